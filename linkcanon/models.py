"""
Pydantic models for bookmark URL payloads.

``BookmarkUrlInput`` is the validation entry point for the bookmark creation
path: the URL it exposes is already canonical. ``CanonicalUrlResult``
describes what canonicalization did to a URL.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from linkcanon.canonicalizer import UrlCanonicalizer
from linkcanon.config import get_canonicalizer
from linkcanon.dedup import dedup_key


class CamelCaseModel(BaseModel):
    """Base model with camelCase JSON serialization, immutable once built."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class BookmarkUrlInput(CamelCaseModel):
    """
    URL submitted for a new bookmark.

    Validation rejects anything that is not an absolute URL and replaces the
    value with its canonical form.
    """

    url: str = Field(description="Bookmark URL, canonicalized on validation")

    @field_validator("url")
    @classmethod
    def canonicalize_url(cls, v: str) -> str:
        """Strip tracking parameters using the configured denylist."""
        # InvalidUrlError is a ValueError, so pydantic reports it as a validation error
        return get_canonicalizer().canonicalize(v)


class CanonicalUrlResult(CamelCaseModel):
    """Outcome of canonicalizing one URL."""

    original_url: str
    canonical_url: str
    dedup_key: str
    removed_parameters: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def changed(self) -> bool:
        """True when tracking parameters were removed."""
        return self.canonical_url != self.original_url


class TrackingParametersResult(CamelCaseModel):
    """Tracking parameter keys found in one URL, in query order."""

    url: str
    tracking_parameters: list[str] = Field(default_factory=list)


class DedupKeyResult(CamelCaseModel):
    """Deduplication key of one URL."""

    url: str
    dedup_key: str


def inspect_url(url: str, canonicalizer: UrlCanonicalizer | None = None) -> CanonicalUrlResult:
    """
    Canonicalize a URL and describe the result.

    Parameters
    ----------
    url : str
        The URL to inspect.
    canonicalizer : UrlCanonicalizer | None
        Canonicalizer to use. Defaults to the configured one.

    Returns
    -------
    CanonicalUrlResult
        Original and canonical URL, dedup key and removed keys.

    Raises
    ------
    InvalidUrlError
        If ``url`` cannot be parsed as an absolute URL.
    """
    canonicalizer = canonicalizer or get_canonicalizer()
    canonical, removed = canonicalizer.strip_tracking_parameters(url)
    return CanonicalUrlResult(
        original_url=url,
        canonical_url=canonical,
        dedup_key=dedup_key(canonical, canonicalizer),
        removed_parameters=removed,
    )
