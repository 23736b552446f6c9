"""
Tracking parameter removal for bookmark URLs.

Two links that differ only by tracking noise collapse to the same canonical
string. Only the query string is rewritten: scheme, authority, path and
fragment are copied through byte-for-byte, and surviving query parameters
keep their original encoding and relative order.
"""

import re
from urllib.parse import unquote_plus, urlsplit

from linkcanon.errors import InvalidUrlError
from linkcanon.params import TrackingParameterPolicy

# Schemes whose URLs are meaningless without a host
NETWORK_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})

# ASCII control characters and space; never valid unescaped in a URL
_FORBIDDEN_CHARS = re.compile(r"[\x00-\x20\x7f]")


def _split_query(url: str) -> tuple[str, str | None, str]:
    """
    Split a raw URL into (head, query, fragment) without decoding anything.

    ``query`` is None when the URL has no ``?``. ``fragment`` includes its
    leading ``#`` or is empty.
    """
    head, hash_sign, fragment = url.partition("#")
    fragment = hash_sign + fragment
    base, question_mark, query = head.partition("?")
    if not question_mark:
        return head, None, fragment
    return base, query, fragment


def _segment_key(segment: str) -> str:
    """Return the form-decoded key of a ``key=value`` query segment."""
    return unquote_plus(segment.partition("=")[0])


class UrlCanonicalizer:
    """
    Strips tracking parameters from URLs.

    Instances hold no mutable state and are safe to share across threads.

    Parameters
    ----------
    policy : TrackingParameterPolicy | None
        Parameters to strip. Defaults to the built-in denylist.
    """

    def __init__(self, policy: TrackingParameterPolicy | None = None) -> None:
        self.policy = policy if policy is not None else TrackingParameterPolicy.default()

    def __repr__(self) -> str:
        return f"UrlCanonicalizer(parameters={len(self.policy)})"

    def _parse(self, url: object) -> str:
        """
        Validate that ``url`` is an absolute URL.

        Returns the input unchanged on success so callers can keep working on
        the raw string.

        Raises
        ------
        InvalidUrlError
            If the input is not parseable as an absolute URL.
        """
        if not isinstance(url, str):
            raise InvalidUrlError(url, "not a string")
        if not url:
            raise InvalidUrlError(url, "empty")
        if _FORBIDDEN_CHARS.search(url):
            raise InvalidUrlError(url, "contains whitespace or control characters")

        try:
            parts = urlsplit(url)
            # Accessing port validates it (non-numeric or out of range raises)
            parts.port  # noqa: B018
        except ValueError as e:
            raise InvalidUrlError(url, str(e)) from e

        if not parts.scheme:
            raise InvalidUrlError(url, "missing scheme")
        if parts.scheme.lower() in NETWORK_SCHEMES and not parts.hostname:
            raise InvalidUrlError(url, "missing host")
        return url

    def strip_tracking_parameters(self, url: str) -> tuple[str, list[str]]:
        """
        Remove tracking parameters and report which keys were removed.

        Parameters
        ----------
        url : str
            The URL to clean.

        Returns
        -------
        tuple[str, list[str]]
            The canonical URL and the removed keys in original order,
            duplicates included.

        Raises
        ------
        InvalidUrlError
            If ``url`` cannot be parsed as an absolute URL.
        """
        self._parse(url)
        head, query, fragment = _split_query(url)
        if not query:
            return url, []

        kept: list[str] = []
        removed: list[str] = []
        for segment in query.split("&"):
            if not segment:
                continue
            key = _segment_key(segment)
            if self.policy.matches(key):
                removed.append(key)
            else:
                kept.append(segment)

        if not removed:
            return url, []

        rebuilt = head
        if kept:
            rebuilt += "?" + "&".join(kept)
        rebuilt += fragment
        return rebuilt, removed

    def canonicalize(self, url: str) -> str:
        """
        Remove tracking parameters from a URL.

        Parameters
        ----------
        url : str
            The URL to clean.

        Returns
        -------
        str
            The URL without tracking parameters. Returned unchanged when it
            carries none.

        Raises
        ------
        InvalidUrlError
            If ``url`` cannot be parsed as an absolute URL.

        Examples
        --------
        >>> UrlCanonicalizer().canonicalize("https://example.com/search?q=react&utm_source=x")
        'https://example.com/search?q=react'
        >>> UrlCanonicalizer().canonicalize("https://example.com/path?utm_source=x#section")
        'https://example.com/path#section'
        """
        return self.strip_tracking_parameters(url)[0]

    def list_tracking_parameters(self, url: str) -> list[str]:
        """
        List tracking parameter keys present in a URL.

        Returns an empty list when the URL cannot be parsed.
        """
        try:
            self._parse(url)
        except InvalidUrlError:
            return []
        query = _split_query(url)[1]
        if not query:
            return []
        keys = (_segment_key(segment) for segment in query.split("&") if segment)
        return [key for key in keys if self.policy.matches(key)]

    def has_tracking_parameters(self, url: str) -> bool:
        """Check whether a URL carries any tracking parameter (False if unparseable)."""
        return bool(self.list_tracking_parameters(url))

    def is_valid_url(self, url: str) -> bool:
        """Check whether ``url`` parses as an absolute URL."""
        try:
            self._parse(url)
        except InvalidUrlError:
            return False
        return True


# Built-in denylist; configuration overrides go through linkcanon.config.get_canonicalizer
_default = UrlCanonicalizer()


def canonicalize(url: str) -> str:
    """Remove built-in tracking parameters from ``url``. See UrlCanonicalizer.canonicalize."""
    return _default.canonicalize(url)


def strip_tracking_parameters(url: str) -> tuple[str, list[str]]:
    """Canonicalize ``url`` and return the removed keys alongside."""
    return _default.strip_tracking_parameters(url)


def has_tracking_parameters(url: str) -> bool:
    """Check ``url`` against the built-in denylist."""
    return _default.has_tracking_parameters(url)


def list_tracking_parameters(url: str) -> list[str]:
    """List built-in tracking parameter keys found in ``url``."""
    return _default.list_tracking_parameters(url)


def is_valid_url(url: str) -> bool:
    return _default.is_valid_url(url)
