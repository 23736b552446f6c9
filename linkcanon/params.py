"""
Tracking parameter denylists.

Query keys listed here are injected by sharing platforms, ad networks and
email tools to attribute clicks. They carry no meaning for the linked
resource and are removed before a bookmark URL is stored.

Matching is exact and case-sensitive. Short generic keys such as ``s``,
``t``, ``ref``, ``source`` and ``hash`` can collide with functional
parameters on some sites; deployments that hit this can drop them with
``TrackingParameterPolicy.without`` or ``LINKCANON_PRESERVED_PARAMETERS``.
"""

from collections.abc import Iterable
from dataclasses import dataclass

TRACKING_PARAMETERS: tuple[str, ...] = (
    # Google Analytics / Marketing
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "utm_id",
    # Google Ads
    "gclid",
    "gclsrc",
    "dclid",
    "wbraid",
    "gbraid",
    # Facebook
    "fbclid",
    "fb_action_ids",
    "fb_action_types",
    "fb_ref",
    "fb_source",
    # Instagram
    "igshid",
    "igsh",
    # Twitter/X
    "ref_src",
    "ref_url",
    "s",
    "t",
    # LinkedIn
    "trk",
    "trkCampaign",
    "li_fat_id",
    # Email marketing (Mailchimp, ConvertKit, generic)
    "mc_cid",
    "mc_eid",
    "ck_subscriber_id",
    "campaign_id",
    "tracking_id",
    "email_id",
    "subscriber_id",
    # Other common tracking
    "ref",
    "source",
    "medium",
    "campaign",
    "_hsenc",  # HubSpot
    "_hsmi",  # HubSpot
    "hsCtaTracking",  # HubSpot
    "vero_conv",  # Vero
    "vero_id",  # Vero
    "wickedid",  # Wicked Reports
    "yclid",  # Yandex
    "msclkid",  # Microsoft/Bing
    "epik",  # Pinterest
    "pp",  # Pinterest
    "_branch_match_id",  # Branch.io
    "spm",  # Alibaba
    "scm",  # Alibaba
    "share_from",  # TikTok
    "checksum",  # TikTok
    "timestamp",
    "hash",
)

# Opt-in additions. Several of these (tag, cid, content, share) are used
# functionally by some sites, so they never apply unless requested.
_EXTENDED_ADDITIONS: tuple[str, ...] = (
    # UTM extensions
    "utm_source_platform",
    "utm_creative_format",
    "utm_marketing_tactic",
    # TikTok
    "tt_content",
    "tt_medium",
    # Mailchimp
    "mc_tc",
    # Generic campaign tracking
    "content",
    "term",
    "cid",
    "cmp",
    "cmpid",
    "campaign_name",
    "campaign_source",
    "campaign_medium",
    "campaign_content",
    "campaign_term",
    # Google Analytics cross-domain linker
    "_ga",
    "_gl",
    "_gac",
    "ga_source",
    "ga_medium",
    "ga_campaign",
    "ga_term",
    "ga_content",
    # Affiliate / partner
    "affiliate_id",
    "partner_id",
    "referrer",
    "ref_id",
    # Social sharing
    "share",
    "shared",
    "social_type",
    "social_source",
    # HubSpot ads
    "hsa_acc",
    "hsa_ad",
    "hsa_cam",
    "hsa_grp",
    "hsa_kw",
    "hsa_mt",
    "hsa_net",
    "hsa_src",
    "hsa_tgt",
    "hsa_ver",
    # Snapchat
    "ScCid",
    # Amazon associates
    "tag",
    "ascsubtag",
    "asc_campaign",
    "asc_refurl",
    "asc_source",
)


def _dedupe(names: Iterable[str]) -> tuple[str, ...]:
    """Drop repeated names, keeping first occurrence order."""
    return tuple(dict.fromkeys(names))


EXTENDED_TRACKING_PARAMETERS: tuple[str, ...] = _dedupe(
    TRACKING_PARAMETERS + _EXTENDED_ADDITIONS
)

PRESETS: dict[str, tuple[str, ...]] = {
    "default": TRACKING_PARAMETERS,
    "extended": EXTENDED_TRACKING_PARAMETERS,
}


@dataclass(frozen=True)
class TrackingParameterPolicy:
    """
    Immutable, ordered set of query keys to strip.

    Parameters
    ----------
    parameters : tuple[str, ...]
        Parameter names. Duplicates are dropped on construction.
    """

    parameters: tuple[str, ...] = TRACKING_PARAMETERS

    def __post_init__(self) -> None:
        names = _dedupe(self.parameters)
        for name in names:
            if not isinstance(name, str) or not name:
                raise ValueError(f"Tracking parameter names must be non-empty strings: {name!r}")
        object.__setattr__(self, "parameters", names)
        object.__setattr__(self, "_lookup", frozenset(names))

    @classmethod
    def default(cls) -> "TrackingParameterPolicy":
        """Policy built on the built-in denylist."""
        return cls(TRACKING_PARAMETERS)

    @classmethod
    def from_preset(cls, name: str) -> "TrackingParameterPolicy":
        """
        Build a policy from a named preset.

        Parameters
        ----------
        name : str
            Preset name, ``default`` or ``extended`` (case-insensitive).

        Returns
        -------
        TrackingParameterPolicy
            Policy containing the preset's parameters.

        Raises
        ------
        ValueError
            If the preset name is unknown.
        """
        key = name.strip().lower()
        if key not in PRESETS:
            known = ", ".join(sorted(PRESETS))
            raise ValueError(f"Unknown tracking parameter preset '{name}' (expected one of: {known})")
        return cls(PRESETS[key])

    def matches(self, key: str) -> bool:
        """Return True if ``key`` is exactly one of the tracking parameters."""
        return key in self._lookup  # type: ignore[attr-defined]

    def extend(self, names: Iterable[str]) -> "TrackingParameterPolicy":
        """Return a new policy with ``names`` appended."""
        return TrackingParameterPolicy(self.parameters + tuple(names))

    def without(self, names: Iterable[str]) -> "TrackingParameterPolicy":
        """Return a new policy with ``names`` removed."""
        drop = set(names)
        return TrackingParameterPolicy(tuple(p for p in self.parameters if p not in drop))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.matches(key)

    def __len__(self) -> int:
        return len(self.parameters)
