"""
Deduplication keys for bookmark URLs.

The canonical URL is what gets stored; the dedup key is a further-normalized
form used only to answer "does this user already have this URL saved".
"""

import ipaddress
from collections.abc import Iterable
from urllib.parse import urlsplit, urlunsplit

from url_normalize import url_normalize

from linkcanon.canonicalizer import UrlCanonicalizer
from linkcanon.errors import InvalidUrlError
from linkcanon.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


def is_local_host(host: str | None) -> bool:
    """
    Check whether a host is local (localhost, loopback or private LAN).

    Parameters
    ----------
    host : str | None
        Hostname from a parsed URL.

    Returns
    -------
    bool
        True for ``localhost``, loopback and private addresses.
    """
    if not host:
        return False
    host = host.lower().rstrip(".")
    if host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_loopback or address.is_private


def _drop_port(netloc: str) -> str:
    """Remove the ``:port`` suffix from a netloc."""
    return netloc.rsplit(":", 1)[0]


def _lower_host(netloc: str) -> str:
    """ASCII-lowercase the host part of a netloc, leaving userinfo alone."""
    userinfo, at, hostport = netloc.rpartition("@")
    return userinfo + at + hostport.lower()


def _apply_scheme_rules(url: str) -> str:
    """
    Drop default ports and upgrade ``http`` to ``https`` for public hosts.

    A default port is dropped both for the original scheme and for the
    upgraded one, so ``http://host:80/`` and ``http://host:443/`` both key
    as ``https://host/``.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    netloc = parts.netloc
    port = parts.port

    if port is not None and DEFAULT_PORTS.get(scheme) == port:
        netloc, port = _drop_port(netloc), None
    if scheme == "http" and not is_local_host(parts.hostname):
        scheme = "https"
    if port is not None and DEFAULT_PORTS.get(scheme) == port:
        netloc = _drop_port(netloc)

    return urlunsplit((scheme, netloc, parts.path, parts.query, parts.fragment))


def dedup_key(url: str, canonicalizer: UrlCanonicalizer | None = None) -> str:
    """
    Compute the deduplication key for a bookmark URL.

    Applies the following on top of tracking parameter removal:
    - Remove default ports (80 for HTTP, 443 for HTTPS)
    - Upgrade http to https (except local hosts)
    - Lowercase scheme and host
    - Normalize percent-encoding

    Hosts that url-normalize cannot IDNA-encode (e.g. a label over 63
    characters) are only ASCII-lowercased, so every URL that canonicalizes
    also has a key.

    Parameters
    ----------
    url : str
        The URL to key.
    canonicalizer : UrlCanonicalizer | None
        Canonicalizer to use. Defaults to one built on the built-in denylist.

    Returns
    -------
    str
        Key shared by URLs that differ only in the above respects.

    Raises
    ------
    InvalidUrlError
        If ``url`` cannot be parsed as an absolute URL.

    Examples
    --------
    >>> dedup_key("http://Example.com:80/a?utm_source=x")
    'https://example.com/a'
    """
    canonicalizer = canonicalizer or UrlCanonicalizer()
    prepared = _apply_scheme_rules(canonicalizer.canonicalize(url))
    try:
        normalized = url_normalize(prepared)
    except ValueError as e:  # UnicodeError included
        logger.debug("URL normalization failed, keying on lowercased host", url=url, error=str(e))
        normalized = None
    if normalized:
        return normalized

    parts = urlsplit(prepared)
    return urlunsplit(
        (parts.scheme, _lower_host(parts.netloc), parts.path, parts.query, parts.fragment)
    )


def find_duplicates(
    urls: Iterable[str], canonicalizer: UrlCanonicalizer | None = None
) -> dict[str, list[str]]:
    """
    Group URLs that share a dedup key.

    Invalid URLs are skipped with a warning.

    Parameters
    ----------
    urls : Iterable[str]
        URLs to group.
    canonicalizer : UrlCanonicalizer | None
        Canonicalizer to use for every URL.

    Returns
    -------
    dict[str, list[str]]
        Map of dedup key to the input URLs sharing it, in input order.
        Only keys with more than one URL are included.
    """
    canonicalizer = canonicalizer or UrlCanonicalizer()
    groups: dict[str, list[str]] = {}
    for url in urls:
        try:
            key = dedup_key(url, canonicalizer)
        except InvalidUrlError as e:
            logger.warning("Skipping invalid URL", url=url, reason=e.reason)
            continue
        groups.setdefault(key, []).append(url)
    return {key: members for key, members in groups.items() if len(members) > 1}
