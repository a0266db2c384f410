"""
Version resolution for Perple_X releases.

Decides whether a requested version token names an installable release and,
if so, whether it can be fetched as a prebuilt binary or has to be built
from source.
"""
import collections
import functools
import re

import requests

from .cli_logger import logger

HEAD = "head"
GITHUB_API = "https://api.github.com"

_VERSION_RE = re.compile(r"v([0-9]+)\.([0-9]+)\.([0-9]+)")


class ResolutionError(Exception):
    """Base class for every fatal resolution failure."""

    hint = None


class MalformedVersion(ResolutionError):
    hint = "Use 'head' or a release tag such as 'v7.1.13'."

    def __init__(self, token):
        self.token = token
        super().__init__(f"Malformed version '{token}': expected 'head' or 'vMAJOR.MINOR.PATCH'.")


class CatalogUnavailable(ResolutionError):
    hint = "Check your network connection and try again later."

    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"Could not retrieve the Perple_X release list: {reason}")


class UnknownVersion(ResolutionError):
    hint = "Pick one of the available versions listed above, or 'head'."

    def __init__(self, token, catalog):
        self.token = token
        self.catalog = tuple(catalog)
        super().__init__(f"Version '{token}' is not a published Perple_X release.")


class TooOldToBuild(ResolutionError):

    def __init__(self, version, minimum):
        self.version = version
        self.minimum = minimum
        self.hint = (
            f"The macOS makefile this tool builds with only ships with {minimum.tag} and later. "
            f"Choose {minimum.tag} or newer, or 'head'."
        )
        super().__init__(f"Version '{version.tag}' is older than {minimum.tag} and cannot be built from source.")


class ReleaseVersion(collections.namedtuple("ReleaseVersion", "major minor patch")):
    """A released version; orders numerically by (major, minor, patch)."""

    __slots__ = ()
    is_head = False

    @property
    def tag(self):
        return f"v{self.major}.{self.minor}.{self.patch}"

    def __str__(self):
        return self.tag


class HeadVersion:
    """The unreleased tip of the upstream repository."""

    is_head = True
    tag = HEAD

    def __repr__(self):
        return "HeadVersion()"

    def __str__(self):
        return self.tag


HEAD_VERSION = HeadVersion()


class ResolutionResult(collections.namedtuple(
        "ResolutionResult", "version valid buildable binary_available")):
    __slots__ = ()

    @property
    def strategy(self):
        """'binary', 'source' or None when the version must not be acquired."""
        if not (self.valid and self.buildable):
            return None
        return "binary" if self.binary_available else "source"


def parse_version(token):
    if token == HEAD:
        return HEAD_VERSION
    match = _VERSION_RE.fullmatch(token or "")
    if not match:
        raise MalformedVersion(token)
    return ReleaseVersion(*(int(part) for part in match.groups()))


def parse_threshold(value):
    """Parse a configured minimum version; accepts 'v7.1.12' or a ReleaseVersion."""
    if isinstance(value, ReleaseVersion):
        return value
    version = parse_version(str(value))
    if version.is_head:
        raise MalformedVersion(value)
    return version


def releases_url(repository):
    return f"{GITHUB_API}/repos/{repository}/releases"


def _next_page(resp):
    """The URL of the next page from the response's Link header, if any."""
    links = resp.links if isinstance(resp.links, dict) else {}
    url = links.get("next", {}).get("url")
    return url if isinstance(url, str) else None


def fetch_catalog(repository="jadconnolly/Perple_X", timeout=30):
    """Return the tag names of every published release, in listing order."""
    url = releases_url(repository)
    logger.info(f"Fetching the release list from {url}...")
    params = {"per_page": 100}
    tags = []
    visited = set()
    while url and url not in visited:
        visited.add(url)
        try:
            resp = requests.get(
                url,
                params=params,
                headers={"Accept": "application/vnd.github+json"},
                timeout=timeout,
            )
            resp.raise_for_status()
            records = resp.json()
        except requests.exceptions.RequestException as e:
            raise CatalogUnavailable(e) from e
        except ValueError as e:
            raise CatalogUnavailable(f"invalid JSON in response ({e})") from e

        if not isinstance(records, list):
            raise CatalogUnavailable("unexpected response shape, expected a list of releases")

        for record in records:
            tag = record.get("tag_name") if isinstance(record, dict) else None
            if not isinstance(tag, str):
                raise CatalogUnavailable(f"release record without a 'tag_name': {record!r}")
            if tag not in tags:
                tags.append(tag)

        # the next link already carries the query string
        url = _next_page(resp)
        params = None
    logger.debug(f"Found {len(tags)} releases.")
    return tuple(tags)


def validate(token, catalog):
    """Exact string membership; 'head' is always valid."""
    if token == HEAD:
        return True
    return token in catalog


def classify_buildability(version, minimum):
    if version.is_head:
        return True
    return version >= minimum


def classify_binary_availability(version, minimum):
    if version.is_head:
        return False
    return version >= minimum


def resolve(token, catalog_fetcher=fetch_catalog, min_buildable="v7.1.12", min_binary="v7.1.15"):
    """
    Resolve a user supplied version token.

    Raises the first ResolutionError encountered; a returned result is always
    valid and buildable. The catalog is never fetched for 'head'.
    """
    min_buildable = parse_threshold(min_buildable)
    min_binary = parse_threshold(min_binary)
    version = parse_version(token)

    if not version.is_head:
        catalog = catalog_fetcher()
        if not validate(token, catalog):
            raise UnknownVersion(token, catalog)

    if not classify_buildability(version, min_buildable):
        raise TooOldToBuild(version, min_buildable)

    return ResolutionResult(
        version=version,
        valid=True,
        buildable=True,
        binary_available=classify_binary_availability(version, min_binary),
    )


def catalog_fetcher_for(settings):
    return functools.partial(
        fetch_catalog,
        repository=settings["perplex"]["repository"],
        timeout=settings["network"]["timeout"],
    )


def resolve_with_settings(token, settings):
    versions = settings["versions"]
    return resolve(
        token,
        catalog_fetcher=catalog_fetcher_for(settings),
        min_buildable=versions["min_buildable"],
        min_binary=versions["min_binary"],
    )
