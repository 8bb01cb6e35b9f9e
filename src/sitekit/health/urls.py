"""URL lists and the HTTP status probe.

URL lists come from the command line (``path|code`` entries separated by
commas) or from a YAML file whose nested key path resolves to a
``url -> code`` mapping:

.. code-block:: yaml

    urls:
      /: 200
      /user/login: 200
      /old-page: 301

Each probe is a HEAD request. Redirect-following is decided per URL: a
desired code in the redirect family disables it so the redirect itself is
observed, any other code follows up to ``max_redirects`` hops.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import httpx
import yaml

from sitekit.health.exceptions import UrlFileError, UrlListError
from sitekit.health.models import UrlObservation

logger = logging.getLogger(__name__)

#: Desired codes that disable redirect-following for their probe.
REDIRECT_CODES = frozenset({301, 302, 303, 307, 308})

#: Code assumed when an entry does not specify one.
DEFAULT_DESIRED_CODE = 200

#: Hop limit for non-redirect URLs.
DEFAULT_MAX_REDIRECTS = 10

#: Connect/read timeout in seconds.
DEFAULT_TIMEOUT = 120.0

#: Status reported when the request itself failed.
TRANSPORT_ERROR_CODE = 0


def _parse_code(raw: Any, entry: str) -> int:
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise UrlListError(f"Invalid HTTP code in URL entry: {entry!r}") from exc


def parse_url_list(raw: str | Iterable[str] | None) -> dict[str, int]:
    """Parse ``path|code`` entries into an ordered ``url -> code`` mapping.

    Entries may be given as one comma-separated string or an iterable of
    such strings. Blank entries are ignored and the code defaults to 200.

    Raises:
        UrlListError: If a code is not an integer.

    Examples:
        >>> parse_url_list("/a, /b|404,http://example.com/old|301")
        {'/a': 200, '/b': 404, 'http://example.com/old': 301}
    """
    if raw is None:
        return {}
    chunks = [raw] if isinstance(raw, str) else list(raw)

    urls: dict[str, int] = {}
    for chunk in chunks:
        for entry in chunk.split(","):
            entry = entry.strip()
            if not entry:
                continue
            url, sep, code = entry.partition("|")
            url = url.strip()
            if not url:
                raise UrlListError(f"Missing URL in entry: {entry!r}")
            urls[url] = _parse_code(code, entry) if sep and code.strip() else DEFAULT_DESIRED_CODE
    return urls


def load_url_file(path: str | Path, key_path: str = "urls") -> dict[str, int]:
    """Load a ``url -> code`` mapping from a YAML file.

    Args:
        path: YAML file.
        key_path: Dotted key path to the mapping (``urls``, ``checks.smoke``).

    Raises:
        UrlFileError: If the file is missing, not YAML, or the key path
            does not resolve to a mapping of integer codes.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise UrlFileError(str(file_path), "URL file not found")
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise UrlFileError(str(file_path), f"Cannot read URL file ({exc})") from exc

    node: Any = data
    for key in (part for part in key_path.split(".") if part):
        if not isinstance(node, Mapping) or key not in node:
            raise UrlFileError(str(file_path), f"Key path '{key_path}' not found")
        node = node[key]
    if not isinstance(node, Mapping):
        raise UrlFileError(str(file_path), f"Key path '{key_path}' is not a url -> code mapping")

    urls: dict[str, int] = {}
    for url, code in node.items():
        try:
            urls[str(url)] = DEFAULT_DESIRED_CODE if code is None else int(code)
        except (TypeError, ValueError) as exc:
            raise UrlFileError(str(file_path), f"Invalid HTTP code for {url!r}") from exc
    logger.debug("Loaded %d URL(s) from %s", len(urls), file_path)
    return urls


def resolve_url(url: str, base_uri: str | None) -> str:
    """Join a host-less URL to ``base_uri``; absolute URLs pass through.

    Raises:
        UrlListError: If ``url`` has no host and no base URI is known.

    Examples:
        >>> resolve_url("/user/login", "https://www.example.com/")
        'https://www.example.com/user/login'
        >>> resolve_url("https://other.example.com/", "https://www.example.com")
        'https://other.example.com/'
    """
    if urlsplit(url).netloc:
        return url
    if not base_uri:
        raise UrlListError(f"Cannot resolve {url!r}: no base URI for the target")
    return f"{base_uri.rstrip('/')}/{url.lstrip('/')}"


def build_client(*, timeout: float = DEFAULT_TIMEOUT, verify: bool = False) -> httpx.Client:
    """Return the HTTP client used for probing.

    Redirects are never followed by the client itself; :class:`UrlProbe`
    walks them so the hop limit can differ per URL.
    """
    return httpx.Client(
        timeout=httpx.Timeout(timeout, connect=timeout),
        verify=verify,
        follow_redirects=False,
    )


class UrlProbe:
    """Fetch the HTTP status of URLs with a per-URL redirect policy.

    Args:
        client: HTTP client (should not follow redirects itself).
        max_redirects: Hop limit for URLs whose desired code is not a redirect.

    Examples:
        >>> with build_client() as client:  # doctest: +SKIP
        ...     UrlProbe(client).status("https://www.example.com/", 200)
        200
    """

    def __init__(self, client: httpx.Client, *, max_redirects: int = DEFAULT_MAX_REDIRECTS) -> None:
        self._client = client
        self._max_redirects = max_redirects

    def max_hops(self, desired_code: int) -> int:
        """Return the redirect hop limit for one probe."""
        return 0 if desired_code in REDIRECT_CODES else self._max_redirects

    def status(self, url: str, desired_code: int) -> int:
        """HEAD ``url`` and return the final status code (0 on transport error)."""
        hops_left = self.max_hops(desired_code)
        try:
            response = self._client.head(url)
            while response.is_redirect and hops_left > 0 and response.next_request is not None:
                hops_left -= 1
                response = self._client.send(response.next_request)
        except httpx.HTTPError as exc:
            logger.debug("Request to %s failed: %s", url, exc)
            return TRANSPORT_ERROR_CODE
        return response.status_code

    def observe(self, url: str, desired_code: int, *, base_uri: str | None = None) -> UrlObservation:
        """Probe one URL and return the observation."""
        resolved = resolve_url(url, base_uri)
        actual = self.status(resolved, desired_code)
        logger.debug("%s -> %d (desired %d)", resolved, actual, desired_code)
        return UrlObservation(url=url, desired_code=desired_code, actual_code=actual, resolved_url=resolved)

    def observe_all(self, urls: Mapping[str, int], *, base_uri: str | None = None) -> list[UrlObservation]:
        """Probe every URL in order."""
        return [self.observe(url, code, base_uri=base_uri) for url, code in urls.items()]


__all__ = [
    "DEFAULT_DESIRED_CODE",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_TIMEOUT",
    "REDIRECT_CODES",
    "TRANSPORT_ERROR_CODE",
    "UrlProbe",
    "build_client",
    "load_url_file",
    "parse_url_list",
    "resolve_url",
]
