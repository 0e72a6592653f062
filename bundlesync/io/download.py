"""
HTTP(S) text download and atomic file writes for bundlesync.

This module performs the raw I/O behind the bundle fetcher: one GET per
bundle URL, and one atomic write per downloaded file. Policy (which
variant, which version, whether to fall back) lives in bundlesync.fetcher.

Key Features:

- **Explicit Results** - fetch_text() returns a FetchResult value instead of
  raising on HTTP errors, so callers can branch on the status code:
  FetchSuccess (2xx), FetchNotFound (4xx), FetchFailure (anything else).
- **No Silent Retries** - Sessions are created with zero retries by default.
  An incomplete or stale answer is worse than a failed run.
- **Atomic Writes** - Files are written to a temporary .part file and renamed
  into place, so a crash never leaves a truncated bundle behind.

Example:
    >>> from pathlib import Path
    >>> from bundlesync.io import fetch_text, make_session, write_text_file
    >>> with make_session() as session:
    ...     result = fetch_text("https://browser.sentry-cdn.com/8.20.0/replay.js", session)
    >>> if isinstance(result, FetchSuccess):
    ...     write_text_file(Path("bundles"), "8.20.0", "replay.js", result.content)

Notes:
- Transport failures (DNS, refused connections, timeouts) raise NetworkError;
  they carry no status code to branch on.
- User-Agent identifies bundlesync to help with debugging/support.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from bundlesync.exceptions import NetworkError, StorageError
from bundlesync.logging import get_global_logger

USER_AGENT = "bundlesync/0.1"


# -------------------------------
# Fetch results
# -------------------------------


@dataclass(frozen=True)
class FetchSuccess:
    """A 2xx response with its decoded text body."""

    content: str
    url: str
    status_code: int = 200


@dataclass(frozen=True)
class FetchNotFound:
    """A 4xx response: the resource is not available at this URL."""

    status_code: int
    url: str


@dataclass(frozen=True)
class FetchFailure:
    """Any other non-success response (5xx, unexpected 1xx/3xx)."""

    status_code: int
    url: str


FetchResult = FetchSuccess | FetchNotFound | FetchFailure


# -------------------------------
# HTTP
# -------------------------------


def make_session(retries: int = 0) -> requests.Session:
    """
    Create a requests.Session for registry and CDN calls.

    - Retries are disabled unless explicitly requested; when enabled they use
      exponential backoff on common transient status codes.
    - Sets a helpful User-Agent to avoid being blocked.
    """
    s = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": USER_AGENT})
    s.mount("http://", HTTPAdapter(max_retries=retry))
    s.mount("https://", HTTPAdapter(max_retries=retry))
    return s


def classify_response(status_code: int, url: str, text: str) -> FetchResult:
    """Map an HTTP status code to a FetchResult."""
    if 200 <= status_code < 300:
        return FetchSuccess(content=text, url=url, status_code=status_code)
    if 400 <= status_code < 500:
        return FetchNotFound(status_code=status_code, url=url)
    return FetchFailure(status_code=status_code, url=url)


def fetch_text(
    url: str,
    session: requests.Session,
    *,
    timeout: int = 60,
) -> FetchResult:
    """Issue one GET and classify the response.

    Args:
        url: URL to fetch.
        session: Session to send the request with.
        timeout: Per-request timeout (seconds).

    Returns:
        FetchSuccess with the body decoded as text, FetchNotFound for 4xx,
            or FetchFailure for any other non-2xx status.

    Raises:
        NetworkError: If the request fails before a response is received.

    """
    logger = get_global_logger()

    logger.verbose("HTTP", f"GET {url}")
    try:
        resp = session.get(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as err:
        raise NetworkError(f"Request failed for {url}: {err}") from err

    logger.verbose("HTTP", f"Response: {resp.status_code} {resp.reason}")

    if not 200 <= resp.status_code < 300:
        return classify_response(resp.status_code, url, "")

    # CDN bundles are served as UTF-8 JavaScript; don't let requests guess.
    resp.encoding = resp.encoding or "utf-8"
    if resp.encoding.lower() == "iso-8859-1":
        resp.encoding = "utf-8"
    text = resp.text
    logger.debug("HTTP", f"Received {len(text)} characters from {url}")
    return classify_response(resp.status_code, url, text)


# -------------------------------
# Filesystem
# -------------------------------


def write_text_file(
    output_root: Path,
    version: str,
    file_name: str,
    content: str,
) -> Path:
    """Write content to {output_root}/{version}/{file_name} atomically.

    The version directory is created if missing. An existing file at the
    target path is overwritten.

    Args:
        output_root: Root of the bundle cache.
        version: Version directory to store the file under.
        file_name: Name of the file inside the version directory.
        content: Text to write (encoded as UTF-8).

    Returns:
        Path to the written file.

    Raises:
        StorageError: If the directory or file cannot be written.

    """
    logger = get_global_logger()

    target_dir = Path(output_root) / version
    target = target_dir / file_name
    tmp = target.with_suffix(target.suffix + ".part")

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8", newline="") as f:
            f.write(content)
        logger.debug("FILE", f"Atomic rename: {tmp.name} -> {target.name}")
        tmp.replace(target)
    except OSError as err:
        try:
            tmp.unlink(missing_ok=True)
        except OSError:
            pass
        raise StorageError(f"Could not write {target}: {err}") from err

    logger.verbose("FILE", f"Wrote {target}")
    return target
