"""Input/Output operations for bundlesync.

This module provides the HTTP and filesystem primitives used by the bundle
fetcher and the registry client.

Modules:

download : module
    Single-request text downloads with explicit result values, session
    setup, and atomic text file writes.

Public API:

fetch_text : function
    GET a URL and return FetchSuccess, FetchNotFound or FetchFailure.
write_text_file : function
    Atomically write text under {root}/{version}/{file_name}.
make_session : function
    Create a requests.Session with the bundlesync User-Agent.

Example:
    from pathlib import Path
    from bundlesync.io import FetchSuccess, fetch_text, make_session, write_text_file

    with make_session() as session:
        result = fetch_text("https://browser.sentry-cdn.com/8.20.0/replay.js", session)
    if isinstance(result, FetchSuccess):
        write_text_file(Path("bundles"), "8.20.0", "replay.js", result.content)

"""

from .download import (
    FetchFailure,
    FetchNotFound,
    FetchResult,
    FetchSuccess,
    fetch_text,
    make_session,
    write_text_file,
)

__all__ = [
    "FetchFailure",
    "FetchNotFound",
    "FetchResult",
    "FetchSuccess",
    "fetch_text",
    "make_session",
    "write_text_file",
]
