"""Readers that hand complete XML text to the parser.

Each reader makes exactly one attempt. Failures are raised before any tree
building starts: ``TransportError`` for remote XML and ``FileReadError`` for
local files.
"""

from pathlib import Path
from typing import Optional, Union

import requests

from xml_event_tree.shared import (
    FetchConfig,
    FileReadError,
    TransportError,
    get_logger,
)


def read_file(
    file_path: Union[str, Path],
    encoding: str = "utf-8",
    correlation_id: Optional[str] = None
) -> str:
    """Read a local XML file fully as text.

    Raises:
        FileReadError: if the file is missing, not a file, unreadable or not
            decodable with ``encoding``
    """
    logger = get_logger(__name__, correlation_id, "file_reader")
    path_obj = Path(file_path)

    logger.info(
        "Reading XML file",
        extra={"file_path": str(path_obj), "encoding": encoding}
    )

    if path_obj.exists() and not path_obj.is_file():
        raise FileReadError(f"Path is not a file: {path_obj}", str(path_obj))

    try:
        return path_obj.read_text(encoding=encoding)
    except FileNotFoundError as e:
        raise FileReadError(f"File not found: {path_obj}", str(path_obj)) from e
    except PermissionError as e:
        raise FileReadError(
            f"Permission denied accessing file: {path_obj}", str(path_obj)
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        logger.exception("File read failed", extra={"file_path": str(path_obj)})
        raise FileReadError(
            f"Could not read file {path_obj}: {e}", str(path_obj)
        ) from e


def fetch_url(
    url: str,
    config: Optional[FetchConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Fetch remote XML with a single HTTP GET.

    Raises:
        TransportError: on connection failure, timeout, too many redirects or
            a non-2xx status
    """
    config = config or FetchConfig()
    logger = get_logger(__name__, correlation_id, "url_fetcher")

    logger.info(
        "Fetching XML",
        extra={
            "url": url,
            "follow_redirects": config.follow_redirects,
            "max_redirects": config.max_redirects,
            "timeout_ms": config.timeout_ms,
        }
    )

    session = requests.Session()
    session.max_redirects = config.max_redirects
    try:
        response = session.get(
            url,
            allow_redirects=config.follow_redirects,
            timeout=config.timeout_seconds,
        )
    except requests.RequestException as e:
        logger.exception("Request failed", extra={"url": url})
        raise TransportError(f"An error occurred: {e}", url=url) from e
    finally:
        session.close()

    if not 200 <= response.status_code < 300:
        logger.warning(
            "HTTP error response",
            extra={"url": url, "status_code": response.status_code}
        )
        raise TransportError(
            f"An HTTP error occurred with status code: {response.status_code}",
            url=url,
            status_code=response.status_code,
        )

    response.encoding = config.encoding
    return response.text
