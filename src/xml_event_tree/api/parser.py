"""Public entry points for turning XML into a JSON-shaped tree.

Level 1 is a set of module functions (``parse``, ``parse_from_file``,
``parse_from_url``). Level 2 is ``XMLTreeParser``, which carries a
configuration, keeps usage statistics and can run parses in the background,
returning futures.

Every entry point returns the Document Root and, when ``on_done`` is given,
calls it exactly once with the same root. On failure the error is raised and
``on_done`` is never called.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from xml_event_tree.lexical import scan
from xml_event_tree.shared import ParserConfig, get_logger
from xml_event_tree.tree import BuildResult, TreeBuilder

from .sources import fetch_url, read_file

Root = Dict[str, Any]
OnDone = Callable[[Root], Any]

# Max length for content preview in logs
PREVIEW_LENGTH = 100
MS_PER_SECOND = 1000


def _as_text(xml_source: Union[str, bytes]) -> str:
    if isinstance(xml_source, bytes):
        return xml_source.decode("utf-8")
    if isinstance(xml_source, str):
        return xml_source
    raise TypeError(
        f"XML source must be str or bytes, not {type(xml_source).__name__}"
    )


class XMLTreeParser:
    """Configured, reusable parser.

    One instance can serve many threads: every parse gets its own builder, so
    no write cursor or CDATA buffer is shared.

    Examples:
        >>> with XMLTreeParser(ParserConfig.strict()) as parser:
        ...     root = parser.parse('<a x="1"><b>hi</b></a>')
        ...     future = parser.submit_string('<feed><entry/></feed>')
        >>> root['a']['b']['innerText']
        'hi'
        >>> future.result()
        {'feed': {'name': 'feed', 'attr': {}, 'entry': {'name': 'entry', 'attr': {}}}}
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_tree_parser")

        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def build(self, xml_source: Union[str, bytes]) -> BuildResult:
        """Build the tree and return it with diagnostics and metrics.

        Raises:
            LexicalError: malformed XML under the RAISE error policy
        """
        xml_text = _as_text(xml_source)
        start_time = time.time()

        self.logger.info(
            "Starting string parse operation",
            extra={
                "content_length": len(xml_text),
                "preview": (
                    xml_text[:PREVIEW_LENGTH] + "..."
                    if len(xml_text) > PREVIEW_LENGTH else xml_text
                )
            }
        )

        builder = TreeBuilder(self.config.lexical, self.correlation_id)
        try:
            result = builder.build(
                scan(xml_text, self.config.lexical, self.correlation_id)
            )
        except Exception:
            self._record((time.time() - start_time) * MS_PER_SECOND, False)
            raise

        self._record((time.time() - start_time) * MS_PER_SECOND, result.success)
        return result

    def parse(
        self,
        xml_source: Union[str, bytes],
        on_done: Optional[OnDone] = None
    ) -> Root:
        """Parse XML text into a Document Root."""
        root = self.build(xml_source).root
        if on_done is not None:
            on_done(root)
        return root

    def parse_from_file(
        self,
        file_path: Union[str, Path],
        on_done: Optional[OnDone] = None,
        encoding: Optional[str] = None
    ) -> Root:
        """Read a local file and parse it.

        Raises:
            FileReadError: if the file cannot be read
        """
        xml_text = read_file(
            file_path,
            encoding=encoding or self.config.file.encoding,
            correlation_id=self.correlation_id,
        )
        return self.parse(xml_text, on_done)

    def parse_from_url(
        self,
        url: str,
        on_done: Optional[OnDone] = None,
        **fetch_overrides: Any
    ) -> Root:
        """Fetch remote XML and parse it.

        ``fetch_overrides`` replace fields of the configured ``FetchConfig``
        (``follow_redirects``, ``max_redirects``, ``encoding``, ``timeout_ms``).

        Raises:
            TransportError: if the fetch fails or the status is not 2xx
        """
        fetch_config = (
            replace(self.config.fetch, **fetch_overrides)
            if fetch_overrides else self.config.fetch
        )
        xml_text = fetch_url(url, fetch_config, self.correlation_id)
        return self.parse(xml_text, on_done)

    def submit_string(
        self,
        xml_source: Union[str, bytes],
        on_done: Optional[OnDone] = None
    ) -> "Future[Root]":
        """Parse in the background; the future resolves to the root."""
        return self._get_executor().submit(self.parse, xml_source, on_done)

    def submit_file(
        self,
        file_path: Union[str, Path],
        on_done: Optional[OnDone] = None,
        encoding: Optional[str] = None
    ) -> "Future[Root]":
        """Read and parse a file in the background."""
        return self._get_executor().submit(
            self.parse_from_file, file_path, on_done, encoding
        )

    def submit_url(
        self,
        url: str,
        on_done: Optional[OnDone] = None,
        **fetch_overrides: Any
    ) -> "Future[Root]":
        """Fetch and parse remote XML in the background."""
        return self._get_executor().submit(
            self.parse_from_url, url, on_done, **fetch_overrides
        )

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.api.max_concurrent_operations,
                    thread_name_prefix="xml-event-tree",
                )
            return self._executor

    def _record(self, processing_time: float, success: bool) -> None:
        with self._lock:
            self._parse_count += 1
            self._total_processing_time += processing_time
            if success:
                self._successful_parses += 1

    def close(self, wait: bool = True) -> None:
        """Shut down the background executor, if one was started."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> "XMLTreeParser":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        with self._lock:
            parse_count = self._parse_count
            successful = self._successful_parses
            total_time = self._total_processing_time
        return {
            "total_parses": parse_count,
            "successful_parses": successful,
            "success_rate": successful / parse_count if parse_count > 0 else 0.0,
            "total_processing_time_ms": total_time,
            "average_processing_time_ms": (
                total_time / parse_count if parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        with self._lock:
            self._parse_count = 0
            self._successful_parses = 0
            self._total_processing_time = 0.0

        self.logger.info("Parser statistics reset")


def parse(
    xml_text: Union[str, bytes],
    on_done: Optional[OnDone] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Root:
    """Parse an XML string into a Document Root.

    Examples:
        >>> parse('<a x="1"><b>hi</b><b>bye</b></a>')['a']['b'][1]['innerText']
        'bye'
    """
    return XMLTreeParser(config, correlation_id).parse(xml_text, on_done)


def parse_from_file(
    file_path: Union[str, Path],
    on_done: Optional[OnDone] = None,
    encoding: Optional[str] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Root:
    """Read a local XML file and parse it.

    Raises:
        FileReadError: if the file cannot be read; ``on_done`` is not called
    """
    return XMLTreeParser(config, correlation_id).parse_from_file(
        file_path, on_done, encoding
    )


def parse_from_url(
    url: str,
    on_done: Optional[OnDone] = None,
    follow_redirects: Optional[bool] = None,
    max_redirects: Optional[int] = None,
    encoding: Optional[str] = None,
    timeout_ms: Optional[int] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Root:
    """Fetch XML from ``url`` with one GET and parse it.

    Fetch arguments that are given take precedence over ``config.fetch``;
    the rest come from it (defaults: redirects followed, at most 10, "UTF8",
    10000 ms).

    Raises:
        TransportError: on transport failure or a non-2xx status; ``on_done``
            is not called
    """
    fetch_overrides = {
        key: value
        for key, value in (
            ("follow_redirects", follow_redirects),
            ("max_redirects", max_redirects),
            ("encoding", encoding),
            ("timeout_ms", timeout_ms),
        )
        if value is not None
    }
    return XMLTreeParser(config, correlation_id).parse_from_url(
        url, on_done, **fetch_overrides
    )


from_string = parse
from_file = parse_from_file
from_url = parse_from_url
