"""HTTP and browser fetchers."""

from __future__ import annotations

import contextlib
import logging
import socket
import threading
import time
from collections.abc import Callable, Iterator
from typing import Any

from requests import Response, Session
from requests.exceptions import RequestException

from .config import PipelineConfig
from .deadline import Deadline
from .errors import DeadlineExceeded, FetchError, RenderError
from .validation import is_supported_url

READ_CHUNK_SIZE = 64 * 1024
RENDER_SETTLE_SECONDS = 0.5


def make_session(config: PipelineConfig) -> Session:
    """Create a requests session with the pipeline's browser identity and redirect cap."""
    session = Session()
    session.headers.update({"User-Agent": config.user_agent, "Accept": config.accept_header})
    session.max_redirects = config.max_redirects
    return session


def read_capped(
    response: Response,
    max_bytes: int,
    *,
    expires_at: float | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> bytes:
    """Read a streamed body, discarding anything past ``max_bytes``.

    When ``expires_at`` is given (a ``clock`` reading), the read fails with
    FetchError as soon as a chunk arrives after that instant.
    """
    chunks: list[bytes] = []
    size = 0
    for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
        if expires_at is not None and clock() >= expires_at:
            raise FetchError(f"body read still running after {size} bytes")
        if not chunk:
            continue
        chunks.append(chunk)
        size += len(chunk)
        if size >= max_bytes:
            break
    if expires_at is not None and clock() >= expires_at:
        raise FetchError(f"body read cut off after {size} bytes")
    return b"".join(chunks)[:max_bytes]


def _shutdown_connection(response: Response) -> None:
    connection = getattr(getattr(response, "raw", None), "connection", None)
    sock = getattr(connection, "sock", None)
    if sock is None:
        return
    # A blocked recv() returns EOF once the socket is shut down.
    with contextlib.suppress(OSError):
        sock.shutdown(socket.SHUT_RDWR)


@contextlib.contextmanager
def read_watchdog(response: Response, seconds: float) -> Iterator[None]:
    """Shut the response's socket down if it is still being read after ``seconds``."""
    timer = threading.Timer(seconds, _shutdown_connection, args=(response,))
    timer.daemon = True
    timer.start()
    try:
        yield
    finally:
        timer.cancel()


class StaticFetcher:
    """Bounded HTTP GET with a fixed retry schedule."""

    def __init__(self, *, session: Session, config: PipelineConfig, logger: logging.Logger) -> None:
        self._session = session
        self._config = config
        self._logger = logger

    def fetch_page(self, url: str, deadline: Deadline) -> bytes:
        """Perform one GET and return the (size-capped) body.

        The whole request, body included, is bounded by ``http_timeout`` and by
        whatever is left of ``deadline``. Running out of the run budget raises
        DeadlineExceeded; every other failure raises FetchError.
        """
        if not is_supported_url(url):
            raise FetchError(f"unsupported URL: {url}")
        timeout = min(self._config.http_timeout, deadline.remaining())
        if timeout <= 0:
            raise DeadlineExceeded(f"deadline exceeded before fetching {url}")
        expires_at = time.monotonic() + timeout
        try:
            return self._get(url, timeout, expires_at)
        except FetchError as exc:
            if deadline.expired:
                raise DeadlineExceeded(f"deadline exceeded while fetching {url}") from exc
            raise

    def _get(self, url: str, timeout: float, expires_at: float) -> bytes:
        try:
            with self._session.get(url, timeout=timeout, stream=True) as response:
                if response.status_code >= 400:
                    raise FetchError(f"HTTP {response.status_code} for {url}")
                remaining = expires_at - time.monotonic()
                if remaining <= 0:
                    raise FetchError(f"no time left to read {url}")
                with read_watchdog(response, remaining):
                    return read_capped(
                        response, self._config.max_response_bytes, expires_at=expires_at
                    )
        except RequestException as exc:
            raise FetchError(f"fetching {url}: {exc}") from exc

    def fetch_with_retry(self, url: str, max_retries: int, deadline: Deadline) -> bytes:
        """Fetch with up to ``max_retries`` retries; raise the last error if all fail."""
        last_error: FetchError | None = None
        for attempt in range(max_retries + 1):
            if attempt > 0:
                backoff = self._config.backoff_for(attempt)
                if not deadline.sleep(backoff):
                    raise DeadlineExceeded(f"deadline exceeded while retrying {url}")
            try:
                return self.fetch_page(url, deadline)
            except DeadlineExceeded:
                raise
            except FetchError as exc:
                self._logger.debug("Fetch attempt %d failed for %s: %s", attempt + 1, url, exc)
                last_error = exc
        assert last_error is not None
        raise last_error


class SeleniumRenderFetcher:
    """Selenium renderer with one isolated headless browser instance."""

    def __init__(
        self, *, user_agent: str, logger: logging.Logger, page_load_timeout: float = 20.0
    ) -> None:
        try:
            from selenium import webdriver
            from selenium.webdriver.chrome.service import (
                Service as ChromeService,
            )
            from webdriver_manager.chrome import ChromeDriverManager
        except ImportError as exc:  # pragma: no cover - exercised only when selenium requested
            raise RenderError(
                "Selenium dependencies are not installed. Use pip install .[selenium]."
            ) from exc

        self._logger = logger
        self._page_load_timeout = page_load_timeout
        options = webdriver.ChromeOptions()
        options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument(f"user-agent={user_agent}")
        try:
            service = ChromeService(ChromeDriverManager().install())
            self._driver: Any = webdriver.Chrome(service=service, options=options)
        except Exception as exc:  # pragma: no cover - integration behavior
            raise RenderError(f"Failed to start Selenium driver: {exc}") from exc

    def render(self, url: str, deadline: Deadline) -> str:
        if not is_supported_url(url):
            raise RenderError(f"unsupported URL: {url}")
        budget = min(self._page_load_timeout, deadline.remaining())
        if budget <= 0:
            raise RenderError(f"no time left to render {url}")
        try:
            self._driver.set_page_load_timeout(budget)
            self._driver.get(url)
            # Lazy content often lands just after the load event.
            deadline.sleep(RENDER_SETTLE_SECONDS)
            return str(self._driver.page_source)
        except Exception as exc:  # pragma: no cover - integration behavior
            raise RenderError(f"Selenium render failed for {url}: {exc}") from exc

    def close(self) -> None:
        try:
            self._driver.quit()
        except Exception:  # pragma: no cover - integration behavior
            return None
