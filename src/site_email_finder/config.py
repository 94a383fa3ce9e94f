"""Runtime configuration model."""

from __future__ import annotations

from dataclasses import dataclass, field

from .validation import validate_pipeline_constraints, validate_runtime_constraints

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_GLOBAL_TIMEOUT = 45.0
DEFAULT_MAX_RESPONSE_BYTES = 5 * 1024 * 1024
DEFAULT_WORKERS = 4


@dataclass(frozen=True)
class PipelineConfig:
    """Limits and HTTP identity used by one pipeline run."""

    user_agent: str = DEFAULT_USER_AGENT
    accept_header: str = DEFAULT_ACCEPT
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    global_timeout: float = DEFAULT_GLOBAL_TIMEOUT
    homepage_retries: int = 2
    contact_page_retries: int = 1
    # Wait before retry N is retry_backoff[N-1]; the last value repeats.
    retry_backoff: tuple[float, ...] = (1.0, 3.0)
    max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES
    max_redirects: int = 3
    max_contact_pages: int = 5
    max_browser_contact_pages: int = 3

    def __post_init__(self) -> None:
        validate_pipeline_constraints(
            http_timeout=self.http_timeout,
            global_timeout=self.global_timeout,
            homepage_retries=self.homepage_retries,
            contact_page_retries=self.contact_page_retries,
            retry_backoff=self.retry_backoff,
            max_response_bytes=self.max_response_bytes,
            max_redirects=self.max_redirects,
            max_contact_pages=self.max_contact_pages,
            max_browser_contact_pages=self.max_browser_contact_pages,
        )

    def backoff_for(self, attempt: int) -> float:
        """Return the wait before retry number ``attempt`` (1-based)."""
        index = min(attempt, len(self.retry_backoff)) - 1
        return self.retry_backoff[max(index, 0)]


@dataclass(frozen=True)
class FinderConfig:
    """Validated configuration for a batch of websites."""

    websites: tuple[str, ...]
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    workers: int = DEFAULT_WORKERS
    use_selenium: bool = False
    show_progress: bool = True

    def __post_init__(self) -> None:
        validate_runtime_constraints(websites=self.websites, workers=self.workers)
