"""Core orchestration pipeline."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

from bs4 import BeautifulSoup
from requests import Session
from tqdm import tqdm

from .config import FinderConfig, PipelineConfig
from .contact_pages import discover_contact_pages
from .deadline import Deadline
from .errors import FetchError, FinderError
from .extraction import extract_from_payload
from .fetchers import SeleniumRenderFetcher, StaticFetcher, make_session
from .logging_utils import get_logger
from .models import (
    SOURCE_BROWSER_CONTACT_PAGE,
    SOURCE_BROWSER_HOMEPAGE,
    SOURCE_CONTACT_PAGE,
    SOURCE_HOMEPAGE,
    STATUS_BLOCKED_DOMAIN,
    STATUS_NO_WEBSITE,
    STATUS_NOT_FOUND,
    STATUS_SKIPPED,
    STATUS_WEBSITE_ERROR,
    RenderFetcher,
    Target,
)
from .validation import is_blocked_website, is_supported_url

RenderFactory = Callable[[], RenderFetcher]


class EmailPipeline:
    """Three-level email lookup for one target.

    Level 1 fetches the homepage over HTTP, Level 2 fetches discovered
    contact/about pages over HTTP, and Level 3 renders the homepage and
    contact pages through a browser. The first level that yields a valid
    address wins. Without a render fetcher Level 3 is skipped.
    """

    def __init__(
        self,
        target: Target,
        render_fetcher: RenderFetcher | None = None,
        *,
        config: PipelineConfig | None = None,
        session: Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._target = target
        self._render_fetcher = render_fetcher
        self._config = config or PipelineConfig()
        self._owns_session = session is None
        self._session = session if session is not None else make_session(self._config)
        self._logger = logger or get_logger()
        self._fetcher = StaticFetcher(
            session=self._session, config=self._config, logger=self._logger
        )
        self._contact_pages: list[str] = []

    @property
    def contact_pages(self) -> list[str]:
        return list(self._contact_pages)

    def run(self, deadline: Deadline | None = None) -> None:
        """Execute the pipeline and write emails, status and source onto the target."""
        deadline = deadline or Deadline(self._config.global_timeout)
        try:
            self._run_levels(deadline)
        finally:
            if self._owns_session:
                self._session.close()
        self._logger.debug(
            "Email pipeline finished for %s: status=%s source=%s emails=%d",
            self._target.website,
            self._target.email_status,
            self._target.email_source,
            len(self._target.emails),
        )

    def _run_levels(self, deadline: Deadline) -> None:
        # Each level returns True once it has written the final outcome.
        self._contact_pages = []
        if self._homepage_level(deadline):
            return
        if self._contact_page_level(deadline):
            return
        if self._render_fetcher is not None and self._browser_level(deadline):
            return
        self._target.set_outcome(STATUS_NOT_FOUND)

    def _homepage_level(self, deadline: Deadline) -> bool:
        website = self._target.website
        try:
            body = self._fetcher.fetch_with_retry(
                website, self._config.homepage_retries, deadline
            )
        except FetchError as exc:
            # An unreachable homepage almost always means an unreachable host.
            self._logger.debug("Homepage fetch failed for %s: %s", website, exc)
            self._target.set_outcome(STATUS_WEBSITE_ERROR)
            return True

        emails, document = extract_from_payload(body)
        if emails:
            self._target.set_found(emails, SOURCE_HOMEPAGE)
            return True
        if document is not None:
            self._discover(document)
        return False

    def _contact_page_level(self, deadline: Deadline) -> bool:
        for page_url in self._contact_pages:
            if deadline.expired:
                return self._give_up(page_url)
            try:
                body = self._fetcher.fetch_with_retry(
                    page_url, self._config.contact_page_retries, deadline
                )
            except FetchError as exc:
                self._logger.debug("Skipping contact page %s: %s", page_url, exc)
                continue
            emails, _ = extract_from_payload(body)
            if emails:
                self._target.set_found(emails, SOURCE_CONTACT_PAGE)
                return True
        return False

    def _browser_level(self, deadline: Deadline) -> bool:
        website = self._target.website
        if deadline.expired:
            return self._give_up(website)

        html = self._render(website, deadline)
        if html:
            emails, document = extract_from_payload(html.encode("utf-8"))
            if emails:
                self._target.set_found(emails, SOURCE_BROWSER_HOMEPAGE)
                return True
            if not self._contact_pages and document is not None:
                self._discover(document)

        for page_url in self._contact_pages[: self._config.max_browser_contact_pages]:
            if deadline.expired:
                return self._give_up(page_url)
            page_html = self._render(page_url, deadline)
            if not page_html:
                continue
            emails, _ = extract_from_payload(page_html.encode("utf-8"))
            if emails:
                self._target.set_found(emails, SOURCE_BROWSER_CONTACT_PAGE)
                return True
        return False

    def _render(self, url: str, deadline: Deadline) -> str:
        assert self._render_fetcher is not None
        try:
            return self._render_fetcher.render(url, deadline)
        except Exception as exc:  # any renderer failure skips the page
            self._logger.debug("Browser render failed for %s: %s", url, exc)
            return ""

    def _discover(self, document: BeautifulSoup) -> None:
        self._contact_pages = discover_contact_pages(
            document, self._target.website, limit=self._config.max_contact_pages
        )
        self._logger.debug(
            "Discovered %d contact pages for %s", len(self._contact_pages), self._target.website
        )

    def _give_up(self, url: str) -> bool:
        # Running out of budget means nothing more was found, not an error.
        self._logger.debug("Deadline reached before %s", url)
        self._target.set_outcome(STATUS_NOT_FOUND)
        return True


def prefilter_status(target: Target) -> str | None:
    """Return the pre-pipeline status for a target, or None when it should run."""
    website = (target.website or "").strip()
    if not website:
        return STATUS_NO_WEBSITE
    if is_blocked_website(website):
        return STATUS_BLOCKED_DOMAIN
    if not is_supported_url(website):
        return STATUS_SKIPPED
    return None


def process_target(
    target: Target,
    *,
    config: PipelineConfig,
    render_fetcher: RenderFetcher | None,
    logger: logging.Logger,
) -> Target:
    """Prefilter one target and run the pipeline on it when eligible."""
    status = prefilter_status(target)
    if status is not None:
        target.set_outcome(status)
        logger.debug("Skipping %r: %s", target.website, status)
        return target

    pipeline = EmailPipeline(target, render_fetcher, config=config, logger=logger)
    try:
        pipeline.run()
    except FinderError as exc:
        logger.warning("Email pipeline failed for %s: %s", target.website, exc)
        target.set_outcome(STATUS_WEBSITE_ERROR)
    logger.info(
        "Email pipeline completed for %s: status=%s source=%s emails=%d",
        target.website,
        target.email_status,
        target.email_source,
        len(target.emails),
    )
    return target


def find_emails(
    websites: Sequence[str],
    *,
    config: PipelineConfig,
    workers: int = 1,
    render_fetcher_factory: RenderFactory | None = None,
    show_progress: bool = False,
    logger: logging.Logger,
) -> list[Target]:
    """Run one independent pipeline per website and return targets in input order."""
    targets = [Target(website=website.strip()) for website in websites]

    if render_fetcher_factory is not None:
        logger.warning("Browser rendering is running in single-thread mode for driver safety.")
        render_fetcher = render_fetcher_factory()
        try:
            iterator = tqdm(targets, desc="finding emails") if show_progress else targets
            for target in iterator:
                process_target(
                    target, config=config, render_fetcher=render_fetcher, logger=logger
                )
        finally:
            close_fn = getattr(render_fetcher, "close", None)
            if callable(close_fn):
                close_fn()
        return targets

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(
                process_target, target, config=config, render_fetcher=None, logger=logger
            )
            for target in targets
        ]
        completed = as_completed(futures)
        if show_progress:
            completed = tqdm(completed, total=len(futures), desc="finding emails")
        for future in completed:
            future.result()
    return targets


def run_finder(config: FinderConfig, *, logger: logging.Logger) -> list[Target]:
    """Build concrete dependencies and run the finder over the configured websites."""
    render_factory = (
        (
            lambda: SeleniumRenderFetcher(
                user_agent=config.pipeline.user_agent, logger=logger
            )
        )
        if config.use_selenium
        else None
    )
    return find_emails(
        config.websites,
        config=config.pipeline,
        workers=config.workers,
        render_fetcher_factory=render_factory,
        show_progress=config.show_progress,
        logger=logger,
    )
