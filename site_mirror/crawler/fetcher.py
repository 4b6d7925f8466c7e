# site_mirror/crawler/fetcher.py
"""
Fetcher module: HTTP GET with a bounded, fixed-delay retry loop.

Transport failures and non-2xx responses are retryable and share one attempt
budget. A permitted 404 returns ``None`` without consuming an attempt.
Exhausting the budget raises :class:`FatalFetchError`.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, cast

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_mirror.config import BuildConfig
from site_mirror.crawler.models import FetchedResource
from site_mirror.errors import FatalFetchError, RetryableFetchError

__all__ = ("RetryingFetcher", "is_retryable")

_TRANSPORT_ERRORS = (ClientError, asyncio.TimeoutError)


def is_retryable(exc: BaseException) -> bool:
    """Return True if *exc* should consume an attempt and be retried."""
    return isinstance(exc, (RetryableFetchError,) + _TRANSPORT_ERRORS)


class RetryingFetcher:
    """Fetches text or binary resources, retrying transient failures."""

    def __init__(
        self,
        session: Optional[ClientSession] = None,
        *,
        retry_times: int = 4,
        retry_delay: float = 5.0,
        timeout: float = 30.0,
        user_agent: str = "SiteMirrorBot/1.0",
    ) -> None:
        self.session = session
        self.retry_times = retry_times
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.user_agent = user_agent
        self._owns_session = session is None
        self.logger = logging.getLogger("SiteMirror")

    @classmethod
    def from_config(cls, config: BuildConfig, session: Optional[ClientSession] = None) -> RetryingFetcher:
        return cls(
            session,
            retry_times=config.retry_times,
            retry_delay=config.retry_delay,
            timeout=config.timeout,
            user_agent=config.user_agent,
        )

    async def __aenter__(self) -> RetryingFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.timeout),
                headers={"User-Agent": self.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            self.session = None

    async def fetch(
        self, url: str, allow_not_found: bool = False, binary: bool = False
    ) -> FetchedResource | None:
        """
        Fetch *url*, retrying up to ``retry_times`` times after the first attempt.

        Returns None only when *allow_not_found* is set and the server answered 404.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized")

        attempts = 0
        last_error: Optional[BaseException] = None
        while attempts <= self.retry_times:
            attempts += 1
            try:
                return await self._attempt(url, allow_not_found, binary)
            except Exception as exc:
                if not is_retryable(exc):
                    raise
                last_error = exc
            if attempts > self.retry_times:
                break
            self.logger.debug(
                "Retry %d/%d for %s after %.1f s: %s",
                attempts, self.retry_times, url, self.retry_delay, last_error,
            )
            await asyncio.sleep(self.retry_delay)

        self.logger.warning("Failed %s after %d attempts: %s", url, attempts, last_error)
        raise FatalFetchError(url, attempts, last_error) from last_error

    async def fetch_text(self, url: str, allow_not_found: bool = False) -> str | None:
        resource = await self.fetch(url, allow_not_found=allow_not_found)
        if resource is None:
            return None
        return resource.body if isinstance(resource.body, str) else resource.body.decode("utf-8", "replace")

    async def fetch_bytes(self, url: str) -> bytes:
        resource = cast(FetchedResource, await self.fetch(url, binary=True))
        return resource.body if isinstance(resource.body, bytes) else resource.body.encode("utf-8")

    async def _attempt(self, url: str, allow_not_found: bool, binary: bool) -> FetchedResource | None:
        try:
            async with self.session.get(url) as resp:  # type: ignore[union-attr]
                if resp.status == 404 and allow_not_found:
                    self.logger.debug("%s -> 404, treated as absent", url)
                    return None
                if not 200 <= resp.status < 300:
                    raise RetryableFetchError(url, f"{resp.status}: {resp.reason}", resp.status)
                ctype = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                if binary:
                    body: str | bytes = await resp.read()
                else:
                    body = await resp.text(errors="replace")
                return FetchedResource(url, body, ctype)
        except _TRANSPORT_ERRORS as exc:
            raise RetryableFetchError(url, str(exc) or type(exc).__name__) from exc
