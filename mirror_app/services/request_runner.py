"""Runners that execute capture requests and deliver results on the session's context."""
from __future__ import annotations

import logging
from typing import Callable, Protocol

LOG = logging.getLogger(__name__)

SettledCallback = Callable[[object, "BaseException | None"], None]


class RequestRunner(Protocol):
    def submit(self, request: Callable[[], object], on_settled: SettledCallback) -> None:
        """Run ``request`` and call ``on_settled(result, error)`` on the session context."""

    def call_soon(self, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` on the session context. Safe from any thread."""


class InlineRequestRunner:
    """Run requests synchronously on the calling thread."""

    def submit(self, request: Callable[[], object], on_settled: SettledCallback) -> None:
        try:
            result = request()
        except Exception as exc:
            LOG.info("[SESSION] capture request failed: %s", exc)
            on_settled(None, exc)
            return
        on_settled(result, None)

    def call_soon(self, callback: Callable[[], None]) -> None:
        callback()
