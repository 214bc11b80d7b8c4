"""Shared plumbing for view controllers: request tagging and view status.

Each view serves at most one *current* request.  Starting a new one
supersedes the previous without cancelling it: the older coroutine runs to
completion, but its result is discarded because its tag no longer matches.
A monotonically increasing counter per view is all the tagging needed.

The loading flag follows the same rule: it is raised when a request starts
and lowered when the *current* request finishes, on every exit path.  A
stale request finishing late never lowers the flag of a newer one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum

from estatefinder.core import events
from estatefinder.core.logging_config import REQUEST_TAG_CTX

__all__ = ["ViewStatus", "RequestTracker"]

logger = logging.getLogger(__name__)


class ViewStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    ERROR = "error"


class RequestTracker:
    """Issue request tags for one view and own its loading flag.

    Args:
        view_name: Prefix of the log tag, e.g. ``"browse"``.
    """

    def __init__(self, view_name: str) -> None:
        self._view_name = view_name
        self._latest = 0
        self._loading = False

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def latest(self) -> int:
        return self._latest

    def is_current(self, tag: int) -> bool:
        return tag == self._latest

    def label(self, tag: int) -> str:
        return f"{self._view_name}#{tag}"

    @contextmanager
    def track(self) -> Iterator[int]:
        """Start a new request and yield its tag.

        Raises the loading flag on entry.  On exit, whatever the outcome,
        the flag is lowered if this request is still the current one, and
        the logging request tag is restored.
        """
        self._latest += 1
        tag = self._latest
        self._loading = True
        token = REQUEST_TAG_CTX.set(self.label(tag))
        try:
            yield tag
        finally:
            if self.is_current(tag):
                self._loading = False
            REQUEST_TAG_CTX.reset(token)

    def discard_if_stale(self, tag: int) -> bool:
        """Return ``True`` (and log) if *tag* was superseded."""
        if self.is_current(tag):
            return False
        logger.info(
            "Discarding stale response %s (current is %s)",
            self.label(tag),
            self.label(self._latest),
            extra={"event": events.RESPONSE_STALE},
        )
        return True
