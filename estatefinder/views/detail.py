"""Detail view controller: one listing, its derived fields and its gallery.

Opening a listing resets the gallery immediately, so the previous listing's
images are never shown while the new one loads.  Like the browse view, a
newer :meth:`DetailView.open` supersedes an older one; late responses are
discarded by tag.

Presentation by outcome:

=============  =========================================================
``OK``         :attr:`DetailView.presentation` and a loaded gallery.
``NOT_FOUND``  "Sale not found" with a browse-all affordance.
``FAILURE``    "Failed to load sale" (retryable).
=============  =========================================================
"""

from __future__ import annotations

import logging

from estatefinder.discovery.executor import OutcomeKind, QueryExecutor, QueryOutcome
from estatefinder.presentation.detail import DetailAssembler, DetailPresentation
from estatefinder.presentation.gallery import Gallery
from estatefinder.views.base import RequestTracker, ViewStatus

__all__ = ["DetailView"]

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Sale not found"
FAILURE_MESSAGE = "Failed to load sale"


class DetailView:
    """Stateful controller behind the listing detail page.

    Args:
        executor: Query executor bound to a listing service.
        assembler: Derives display fields from the fetched record.
        browse_route: Route offered when the listing does not exist.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        assembler: DetailAssembler,
        *,
        browse_route: str = "/sales",
    ) -> None:
        self._executor = executor
        self._assembler = assembler
        self._tracker = RequestTracker("detail")
        self.browse_route = browse_route
        self.gallery = Gallery()
        self._listing_id: str | None = None
        self._outcome: QueryOutcome | None = None
        self._presentation: DetailPresentation | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def loading(self) -> bool:
        return self._tracker.loading

    @property
    def listing_id(self) -> str | None:
        """Id most recently requested via :meth:`open`."""
        return self._listing_id

    @property
    def outcome(self) -> QueryOutcome | None:
        return self._outcome

    @property
    def presentation(self) -> DetailPresentation | None:
        return self._presentation

    @property
    def status(self) -> ViewStatus:
        if self.loading:
            return ViewStatus.LOADING
        if self._outcome is None:
            return ViewStatus.IDLE
        if self._outcome.kind is OutcomeKind.NOT_FOUND:
            return ViewStatus.NOT_FOUND
        if self._outcome.kind is OutcomeKind.OK:
            return ViewStatus.READY
        return ViewStatus.ERROR

    @property
    def message(self) -> str | None:
        status = self.status
        if status is ViewStatus.NOT_FOUND:
            return NOT_FOUND_MESSAGE
        if status is ViewStatus.ERROR:
            return FAILURE_MESSAGE
        return None

    # ------------------------------------------------------------------
    # Reactions
    # ------------------------------------------------------------------

    async def open(self, listing_id: str | int) -> QueryOutcome | None:
        """Load *listing_id*, replacing whatever was shown.

        Returns:
            The outcome, or ``None`` if superseded by a newer :meth:`open`.
        """
        self._listing_id = str(listing_id)
        self._outcome = None
        self._presentation = None
        self.gallery.reset()

        with self._tracker.track() as tag:
            try:
                outcome = await self._executor.lookup(listing_id)
                presentation = (
                    self._assembler.assemble(outcome.listing)
                    if outcome.listing is not None
                    else None
                )
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected error while loading listing %s", listing_id)
                outcome = QueryOutcome.failure(f"unexpected error: {exc}")
                presentation = None

            if self._tracker.discard_if_stale(tag):
                return None

            self._outcome = outcome
            self._presentation = presentation
            if outcome.listing is not None:
                self.gallery.load(outcome.listing.images, listing_key=str(outcome.listing.id))
            return outcome

    async def retry(self) -> QueryOutcome | None:
        """Re-issue the last :meth:`open`; no-op if nothing was opened."""
        if self._listing_id is None:
            return None
        return await self.open(self._listing_id)

    def next_image(self) -> int | None:
        return self.gallery.next()

    def prev_image(self) -> int | None:
        return self.gallery.prev()

    def select_image(self, index: int) -> bool:
        return self.gallery.select(index)
