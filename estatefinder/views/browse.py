"""Browse view controller: search form, result set, refinement and cards.

Reactions
---------
:meth:`BrowseView.submit`
    Rebuild :class:`~estatefinder.core.criteria.FilterCriteria` from the
    form and query the service.  Supersedes any request still in flight.
:meth:`BrowseView.clear_filters`
    Reset city / state / sale type / featured (the search text stays) and
    re-query.
Editing :attr:`BrowseView.form.query <SearchForm.query>`
    No network call.  :attr:`BrowseView.visible_listings` re-applies the
    local refinement filter to the already-fetched result set.

Nothing raised while fetching escapes this module: service errors arrive as
``FAILURE`` outcomes, and anything unexpected is logged and converted to
one.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from estatefinder.core.criteria import SearchRequest, build_criteria
from estatefinder.core.models import ListingSummary
from estatefinder.discovery.executor import OutcomeKind, QueryExecutor, QueryOutcome
from estatefinder.filters.refinement import refine
from estatefinder.presentation.router import CardPresentation, PresentationRouter
from estatefinder.views.base import RequestTracker, ViewStatus

__all__ = ["SearchForm", "BrowseView"]

logger = logging.getLogger(__name__)

_EMPTY_WITH_FILTERS = "Try adjusting your search or filters"
_EMPTY_WITHOUT_FILTERS = "Be the first to list a sale!"
_FAILURE_MESSAGE = "We couldn't load sales right now. Please try again."


@dataclass
class SearchForm:
    """Raw, user-editable search inputs."""

    query: str = ""
    city: str = ""
    state: str = ""
    sale_type: str = ""
    featured: bool = False

    @property
    def has_filters(self) -> bool:
        """``True`` if any server-side filter input is non-blank."""
        return bool(
            self.city.strip() or self.state.strip() or self.sale_type.strip() or self.featured
        )

    @property
    def has_search(self) -> bool:
        return bool(self.query.strip())

    def build(self) -> SearchRequest:
        return build_criteria(
            search=self.query,
            city=self.city,
            state=self.state,
            sale_type=self.sale_type,
            featured=self.featured,
        )

    def clear_filters(self) -> None:
        self.city = ""
        self.state = ""
        self.sale_type = ""
        self.featured = False


class BrowseView:
    """Stateful controller behind the listing browse page.

    Args:
        executor: Query executor bound to a listing service.
        router: Card presentation router.
        limit: Optional result-count limit passed on every query.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        router: PresentationRouter,
        *,
        limit: int | None = None,
    ) -> None:
        self._executor = executor
        self._router = router
        self._limit = limit
        self._tracker = RequestTracker("browse")
        self.form = SearchForm()
        self._outcome: QueryOutcome | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def loading(self) -> bool:
        return self._tracker.loading

    @property
    def outcome(self) -> QueryOutcome | None:
        """Outcome of the most recent *current* request, if any finished."""
        return self._outcome

    @property
    def status(self) -> ViewStatus:
        if self.loading:
            return ViewStatus.LOADING
        if self._outcome is None:
            return ViewStatus.IDLE
        if self._outcome.kind is OutcomeKind.FAILURE:
            return ViewStatus.ERROR
        if not self.visible_listings:
            return ViewStatus.EMPTY
        return ViewStatus.READY

    @property
    def fetched_listings(self) -> tuple[ListingSummary, ...]:
        if self._outcome is None:
            return ()
        return self._outcome.listings

    @property
    def visible_listings(self) -> Sequence[ListingSummary]:
        """Fetched listings narrowed by the current search text."""
        return refine(self.fetched_listings, self.form.query.strip())

    @property
    def cards(self) -> list[CardPresentation]:
        return self._router.present_many(self.visible_listings)

    @property
    def result_label(self) -> str:
        count = len(self.visible_listings)
        return f"Found {count} {'sale' if count == 1 else 'sales'}"

    @property
    def message(self) -> str | None:
        """User-facing text for the error and empty states."""
        status = self.status
        if status is ViewStatus.ERROR:
            return _FAILURE_MESSAGE
        if status is ViewStatus.EMPTY:
            if self.form.has_search or self.form.has_filters:
                return _EMPTY_WITH_FILTERS
            return _EMPTY_WITHOUT_FILTERS
        return None

    # ------------------------------------------------------------------
    # Reactions
    # ------------------------------------------------------------------

    async def submit(self) -> QueryOutcome | None:
        """Query the service with the current form.

        Returns:
            The outcome, or ``None`` if a newer submission superseded this
            one before it finished (its result is discarded).
        """
        request = self.form.build()
        with self._tracker.track() as tag:
            try:
                outcome = await self._executor.search(request.criteria, self._limit)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected error while searching listings")
                outcome = QueryOutcome.failure(f"unexpected error: {exc}")

            if self._tracker.discard_if_stale(tag):
                return None
            self._outcome = outcome
            return outcome

    async def clear_filters(self) -> QueryOutcome | None:
        self.form.clear_filters()
        return await self.submit()
