"""Client-side free-text refinement of fetched listings.

Provides :class:`TextRefinementFilter`, a secondary gate applied to a result
set the query executor has already fetched.  It never touches the network:
changing the search text re-filters the cached collection instead of
re-querying the service.

A listing matches when the token is a case-insensitive substring of its
``title``, ``city``, ``state`` or ``description``.  A missing description
simply does not match.  An empty token is the identity: the input sequence
is returned unchanged.

Typical usage::

    from estatefinder.filters.refinement import TextRefinementFilter

    visible = TextRefinementFilter("vintage").apply(outcome.listings)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from estatefinder.core.models import ListingSummary

__all__ = ["TextRefinementFilter", "refine"]

logger = logging.getLogger(__name__)


class TextRefinementFilter:
    """Case-insensitive substring filter over summary text fields.

    Args:
        token: The search text.  Compared as typed (no trimming); callers
            normalise via :func:`~estatefinder.core.criteria.build_criteria`.
    """

    def __init__(self, token: str) -> None:
        self._token = token
        self._needle = token.casefold()

    @property
    def is_identity(self) -> bool:
        """``True`` when the token is empty and :meth:`apply` is a no-op."""
        return not self._token

    def matches(self, listing: ListingSummary) -> bool:
        """Return ``True`` if *listing* contains the token in any text field."""
        if self.is_identity:
            return True
        haystacks = (listing.title, listing.city, listing.state, listing.description)
        return any(h is not None and self._needle in h.casefold() for h in haystacks)

    def apply(self, listings: Sequence[ListingSummary]) -> Sequence[ListingSummary]:
        """Return the matching subset of *listings*, preserving order.

        With an empty token the very same sequence object is returned.
        """
        if self.is_identity:
            return listings

        kept = [listing for listing in listings if self.matches(listing)]
        logger.debug(
            "Refinement %r: %d/%d listings kept",
            self._token,
            len(kept),
            len(listings),
        )
        return kept


def refine(listings: Sequence[ListingSummary], token: str) -> Sequence[ListingSummary]:
    """Shorthand for ``TextRefinementFilter(token).apply(listings)``."""
    return TextRefinementFilter(token).apply(listings)
