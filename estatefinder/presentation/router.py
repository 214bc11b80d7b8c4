"""Per-listing presentation decisions for result cards.

:class:`PresentationRouter` turns one :class:`~estatefinder.core.models.ListingSummary`
into a :class:`CardPresentation`: where the card navigates, how it opens,
which badge and image it shows, and its display lines.  It is a pure
decision function with no side effects, called once per listing per render.

Navigation rules
----------------
* ``is_scraped`` **and** ``source`` present → the source URL, verbatim, in a
  new browsing context with ``rel="noopener noreferrer"``.
* Otherwise → the internal detail route keyed by ``id``, in place.

Card image rules
----------------
1. Exactly one image flagged primary → that image.
2. Images present but zero or several flagged → the first image.
3. No images → ``thumbnail_url``.
4. Nothing at all → placeholder (``url is None``); never an error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, tzinfo
from enum import StrEnum

from estatefinder.core.ids import detail_route
from estatefinder.core.models import ListingSummary
from estatefinder.presentation.badges import Badge, classify_sale_type
from estatefinder.presentation.formatting import format_card_datetime

__all__ = [
    "OpenContext",
    "ImageOrigin",
    "NavigationTarget",
    "CardImage",
    "CardPresentation",
    "PresentationRouter",
]

logger = logging.getLogger(__name__)

#: ``rel`` attribute that prevents referrer and opener leakage.
EXTERNAL_REL: str = "noopener noreferrer"


class OpenContext(StrEnum):
    SAME_TAB = "same_tab"
    NEW_TAB = "new_tab"


class ImageOrigin(StrEnum):
    """Which rule selected a card image."""

    PRIMARY = "primary"
    FIRST = "first"
    THUMBNAIL = "thumbnail"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True, slots=True)
class NavigationTarget:
    """Where a card goes when activated.

    Attributes:
        href: Internal route or external URL.
        external: ``True`` for a third-party source URL.
        open_context: Same tab for internal routes, new tab for external.
        rel: Link relationship for external targets; ``None`` otherwise.
    """

    href: str
    external: bool
    open_context: OpenContext
    rel: str | None = None


@dataclass(frozen=True, slots=True)
class CardImage:
    url: str | None
    origin: ImageOrigin

    @property
    def is_placeholder(self) -> bool:
        return self.url is None


@dataclass(frozen=True, slots=True)
class CardPresentation:
    """Everything a result card needs, derived from one summary.

    Attributes:
        listing_id: The listing's opaque id (render key).
        title: Headline.
        target: Navigation decision.
        badge: Sale-type badge.
        image: Card image decision.
        address_line: Street address, or ``None`` when it is ``"TBA"``.
        locality_line: ``"City, ST 12345"``; always shown.
        starts: Compact start date/time.
        ends: Compact end date/time.
        featured: Passed through unchanged; ``None`` when not reported.
        source_name: Provenance label of a scraped listing.
    """

    listing_id: str
    title: str
    target: NavigationTarget
    badge: Badge
    image: CardImage
    address_line: str | None
    locality_line: str
    starts: str
    ends: str
    featured: bool | None = None
    source_name: str | None = None


class PresentationRouter:
    """Derive :class:`CardPresentation` values for summaries.

    Args:
        detail_route_prefix: Path prefix of the internal detail route.
        tz: Display timezone for card dates.
    """

    def __init__(self, detail_route_prefix: str = "/sales", tz: tzinfo = UTC) -> None:
        self._prefix = detail_route_prefix
        self._tz = tz

    # ------------------------------------------------------------------
    # Individual decisions
    # ------------------------------------------------------------------

    def navigation_target(self, listing: ListingSummary) -> NavigationTarget:
        if listing.is_scraped and listing.source is not None:
            return NavigationTarget(
                href=listing.source.url,
                external=True,
                open_context=OpenContext.NEW_TAB,
                rel=EXTERNAL_REL,
            )
        return NavigationTarget(
            href=detail_route(listing.id, self._prefix),
            external=False,
            open_context=OpenContext.SAME_TAB,
        )

    def card_image(self, listing: ListingSummary) -> CardImage:
        images = listing.images or ()
        if images:
            primaries = [img for img in images if img.is_primary]
            if len(primaries) == 1:
                return CardImage(url=primaries[0].image_url, origin=ImageOrigin.PRIMARY)
            if len(primaries) > 1:
                logger.debug(
                    "Listing %s has %d primary images; using the first image",
                    listing.id,
                    len(primaries),
                )
            return CardImage(url=images[0].image_url, origin=ImageOrigin.FIRST)
        if listing.thumbnail_url:
            return CardImage(url=listing.thumbnail_url, origin=ImageOrigin.THUMBNAIL)
        return CardImage(url=None, origin=ImageOrigin.PLACEHOLDER)

    # ------------------------------------------------------------------
    # Whole card
    # ------------------------------------------------------------------

    def present(self, listing: ListingSummary) -> CardPresentation:
        return CardPresentation(
            listing_id=listing.id,
            title=listing.title,
            target=self.navigation_target(listing),
            badge=classify_sale_type(listing.sale_type),
            image=self.card_image(listing),
            address_line=listing.address if listing.address_announced else None,
            locality_line=f"{listing.city}, {listing.state} {listing.zip_code}",
            starts=format_card_datetime(listing.start_date, self._tz),
            ends=format_card_datetime(listing.end_date, self._tz),
            featured=listing.featured,
            source_name=listing.source.name if listing.source is not None else None,
        )

    def present_many(self, listings: Iterable[ListingSummary]) -> list[CardPresentation]:
        return [self.present(listing) for listing in listings]
