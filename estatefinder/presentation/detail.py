"""Display-ready fields for the listing detail view.

:class:`DetailAssembler` derives everything the detail page shows from a raw
:class:`~estatefinder.core.models.ListingDetail`: formatted dates and times,
the sale-type badge, the directions URL and the share text.  Every function
here is total over its inputs, including records with missing optional
fields, and performs no I/O.

Directions URL
--------------
* Both ``latitude`` and ``longitude`` present → coordinate form
  ``...?api=1&destination=45.5152,-122.6784`` (address fields ignored).
* Otherwise → the postal address ``"line1, City, ST 12345"``, with empty
  parts dropped, percent-encoded as a single query value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, tzinfo
from urllib.parse import quote

from estatefinder.core.models import ListingDetail
from estatefinder.presentation.badges import Badge, classify_sale_type
from estatefinder.presentation.formatting import (
    format_long_date,
    format_time,
    same_calendar_day,
)

__all__ = [
    "DEFAULT_MAPS_BASE_URL",
    "DetailPresentation",
    "DetailAssembler",
    "directions_url",
    "postal_address",
    "share_text",
]

logger = logging.getLogger(__name__)

DEFAULT_MAPS_BASE_URL: str = "https://www.google.com/maps/dir/"


@dataclass(frozen=True, slots=True)
class DetailPresentation:
    """Derived, display-ready view of one :class:`ListingDetail`.

    ``end_date_line`` is ``None`` when the sale starts and ends on the same
    calendar day; both times are always present.
    """

    listing_id: int
    title: str
    description: str
    badge: Badge
    start_date_line: str
    end_date_line: str | None
    start_time: str
    end_time: str
    address_lines: tuple[str, ...]
    locality_line: str
    directions_url: str
    share_text: str
    listing_tier: str
    view_count: int | None
    featured: bool | None
    driving_directions: str | None
    parking_info: str | None
    schedule_valid: bool

    @property
    def time_range(self) -> str:
        return f"{self.start_time} - {self.end_time}"


def postal_address(detail: ListingDetail) -> str:
    """``"123 Main St, Portland, OR 97201"``, skipping empty parts."""
    region = " ".join(part for part in (detail.state.strip(), detail.zip_code.strip()) if part)
    parts = (detail.address_line1.strip(), detail.city.strip(), region)
    return ", ".join(part for part in parts if part)


def directions_url(detail: ListingDetail, base_url: str = DEFAULT_MAPS_BASE_URL) -> str:
    if detail.has_coordinates:
        destination = f"{detail.latitude},{detail.longitude}"
    else:
        destination = quote(postal_address(detail), safe="")
    return f"{base_url}?api=1&destination={destination}"


def share_text(detail: ListingDetail) -> str:
    """``"Check out this estate sale in Portland, OR"``."""
    kind = detail.sale_type.replace("_", " ") if detail.sale_type else "sale"
    where = ", ".join(part for part in (detail.city, detail.state) if part)
    if not where:
        return f"Check out this {kind}"
    return f"Check out this {kind} in {where}"


class DetailAssembler:
    """Build :class:`DetailPresentation` values.

    Args:
        tz: Display timezone.
        maps_base_url: Directions endpoint of the mapping service.
    """

    def __init__(self, tz: tzinfo = UTC, maps_base_url: str = DEFAULT_MAPS_BASE_URL) -> None:
        self._tz = tz
        self._maps_base_url = maps_base_url

    def assemble(self, detail: ListingDetail) -> DetailPresentation:
        single_day = same_calendar_day(detail.start_date, detail.end_date, self._tz)
        address_lines = tuple(
            line for line in (detail.address_line1, detail.address_line2) if line
        )
        region = " ".join(part for part in (detail.state, detail.zip_code) if part)
        locality = ", ".join(part for part in (detail.city, region) if part)

        return DetailPresentation(
            listing_id=detail.id,
            title=detail.title,
            description=detail.description,
            badge=classify_sale_type(detail.sale_type),
            start_date_line=format_long_date(detail.start_date, self._tz),
            end_date_line=None if single_day else format_long_date(detail.end_date, self._tz),
            start_time=format_time(detail.start_date, self._tz),
            end_time=format_time(detail.end_date, self._tz),
            address_lines=address_lines,
            locality_line=locality,
            directions_url=directions_url(detail, self._maps_base_url),
            share_text=share_text(detail),
            listing_tier=detail.listing_tier,
            view_count=detail.view_count,
            featured=detail.featured,
            driving_directions=detail.driving_directions,
            parking_info=detail.parking_info,
            schedule_valid=detail.schedule_valid,
        )
