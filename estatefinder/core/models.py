"""Estatefinder listing record models.

This module defines the two read-only listing shapes the discovery engine
works with:

* :class:`ListingSummary`: the card-sized record returned by collection
  queries.  Its ``id`` is an opaque string: either a platform-issued number
  (``"42"``) or an external identifier (``"external-123"``).
* :class:`ListingDetail`: the full record returned by a single-listing
  lookup.  It carries a numeric ``id``, the seller, a structured address,
  optional coordinates, and images with an explicit ``display_order``.

The two shapes are deliberately **independent** models.  They share some
field names because they describe the same sale, but neither inherits from
the other: detail-only fields such as ``seller_id`` or ``listing_tier`` never
appear on a summary.

Both models are **frozen**.  The client never mutates a listing; image
collections are stored as tuples for the same reason.

Typical usage::

    from estatefinder.core.models import ListingSummary

    summary = ListingSummary.model_validate(payload)
    if summary.is_scraped:
        print(summary.source.url)
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from estatefinder.core import events

__all__ = [
    "ADDRESS_TBA",
    "ListingImage",
    "ListingSourceInfo",
    "ListingSummary",
    "DetailImage",
    "ListingDetail",
]

logger = logging.getLogger(__name__)

#: Sentinel address meaning "not yet announced".
ADDRESS_TBA: str = "TBA"


def _blank_to_none(v: object) -> object:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _ends_after_start(start: datetime, end: datetime) -> bool:
    # Naive timestamps are taken as UTC so mixed inputs stay comparable.
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    if end.tzinfo is None:
        end = end.replace(tzinfo=UTC)
    return end > start


# ---------------------------------------------------------------------------
# Summary shape
# ---------------------------------------------------------------------------


class ListingImage(BaseModel):
    """One image attached to a :class:`ListingSummary`."""

    model_config = {"frozen": True}

    image_url: str = Field(..., min_length=1, description="Absolute image URL.")
    is_primary: bool = Field(default=False, description="Representative image flag.")


class ListingSourceInfo(BaseModel):
    """Provenance of a scraped listing.

    Attributes:
        name: Display name of the third-party site (e.g. ``"EstateSales.net"``).
        url: Deep link to the listing on that site.  Used verbatim as the
            navigation target; never validated or rewritten.
    """

    model_config = {"frozen": True}

    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)

    @field_validator("name", "url", mode="before")
    @classmethod
    def _reject_blank(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            raise ValueError("source name and url must not be blank")
        return v


class ListingSummary(BaseModel):
    """Normalised card-level representation of a listing.

    Optional display metadata (``status``, ``view_count``, ``featured``) keeps
    ``None`` distinct from ``False`` / ``0``: absence means "not reported",
    which the presentation layer renders differently from an explicit value.

    Attributes:
        id: Opaque identifier.  Numeric ids sent as JSON numbers are coerced
            to strings so every id is handled uniformly.
        title: Headline text.
        address: Street address, or :data:`ADDRESS_TBA` when not announced.
        city: City name.
        state: State code (e.g. ``"OR"``).
        zip_code: Postal code.
        description: Long text; ``None`` when absent.
        start_date: When the sale opens.
        end_date: When the sale closes.  Should be strictly after
            ``start_date``; see :attr:`schedule_valid`.
        thumbnail_url: Fallback card image when ``images`` is empty.
        images: Ordered images; ``None`` when the service sent none.
        is_scraped: ``True`` for listings mirrored from third-party sites.
        source: Provenance; present if and only if ``is_scraped``.
        sale_type: Open-ended category tag (``"estate_sale"``, ...).
        status: Publication status label.
        view_count: Page views, if reported.
        featured: Promoted-placement flag, if reported.
    """

    model_config = {"frozen": True}

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    description: str | None = None
    start_date: datetime
    end_date: datetime
    thumbnail_url: str | None = None
    images: tuple[ListingImage, ...] | None = None
    is_scraped: bool = False
    source: ListingSourceInfo | None = None
    sale_type: str | None = None
    status: str | None = None
    view_count: int | None = Field(None, ge=0)
    featured: bool | None = None

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: object) -> object:
        """Accept numeric ids and treat them as strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("thumbnail_url", "sale_type", "status", mode="before")
    @classmethod
    def _optional_blank_to_none(cls, v: object) -> object:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def _check_provenance(self) -> ListingSummary:
        """Enforce ``is_scraped`` ⇔ ``source is not None``."""
        if self.is_scraped and self.source is None:
            raise ValueError(f"scraped listing {self.id!r} has no source")
        if not self.is_scraped and self.source is not None:
            raise ValueError(f"owned listing {self.id!r} must not carry a source")
        return self

    @model_validator(mode="after")
    def _surface_bad_schedule(self) -> ListingSummary:
        """Log, but accept, listings whose end is not after their start."""
        if not self.schedule_valid:
            logger.warning(
                "Listing %s ends (%s) before it starts (%s)",
                self.id,
                self.end_date.isoformat(),
                self.start_date.isoformat(),
                extra={"event": events.SCHEDULE_INVALID, "listing_id": self.id},
            )
        return self

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------

    @property
    def schedule_valid(self) -> bool:
        """``True`` when ``end_date`` is strictly after ``start_date``."""
        return _ends_after_start(self.start_date, self.end_date)

    @property
    def address_announced(self) -> bool:
        """``False`` when the street address is the ``"TBA"`` sentinel."""
        return self.address.strip().upper() != ADDRESS_TBA


# ---------------------------------------------------------------------------
# Detail shape
# ---------------------------------------------------------------------------


class DetailImage(BaseModel):
    """One image attached to a :class:`ListingDetail`.

    ``display_order`` is an integer ranking; values need not be contiguous
    and need not start at zero.
    """

    model_config = {"frozen": True}

    id: int
    image_url: str = Field(..., min_length=1)
    is_primary: bool = False
    display_order: int = 0


class ListingDetail(BaseModel):
    """Full record for a single platform-owned listing.

    Address fields default to empty strings rather than being required: the
    detail view must still render (and build a directions URL) for partially
    entered sales.

    Attributes:
        id: Platform-issued numeric identifier.
        seller_id: Owning seller.
        title: Headline text.
        description: Long text; empty when absent.
        sale_type: Open-ended category tag.
        status: Publication status label.
        address_line1: First street-address line.
        address_line2: Optional second line (unit, suite, ...).
        city: City name.
        state: State code.
        zip_code: Postal code.
        latitude: Optional WGS-84 latitude.
        longitude: Optional WGS-84 longitude.
        start_date: When the sale opens.
        end_date: When the sale closes.
        listing_tier: ``"basic"``, ``"featured"``, ``"premium"``, ...
        view_count: Page views, if reported.
        featured: Promoted-placement flag, if reported.
        driving_directions: Free-text seller directions.
        parking_info: Free-text parking notes.
        created_at: Creation timestamp.
        images: Images in service order; ``None`` when absent.
    """

    model_config = {"frozen": True}

    id: int
    seller_id: int
    title: str = Field(..., min_length=1)
    description: str = ""
    sale_type: str | None = None
    status: str | None = None
    address_line1: str = ""
    address_line2: str | None = None
    city: str = ""
    state: str = ""
    zip_code: str = ""
    latitude: float | None = Field(None, ge=-90.0, le=90.0)
    longitude: float | None = Field(None, ge=-180.0, le=180.0)
    start_date: datetime
    end_date: datetime
    listing_tier: str = "basic"
    view_count: int | None = Field(None, ge=0)
    featured: bool | None = None
    driving_directions: str | None = None
    parking_info: str | None = None
    created_at: datetime
    images: tuple[DetailImage, ...] | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _description_none_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator(
        "sale_type",
        "status",
        "address_line2",
        "driving_directions",
        "parking_info",
        mode="before",
    )
    @classmethod
    def _optional_blank_to_none(cls, v: object) -> object:
        return _blank_to_none(v)

    @field_validator("address_line1", "city", "state", "zip_code", mode="before")
    @classmethod
    def _address_none_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @model_validator(mode="after")
    def _surface_bad_schedule(self) -> ListingDetail:
        if not self.schedule_valid:
            logger.warning(
                "Listing %s ends (%s) before it starts (%s)",
                self.id,
                self.end_date.isoformat(),
                self.start_date.isoformat(),
                extra={"event": events.SCHEDULE_INVALID, "listing_id": str(self.id)},
            )
        return self

    @property
    def schedule_valid(self) -> bool:
        """``True`` when ``end_date`` is strictly after ``start_date``."""
        return _ends_after_start(self.start_date, self.end_date)

    @property
    def has_coordinates(self) -> bool:
        """``True`` when both latitude and longitude are present."""
        return self.latitude is not None and self.longitude is not None
