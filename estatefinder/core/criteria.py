"""Estatefinder query criteria.

Defines :class:`FilterCriteria`, the value object describing *which listings
the service should return*, and :func:`build_criteria`, which turns raw
search-form input into a :class:`SearchRequest` (criteria plus the free-text
token consumed only by the local refinement filter).

Criteria are rebuilt from form state on every query and never mutated in
place after construction.

Typical usage::

    from estatefinder.core.criteria import build_criteria

    request = build_criteria(search="vintage", city="Portland", state="OR")
    params = request.criteria.to_query_params()
    # {"city": "Portland", "state": "OR"}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, field_validator, model_validator

if TYPE_CHECKING:
    from estatefinder.core.models import ListingSummary

__all__ = ["FilterCriteria", "SearchRequest", "build_criteria"]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class FilterCriteria(BaseModel):
    """Server-side listing query constraints.

    ``None`` means "no constraint on this axis."  String values are passed
    to the service verbatim; there is no validation against a canonical
    list of cities or states.

    Attributes:
        city: City constraint.  Matched by the service as a case-insensitive
            substring.
        state: State constraint.  Matched exactly.
        sale_type: Category tag constraint (``"estate_sale"``, ...).
        featured_only: Only promoted listings.  Sent only when ``True``.
        zip_code: Postal-code constraint.
        start_date: Earliest sale date (inclusive).
        end_date: Latest sale date (inclusive).
        offset: Number of leading results to skip.  ``0`` is not sent.
    """

    model_config = {"frozen": True}

    city: str | None = Field(None, description="City; None = any.")
    state: str | None = Field(None, description="State code; None = any.")
    sale_type: str | None = Field(None, description="Sale category; None = any.")
    featured_only: bool = Field(False, description="Restrict to featured listings.")
    zip_code: str | None = Field(None, description="Postal code; None = any.")
    start_date: date | None = Field(None, description="Earliest sale date.")
    end_date: date | None = Field(None, description="Latest sale date.")
    offset: int = Field(0, ge=0, description="Leading results to skip.")

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("city", "state", "sale_type", "zip_code", mode="before")
    @classmethod
    def _blank_to_unset(cls, v: object) -> object:
        """Whitespace-only strings mean "unset", not an empty constraint."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _validate_date_range(self) -> FilterCriteria:
        if self.start_date is not None and self.end_date is not None:
            if self.start_date > self.end_date:
                raise ValueError(
                    f"start_date ({self.start_date}) must be <= end_date ({self.end_date})"
                )
        return self

    # ------------------------------------------------------------------
    # Query encoding
    # ------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        """``True`` when no constraint at all is active."""
        return not self.to_query_params()

    def to_query_params(self, limit: int | None = None) -> dict[str, Any]:
        """Encode the active constraints as listing-endpoint query parameters.

        Args:
            limit: Optional positive result-count limit.  The caller is
                responsible for rejecting non-positive values.

        Returns:
            A dict containing only the constraints that are set.
        """
        params: dict[str, Any] = {}
        if self.city is not None:
            params["city"] = self.city
        if self.state is not None:
            params["state"] = self.state
        if self.zip_code is not None:
            params["zip_code"] = self.zip_code
        if self.sale_type is not None:
            params["sale_type"] = self.sale_type
        if self.featured_only:
            params["featured"] = "true"
        if self.start_date is not None:
            params["start_date"] = self.start_date.isoformat()
        if self.end_date is not None:
            params["end_date"] = self.end_date.isoformat()
        if limit is not None:
            params["limit"] = limit
        if self.offset:
            params["offset"] = self.offset
        return params

    # ------------------------------------------------------------------
    # Matching helpers
    # ------------------------------------------------------------------

    def matches_city(self, city: str) -> bool:
        """Case-insensitive substring match; always ``True`` when unset."""
        if self.city is None:
            return True
        return self.city.casefold() in city.casefold()

    def matches_state(self, state: str) -> bool:
        """Whole-value match ignoring case, as the service compares states."""
        if self.state is None:
            return True
        return state.casefold() == self.state.casefold()

    def matches_sale_type(self, sale_type: str | None) -> bool:
        """Exact match; always ``True`` when unset."""
        if self.sale_type is None:
            return True
        return sale_type == self.sale_type

    def matches_featured(self, featured: bool | None) -> bool:
        """When ``featured_only`` is set, an unreported flag is accepted.

        Only an explicit ``False`` is rejected: absence is not coerced.
        """
        if not self.featured_only:
            return True
        return featured is not False

    def matches_listing(self, listing: ListingSummary) -> tuple[bool, str]:
        """Check a fetched summary against the location and category axes.

        Date and offset constraints are the service's responsibility and are
        not re-checked here.

        Returns:
            A ``(passed, reason)`` tuple; *reason* is ``""`` on pass.
        """
        if not self.matches_state(listing.state):
            return False, f"state {listing.state!r} != {self.state!r}"
        if not self.matches_city(listing.city):
            return False, f"city {listing.city!r} does not contain {self.city!r}"
        if not self.matches_sale_type(listing.sale_type):
            return False, f"sale_type {listing.sale_type!r} != {self.sale_type!r}"
        if not self.matches_featured(listing.featured):
            return False, "listing is not featured"
        return True, ""


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """Output of :func:`build_criteria`.

    Attributes:
        criteria: Constraints sent to the listing service.
        text_token: Free-text token for the local refinement filter only.
            Empty string when the search box was blank.
    """

    criteria: FilterCriteria
    text_token: str = ""


def build_criteria(
    search: str = "",
    city: str = "",
    state: str = "",
    sale_type: str = "",
    featured: bool = False,
    *,
    zip_code: str = "",
    start_date: date | None = None,
    end_date: date | None = None,
    offset: int = 0,
) -> SearchRequest:
    """Translate raw search-form input into a :class:`SearchRequest`.

    Pure transformation: blank strings become "unset", everything else is
    kept as typed.  The search text never reaches the service.

    Raises:
        pydantic.ValidationError: If ``start_date`` is after ``end_date`` or
            ``offset`` is negative.
    """
    criteria = FilterCriteria(
        city=city,
        state=state,
        sale_type=sale_type,
        featured_only=featured,
        zip_code=zip_code,
        start_date=start_date,
        end_date=end_date,
        offset=offset,
    )
    return SearchRequest(criteria=criteria, text_token=search.strip())
