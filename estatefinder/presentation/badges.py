"""Sale-type badge classification shared by cards and the detail view."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

__all__ = ["BadgeColor", "Badge", "classify_sale_type", "sale_type_label"]

logger = logging.getLogger(__name__)


class BadgeColor(StrEnum):
    """Colour family a badge is rendered in."""

    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    YELLOW = "yellow"
    NEUTRAL = "gray"


_SALE_TYPE_COLORS = MappingProxyType(
    {
        "estate_sale": BadgeColor.BLUE,
        "moving_sale": BadgeColor.GREEN,
        "auction": BadgeColor.PURPLE,
        "garage_sale": BadgeColor.YELLOW,
    }
)


@dataclass(frozen=True, slots=True)
class Badge:
    """A rendered sale-type badge.

    Attributes:
        color: Colour family; :attr:`BadgeColor.NEUTRAL` for unknown types.
        label: Upper-case text, e.g. ``"ESTATE SALE"``.  Empty when the
            listing has no sale type.
    """

    color: BadgeColor
    label: str


def sale_type_label(sale_type: str | None) -> str:
    """``"moving_sale"`` → ``"MOVING SALE"``; ``None`` → ``""``."""
    if not sale_type:
        return ""
    return sale_type.replace("_", " ").strip().upper()


def classify_sale_type(sale_type: str | None) -> Badge:
    """Map a sale-type tag to its badge.

    Total over every input: unrecognised or absent tags get the neutral
    colour.
    """
    color = _SALE_TYPE_COLORS.get(sale_type or "", BadgeColor.NEUTRAL)
    return Badge(color=color, label=sale_type_label(sale_type))
