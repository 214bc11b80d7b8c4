"""Presentation decisions: badges, card routing, gallery state and detail fields."""

from estatefinder.presentation.badges import Badge, BadgeColor, classify_sale_type
from estatefinder.presentation.detail import DetailAssembler, DetailPresentation
from estatefinder.presentation.gallery import Gallery, GalleryState, order_images
from estatefinder.presentation.router import (
    CardPresentation,
    NavigationTarget,
    OpenContext,
    PresentationRouter,
)

__all__ = [
    "Badge",
    "BadgeColor",
    "classify_sale_type",
    "CardPresentation",
    "NavigationTarget",
    "OpenContext",
    "PresentationRouter",
    "Gallery",
    "GalleryState",
    "order_images",
    "DetailAssembler",
    "DetailPresentation",
]
