"""Image-gallery state machine for the listing detail view.

States
------
``EMPTY``
    No images loaded.  :attr:`Gallery.current_index` is ``None`` and every
    transition is a no-op.
``VIEWING``
    One or more images; :attr:`Gallery.current_index` is always a valid
    index into :attr:`Gallery.images`.

Ordering
--------
On :meth:`Gallery.load` images are ordered primary-first, then by
``display_order`` ascending.  Upstream data does not guarantee "at most one
primary", so when several images are flagged primary they keep their
original relative order (the sort is stable and primaries share one key).

Transitions
-----------
* :meth:`~Gallery.next` / :meth:`~Gallery.prev` wrap cyclically.
* :meth:`~Gallery.select` jumps to a thumbnail; out-of-range requests are
  ignored.
* :meth:`~Gallery.load` always resets first, so nothing carries over from
  a previous listing.

Typical usage::

    gallery = Gallery()
    gallery.load(detail.images, listing_key=str(detail.id))
    gallery.next()
    url = gallery.current_image.image_url
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import StrEnum

from estatefinder.core.models import DetailImage

__all__ = ["GalleryState", "Gallery", "order_images"]

logger = logging.getLogger(__name__)


class GalleryState(StrEnum):
    EMPTY = "empty"
    VIEWING = "viewing"


def _sort_key(image: DetailImage) -> tuple[int, int]:
    # Primaries share one key so the stable sort keeps their input order.
    if image.is_primary:
        return (0, 0)
    return (1, image.display_order)


def order_images(images: Iterable[DetailImage] | None) -> tuple[DetailImage, ...]:
    """Return *images* primary-first, then by ascending ``display_order``."""
    if not images:
        return ()
    return tuple(sorted(images, key=_sort_key))


class Gallery:
    """Ordered image set plus a cyclic cursor, owned by one detail view."""

    def __init__(self) -> None:
        self._images: tuple[DetailImage, ...] = ()
        self._index: int = 0
        self._listing_key: str | None = None

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> GalleryState:
        return GalleryState.VIEWING if self._images else GalleryState.EMPTY

    @property
    def images(self) -> tuple[DetailImage, ...]:
        return self._images

    @property
    def listing_key(self) -> str | None:
        """Key of the listing whose images are loaded, if any."""
        return self._listing_key

    @property
    def current_index(self) -> int | None:
        """Index of the shown image; ``None`` while ``EMPTY``."""
        if not self._images:
            return None
        return self._index

    @property
    def current_image(self) -> DetailImage | None:
        if not self._images:
            return None
        return self._images[self._index]

    @property
    def position_label(self) -> str | None:
        """``"2 / 5"`` style counter; ``None`` while ``EMPTY``."""
        if not self._images:
            return None
        return f"{self._index + 1} / {len(self._images)}"

    def __len__(self) -> int:
        return len(self._images)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return to ``EMPTY``."""
        self._images = ()
        self._index = 0
        self._listing_key = None

    def load(self, images: Iterable[DetailImage] | None, listing_key: str | None = None) -> None:
        """Reset, then enter ``VIEWING`` at index 0 if *images* is non-empty."""
        self.reset()
        self._images = order_images(images)
        self._listing_key = listing_key
        logger.debug(
            "Gallery loaded %d images for listing %s",
            len(self._images),
            listing_key or "?",
        )

    def next(self) -> int | None:
        """Advance one image, wrapping from last to first."""
        if len(self._images) > 1:
            self._index = (self._index + 1) % len(self._images)
        return self.current_index

    def prev(self) -> int | None:
        """Step back one image, wrapping from first to last."""
        if len(self._images) > 1:
            self._index = (self._index - 1 + len(self._images)) % len(self._images)
        return self.current_index

    def select(self, index: int) -> bool:
        """Jump to *index*.  Returns ``False`` (and changes nothing) if out of range."""
        if not 0 <= index < len(self._images):
            logger.debug(
                "Ignoring thumbnail selection %d (gallery has %d images)",
                index,
                len(self._images),
            )
            return False
        self._index = index
        return True
