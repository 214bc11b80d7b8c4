"""Estatefinder command-line entry point.

Usage:
    python -m estatefinder search [--q TEXT] [--city CITY] [--state ST]
                                  [--type SALE_TYPE] [--featured] [--limit N]
    python -m estatefinder show LISTING_ID

Both commands drive the same view controllers a UI would use, then print
the derived cards / detail fields as plain text.  The exit status is ``0``
for results (including an empty result set), ``2`` for "not found" and
``1`` for service failures.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from estatefinder.core import configure_logging
from estatefinder.core.exceptions import ConfigError
from estatefinder.core.settings import Settings, load_settings
from estatefinder.discovery.executor import QueryExecutor
from estatefinder.presentation.detail import DetailAssembler
from estatefinder.presentation.router import PresentationRouter
from estatefinder.providers.http_service import HttpListingService
from estatefinder.views.base import ViewStatus
from estatefinder.views.browse import BrowseView
from estatefinder.views.detail import DetailView

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="estatefinder",
        description="Browse estate, moving, auction and garage sales.",
    )
    parser.add_argument("--log-level", default=None, metavar="LEVEL")
    parser.add_argument("--log-format", default=None, metavar="FORMAT")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="List sales matching filters.")
    search.add_argument("--q", default="", help="Free-text refinement (title, city, state, description).")
    search.add_argument("--city", default="")
    search.add_argument("--state", default="")
    search.add_argument("--type", dest="sale_type", default="", help="estate_sale, moving_sale, ...")
    search.add_argument("--featured", action="store_true", help="Only featured sales.")
    search.add_argument("--limit", type=int, default=None)

    show = sub.add_parser("show", help="Show one sale in detail.")
    show.add_argument("listing_id")
    return parser


async def _run_search(args: argparse.Namespace, settings: Settings) -> int:
    async with HttpListingService.from_settings(settings) as service:
        executor = QueryExecutor(
            service,
            default_limit=settings.default_limit,
            service_label=settings.api_base_url,
        )
        router = PresentationRouter(settings.detail_route_prefix, settings.display_tz)
        view = BrowseView(executor, router, limit=args.limit)
        view.form.query = args.q
        view.form.city = args.city
        view.form.state = args.state
        view.form.sale_type = args.sale_type
        view.form.featured = args.featured
        await view.submit()

    if view.status is ViewStatus.ERROR:
        print(view.message, file=sys.stderr)  # noqa: T201
        return 1
    if view.status is ViewStatus.EMPTY:
        print(view.message)  # noqa: T201
        return 0

    print(view.result_label)  # noqa: T201
    for card in view.cards:
        badge = f" [{card.badge.label}]" if card.badge.label else ""
        featured = " *FEATURED*" if card.featured else ""
        print(f"\n{card.title}{badge}{featured}")  # noqa: T201
        if card.address_line:
            print(f"  {card.address_line}")  # noqa: T201
        print(f"  {card.locality_line}")  # noqa: T201
        print(f"  {card.starts} to {card.ends}")  # noqa: T201
        via = f" (via {card.source_name})" if card.source_name else ""
        print(f"  -> {card.target.href}{via}")  # noqa: T201
    return 0


async def _run_show(args: argparse.Namespace, settings: Settings) -> int:
    async with HttpListingService.from_settings(settings) as service:
        executor = QueryExecutor(service, service_label=settings.api_base_url)
        assembler = DetailAssembler(settings.display_tz, settings.maps_base_url)
        view = DetailView(executor, assembler, browse_route=settings.detail_route_prefix)
        await view.open(args.listing_id)

    if view.status is ViewStatus.NOT_FOUND:
        print(f"{view.message}. Browse all sales at {view.browse_route}", file=sys.stderr)  # noqa: T201
        return 2
    detail = view.presentation
    if view.status is not ViewStatus.READY or detail is None:
        print(view.message, file=sys.stderr)  # noqa: T201
        return 1

    print(f"{detail.title} [{detail.badge.label or 'SALE'}]")  # noqa: T201
    print(detail.start_date_line)  # noqa: T201
    if detail.end_date_line:
        print(f"through {detail.end_date_line}")  # noqa: T201
    print(detail.time_range)  # noqa: T201
    for line in detail.address_lines:
        print(line)  # noqa: T201
    print(detail.locality_line)  # noqa: T201
    print(f"Directions: {detail.directions_url}")  # noqa: T201
    if detail.parking_info:
        print(f"Parking: {detail.parking_info}")  # noqa: T201
    if view.gallery.current_image is not None:
        print(f"Image {view.gallery.position_label}: {view.gallery.current_image.image_url}")  # noqa: T201
    if detail.description:
        print(f"\n{detail.description}")  # noqa: T201
    return 0


def main() -> None:
    """CLI entry-point registered in ``pyproject.toml``."""
    args = _build_parser().parse_args()

    try:
        configure_logging(level=args.log_level, fmt=args.log_format)
    except ValueError as exc:
        print(f"estatefinder: configuration error: {exc}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.critical("Configuration error: %s", exc)
        sys.exit(1)

    runner = _run_search if args.command == "search" else _run_show
    try:
        sys.exit(asyncio.run(runner(args, settings)))
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting.")
        sys.exit(0)


if __name__ == "__main__":
    main()
