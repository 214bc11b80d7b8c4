"""Unit tests for the ``python -m estatefinder`` entry point.

The HTTP service is swapped for ``FakeListingService`` by patching
:meth:`HttpListingService.from_settings`, so the commands run end-to-end
through the real executor, views and presentation code.
"""

from __future__ import annotations

import sys
from typing import Any

import pytest

from estatefinder import __main__ as cli
from estatefinder.providers.http_service import HttpListingService


@pytest.fixture()
def patch_service(monkeypatch: pytest.MonkeyPatch, clean_env: None) -> Any:
    """Install *service* as the one every CLI command talks to."""

    def _install(service: Any) -> Any:
        monkeypatch.setattr(HttpListingService, "from_settings", classmethod(lambda cls, s: service))
        return service

    return _install


def _run(monkeypatch: pytest.MonkeyPatch, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["estatefinder", "--log-level", "DEBUG", *argv])
    with pytest.raises(SystemExit) as exc_info:
        cli.main()
    return exc_info.value.code


class TestParser:
    def test_search_arguments(self) -> None:
        args = cli._build_parser().parse_args(  # noqa: SLF001
            ["search", "--q", "lamp", "--state", "OR", "--type", "auction", "--featured", "--limit", "5"]
        )
        assert args.command == "search"
        assert args.q == "lamp"
        assert args.state == "OR"
        assert args.sale_type == "auction"
        assert args.featured is True
        assert args.limit == 5

    def test_show_requires_id(self) -> None:
        with pytest.raises(SystemExit):
            cli._build_parser().parse_args(["show"])  # noqa: SLF001


class TestCommands:
    def test_search_prints_cards(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        patch_service: Any,
        make_service: Any,
        summary_payload: Any,
        envelope: Any,
    ) -> None:
        service = patch_service(make_service(envelope([summary_payload(id="7")])))

        code = _run(monkeypatch, "search", "--state", "OR", "--limit", "3")

        out = capsys.readouterr().out
        assert code == 0
        assert "Found 1 sale" in out
        assert "Vintage Estate Sale [ESTATE SALE]" in out
        assert "/sales/7" in out
        assert service.calls == [{"state": "OR", "limit": 3}]
        assert service.closed is True

    def test_search_empty(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        patch_service: Any,
        make_service: Any,
    ) -> None:
        patch_service(make_service())
        assert _run(monkeypatch, "search") == 0
        assert "Be the first to list a sale!" in capsys.readouterr().out

    def test_search_failure_exit_code(
        self, monkeypatch: pytest.MonkeyPatch, patch_service: Any, make_service: Any, envelope: Any
    ) -> None:
        patch_service(make_service(envelope(None, success=False)))
        assert _run(monkeypatch, "search") == 1

    def test_show_prints_detail(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        patch_service: Any,
        make_service: Any,
        detail_payload: Any,
        envelope: Any,
    ) -> None:
        patch_service(make_service(details={"42": envelope(detail_payload(parking_info="Street only"))}))

        assert _run(monkeypatch, "show", "42") == 0

        out = capsys.readouterr().out
        assert "Saturday, November 1, 2025" in out
        assert "9:00 AM - 4:00 PM" in out
        assert "Parking: Street only" in out
        assert "destination=123%20Main%20St" in out
        assert "Image " not in out

    def test_show_prints_primary_image_position(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        patch_service: Any,
        make_service: Any,
        detail_payload: Any,
        envelope: Any,
    ) -> None:
        images = [
            {"id": 1, "image_url": "https://img.test/a.jpg", "display_order": 0},
            {"id": 2, "image_url": "https://img.test/b.jpg", "is_primary": True, "display_order": 1},
        ]
        patch_service(make_service(details={"42": envelope(detail_payload(images=images))}))

        assert _run(monkeypatch, "show", "42") == 0
        assert "Image 1 / 2: https://img.test/b.jpg" in capsys.readouterr().out

    def test_show_not_found_exit_code(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        patch_service: Any,
        make_service: Any,
    ) -> None:
        patch_service(make_service())
        assert _run(monkeypatch, "show", "999") == 2
        assert "Sale not found" in capsys.readouterr().err

    def test_bad_configuration_exits_1(
        self, monkeypatch: pytest.MonkeyPatch, clean_env: None
    ) -> None:
        monkeypatch.setenv("DISPLAY_TIMEZONE", "Nowhere/Special")
        assert _run(monkeypatch, "search") == 1

    def test_bad_log_level_exits_1(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "argv", ["estatefinder", "--log-level", "LOUD", "search"])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1
