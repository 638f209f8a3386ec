import asyncio
from pathlib import Path

import pytest

from mhtml_to_pdf.config import Config
from mhtml_to_pdf.console import ConsoleLogger
from mhtml_to_pdf.converter import BOOLEAN_FLAGS, MhtmlToPDFConverter, build_parser, main, parse_command_line
from mhtml_to_pdf.dimensions import SizeSpec


class FakePage:
    """Stands in for a Playwright page and records what the converter asks of it."""

    def __init__(self, measurement=None, fail_on_pdf: bool = False) -> None:
        self.measurement = measurement if measurement is not None else {"width": 800, "height": 600}
        self.fail_on_pdf = fail_on_pdf
        self.evaluate_calls = 0
        self.goto_calls = []
        self.waits = []
        self.viewport = None
        self.pdf_kwargs = None
        self.closed = False

    async def goto(self, url, **kwargs):
        self.goto_calls.append((url, kwargs))

    async def wait_for_timeout(self, ms):
        self.waits.append(ms)

    async def evaluate(self, script):
        self.evaluate_calls += 1
        return self.measurement

    async def set_viewport_size(self, size):
        self.viewport = size

    async def pdf(self, **kwargs):
        if self.fail_on_pdf:
            raise RuntimeError("Target closed")
        self.pdf_kwargs = kwargs
        return b"%PDF-1.4"

    def is_closed(self):
        return self.closed

    async def close(self):
        self.closed = True


def _converter(**cli_config) -> MhtmlToPDFConverter:
    return MhtmlToPDFConverter(Config(cli_config, environ={}), ConsoleLogger())


def test_render_page_measures_and_clamps(tmp_path: Path, capsys) -> None:
    page = FakePage({"width": 1200, "height": 30000})
    out = tmp_path / "page.pdf"

    resolved = asyncio.run(_converter().render_page(page, "file:///tmp/page.mhtml", out))

    assert page.evaluate_calls == 1
    assert page.goto_calls == [("file:///tmp/page.mhtml", {"wait_until": "networkidle", "timeout": 30000})]
    assert page.waits == [250]
    assert page.viewport == {"width": 1200, "height": 20000}
    assert page.pdf_kwargs == {
        "path": str(out),
        "width": "1200px",
        "height": "20000px",
        "print_background": True,
        "prefer_css_page_size": False,
    }
    assert resolved.clamped_from_px == 30000
    captured = capsys.readouterr()
    assert "[WARNING]" in captured.err
    assert "Using PDF size: 1200px x 20000px" in captured.out


def test_render_page_skips_measurement_with_both_overrides(tmp_path: Path) -> None:
    page = FakePage()
    resolved = asyncio.run(_converter(delay="0").render_page(
        page, "file:///x.mhtml", tmp_path / "x.pdf", SizeSpec("in", 8.5), SizeSpec("in", 11.0)))

    assert page.evaluate_calls == 0
    assert page.waits == []
    assert page.viewport == {"width": 816, "height": 1056}
    assert (page.pdf_kwargs["width"], page.pdf_kwargs["height"]) == ("8.5in", "11in")
    assert (resolved.export_width, resolved.export_height) == ("8.5in", "11in")


def test_render_page_floors_narrow_content(tmp_path: Path) -> None:
    page = FakePage({"width": 90, "height": 400})
    asyncio.run(_converter().render_page(page, "file:///x.mhtml", tmp_path / "x.pdf"))
    assert page.viewport == {"width": 200, "height": 400}
    assert page.pdf_kwargs["width"] == "90px"


def test_parse_command_line() -> None:
    cmd = parse_command_line(["page.mhtml", "page.pdf", "--WIDTH", "8.5in", "--height", "a4", "--debug"])
    assert cmd.input_file == "page.mhtml"
    assert cmd.output_file == "page.pdf"
    assert cmd.options == {"width": "8.5in", "height": "a4", "debug": "true"}


def test_parse_command_line_defaults_and_flag_fallback() -> None:
    cmd = parse_command_line(["page.mhtml", "--width", "--height", "900"])
    assert cmd.output_file == "out.pdf"
    assert cmd.options == {"width": "true", "height": "900"}

    trailing = parse_command_line(["page.mhtml", "--foo"])
    assert trailing.options == {"foo": "true"}

    # Boolean flags never swallow the input path
    first = parse_command_line(["--debug", "page.mhtml"])
    assert first.input_file == "page.mhtml"
    assert first.flag("debug")


def test_main_without_input_exits_with_usage(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "usage" in capsys.readouterr().err.lower()


def test_main_missing_input_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "missing.mhtml")])
    assert exc.value.code == 1


def test_main_invalid_config_value(tmp_path: Path) -> None:
    src = tmp_path / "page.mhtml"
    src.write_text("<html></html>")
    with pytest.raises(SystemExit) as exc:
        main([str(src), "--delay", "later"])
    assert exc.value.code == 1


def _patch_browser(monkeypatch, page: FakePage) -> None:
    async def fake_launch(self):
        self._page = page

    monkeypatch.setattr(MhtmlToPDFConverter, "_launch_browser", fake_launch)


def test_main_end_to_end_with_overrides(tmp_path: Path, monkeypatch, capsys) -> None:
    src = tmp_path / "page.mhtml"
    src.write_text("<html><body>hi</body></html>")
    out = tmp_path / "nested" / "page.pdf"
    page = FakePage()
    _patch_browser(monkeypatch, page)

    main([str(src), str(out), "--width", "8.5in", "--height", "11in", "--delay", "0"])

    assert page.evaluate_calls == 0
    assert page.goto_calls[0][0] == src.resolve().as_uri()
    assert page.viewport == {"width": 816, "height": 1056}
    assert page.closed
    assert out.parent.is_dir()
    assert "PDF written to" in capsys.readouterr().out


def test_main_bad_override_falls_back_to_measurement(tmp_path: Path, monkeypatch, capsys) -> None:
    src = tmp_path / "page.mhtml"
    src.write_text("<html></html>")
    page = FakePage({"width": 1000, "height": 2000})
    _patch_browser(monkeypatch, page)

    main([str(src), str(tmp_path / "out.pdf"), "--width", "wide", "--height", "11in"])

    assert page.evaluate_calls == 1
    assert page.pdf_kwargs["width"] == "1000px"
    assert page.pdf_kwargs["height"] == "11in"
    assert "--width value 'wide'" in capsys.readouterr().err


def test_browser_released_when_export_fails(tmp_path: Path, monkeypatch) -> None:
    page = FakePage(fail_on_pdf=True)
    _patch_browser(monkeypatch, page)

    with pytest.raises(RuntimeError):
        _converter().convert(tmp_path / "page.mhtml", tmp_path / "out.pdf")
    assert page.closed


def test_parser_switches_never_take_a_value() -> None:
    switches = {
        action.option_strings[-1][2:]
        for action in build_parser()._actions
        if action.option_strings and action.nargs == 0
    }
    assert switches == BOOLEAN_FLAGS
    for key in switches:
        cmd = parse_command_line([f"--{key}", "page.mhtml", "page.pdf"])
        assert cmd.input_file == "page.mhtml"
        assert cmd.output_file == "page.pdf"
        assert cmd.flag(key)
