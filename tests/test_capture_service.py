"""Tests for capture backend selection and fallbacks."""

import subprocess
from pathlib import Path

import pytest
from PySide6.QtGui import QImage

from prinsp.core import capture_service
from prinsp.core.capture_service import (
    BACKEND_GNOME,
    BACKEND_GRIM,
    BACKEND_QT,
    CaptureService,
)
from prinsp.core.errors import CaptureFailure
from prinsp.services.ocr_service import qimage_to_png_bytes


@pytest.fixture
def png_bytes(white_image):
    return qimage_to_png_bytes(white_image)


@pytest.fixture
def qt_fails(monkeypatch):
    def _fail(self):
        raise CaptureFailure("qt: grab returned an empty image")

    monkeypatch.setattr(CaptureService, "_grab_with_qt", _fail)


@pytest.fixture
def qt_works(monkeypatch, white_image):
    monkeypatch.setattr(CaptureService, "_grab_with_qt", lambda self: white_image)


@pytest.fixture
def wayland(monkeypatch):
    monkeypatch.setenv("WAYLAND_DISPLAY", "wayland-0")


@pytest.fixture
def x11(monkeypatch):
    monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)


class FakeRun:
    """Stands in for subprocess.run, keyed by tool name."""

    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append((list(args), kwargs))
        outcome = self.outcomes.get(args[0])
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(args)
        return subprocess.CompletedProcess(args, 0, stdout=outcome or b"", stderr=b"")

    def tools(self):
        return [args[0] for args, _ in self.calls]


def _install(monkeypatch, outcomes):
    fake = FakeRun(outcomes)
    monkeypatch.setattr(capture_service.subprocess, "run", fake)
    return fake


class TestBackendOrder:
    """Tests for the order backends are tried in."""

    def test_qt_first_outside_wayland(self, x11, qapp):
        assert CaptureService().backend_order() == [BACKEND_QT, BACKEND_GRIM, BACKEND_GNOME]

    def test_grim_first_on_wayland(self, wayland, qapp):
        assert CaptureService().backend_order() == [BACKEND_GRIM, BACKEND_QT, BACKEND_GNOME]


class TestCaptureFallback:
    """Tests for capture_full_screen() across backends."""

    def test_qt_grab_needs_no_external_tool(self, x11, qt_works, monkeypatch):
        fake = _install(monkeypatch, {})
        service = CaptureService()

        image = service.capture_full_screen()

        assert image.size().width() == 200
        assert fake.calls == []
        assert service.preferred_backend == BACKEND_QT

    def test_empty_qt_grab_falls_back_to_grim(self, x11, qt_fails, monkeypatch, png_bytes):
        fake = _install(monkeypatch, {BACKEND_GRIM: png_bytes})
        service = CaptureService()

        image = service.capture_full_screen()

        assert (image.width(), image.height()) == (200, 100)
        assert fake.calls[0][0] == [BACKEND_GRIM, "-"]
        assert fake.calls[0][1]["timeout"] == capture_service.EXTERNAL_TIMEOUT_S
        assert service.preferred_backend == BACKEND_GRIM

    def test_gnome_screenshot_reads_written_file(self, wayland, qt_fails, monkeypatch, png_bytes):
        def _write(args):
            Path(args[2]).write_bytes(png_bytes)
            return subprocess.CompletedProcess(args, 0, stdout=b"", stderr=b"")

        fake = _install(monkeypatch, {
            BACKEND_GRIM: FileNotFoundError("grim"),
            BACKEND_GNOME: _write,
        })
        service = CaptureService()

        image = service.capture_full_screen()

        assert not image.isNull()
        assert fake.tools() == [BACKEND_GRIM, BACKEND_GNOME]
        assert service.preferred_backend == BACKEND_GNOME

    def test_successful_backend_is_tried_first_next_time(self, wayland, qt_fails, monkeypatch, png_bytes):
        def _write(args):
            Path(args[2]).write_bytes(png_bytes)
            return subprocess.CompletedProcess(args, 0, stdout=b"", stderr=b"")

        fake = _install(monkeypatch, {
            BACKEND_GRIM: FileNotFoundError("grim"),
            BACKEND_GNOME: _write,
        })
        service = CaptureService()
        service.capture_full_screen()
        fake.calls.clear()

        service.capture_full_screen()

        assert fake.tools() == [BACKEND_GNOME]

    def test_all_backends_failing_raises_last_error(self, x11, qt_fails, monkeypatch):
        _install(monkeypatch, {
            BACKEND_GRIM: subprocess.TimeoutExpired([BACKEND_GRIM, "-"], 2),
            BACKEND_GNOME: subprocess.CalledProcessError(1, [BACKEND_GNOME], stderr=b"no portal"),
        })
        service = CaptureService()

        with pytest.raises(CaptureFailure, match="gnome-screenshot: no portal"):
            service.capture_full_screen()
        assert service.preferred_backend is None

    def test_timeout_then_missing_tool(self, wayland, qt_fails, monkeypatch):
        _install(monkeypatch, {
            BACKEND_GRIM: subprocess.TimeoutExpired([BACKEND_GRIM, "-"], 2),
            BACKEND_GNOME: FileNotFoundError("gnome-screenshot"),
        })

        with pytest.raises(CaptureFailure, match="not installed"):
            CaptureService().capture_full_screen()

    def test_unreadable_tool_output(self, x11, qt_fails, monkeypatch, qapp):
        _install(monkeypatch, {
            BACKEND_GRIM: b"garbage",
            BACKEND_GNOME: FileNotFoundError("gnome-screenshot"),
        })
        service = CaptureService()

        with pytest.raises(CaptureFailure):
            service.capture_full_screen()

    def test_grim_output_decodes(self, qapp, png_bytes):
        image = CaptureService._load_png(BACKEND_GRIM, png_bytes)

        assert isinstance(image, QImage)
        assert image.width() == 200
