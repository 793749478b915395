"""Light Qt widget tests (offscreen platform, fake audio device)."""

from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QColor, QImage, QMouseEvent
import pytest

from conftest import make_track
from core.models import ColorTheme, DEFAULT_THEME
from player.covers import CoverProgress
from ui.loading_overlay import LoadingOverlay
from ui.player_bar import PlayerBar
from ui.theme import build_stylesheet
from ui.widgets.cover_backdrop import BLUR_SIZE, CoverBackdrop
from ui.widgets.progress_track import ProgressTrack, percent_from_x
from ui.widgets.record_indicator import RecordIndicator
from ui.widgets.visualizer_widget import QImageSurface, to_painter_path
from visualizer.pulse import LineTo, MoveTo, QuadTo, StrokeStyle


def _mouse(kind, x, buttons=Qt.MouseButton.LeftButton):
    button = Qt.MouseButton.LeftButton if kind != QEvent.Type.MouseMove else Qt.MouseButton.NoButton
    pos = QPointF(x, 5)
    return QMouseEvent(kind, pos, pos, button, buttons, Qt.KeyboardModifier.NoModifier)


class TestPercentFromX:
    @pytest.mark.parametrize("x, expected", [(0, 0.0), (50, 25.0), (200, 100.0), (-10, 0.0), (500, 100.0)])
    def test_maps_and_clamps(self, x, expected):
        assert percent_from_x(x, 0, 200) == expected

    def test_offset_track(self):
        assert percent_from_x(150, 100, 100) == 50.0

    def test_zero_width(self):
        assert percent_from_x(10, 0, 0) == 0.0


class TestProgressTrack:
    def test_drag_emits_each_position(self, qapp):
        track = ProgressTrack()
        track.resize(200, 14)
        seen = []
        track.seekRequested.connect(seen.append)

        track.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, 50))
        assert track.dragging
        track.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 150))
        track.mouseReleaseEvent(_mouse(QEvent.Type.MouseButtonRelease, 150, Qt.MouseButton.NoButton))
        track.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 10, Qt.MouseButton.NoButton))

        assert seen == [25.0, 75.0]
        assert not track.dragging
        assert track.percent == 75.0

    def test_set_percent_clamps(self, qapp):
        track = ProgressTrack()
        track.set_percent(140)
        assert track.percent == 100.0


class TestPlayerBar:
    def test_buttons_drive_player(self, player):
        player.set_tracks([make_track(n) for n in range(1, 4)])
        bar = PlayerBar(player)

        bar.btn_next.click()
        assert player.current_index == 1
        bar.btn_prev.click()
        bar.btn_prev.click()
        assert player.current_index == 2

        bar.btn_play.click()
        assert player.is_playing
        assert bar.is_playing
        bar.btn_play.click()
        assert not bar.is_playing

    def test_track_change_resets_readouts(self, player, fake_device):
        bar = PlayerBar(player)
        player.set_tracks([make_track(1), make_track(2)])
        fake_device.fire_duration(200.0)
        fake_device.fire_time(50.0)

        assert bar.lbl_time.text() == "0:50"
        assert bar.lbl_dur.text() == "3:20"
        assert bar.progress.percent == 25.0

        player.next_track()
        assert bar.lbl_time.text() == "0:00"
        assert bar.progress.percent == 0.0

    def test_seek_from_progress_track(self, player, fake_device):
        player.set_tracks([make_track(1)])
        fake_device.duration_s = 120.0
        bar = PlayerBar(player)

        bar.progress.seekRequested.emit(50.0)
        assert fake_device.seeks == [60.0]

    def test_seek_to_start_resets_time_label(self, player, fake_device):
        bar = PlayerBar(player)
        player.set_tracks([make_track(1)])
        fake_device.fire_duration(120.0)
        fake_device.fire_time(45.0)
        assert bar.lbl_time.text() == "0:45"

        bar.progress.seekRequested.emit(0.0)

        assert fake_device.seeks == [0.0]
        assert bar.lbl_time.text() == "0:00"
        assert bar.progress.percent == 0.0


class TestLoadingOverlay:
    def test_progress(self, qapp):
        overlay = LoadingOverlay()
        overlay.set_progress(CoverProgress(3, 4))
        assert overlay.bar.value() == 750
        assert overlay.status.text() == "Loading cover images... 3/4"


class TestRecordIndicator:
    def test_spins_only_while_playing(self, qapp):
        record = RecordIndicator()
        record.set_spinning(True)
        assert record.spinning
        record.set_spinning(False)
        assert not record.spinning


class TestStylesheet:
    def test_carries_theme_colors(self):
        sheet = build_stylesheet(ColorTheme(primary="#123456", dark="#000011"))
        assert "#123456" in sheet
        assert "#000011" in sheet
        assert "QToolButton#BtnPlay" in sheet

    def test_default_theme(self):
        assert DEFAULT_THEME.accent in build_stylesheet(DEFAULT_THEME)


class TestSurface:
    def test_painter_path_follows_commands(self, qapp):
        qpath = to_painter_path([MoveTo(0, 0), QuadTo(5, 10, 10, 10), LineTo(20, 10)])
        assert qpath.currentPosition() == QPointF(20, 10)

    def test_resize_uses_device_pixel_ratio(self, qapp):
        surface = QImageSurface()
        surface.resize(100, 50, 2.0)
        assert surface.image.width() == 200
        assert surface.image.height() == 100
        assert surface.image.devicePixelRatio() == 2.0

    def test_stroke_draws_pixels(self, qapp):
        presented = []
        surface = QImageSurface(on_present=lambda: presented.append(True))
        surface.resize(40, 20, 1.0)
        style = StrokeStyle(width=4, stops=((0.0, (255, 0, 0, 1.0)),))

        surface.stroke_path([MoveTo(0, 10), LineTo(40, 10)], style)
        surface.present()

        assert surface.image.pixelColor(20, 10).red() > 0
        assert presented == [True]


def _solid(color, w=64, h=48):
    image = QImage(w, h, QImage.Format.Format_RGB32)
    image.fill(QColor(color))
    return image


class TestCoverBackdrop:
    def test_cover_is_shrunk_for_blur(self, qapp):
        root = CoverBackdrop()
        assert root.objectName() == "PlayerRoot"
        assert root.backdrop is None

        root.set_cover(_solid("#ff0000", 640, 480))

        assert root.backdrop is not None
        assert min(root.backdrop.width(), root.backdrop.height()) == BLUR_SIZE

    def test_clearing_cover(self, qapp):
        root = CoverBackdrop()
        root.set_cover(_solid("#ff0000"))
        root.set_cover(None)
        assert root.backdrop is None
        root.set_cover(QImage())
        assert root.backdrop is None

    def test_cover_tints_the_background(self, qapp):
        root = CoverBackdrop()
        root.resize(80, 60)
        plain = root.grab().toImage().pixelColor(40, 30)

        root.set_cover(_solid("#ff0000"))
        tinted = root.grab().toImage().pixelColor(40, 30)

        assert tinted.red() > plain.red() or plain.red() == 255
        assert tinted.blue() < plain.blue() or plain.blue() == 0
        assert tinted != plain
