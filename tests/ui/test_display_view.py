import pytest
from PySide6.QtGui import QColor

from chip8_tracer.arch.chip8.display import Framebuffer
from chip8_tracer.ui.display_view import DisplayView


class TestDisplayView:
    @pytest.fixture
    def view(self, qapp):
        return DisplayView(scale=4)

    def test_size_hint_follows_scale(self, view):
        assert (view.sizeHint().width(), view.sizeHint().height()) == (256, 128)
        view.set_scale(2)
        assert view.sizeHint().width() == 128
        with pytest.raises(ValueError):
            view.set_scale(0)

    # @intent:test_case_render 点灯ピクセルが前景色で、その他が背景色で描画されることを検証します。
    def test_to_image_renders_lit_pixels(self, view):
        fb = Framebuffer()
        fb.draw_sprite(1, 0, [0x80])
        view.set_framebuffer(fb)
        view.set_colors("#FFFFFF", "#000000")

        image = view.to_image()

        assert (image.width(), image.height()) == (256, 128)
        assert image.pixelColor(5, 1) == QColor("#FFFFFF")
        assert image.pixelColor(1, 1) == QColor("#000000")
        assert image.pixelColor(9, 1) == QColor("#000000")

    def test_to_image_without_framebuffer_is_background(self, view):
        image = view.to_image()
        assert image.pixelColor(0, 0) == QColor("#101010")

    def test_invalid_colors(self, view):
        with pytest.raises(ValueError):
            view.set_colors("not-a-color", "#000000")

    def test_refresh_tracks_framebuffer_version(self, view):
        assert view.refresh() is False
        view.set_framebuffer(Framebuffer())
        assert view.refresh() is True
