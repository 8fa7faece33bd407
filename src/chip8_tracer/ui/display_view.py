"""
Display View モジュール。

CHIP-8のフレームバッファを整数倍に拡大して描画するウィジェットを提供します。
"""
from typing import Optional

from PySide6.QtWidgets import QWidget, QSizePolicy
from PySide6.QtCore import QSize, QRect
from PySide6.QtGui import QPainter, QColor, QImage, QPaintEvent

from chip8_tracer.arch.chip8.display import Framebuffer, SCREEN_WIDTH, SCREEN_HEIGHT

COLOR_FOREGROUND = "#33FF66"
COLOR_BACKGROUND = "#101010"

# @intent:responsibility フレームバッファの内容をピクセル単位で拡大描画します。
class DisplayView(QWidget):
    def __init__(self, parent=None, scale: int = 10):
        super().__init__(parent)
        self._framebuffer: Optional[Framebuffer] = None
        self._scale = scale
        self._foreground = QColor(COLOR_FOREGROUND)
        self._background = QColor(COLOR_BACKGROUND)
        self._painted_version = -1
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

    def set_framebuffer(self, framebuffer: Framebuffer) -> None:
        self._framebuffer = framebuffer
        self._painted_version = -1
        self.update()

    # @intent:pre-condition 色はQColorが解釈できる文字列（"#RRGGBB"など）であること。
    def set_colors(self, foreground: str, background: str) -> None:
        fg, bg = QColor(foreground), QColor(background)
        if not fg.isValid() or not bg.isValid():
            raise ValueError(f"Invalid display colors: {foreground}, {background}")
        self._foreground, self._background = fg, bg
        self.update()

    def set_scale(self, scale: int) -> None:
        if scale <= 0:
            raise ValueError("scale must be positive.")
        self._scale = scale
        self.updateGeometry()
        self.update()

    @property
    def scale(self) -> int:
        return self._scale

    # @intent:responsibility フレームバッファが前回描画時から変わっている場合のみ再描画を要求します。
    def refresh(self) -> bool:
        if self._framebuffer is None or self._framebuffer.version == self._painted_version:
            return False
        self.update()
        return True

    def sizeHint(self) -> QSize:
        width, height = self._dimensions()
        return QSize(width * self._scale, height * self._scale)

    def _dimensions(self):
        if self._framebuffer is None:
            return SCREEN_WIDTH, SCREEN_HEIGHT
        return self._framebuffer.width, self._framebuffer.height

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), self._background)
            if self._framebuffer is None:
                return
            width, height = self._dimensions()
            # 縦横比を保ったまま、ウィジェットに収まる最大の整数倍で中央に描画する
            cell = max(1, min(self.width() // width, self.height() // height))
            left = (self.width() - cell * width) // 2
            top = (self.height() - cell * height) // 2
            self._paint_pixels(painter, left, top, cell)
            self._painted_version = self._framebuffer.version
        finally:
            painter.end()

    def _paint_pixels(self, painter: QPainter, left: int, top: int, cell: int) -> None:
        fb = self._framebuffer
        for y in range(fb.height):
            for x in range(fb.width):
                if fb.get_pixel(x, y):
                    painter.fillRect(QRect(left + x * cell, top + y * cell, cell, cell), self._foreground)

    # @intent:responsibility 現在のフレームバッファを、設定された倍率でQImageとして描画して返します。
    def to_image(self) -> QImage:
        width, height = self._dimensions()
        image = QImage(width * self._scale, height * self._scale, QImage.Format_RGB32)
        image.fill(self._background)
        if self._framebuffer is not None:
            painter = QPainter(image)
            try:
                self._paint_pixels(painter, 0, 0, self._scale)
            finally:
                painter.end()
        return image
