# src/chip8_tracer/arch/chip8/display.py
"""
モノクロのピクセルフレームバッファ。

描画はXORブリットのみで行われ、点灯していたピクセルが消えた場合に衝突として報告します。
画面外の座標はラップアラウンド（幅・高さによる剰余）で扱います。
"""
from typing import List, Sequence

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32

# @intent:responsibility 64x32のピクセル状態を保持し、スプライトのXOR描画と衝突検出を行います。
class Framebuffer:
    """
    (0, 0)を左上とするモノクロのフレームバッファ。
    """
    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self._pixels = bytearray(width * height)
        # @intent:rationale ホストが再描画の要否を判断できるよう、変更のたびに増加するカウンタを持ちます。
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def clear(self) -> None:
        self._pixels[:] = bytes(len(self._pixels))
        self._version += 1

    def get_pixel(self, x: int, y: int) -> bool:
        return self._pixels[(y % self.height) * self.width + (x % self.width)] != 0

    # @intent:responsibility スプライトを(x, y)にXOR描画し、衝突の有無を返します。
    # @intent:pre-condition rowsの各要素は8ピクセル分の1行（最上位ビットが左端）です。
    # @intent:post-condition いずれかの点灯ピクセルが消灯された場合True。
    def draw_sprite(self, x: int, y: int, rows: Sequence[int]) -> bool:
        collision = False
        for row_index, row in enumerate(rows):
            py = (y + row_index) % self.height
            for bit in range(8):
                if not row & (0x80 >> bit):
                    continue
                px = (x + bit) % self.width
                index = py * self.width + px
                if self._pixels[index]:
                    collision = True
                self._pixels[index] ^= 1
        self._version += 1
        return collision

    # @intent:responsibility ホスト向けに、行ごとの真偽値グリッドのコピーを返します。
    def snapshot(self) -> List[List[bool]]:
        w = self.width
        return [[self._pixels[y * w + x] != 0 for x in range(w)] for y in range(self.height)]

    def lit_count(self) -> int:
        return sum(self._pixels)
