# src/chip8_tracer/arch/chip8/font.py
"""
組み込み16進フォント（0-F）の定義。
各グリフは5バイト、各バイトが8ピクセル幅の1行を表します（上位4ビットのみ使用）。
"""

# @intent:constant 1グリフあたりのバイト数。
GLYPH_SIZE = 5

# @intent:constant 16グリフ x 5バイトのフォントデータ。インデックス = 16進数字 * GLYPH_SIZE。
FONT_SET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])

# @intent:utility_function 16進数字のグリフの先頭アドレスを返します。
def glyph_address(font_base: int, digit: int) -> int:
    return font_base + (digit & 0xF) * GLYPH_SIZE
