# src/chip8_tracer/ui/fonts.py
"""
UIフォント管理モジュール。

レジスタや逆アセンブル表示で使う等幅フォントを、環境に応じて選択します。
"""
from PySide6.QtGui import QFont, QFontDatabase

PREFERRED_MONOSPACE_FAMILIES = ("Consolas", "Menlo", "Monaco", "DejaVu Sans Mono", "Courier New")

# @intent:responsibility 利用可能な等幅フォントファミリー名を優先順位に従って返します。
def get_monospace_font_family() -> str:
    available = set(QFontDatabase.families())
    for family in PREFERRED_MONOSPACE_FAMILIES:
        if family in available:
            return family
    return QFontDatabase.systemFont(QFontDatabase.FixedFont).family()

def get_monospace_font(size: int = 10) -> QFont:
    font = QFont(get_monospace_font_family(), size)
    font.setStyleHint(QFont.Monospace)
    return font
