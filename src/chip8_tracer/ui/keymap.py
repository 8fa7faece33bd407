"""
ホストのキーボードとCHIP-8キーパッドの対応付け。
"""
from typing import Dict, Mapping

from PySide6.QtCore import Qt

from chip8_tracer.common.errors import ConfigError

# @intent:responsibility 設定のキー名（"A", "Q", "1", "Space" など）をQtのキーコードに解決します。
# @intent:post-condition 未知のキー名はConfigErrorとなります。
def resolve_keymap(keymap: Mapping[str, int]) -> Dict[int, int]:
    resolved: Dict[int, int] = {}
    for name, chip8_key in keymap.items():
        qt_key = _lookup_qt_key(str(name))
        if qt_key is None:
            raise ConfigError(f"Unknown host key name: '{name}'")
        resolved[qt_key] = chip8_key
    return resolved

def _lookup_qt_key(name: str):
    for candidate in (name, name.upper(), name.capitalize()):
        key = getattr(Qt.Key, f"Key_{candidate}", None)
        if key is not None:
            return int(key.value)
    return None
