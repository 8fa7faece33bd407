# src/chip8_tracer/arch/chip8/keypad.py
"""
16キーの入力状態。ホストが書き込み、コアは読み取るのみです。
"""
from typing import Iterable, Optional, Tuple

KEY_COUNT = 16

# @intent:responsibility 16個のキー押下フラグを保持し、キー入力待ち命令のための押下遷移検出を提供します。
class Keypad:
    """
    レベルトリガのキー状態。
    poll_newly_pressed() のみ、直前のポーリング時点から「押された」遷移を検出します。
    """
    def __init__(self):
        self._pressed = [False] * KEY_COUNT
        self._latched = [False] * KEY_COUNT

    def reset(self) -> None:
        self._pressed = [False] * KEY_COUNT
        self._latched = [False] * KEY_COUNT

    # @intent:pre-condition keyは0x0-0xFである必要があります。
    def set_key(self, key: int, pressed: bool) -> None:
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"Key {key} out of range 0x0-0xF.")
        self._pressed[key] = bool(pressed)

    # @intent:responsibility ホストから全キーのスナップショットを受け取ります。
    def set_state(self, states: Iterable[bool]) -> None:
        values = [bool(s) for s in states]
        if len(values) != KEY_COUNT:
            raise ValueError(f"Expected {KEY_COUNT} key states, got {len(values)}.")
        self._pressed = values

    def is_pressed(self, key: int) -> bool:
        return self._pressed[key & 0xF]

    def get_state(self) -> Tuple[bool, ...]:
        return tuple(self._pressed)

    # @intent:responsibility 現在の押下状態を基準として記録します。入力待ちの開始時に呼ばれます。
    def latch(self) -> None:
        self._latched = list(self._pressed)

    # @intent:responsibility 前回の基準から新たに押されたキーのうち最小のインデックスを返します。
    # @intent:post-condition 呼び出し後、基準は現在の押下状態に更新されます（離されたキーの再押下も検出できる）。
    def poll_newly_pressed(self) -> Optional[int]:
        found = None
        for key, pressed in enumerate(self._pressed):
            if pressed and not self._latched[key]:
                found = key
                break
        self._latched = list(self._pressed)
        return found
