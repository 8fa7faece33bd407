# src/chip8_tracer/arch/chip8/timers.py
"""
遅延タイマー・サウンドタイマーの固定レート減算。

命令の実行速度とは独立した時間アキュムレータで、一定周期（既定60Hz）ごとに
両タイマーを1ずつ減算します（0で飽和）。
"""
from chip8_tracer.arch.chip8.state import Chip8CpuState

DEFAULT_TIMER_HZ = 60.0

# @intent:responsibility 経過時間を蓄積し、固定周期ごとにタイマーを減算します。
class TimerClock:
    def __init__(self, rate_hz: float = DEFAULT_TIMER_HZ):
        if rate_hz <= 0:
            raise ValueError("Timer rate must be positive.")
        self._period = 1.0 / rate_hz
        self._accumulator = 0.0

    @property
    def period(self) -> float:
        return self._period

    def reset(self) -> None:
        self._accumulator = 0.0

    # @intent:responsibility elapsed秒を進め、発生したティック数だけタイマーを減算します。
    # @intent:return 発生したティック数。
    def advance(self, state: Chip8CpuState, elapsed: float) -> int:
        self._accumulator += elapsed
        ticks = 0
        while self._accumulator >= self._period:
            self._accumulator -= self._period
            ticks += 1
        if ticks:
            state.delay_timer = max(0, state.delay_timer - ticks)
            state.sound_timer = max(0, state.sound_timer - ticks)
        return ticks
