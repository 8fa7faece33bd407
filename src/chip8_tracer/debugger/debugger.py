# chip8_tracer/debugger/debugger.py
"""
デバッガモジュール。

CPUを1命令ずつ、または条件成立まで連続で実行し、実行履歴を保持します。
停止条件はPC、メモリアクセス、レジスタ値の3系統で指定します。
"""
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, List, Optional
import time

from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.core.snapshot import Snapshot
from chip8_tracer.transport.bus import BusAccessType
from chip8_tracer.common.errors import FatalCpuError

# @intent:responsibility 停止条件の種類。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"                # 次に実行する命令のアドレス
    MEMORY_READ = "MEMORY_READ"          # 直前の命令が読んだアドレス
    MEMORY_WRITE = "MEMORY_WRITE"        # 直前の命令が書いたアドレス
    REGISTER_VALUE = "REGISTER_VALUE"    # レジスタが指定値に等しい
    REGISTER_CHANGE = "REGISTER_CHANGE"  # 直前の命令でレジスタが変化した

# @intent:responsibility 1つの停止条件。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    register_nameはCPUのレジスタマップのキー（"V3", "I", "DT" など）です。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None          # 比較値（PC_MATCH, REGISTER_VALUE）
    address: Optional[int] = None        # 監視アドレス（MEMORY_READ, MEMORY_WRITE）
    register_name: Optional[str] = None  # 監視レジスタ（REGISTER_VALUE, REGISTER_CHANGE）
    enabled: bool = True

# @intent:responsibility 停止理由を表します。
class StopReason(Enum):
    BREAKPOINT = "BREAKPOINT"
    FAULT = "FAULT"
    STEP_LIMIT = "STEP_LIMIT"
    STOPPED = "STOPPED"

# @intent:responsibility ブレークポイントを管理し、CPUの実行を制御します。
class Debugger:
    """
    CPUをラップするデバッガ。致命的エラーは例外として伝播させず、停止理由として報告します。
    """
    def __init__(self, cpu: AbstractCpu, history_limit: int = 1000):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._last_snapshot: Optional[Snapshot] = None
        self._last_error: Optional[FatalCpuError] = None
        self._stop_reason: Optional[StopReason] = None
        # @intent:responsibility 直近の実行履歴を保持します。古いものから破棄されます。
        self._history: Deque[Snapshot] = deque(maxlen=history_limit)

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        if old_condition in self._breakpoints:
            idx = self._breakpoints.index(old_condition)
            self._breakpoints[idx] = new_condition

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    @property
    def last_error(self) -> Optional[FatalCpuError]:
        return self._last_error

    @property
    def stop_reason(self) -> Optional[StopReason]:
        return self._stop_reason

    def _pc_breakpoint_hit(self, pc: int) -> bool:
        for bp in self._breakpoints:
            if bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc:
                return True
        return False

    # @intent:responsibility Snapshotに基づいてPC_MATCH以外のブレークポイントをチェックします。
    def _check_other_breakpoints(self, snapshot: Snapshot, previous: Dict[str, int], current: Dict[str, int]) -> bool:
        for bp in self._breakpoints:
            if not bp.enabled:
                continue

            if bp.condition_type == BreakpointConditionType.MEMORY_READ:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.READ and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.MEMORY_WRITE:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.WRITE and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE:
                if bp.register_name in current and current[bp.register_name] == bp.value:
                    return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                name = bp.register_name
                if name in current and name in previous and current[name] != previous[name]:
                    return True
        return False

    # @intent:responsibility CPUを1命令分実行し、その結果のSnapshotを返します。
    def step_instruction(self) -> Snapshot:
        snapshot = self._cpu.step()
        self._last_snapshot = snapshot
        self._history.append(snapshot)
        return snapshot

    # @intent:responsibility ブレークポイント、致命的エラー、stop()、またはmax_stepsに達するまで実行を継続します。
    # @intent:return 停止理由。
    def run(self, max_steps: Optional[int] = None) -> StopReason:
        self._running = True
        self._last_error = None
        steps = 0

        # 現在のPCにブレークポイントがある場合は、まず1命令進めてから判定を開始する
        if self._pc_breakpoint_hit(self._cpu.get_state().pc):
            if not self._guarded_step():
                return self._finish(StopReason.FAULT)
            steps += 1

        while self._running:
            time.sleep(0)

            if max_steps is not None and steps >= max_steps:
                return self._finish(StopReason.STEP_LIMIT)

            current_pc = self._cpu.get_state().pc
            if self._pc_breakpoint_hit(current_pc):
                print(f"Breakpoint hit at PC: {current_pc:#06x}")
                return self._finish(StopReason.BREAKPOINT)

            previous = self._cpu.get_register_map()
            if not self._guarded_step():
                return self._finish(StopReason.FAULT)
            steps += 1

            if self._check_other_breakpoints(self._last_snapshot, previous, self._cpu.get_register_map()):
                print(f"Breakpoint hit at PC: {self._last_snapshot.state.pc:#06x}")
                return self._finish(StopReason.BREAKPOINT)

        return self._finish(StopReason.STOPPED)

    # @intent:responsibility 1命令を実行し、致命的エラーの場合は記録してFalseを返します。
    def _guarded_step(self) -> bool:
        try:
            self.step_instruction()
        except FatalCpuError as e:
            self._last_error = e
            print(f"CPU halted: {e}")
            return False
        return True

    def _finish(self, reason: StopReason) -> StopReason:
        self._running = False
        self._stop_reason = reason
        return reason

    def stop(self) -> None:
        self._running = False
