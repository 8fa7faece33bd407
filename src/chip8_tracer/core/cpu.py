# chip8_tracer/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Tuple

from chip8_tracer.transport.bus import Bus
from chip8_tracer.core.snapshot import Snapshot, Operation, Metadata
from chip8_tracer.core.state import CpuState
from chip8_tracer.common.errors import FatalCpuError
from chip8_tracer.common.types import RegisterLayoutInfo

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0
        self._fault: Optional[FatalCpuError] = None
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。ラッチされた致命的エラーも解除します。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0
        self._fault = None

    def get_state(self) -> CpuState:
        return self._state

    def get_bus(self) -> Bus:
        return self._bus

    # @intent:responsibility 直近の致命的エラーを返します。停止していなければNone。
    @property
    def fault(self) -> Optional[FatalCpuError]:
        return self._fault

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @abstractmethod
    def _fetch(self) -> int:
        """
        現在のPCからメモリの次の命令（オペコード）をフェッチし、その値を返します。
        PCの更新は_update_pcで行います。
        """
        pass

    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        pass

    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー
    #                  （ログクリア→停止判定→フェッチ→デコード→PC更新→実行→サイクル終了処理→Snapshot生成）を定義します。
    #                  アーキテクチャ固有の振る舞い（キー入力待ちなど）はフックメソッドで対応します。
    def step(self) -> Snapshot:
        """
        CPUを1命令サイクル進め、その時点でのCPUとバスの状態を含むSnapshotオブジェクトを返します。
        FatalCpuErrorが発生した場合はエラーをラッチして再送出し、以降のstepは状態を変更しません。
        """
        # 1. 前処理: 前サイクルまでの残存ログを破棄
        self._bus.get_and_clear_activity_log()
        initial_pc = self._state.pc

        # 2. 致命的エラーで停止中なら何もしない
        if self._fault is not None:
            operation = Operation(opcode=0, mnemonic="HALT (fault)", length=0)
            return self._create_snapshot(initial_pc, operation)

        try:
            # 3. サスペンド判定 (Hook)
            operation = self._handle_suspended(initial_pc)
            if operation is None:
                # 4. フェッチ -> デコード -> PC更新 -> 実行
                opcode = self._fetch()
                operation = self._decode(opcode)
                self._update_pc(operation)
                self._execute(operation)
        except FatalCpuError as error:
            self._fault = error
            raise

        # 5. サイクル終了処理 (Hook)
        self._end_cycle(operation)

        # 6. Snapshot生成
        return self._create_snapshot(initial_pc, operation)

    # @intent:responsibility 命令を実行できない状態（入力待ちなど）の場合の処理を行います。
    # @intent:return サスペンド中であればそのサイクルを表すOperation、そうでなければNone。
    def _handle_suspended(self, current_pc: int) -> Optional[Operation]:
        return None

    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    # @intent:responsibility 命令実行後（サスペンド中も含む）に毎サイクル行う処理。デフォルトは何もしない。
    def _end_cycle(self, operation: Operation) -> None:
        pass

    def _create_snapshot(self, initial_pc: int, operation: Operation) -> Snapshot:
        bus_activity = self._bus.get_and_clear_activity_log()
        self._cycle_count += operation.cycle_count

        return Snapshot(
            state=self._state.copy(),
            operation=operation,
            metadata=Metadata(
                cycle_count=self._cycle_count,
                description=f"{initial_pc:#06x}: {operation.text()}",
            ),
            bus_activity=bus_activity
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        UIやデバッガがCPUの内部構造を知らなくても値を参照できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, mnemonic) のタプルリストを返す。
        """
        pass
