# chip8_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1サイクル実行後のCPUとバスの状態を記録した不変のデータ構造を定義します。
UIへの情報提供と、デバッグ時の状態記録に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

from chip8_tracer.core.state import CpuState
from chip8_tracer.transport.bus import BusAccess


# @intent:data_structure 16bit命令語から切り出したオペランドフィールド。
class OpcodeFields(NamedTuple):
    x: int    # 0x0F00
    y: int    # 0x00F0
    n: int    # 0x000F
    nn: int   # 0x00FF
    nnn: int  # 0x0FFF


# @intent:responsibility 実行された命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    実行された命令の詳細（オペコード、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode: int # 例: 0x6005
    mnemonic: str # 例: "LD"
    operands: List[str] = field(default_factory=list) # 例: ["V0", "#$05"]
    fields: Optional[OpcodeFields] = None
    cycle_count: int = 1
    length: int = 2 # 命令のバイト長

    @property
    def opcode_hex(self) -> str:
        return f"{self.opcode:04X}"

    # @intent:responsibility "LD V0, #$05" 形式の表示文字列を返します。
    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} " + ", ".join(self.operands)
        return self.mnemonic

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    """
    実行に関するメタデータ（累計サイクル数、トレース文字列など）を記録するデータクラス。
    """
    cycle_count: int
    description: Optional[str] = None # 例: "0x0200: LD V0, #$05"

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    1サイクル実行後のCPUとバスの状態を記録した不変のデータ構造。
    stateは生成時にコピーされるため、その後のCPUの実行で変化しません。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
