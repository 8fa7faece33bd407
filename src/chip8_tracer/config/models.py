from dataclasses import dataclass, field
from typing import Dict, Optional

# @intent:data_structure ホストのキー名からCHIP-8キーへの既定のマッピング。
#                       キー "0"-"9", "A"-"F" がそれぞれ同じ16進キーに対応します。
DEFAULT_KEYMAP: Dict[str, int] = {f"{key:X}": key for key in range(16)}

@dataclass
class MemoryConfig:
    size: int = 0x1000
    program_origin: int = 0x200
    font_base: int = 0x000
    stack_depth: int = 16

@dataclass
class TimingConfig:
    cpu_hz: float = 700.0  # 命令実行レート
    timer_hz: float = 60.0  # タイマー減算レート

@dataclass
class DisplayConfig:
    scale: int = 10
    foreground: str = "#33FF66"
    background: str = "#101010"

@dataclass
class SystemConfig:
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    keymap: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_KEYMAP))
    seed: Optional[int] = None  # 乱数シード（Noneの場合は非決定的）
