import random
from typing import Tuple

from chip8_tracer.common.errors import ConfigError
from chip8_tracer.transport.bus import Bus, RAM, ROM
from chip8_tracer.arch.chip8.cpu import Chip8Cpu
from chip8_tracer.arch.chip8.state import MemoryLayout
from .models import SystemConfig

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Tuple[Chip8Cpu, Bus]:
        layout = self.build_layout(config)

        bus = Bus()
        # フォント領域（プログラム原点より下）はROM、それ以降はRAM
        bus.register_device(0x000, layout.program_origin - 1, ROM(layout.program_origin))
        bus.register_device(layout.program_origin, layout.size - 1, RAM(layout.program_capacity))

        rng = random.Random(config.seed)
        cpu = Chip8Cpu(
            bus,
            layout=layout,
            cpu_hz=config.timing.cpu_hz,
            timer_hz=config.timing.timer_hz,
            rng=rng,
        )
        return cpu, bus

    # @intent:responsibility メモリ構成からMemoryLayoutを生成し、整合性を検証します。
    def build_layout(self, config: SystemConfig) -> MemoryLayout:
        memory = config.memory
        layout = MemoryLayout(
            size=memory.size,
            program_origin=memory.program_origin,
            font_base=memory.font_base,
            stack_depth=memory.stack_depth,
        )
        try:
            layout.validate()
        except ValueError as e:
            raise ConfigError(f"Invalid memory layout: {e}") from e
        return layout
