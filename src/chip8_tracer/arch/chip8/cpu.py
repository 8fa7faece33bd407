# src/chip8_tracer/arch/chip8/cpu.py
"""
CHIP-8 CPUエミュレーションの中心モジュール。

Chip8Cpuはインタプリタの全ての状態（メモリへのバス、レジスタ、スタック、タイマー、
キー入力、フレームバッファ）を所有し、1命令単位のサイクル駆動を提供します。
"""
import random
from typing import Dict, List, Optional, Tuple

from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.core.snapshot import Operation, Snapshot
from chip8_tracer.common.errors import ProgramNotLoadedError, RomLoadError
from chip8_tracer.common.types import RegisterLayoutInfo, RegisterInfo
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, MemoryLayout, RunState, REGISTER_COUNT
from chip8_tracer.arch.chip8.context import ExecutionContext
from chip8_tracer.arch.chip8.display import Framebuffer
from chip8_tracer.arch.chip8.keypad import Keypad
from chip8_tracer.arch.chip8.timers import TimerClock, DEFAULT_TIMER_HZ
from chip8_tracer.arch.chip8.font import FONT_SET
from chip8_tracer.arch.chip8.instructions import decode_opcode, execute_instruction
from chip8_tracer.arch.chip8 import disassembler

DEFAULT_CPU_HZ = 700.0

# @intent:responsibility CHIP-8 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行、タイマー）を提供します。
class Chip8Cpu(AbstractCpu):
    """
    CHIP-8 CPUをエミュレートするクラス。

    命令の実行レート（cpu_hz）とタイマーの減算レート（timer_hz）は独立しています。
    1サイクルは 1 / cpu_hz 秒の仮想時間として扱われ、タイマーはその経過時間に基づいて減算されます。
    """
    # @intent:pre-condition `bus`にはlayoutのアドレス範囲全体がマップされている必要があります。
    def __init__(self, bus: Bus, layout: Optional[MemoryLayout] = None,
                 cpu_hz: float = DEFAULT_CPU_HZ, timer_hz: float = DEFAULT_TIMER_HZ,
                 rng: Optional[random.Random] = None):
        self._layout = layout or MemoryLayout()
        self._layout.validate()
        if cpu_hz <= 0:
            raise ValueError("cpu_hz must be positive.")
        self._cpu_hz = float(cpu_hz)
        self._display = Framebuffer()
        self._keypad = Keypad()
        self._rng = rng if rng is not None else random.Random()
        self._timer_clock = TimerClock(timer_hz)
        self._cycle_budget = 0.0
        self._program_loaded = False
        super().__init__(bus)
        self.reset()

    def _create_initial_state(self) -> Chip8CpuState:
        return Chip8CpuState(
            pc=self._layout.program_origin,
            stack=[0] * self._layout.stack_depth,
        )

    # @intent:responsibility 全ての状態をゼロクリアし、フォントを再ロードします。
    # @intent:post-condition プログラムは未ロード状態になるため、実行前にload_programが必要です。
    def reset(self) -> None:
        super().reset()
        self._bus.clear()
        for offset, byte in enumerate(FONT_SET):
            self._bus.load(self._layout.font_base + offset, byte)
        self._display.clear()
        self._keypad.reset()
        self._timer_clock.reset()
        self._cycle_budget = 0.0
        self._program_loaded = False
        self._context = ExecutionContext(
            state=self._state,
            bus=self._bus,
            display=self._display,
            keypad=self._keypad,
            rng=self._rng,
            layout=self._layout,
        )

    # @intent:responsibility プログラムがこのレイアウトに収まるかを、状態を変更せずに検査します。
    # @intent:post-condition 空、または容量超過の場合はRomLoadError。
    def check_program(self, data: bytes) -> None:
        capacity = self._layout.program_capacity
        if not data:
            raise RomLoadError("Program is empty.")
        if len(data) > capacity:
            raise RomLoadError(f"Program of {len(data)} bytes exceeds the {capacity} bytes available.")

    # @intent:responsibility プログラムをプログラム原点からメモリにコピーし、PCを原点に設定します。
    # @intent:post-condition 容量を超える場合はRomLoadErrorを送出し、状態は一切変更しません。
    def load_program(self, data: bytes) -> None:
        data = bytes(data)
        self.check_program(data)

        origin = self._layout.program_origin
        for address in range(origin, self._layout.size):
            self._bus.load(address, 0)
        for offset, byte in enumerate(data):
            self._bus.load(origin + offset, byte)
        self._state.pc = origin
        self._program_loaded = True

    @property
    def program_loaded(self) -> bool:
        return self._program_loaded

    @property
    def layout(self) -> MemoryLayout:
        return self._layout

    @property
    def display(self) -> Framebuffer:
        return self._display

    @property
    def keypad(self) -> Keypad:
        return self._keypad

    @property
    def cpu_hz(self) -> float:
        return self._cpu_hz

    # @intent:responsibility ホストがビープ音を鳴らすべきかどうかを返します。
    def is_sound_active(self) -> bool:
        return self._state.sound_timer > 0

    # @intent:responsibility 1サイクルを実行します。プログラム未ロードの場合はフェッチを行いません。
    def step(self) -> Snapshot:
        if not self._program_loaded:
            raise ProgramNotLoadedError("No program loaded; call load_program() before stepping.")
        return super().step()

    # @intent:responsibility seconds秒分の仮想時間に相当するサイクルを実行し、実行したサイクル数を返します。
    # @intent:rationale 端数のサイクルは次回の呼び出しに繰り越し、長期的な実行レートをcpu_hzに一致させます。
    def run_for(self, seconds: float) -> int:
        self._cycle_budget += seconds * self._cpu_hz
        count = int(self._cycle_budget)
        self._cycle_budget -= count
        for _ in range(count):
            self.step()
        return count

    # @intent:responsibility ビッグエンディアンの16bit命令語をフェッチします。PCの更新は_update_pcで行います。
    def _fetch(self) -> int:
        pc = self._state.pc
        return (self._bus.read(pc) << 8) | self._bus.read(pc + 1)

    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._context)

    # @intent:responsibility キー入力待ちの間は命令をフェッチせず、新たに押されたキーのみを検出します。
    def _handle_suspended(self, current_pc: int) -> Optional[Operation]:
        state = self._state
        if state.run_state is not RunState.WAITING_FOR_KEY:
            return None

        x = state.wait_register
        opcode = 0xF00A | (x << 8)
        key = self._keypad.poll_newly_pressed()
        if key is None:
            return Operation(opcode=opcode, mnemonic="WAIT (suspended)", operands=[f"V{x:X}", "K"], length=0)

        state.v[x] = key
        state.run_state = RunState.RUNNING
        return Operation(opcode=opcode, mnemonic="KEY", operands=[f"V{x:X}", f"#${key:02X}"], length=0)

    # @intent:responsibility 1サイクル分の仮想時間だけタイマークロックを進めます。
    def _end_cycle(self, operation: Operation) -> None:
        self._timer_clock.advance(self._state, 1.0 / self._cpu_hz)

    # @intent:responsibility UI表示用に、現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        registers = {f"V{index:X}": s.v[index] for index in range(REGISTER_COUNT)}
        registers.update({"I": s.i, "PC": s.pc, "SP": s.sp, "DT": s.delay_timer, "ST": s.sound_timer})
        return registers

    # @intent:responsibility UIのレジスタ表示レイアウト（グループ化）を定義します。
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [RegisterInfo(f"V{index:X}", 8) for index in range(REGISTER_COUNT)]),
            RegisterLayoutInfo("Index/Pointers", [
                RegisterInfo("I", 16), RegisterInfo("PC", 16), RegisterInfo("SP", 8)
            ]),
            RegisterLayoutInfo("Timers", [
                RegisterInfo("DT", 8), RegisterInfo("ST", 8)
            ]),
        ]

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self._bus, start_addr, length)
