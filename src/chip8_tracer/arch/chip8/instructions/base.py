# src/chip8_tracer/arch/chip8/instructions/base.py
"""
CHIP-8命令実装用の共通ユーティリティ。
"""
from chip8_tracer.core.snapshot import OpcodeFields
from chip8_tracer.arch.chip8.state import Chip8CpuState
from chip8_tracer.common.errors import StackOverflowError, StackUnderflowError

# @intent:utility_function 命令語から標準のオペランドフィールドを切り出します。
def extract_fields(opcode: int) -> OpcodeFields:
    return OpcodeFields(
        x=(opcode >> 8) & 0xF,
        y=(opcode >> 4) & 0xF,
        n=opcode & 0xF,
        nn=opcode & 0xFF,
        nnn=opcode & 0xFFF,
    )

# @intent:utility_function 戻りアドレスを固定長のコールスタックにプッシュします。
# @intent:post-condition 容量を超える場合はStackOverflowErrorを送出し、スタックは変更しません。
def push_return(state: Chip8CpuState, address: int) -> None:
    if state.sp >= len(state.stack):
        raise StackOverflowError(
            f"Call stack overflow at PC {state.pc:#05x} (capacity {len(state.stack)})."
        )
    state.stack[state.sp] = address
    state.sp += 1

# @intent:utility_function コールスタックから戻りアドレスをポップします。
def pop_return(state: Chip8CpuState) -> int:
    if state.sp == 0:
        raise StackUnderflowError(f"Return with empty call stack at PC {state.pc:#05x}.")
    state.sp -= 1
    return state.stack[state.sp]

# @intent:utility_function 条件が成立した場合に次の命令をスキップします。境界チェックは次のフェッチで行われます。
def skip_if(state: Chip8CpuState, condition: bool) -> None:
    if condition:
        state.pc = (state.pc + 2) & 0xFFFF
