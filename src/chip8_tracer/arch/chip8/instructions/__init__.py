# src/chip8_tracer/arch/chip8/instructions/__init__.py
"""
CHIP-8命令セット実装パッケージ。
"""
import warnings

from chip8_tracer.core.snapshot import Operation
from chip8_tracer.common.errors import UnknownOpcodeWarning
from chip8_tracer.arch.chip8.context import ExecutionContext
from .base import extract_fields
from .maps import DECODE_MAP, EXECUTE_MAP, instruction_key

# @intent:responsibility 16bit命令語をデコードし、Operationオブジェクトを返します。
def decode_opcode(opcode: int) -> Operation:
    """
    CHIP-8の命令語をデコードし、Operationオブジェクトを返します。
    未知の命令語の場合は"UNKNOWN"を返します。
    """
    fields = extract_fields(opcode)
    entry = DECODE_MAP.get(instruction_key(opcode))
    if entry is None:
        return Operation(opcode=opcode, mnemonic="UNKNOWN", operands=[f"${opcode:04X}"], fields=fields)
    mnemonic, formats = entry
    values = fields._asdict()
    return Operation(
        opcode=opcode,
        mnemonic=mnemonic,
        operands=[fmt.format(**values) for fmt in formats],
        fields=fields,
    )

# @intent:responsibility デコードされた命令を実行し、コンテキストの状態を変更します。
# @intent:rationale 未知の命令語は致命的ではなく、警告を発してNOPとして完了させます。
def execute_instruction(operation: Operation, ctx: ExecutionContext) -> None:
    executor = EXECUTE_MAP.get(instruction_key(operation.opcode))
    if executor is None:
        warnings.warn(
            f"Unknown opcode {operation.opcode:#06x} at {ctx.state.pc - 2:#05x}; treated as no-op.",
            UnknownOpcodeWarning,
            stacklevel=2,
        )
        return
    executor(ctx, operation)
