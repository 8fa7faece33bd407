# src/chip8_tracer/arch/chip8/instructions/alu.py
"""
算術論理演算命令の実装。

フラグを伴う命令では結果をVXへ書き込んだ後にVFを書き込みます。
そのためX = Fの場合はフラグ値が残ります。
"""
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.arch.chip8.context import ExecutionContext
from chip8_tracer.arch.chip8.state import FLAG_REGISTER

# --- 7XNN ADD Vx, NN ---
# @intent:responsibility 即値を加算します。キャリーフラグは変化しません。
def execute_add_imm(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    v[op.fields.x] = (v[op.fields.x] + op.fields.nn) & 0xFF

# --- 8XY1 / 8XY2 / 8XY3 ---
def execute_or(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    v[op.fields.x] |= v[op.fields.y]

def execute_and(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    v[op.fields.x] &= v[op.fields.y]

def execute_xor(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    v[op.fields.x] ^= v[op.fields.y]

# --- 8XY4 ADD Vx, Vy ---
# @intent:responsibility 符号なし加算を行い、255を超えた場合にVF=1とします。
def execute_add(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    total = v[op.fields.x] + v[op.fields.y]
    v[op.fields.x] = total & 0xFF
    v[FLAG_REGISTER] = 1 if total > 0xFF else 0

# --- 8XY5 SUB Vx, Vy ---
# @intent:responsibility VX - VY を計算します。ボローが発生した場合VF=0、それ以外はVF=1。
def execute_sub(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    vx, vy = v[op.fields.x], v[op.fields.y]
    v[op.fields.x] = (vx - vy) & 0xFF
    v[FLAG_REGISTER] = 0 if vx < vy else 1

# --- 8XY7 SUBN Vx, Vy ---
def execute_subn(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    vx, vy = v[op.fields.x], v[op.fields.y]
    v[op.fields.x] = (vy - vx) & 0xFF
    v[FLAG_REGISTER] = 0 if vy < vx else 1

# --- 8XY6 SHR Vx, Vy ---
# @intent:responsibility VYを右シフトした値をVXに格納し、シフト前の最下位ビットをVFに格納します。VYは変更しません。
def execute_shr(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    vy = v[op.fields.y]
    v[op.fields.x] = vy >> 1
    v[FLAG_REGISTER] = vy & 0x01

# --- 8XYE SHL Vx, Vy ---
# @intent:responsibility VYを左シフトした値をVXに格納し、シフト前の最上位ビットをVFに格納します。
def execute_shl(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    vy = v[op.fields.y]
    v[op.fields.x] = (vy << 1) & 0xFF
    v[FLAG_REGISTER] = (vy >> 7) & 0x01

# --- FX1E ADD I, Vx ---
# @intent:responsibility インデックスレジスタにVXを加算します（16bitで折り返し、フラグは定義しない）。
def execute_add_index(ctx: ExecutionContext, op: Operation) -> None:
    state = ctx.state
    state.i = (state.i + state.v[op.fields.x]) & 0xFFFF

# --- CXNN RND Vx, NN ---
def execute_rnd(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.v[op.fields.x] = ctx.rng.randrange(0x100) & op.fields.nn
