# src/chip8_tracer/arch/chip8/instructions/load.py
"""
転送命令（レジスタ・インデックス・タイマー・メモリ）の実装。
メモリアクセスは全てバス経由で行われ、範囲外は致命的エラーになります。
"""
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.arch.chip8.context import ExecutionContext
from chip8_tracer.arch.chip8.font import glyph_address

# --- 6XNN LD Vx, NN ---
def execute_ld_imm(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.v[op.fields.x] = op.fields.nn

# --- 8XY0 LD Vx, Vy ---
def execute_ld_reg(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    v[op.fields.x] = v[op.fields.y]

# --- ANNN LD I, NNN ---
def execute_ld_index(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.i = op.fields.nnn

# --- FX07 / FX15 / FX18 ---
def execute_ld_vx_dt(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.v[op.fields.x] = ctx.state.delay_timer

def execute_ld_dt_vx(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.delay_timer = ctx.state.v[op.fields.x]

def execute_ld_st_vx(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.sound_timer = ctx.state.v[op.fields.x]

# --- FX29 LD F, Vx ---
# @intent:responsibility VXの16進数字に対応するフォントグリフのアドレスをIに設定します。
def execute_ld_font(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.i = glyph_address(ctx.layout.font_base, ctx.state.v[op.fields.x])

# --- FX33 LD B, Vx ---
# @intent:responsibility VXの10進表現（百の位、十の位、一の位）をI, I+1, I+2に書き込みます。
def execute_ld_bcd(ctx: ExecutionContext, op: Operation) -> None:
    value = ctx.state.v[op.fields.x]
    i = ctx.state.i
    ctx.bus.write(i, value // 100)
    ctx.bus.write(i + 1, (value // 10) % 10)
    ctx.bus.write(i + 2, value % 10)

# --- FX55 LD [I], Vx ---
# @intent:responsibility V0..VXをIから始まるメモリに格納し、IをX+1進めます。
def execute_store_regs(ctx: ExecutionContext, op: Operation) -> None:
    state = ctx.state
    x = op.fields.x
    for offset in range(x + 1):
        ctx.bus.write(state.i + offset, state.v[offset])
    state.i = (state.i + x + 1) & 0xFFFF

# --- FX65 LD Vx, [I] ---
# @intent:responsibility Iから始まるメモリをV0..VXに読み込み、IをX+1進めます。
def execute_load_regs(ctx: ExecutionContext, op: Operation) -> None:
    state = ctx.state
    x = op.fields.x
    for offset in range(x + 1):
        state.v[offset] = ctx.bus.read(state.i + offset)
    state.i = (state.i + x + 1) & 0xFFFF
