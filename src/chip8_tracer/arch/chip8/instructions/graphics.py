# src/chip8_tracer/arch/chip8/instructions/graphics.py
"""
画面命令（消去、スプライト描画）の実装。
"""
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.arch.chip8.context import ExecutionContext
from chip8_tracer.arch.chip8.state import FLAG_REGISTER

# --- 00E0 CLS ---
def execute_cls(ctx: ExecutionContext, op: Operation) -> None:
    ctx.display.clear()

# --- DXYN DRW Vx, Vy, N ---
# @intent:responsibility Iから読んだNバイトのスプライトを(VX, VY)にXOR描画し、衝突をVFに格納します。
def execute_drw(ctx: ExecutionContext, op: Operation) -> None:
    state = ctx.state
    rows = [ctx.bus.read(state.i + row) for row in range(op.fields.n)]
    collided = ctx.display.draw_sprite(state.v[op.fields.x], state.v[op.fields.y], rows)
    state.v[FLAG_REGISTER] = 1 if collided else 0
