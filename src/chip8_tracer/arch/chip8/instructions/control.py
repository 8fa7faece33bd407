# src/chip8_tracer/arch/chip8/instructions/control.py
"""
制御命令（ジャンプ、サブルーチン、条件スキップ、キー入力待ち）の実装。
"""
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.arch.chip8.context import ExecutionContext
from chip8_tracer.arch.chip8.state import RunState
from .base import push_return, pop_return, skip_if

# --- 00EE RET ---
# @intent:responsibility スタックから戻りアドレスをポップしてPCに設定します。空の場合は致命的エラー。
def execute_ret(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.pc = pop_return(ctx.state)

# --- 1NNN JP ---
def execute_jp(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.pc = op.fields.nnn

# --- 2NNN CALL ---
# @intent:responsibility 戻りアドレスをプッシュしてからジャンプします。
def execute_call(ctx: ExecutionContext, op: Operation) -> None:
    # state.pc is already pointing to the next instruction
    push_return(ctx.state, ctx.state.pc)
    ctx.state.pc = op.fields.nnn

# --- BNNN JP V0 ---
def execute_jp_v0(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.pc = op.fields.nnn + ctx.state.v[0]

# --- 3XNN / 4XNN ---
def execute_se_imm(ctx: ExecutionContext, op: Operation) -> None:
    skip_if(ctx.state, ctx.state.v[op.fields.x] == op.fields.nn)

def execute_sne_imm(ctx: ExecutionContext, op: Operation) -> None:
    skip_if(ctx.state, ctx.state.v[op.fields.x] != op.fields.nn)

# --- 5XY0 / 9XY0 ---
def execute_se_reg(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    skip_if(ctx.state, v[op.fields.x] == v[op.fields.y])

def execute_sne_reg(ctx: ExecutionContext, op: Operation) -> None:
    v = ctx.state.v
    skip_if(ctx.state, v[op.fields.x] != v[op.fields.y])

# --- EX9E / EXA1 ---
# @intent:responsibility VXが示すキー（下位4ビット）の押下状態で分岐します。
def execute_skp(ctx: ExecutionContext, op: Operation) -> None:
    skip_if(ctx.state, ctx.keypad.is_pressed(ctx.state.v[op.fields.x]))

def execute_sknp(ctx: ExecutionContext, op: Operation) -> None:
    skip_if(ctx.state, not ctx.keypad.is_pressed(ctx.state.v[op.fields.x]))

# --- FX0A LD Vx, K ---
# @intent:responsibility キー入力待ち状態に遷移します。キーの検出と格納はCPUのサスペンド処理が行います。
# @intent:rationale 全キーを走査して何もなければ素通りする実装ではPCが進んでしまうため、明示的な状態として扱います。
def execute_wait_key(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.run_state = RunState.WAITING_FOR_KEY
    ctx.state.wait_register = op.fields.x
    ctx.keypad.latch()
