# src/chip8_tracer/arch/chip8/instructions/maps.py
"""
命令キーと命令実装のマッピング定義。

命令キーは (上位ニブル, 区別用の下位ビット) の組です。
上位ニブルを複数の命令で共有するファミリ（0x0, 0x5, 0x8, 0x9, 0xE, 0xF）のみ、
SUBKEY_MASKSで指定した下位ビットで2段目の区別を行います。
"""
from typing import Tuple

from . import load
from . import alu
from . import control
from . import graphics

# @intent:map ファミリごとの2段目キー抽出マスク。記載のないファミリは単一命令（キーは0）。
SUBKEY_MASKS = {
    0x0: 0x0FFF,
    0x5: 0x000F,
    0x8: 0x000F,
    0x9: 0x000F,
    0xE: 0x00FF,
    0xF: 0x00FF,
}

# @intent:utility_function 命令語から命令キーを求めます。
def instruction_key(opcode: int) -> Tuple[int, int]:
    family = (opcode >> 12) & 0xF
    return family, opcode & SUBKEY_MASKS.get(family, 0)

# オペランド書式。OpcodeFieldsのフィールド名で展開される。
VX = "V{x:X}"
VY = "V{y:X}"
ADDR = "${nnn:03X}"
BYTE = "#${nn:02X}"
NIBBLE = "{n}"

# @intent:map 命令キーから (ニーモニック, オペランド書式) へのマッピングテーブル。
DECODE_MAP = {
    (0x0, 0x0E0): ("CLS", ()),
    (0x0, 0x0EE): ("RET", ()),
    (0x1, 0x0): ("JP", (ADDR,)),
    (0x2, 0x0): ("CALL", (ADDR,)),
    (0x3, 0x0): ("SE", (VX, BYTE)),
    (0x4, 0x0): ("SNE", (VX, BYTE)),
    (0x5, 0x0): ("SE", (VX, VY)),
    (0x6, 0x0): ("LD", (VX, BYTE)),
    (0x7, 0x0): ("ADD", (VX, BYTE)),
    (0x8, 0x0): ("LD", (VX, VY)),
    (0x8, 0x1): ("OR", (VX, VY)),
    (0x8, 0x2): ("AND", (VX, VY)),
    (0x8, 0x3): ("XOR", (VX, VY)),
    (0x8, 0x4): ("ADD", (VX, VY)),
    (0x8, 0x5): ("SUB", (VX, VY)),
    (0x8, 0x6): ("SHR", (VX, VY)),
    (0x8, 0x7): ("SUBN", (VX, VY)),
    (0x8, 0xE): ("SHL", (VX, VY)),
    (0x9, 0x0): ("SNE", (VX, VY)),
    (0xA, 0x0): ("LD", ("I", ADDR)),
    (0xB, 0x0): ("JP", ("V0", ADDR)),
    (0xC, 0x0): ("RND", (VX, BYTE)),
    (0xD, 0x0): ("DRW", (VX, VY, NIBBLE)),
    (0xE, 0x9E): ("SKP", (VX,)),
    (0xE, 0xA1): ("SKNP", (VX,)),
    (0xF, 0x07): ("LD", (VX, "DT")),
    (0xF, 0x0A): ("LD", (VX, "K")),
    (0xF, 0x15): ("LD", ("DT", VX)),
    (0xF, 0x18): ("LD", ("ST", VX)),
    (0xF, 0x1E): ("ADD", ("I", VX)),
    (0xF, 0x29): ("LD", ("F", VX)),
    (0xF, 0x33): ("LD", ("B", VX)),
    (0xF, 0x55): ("LD", ("[I]", VX)),
    (0xF, 0x65): ("LD", (VX, "[I]")),
}

# @intent:map 命令キーから実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    # Screen
    (0x0, 0x0E0): graphics.execute_cls,
    (0xD, 0x0): graphics.execute_drw,

    # Control
    (0x0, 0x0EE): control.execute_ret,
    (0x1, 0x0): control.execute_jp,
    (0x2, 0x0): control.execute_call,
    (0x3, 0x0): control.execute_se_imm,
    (0x4, 0x0): control.execute_sne_imm,
    (0x5, 0x0): control.execute_se_reg,
    (0x9, 0x0): control.execute_sne_reg,
    (0xB, 0x0): control.execute_jp_v0,
    (0xE, 0x9E): control.execute_skp,
    (0xE, 0xA1): control.execute_sknp,
    (0xF, 0x0A): control.execute_wait_key,

    # Load/Store
    (0x6, 0x0): load.execute_ld_imm,
    (0x8, 0x0): load.execute_ld_reg,
    (0xA, 0x0): load.execute_ld_index,
    (0xF, 0x07): load.execute_ld_vx_dt,
    (0xF, 0x15): load.execute_ld_dt_vx,
    (0xF, 0x18): load.execute_ld_st_vx,
    (0xF, 0x29): load.execute_ld_font,
    (0xF, 0x33): load.execute_ld_bcd,
    (0xF, 0x55): load.execute_store_regs,
    (0xF, 0x65): load.execute_load_regs,

    # ALU
    (0x7, 0x0): alu.execute_add_imm,
    (0x8, 0x1): alu.execute_or,
    (0x8, 0x2): alu.execute_and,
    (0x8, 0x3): alu.execute_xor,
    (0x8, 0x4): alu.execute_add,
    (0x8, 0x5): alu.execute_sub,
    (0x8, 0x6): alu.execute_shr,
    (0x8, 0x7): alu.execute_subn,
    (0x8, 0xE): alu.execute_shl,
    (0xC, 0x0): alu.execute_rnd,
    (0xF, 0x1E): alu.execute_add_index,
}
