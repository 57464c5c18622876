"""
Closed instruction model for the TMS34010.

Every decodable operation is one member of :class:`Op`.  The operand payload of
an instruction is a dict of binds whose keys are fixed per tag in :data:`OPS`,
so decode and render code switch on the tag instead of on a class hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


class Family(str, Enum):
    ARITH = "arith"
    MOVE = "move"
    GRAPHICS = "graphics"
    CONTROL = "control"
    JUMP = "jump"
    SHIFT = "shift"
    DATA = "data"


class Op(str, Enum):
    # Arithmetic, logical, comparison
    ABS = "abs"
    ADD = "add"
    ADDC = "addc"
    ADDI_IW = "addi_iw"
    ADDI_IL = "addi_il"
    ADDK = "addk"
    ADDXY = "addxy"
    AND = "and"
    ANDI = "andi"
    ANDN = "andn"
    BTST_K = "btst_k"
    BTST_R = "btst_r"
    CLR = "clr"
    CLRC = "clrc"
    CMP = "cmp"
    CMPI_IW = "cmpi_iw"
    CMPI_IL = "cmpi_il"
    CMPXY = "cmpxy"
    DEC = "dec"
    DIVS = "divs"
    DIVU = "divu"
    INC = "inc"
    LMO = "lmo"
    MODS = "mods"
    MODU = "modu"
    MPYS = "mpys"
    MPYU = "mpyu"
    NEG = "neg"
    NEGB = "negb"
    NOT = "not"
    OR = "or"
    ORI = "ori"
    SETC = "setc"
    SEXT = "sext"
    SUB = "sub"
    SUBB = "subb"
    SUBI_IW = "subi_iw"
    SUBI_IL = "subi_il"
    SUBK = "subk"
    SUBXY = "subxy"
    XOR = "xor"
    XORI = "xori"
    ZEXT = "zext"

    # Move
    EXGF = "exgf"
    MMFM = "mmfm"
    MMTM = "mmtm"
    MOVB_R_IND = "movb_r_ind"
    MOVB_IND_R = "movb_ind_r"
    MOVB_IND_IND = "movb_ind_ind"
    MOVB_R_DISP = "movb_r_disp"
    MOVB_DISP_R = "movb_disp_r"
    MOVB_DISP_DISP = "movb_disp_disp"
    MOVB_R_ABS = "movb_r_abs"
    MOVB_ABS_R = "movb_abs_r"
    MOVB_ABS_ABS = "movb_abs_abs"
    MOVE_RR = "move_rr"
    MOVE_R_IND = "move_r_ind"
    MOVE_R_PREDEC = "move_r_predec"
    MOVE_R_POSTINC = "move_r_postinc"
    MOVE_IND_R = "move_ind_r"
    MOVE_PREDEC_R = "move_predec_r"
    MOVE_POSTINC_R = "move_postinc_r"
    MOVE_IND_IND = "move_ind_ind"
    MOVE_PREDEC_PREDEC = "move_predec_predec"
    MOVE_POSTINC_POSTINC = "move_postinc_postinc"
    MOVE_R_DISP = "move_r_disp"
    MOVE_DISP_R = "move_disp_r"
    MOVE_DISP_POSTINC = "move_disp_postinc"
    MOVE_DISP_DISP = "move_disp_disp"
    MOVE_R_ABS = "move_r_abs"
    MOVE_ABS_R = "move_abs_r"
    MOVE_ABS_POSTINC = "move_abs_postinc"
    MOVE_ABS_ABS = "move_abs_abs"
    MOVI_IW = "movi_iw"
    MOVI_IL = "movi_il"
    MOVK = "movk"
    MOVX = "movx"
    MOVY = "movy"
    SETF = "setf"

    # Graphics
    CPW = "cpw"
    CVXYL = "cvxyl"
    DRAV = "drav"
    FILL_L = "fill_l"
    FILL_XY = "fill_xy"
    LINE = "line"
    PIXBLT_L_L = "pixblt_l_l"
    PIXBLT_L_XY = "pixblt_l_xy"
    PIXBLT_XY_L = "pixblt_xy_l"
    PIXBLT_XY_XY = "pixblt_xy_xy"
    PIXBLT_B_L = "pixblt_b_l"
    PIXBLT_B_XY = "pixblt_b_xy"
    PIXT_R_IND = "pixt_r_ind"
    PIXT_R_INDXY = "pixt_r_indxy"
    PIXT_IND_R = "pixt_ind_r"
    PIXT_IND_IND = "pixt_ind_ind"
    PIXT_INDXY_R = "pixt_indxy_r"
    PIXT_INDXY_INDXY = "pixt_indxy_indxy"

    # Control
    CALL = "call"
    CALLA = "calla"
    CALLR = "callr"
    DINT = "dint"
    EINT = "eint"
    EMU = "emu"
    EXGPC = "exgpc"
    GETPC = "getpc"
    GETST = "getst"
    NOP = "nop"
    POPST = "popst"
    PUSHST = "pushst"
    PUTST = "putst"
    RETI = "reti"
    RETS = "rets"
    REV = "rev"
    TRAP = "trap"

    # Jump
    DSJ = "dsj"
    DSJEQ = "dsjeq"
    DSJNE = "dsjne"
    DSJS = "dsjs"
    JA = "ja"
    JR_SHORT = "jr_short"
    JR_LONG = "jr_long"
    JUMP = "jump"

    # Shift
    RL_K = "rl_k"
    RL_R = "rl_r"
    SLA_K = "sla_k"
    SLA_R = "sla_r"
    SLL_K = "sll_k"
    SLL_R = "sll_r"
    SRA_K = "sra_k"
    SRA_R = "sra_r"
    SRL_K = "srl_k"
    SRL_R = "srl_r"

    # Data word that matched no opcode
    DW = "dw"


@dataclass(frozen=True)
class OpInfo:
    family: Family
    keys: Tuple[str, ...]
    extra_words: int = 0


_RS_RD = ("rs", "rd")
_RD = ("rd",)
_RS = ("rs",)
_NONE: Tuple[str, ...] = ()
_FIELD_RR = ("rs", "rd", "f")


def _arith(keys: Tuple[str, ...], extra: int = 0) -> OpInfo:
    return OpInfo(Family.ARITH, keys, extra)


def _move(keys: Tuple[str, ...], extra: int = 0) -> OpInfo:
    return OpInfo(Family.MOVE, keys, extra)


def _gfx(keys: Tuple[str, ...] = _NONE) -> OpInfo:
    return OpInfo(Family.GRAPHICS, keys)


def _ctl(keys: Tuple[str, ...] = _NONE, extra: int = 0) -> OpInfo:
    return OpInfo(Family.CONTROL, keys, extra)


def _shift(keys: Tuple[str, ...]) -> OpInfo:
    return OpInfo(Family.SHIFT, keys)


OPS: Dict[Op, OpInfo] = {
    Op.ABS: _arith(_RD),
    Op.ADD: _arith(_RS_RD),
    Op.ADDC: _arith(_RS_RD),
    Op.ADDI_IW: _arith(("iw", "rd"), 1),
    Op.ADDI_IL: _arith(("il", "rd"), 2),
    Op.ADDK: _arith(("k", "rd")),
    Op.ADDXY: _arith(_RS_RD),
    Op.AND: _arith(_RS_RD),
    Op.ANDI: _arith(("il", "rd"), 2),
    Op.ANDN: _arith(_RS_RD),
    Op.BTST_K: _arith(("count", "rd")),
    Op.BTST_R: _arith(_RS_RD),
    Op.CLR: _arith(_RD),
    Op.CLRC: _arith(_NONE),
    Op.CMP: _arith(_RS_RD),
    Op.CMPI_IW: _arith(("iw", "rd"), 1),
    Op.CMPI_IL: _arith(("il", "rd"), 2),
    Op.CMPXY: _arith(_RS_RD),
    Op.DEC: _arith(_RD),
    Op.DIVS: _arith(_RS_RD),
    Op.DIVU: _arith(_RS_RD),
    Op.INC: _arith(_RD),
    Op.LMO: _arith(_RS_RD),
    Op.MODS: _arith(_RS_RD),
    Op.MODU: _arith(_RS_RD),
    Op.MPYS: _arith(_RS_RD),
    Op.MPYU: _arith(_RS_RD),
    Op.NEG: _arith(_RD),
    Op.NEGB: _arith(_RD),
    Op.NOT: _arith(_RD),
    Op.OR: _arith(_RS_RD),
    Op.ORI: _arith(("il", "rd"), 2),
    Op.SETC: _arith(_NONE),
    Op.SEXT: _arith(("rd", "f")),
    Op.SUB: _arith(_RS_RD),
    Op.SUBB: _arith(_RS_RD),
    Op.SUBI_IW: _arith(("iw", "rd"), 1),
    Op.SUBI_IL: _arith(("il", "rd"), 2),
    Op.SUBK: _arith(("k", "rd")),
    Op.SUBXY: _arith(_RS_RD),
    Op.XOR: _arith(_RS_RD),
    Op.XORI: _arith(("il", "rd"), 2),
    Op.ZEXT: _arith(("rd", "f")),
    Op.EXGF: _move(("rd", "f")),
    Op.MMFM: _move(("rd", "list"), 1),
    Op.MMTM: _move(("rd", "list"), 1),
    Op.MOVB_R_IND: _move(_RS_RD),
    Op.MOVB_IND_R: _move(_RS_RD),
    Op.MOVB_IND_IND: _move(_RS_RD),
    Op.MOVB_R_DISP: _move(("rs", "rd", "ddisp"), 1),
    Op.MOVB_DISP_R: _move(("rs", "sdisp", "rd"), 1),
    Op.MOVB_DISP_DISP: _move(("rs", "sdisp", "rd", "ddisp"), 2),
    Op.MOVB_R_ABS: _move(("rs", "daddr"), 2),
    Op.MOVB_ABS_R: _move(("saddr", "rd"), 2),
    Op.MOVB_ABS_ABS: _move(("saddr", "daddr"), 4),
    Op.MOVE_RR: _move(("rs", "rd", "m")),
    Op.MOVE_R_IND: _move(_FIELD_RR),
    Op.MOVE_R_PREDEC: _move(_FIELD_RR),
    Op.MOVE_R_POSTINC: _move(_FIELD_RR),
    Op.MOVE_IND_R: _move(_FIELD_RR),
    Op.MOVE_PREDEC_R: _move(_FIELD_RR),
    Op.MOVE_POSTINC_R: _move(_FIELD_RR),
    Op.MOVE_IND_IND: _move(_FIELD_RR),
    Op.MOVE_PREDEC_PREDEC: _move(_FIELD_RR),
    Op.MOVE_POSTINC_POSTINC: _move(_FIELD_RR),
    Op.MOVE_R_DISP: _move(("rs", "rd", "ddisp", "f"), 1),
    Op.MOVE_DISP_R: _move(("rs", "sdisp", "rd", "f"), 1),
    Op.MOVE_DISP_POSTINC: _move(("rs", "sdisp", "rd", "f"), 1),
    Op.MOVE_DISP_DISP: _move(("rs", "sdisp", "rd", "ddisp", "f"), 2),
    Op.MOVE_R_ABS: _move(("rs", "daddr", "f"), 2),
    Op.MOVE_ABS_R: _move(("saddr", "rd", "f"), 2),
    Op.MOVE_ABS_POSTINC: _move(("saddr", "rd", "f"), 2),
    Op.MOVE_ABS_ABS: _move(("saddr", "daddr", "f"), 4),
    Op.MOVI_IW: _move(("iw", "rd"), 1),
    Op.MOVI_IL: _move(("il", "rd"), 2),
    Op.MOVK: _move(("k", "rd")),
    Op.MOVX: _move(_RS_RD),
    Op.MOVY: _move(_RS_RD),
    Op.SETF: _move(("fs", "fe", "f")),
    Op.CPW: _gfx(_RS_RD),
    Op.CVXYL: _gfx(_RS_RD),
    Op.DRAV: _gfx(_RS_RD),
    Op.FILL_L: _gfx(),
    Op.FILL_XY: _gfx(),
    Op.LINE: _gfx(("z",)),
    Op.PIXBLT_L_L: _gfx(),
    Op.PIXBLT_L_XY: _gfx(),
    Op.PIXBLT_XY_L: _gfx(),
    Op.PIXBLT_XY_XY: _gfx(),
    Op.PIXBLT_B_L: _gfx(),
    Op.PIXBLT_B_XY: _gfx(),
    Op.PIXT_R_IND: _gfx(_RS_RD),
    Op.PIXT_R_INDXY: _gfx(_RS_RD),
    Op.PIXT_IND_R: _gfx(_RS_RD),
    Op.PIXT_IND_IND: _gfx(_RS_RD),
    Op.PIXT_INDXY_R: _gfx(_RS_RD),
    Op.PIXT_INDXY_INDXY: _gfx(_RS_RD),
    Op.CALL: _ctl(_RS),
    Op.CALLA: _ctl(("addr",), 2),
    Op.CALLR: _ctl(("offset", "at"), 1),
    Op.DINT: _ctl(),
    Op.EINT: _ctl(),
    Op.EMU: _ctl(),
    Op.EXGPC: _ctl(_RD),
    Op.GETPC: _ctl(_RD),
    Op.GETST: _ctl(_RD),
    Op.NOP: _ctl(),
    Op.POPST: _ctl(),
    Op.PUSHST: _ctl(),
    Op.PUTST: _ctl(_RS),
    Op.RETI: _ctl(),
    Op.RETS: _ctl(("n",)),
    Op.REV: _ctl(_RD),
    Op.TRAP: _ctl(("n",)),
    Op.DSJ: OpInfo(Family.JUMP, ("rd", "offset", "at"), 1),
    Op.DSJEQ: OpInfo(Family.JUMP, ("rd", "offset", "at"), 1),
    Op.DSJNE: OpInfo(Family.JUMP, ("rd", "offset", "at"), 1),
    Op.DSJS: OpInfo(Family.JUMP, ("rd", "offset", "dir", "at")),
    Op.JA: OpInfo(Family.JUMP, ("cond", "addr"), 2),
    Op.JR_SHORT: OpInfo(Family.JUMP, ("cond", "offset", "at")),
    Op.JR_LONG: OpInfo(Family.JUMP, ("cond", "offset", "at"), 1),
    Op.JUMP: OpInfo(Family.JUMP, _RS),
    Op.RL_K: _shift(("count", "rd")),
    Op.RL_R: _shift(_RS_RD),
    Op.SLA_K: _shift(("count", "rd")),
    Op.SLA_R: _shift(_RS_RD),
    Op.SLL_K: _shift(("count", "rd")),
    Op.SLL_R: _shift(_RS_RD),
    Op.SRA_K: _shift(("count", "rd")),
    Op.SRA_R: _shift(_RS_RD),
    Op.SRL_K: _shift(("count", "rd")),
    Op.SRL_R: _shift(_RS_RD),
    Op.DW: OpInfo(Family.DATA, ("raw",)),
}


@dataclass(frozen=True, slots=True)
class DecodedInstr:
    op: Op
    binds: Dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        expected = OPS[self.op].keys
        if set(self.binds) != set(expected):
            raise ValueError(
                f"{self.op.name} expects binds {expected}, got {tuple(self.binds)}"
            )

    @property
    def family(self) -> Family:
        return OPS[self.op].family

    @property
    def length(self) -> int:
        """Length in words, opcode word included."""
        return 1 + OPS[self.op].extra_words

    def __getitem__(self, key: str) -> object:
        return self.binds[key]


@dataclass(frozen=True, slots=True)
class Record:
    address: int
    instr: DecodedInstr
    words: Tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.words) != self.instr.length:
            raise ValueError(
                f"{self.instr.op.name} at {self.address:#x} spans "
                f"{self.instr.length} words, got {len(self.words)}"
            )

    @property
    def next_address(self) -> int:
        return self.address + len(self.words)


__all__ = ["Family", "Op", "OpInfo", "OPS", "DecodedInstr", "Record"]
