"""
Text rendering of decoded TMS34010 instructions.

Rendering produces ``binja_test_mocks`` tokens so the same output can feed a
Binary Ninja architecture plugin or be flattened with :func:`asm_str` for
listings.  It only looks at the instruction itself; PC-relative targets come
from the ``at`` bind the decoder stores in those instructions.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple, Type, TypeVar

from binja_test_mocks import binja_api  # noqa: F401  # pyright: ignore
from binja_test_mocks.tokens import Token, TInstr, TInt, TReg, TSep, TText, asm_str

from ..decoding.bind import (
    Addr32,
    Cond,
    Count5,
    Disp16,
    FieldExt,
    FieldSel,
    FieldSize,
    Flag,
    Imm16,
    Imm32,
    KConst,
    Offset5,
    Offset8,
    Offset16,
    RawWord,
    Reg,
    RegList,
    WordAddr,
)
from ..decoding.model import OPS, DecodedInstr, Op
from .constants import (
    ADDRESS_MASK,
    BANK_LETTERS,
    BITS_PER_WORD,
    CONDITION_NAMES,
    DATA_WORD_DIRECTIVE,
)

OperandRenderer = Callable[[DecodedInstr], List[Token]]
T = TypeVar("T")

# Immediates the hardware stores as their one's complement
COMPLEMENTED_IMMEDIATES = {Op.ANDI, Op.CMPI_IW, Op.CMPI_IL, Op.SUBI_IW, Op.SUBI_IL}

# Bits added to the scaled target of each PC-relative form
PC_RELATIVE: Dict[Op, int] = {
    Op.JR_SHORT: 16,
    Op.JR_LONG: 16,
    Op.DSJ: 16,
    Op.DSJEQ: 16,
    Op.DSJNE: 16,
    Op.DSJS: 16,
    Op.CALLR: 32,
}


def reg_name(reg: Reg) -> str:
    if reg.is_sp:
        return "SP"
    return f"{BANK_LETTERS[reg.bank]}{reg.field}"


def condition_name(cond: Cond) -> str:
    return CONDITION_NAMES[cond.code]


def hex_imm(value: int) -> str:
    return f"0x{value:X}"


def hex_addr(value: int) -> str:
    return f"0x{value & ADDRESS_MASK:08X}"


def signed_hex(value: int) -> str:
    if value < 0:
        return f"-0x{-value:X}"
    return f"0x{value:X}"


def mnemonic(instr: DecodedInstr) -> str:
    op = instr.op
    if op is Op.DW:
        return DATA_WORD_DIRECTIVE
    if op in (Op.JR_SHORT, Op.JR_LONG):
        return "JR" + condition_name(_cond(instr))
    if op is Op.JA:
        return "JA" + condition_name(_cond(instr))
    return op.name.split("_")[0]


def branch_target(instr: DecodedInstr) -> Optional[int]:
    """
    Bit address a PC-relative instruction transfers to.

    The target is ``(own address + offset) * 16`` plus a per-form constant:
    32 bits for CALLR, 16 for the branch and decrement-jump forms.
    """
    if instr.op not in PC_RELATIVE:
        return None
    at = _bind(instr, "at", WordAddr)
    offset = instr.binds["offset"]
    if isinstance(offset, Offset5):
        delta = -offset.raw if instr.binds["dir"] else offset.raw
    else:
        assert isinstance(offset, (Offset8, Offset16))
        delta = offset.signed
    target = (at.value + delta) * BITS_PER_WORD + PC_RELATIVE[instr.op]
    return target & ADDRESS_MASK


def _cond(instr: DecodedInstr) -> Cond:
    return _bind(instr, "cond", Cond)


def _bind(instr: DecodedInstr, key: str, kind: Type[T]) -> T:
    value = instr.binds[key]
    assert isinstance(value, kind), f"{key}: expected {kind.__name__}, got {value!r}"
    return value


def _sep() -> TSep:
    return TSep(",")


def _join(*groups: List[Token]) -> List[Token]:
    out: List[Token] = []
    for group in groups:
        if not group:
            continue
        if out:
            out.append(_sep())
        out.extend(group)
    return out


def _reg(instr: DecodedInstr, key: str) -> List[Token]:
    reg = _bind(instr, key, Reg)
    return [TReg(reg_name(reg))]


def _abs(instr: DecodedInstr, key: str) -> List[Token]:
    addr = _bind(instr, key, Addr32)
    return [TText("@"), TInt(hex_addr(addr.value))]


def _disp(instr: DecodedInstr, key: str) -> List[Token]:
    disp = _bind(instr, key, Disp16)
    return [TText("("), TInt(signed_hex(disp.signed)), TText(")")]


# --- operand forms --------------------------------------------------------


def _none(instr: DecodedInstr) -> List[Token]:
    return []


def _rd(instr: DecodedInstr) -> List[Token]:
    return _reg(instr, "rd")


def _rs(instr: DecodedInstr) -> List[Token]:
    return _reg(instr, "rs")


def _rs_rd(instr: DecodedInstr) -> List[Token]:
    return _join(_reg(instr, "rs"), _reg(instr, "rd"))


def _imm_rd(instr: DecodedInstr) -> List[Token]:
    if "iw" in instr.binds:
        imm16 = _bind(instr, "iw", Imm16)
        value, mask = imm16.value, 0xFFFF
    else:
        imm32 = _bind(instr, "il", Imm32)
        value, mask = imm32.u32, 0xFFFFFFFF
    if instr.op in COMPLEMENTED_IMMEDIATES:
        value = ~value & mask
    return _join([TInt(hex_imm(value))], _reg(instr, "rd"))


def _k_rd(instr: DecodedInstr) -> List[Token]:
    k = _bind(instr, "k", KConst)
    return _join([TInt(str(k.effective))], _reg(instr, "rd"))


def _count_rd(instr: DecodedInstr) -> List[Token]:
    count = _bind(instr, "count", Count5)
    value = count.value
    if instr.op in (Op.SRA_K, Op.SRL_K):
        # Right shifts store the two's complement of the count
        value = (32 - value) & 0x1F
    elif instr.op is Op.BTST_K:
        value = 31 - value
    return _join([TInt(str(value))], _reg(instr, "rd"))


def _rd_f(instr: DecodedInstr) -> List[Token]:
    fsel = _bind(instr, "f", FieldSel)
    return _join(_reg(instr, "rd"), [TInt(str(fsel.value))])


def _setf(instr: DecodedInstr) -> List[Token]:
    fs = _bind(instr, "fs", FieldSize)
    fe = _bind(instr, "fe", FieldExt)
    fsel = _bind(instr, "f", FieldSel)
    return _join(
        [TInt(str(fs.effective))], [TInt(str(fe.value))], [TInt(str(fsel.value))]
    )


def _reg_list(instr: DecodedInstr) -> List[Token]:
    rp = _bind(instr, "rd", Reg)
    regs = _bind(instr, "list", RegList)
    groups = [[TReg(reg_name(Reg.of(rp.bank, field)))] for field in regs.fields()]
    return _join([TReg(reg_name(rp))], *groups)


def _count_n(instr: DecodedInstr) -> List[Token]:
    n = _bind(instr, "n", Count5)
    if instr.op is Op.RETS and n.value == 0:
        return []
    return [TInt(str(n.value))]


def _line(instr: DecodedInstr) -> List[Token]:
    z = _bind(instr, "z", Flag)
    return [TInt(str(z.value))]


def _suffix_parts(instr: DecodedInstr) -> List[Token]:
    # PIXBLT B,XY / FILL L: the operand kinds are spelled in the tag name
    parts = instr.op.name.split("_")[1:]
    return _join(*[[TText(part)] for part in parts])


def _target(instr: DecodedInstr) -> List[Token]:
    target = branch_target(instr)
    assert target is not None
    return [TInt(hex_addr(target))]


def _jump_rel(instr: DecodedInstr) -> List[Token]:
    return _target(instr)


def _jump_abs(instr: DecodedInstr) -> List[Token]:
    addr = _bind(instr, "addr", Addr32)
    return [TInt(hex_addr(addr.value))]


def _dsj(instr: DecodedInstr) -> List[Token]:
    return _join(_reg(instr, "rd"), _target(instr))


def _data_word(instr: DecodedInstr) -> List[Token]:
    raw = _bind(instr, "raw", RawWord)
    return [TInt(f"0x{raw.value:04X}")]


def _mem_operand(
    instr: DecodedInstr, mode: str, reg_key: str, disp_key: str, addr_key: str
) -> List[Token]:
    if mode == "abs":
        return _abs(instr, addr_key)
    reg = _reg(instr, reg_key)
    if mode == "reg":
        return reg
    if mode == "ind":
        return [TText("*"), *reg]
    if mode == "postinc":
        return [TText("*"), *reg, TText("+")]
    if mode == "predec":
        return [TText("-*"), *reg]
    if mode == "disp":
        return [TText("*"), *reg, *_disp(instr, disp_key)]
    if mode == "xy":
        return [TText("*"), *reg, TText(".XY")]
    raise ValueError(f"Unknown operand mode {mode!r}")


_MOVE_FORMS: Dict[Op, Tuple[str, str]] = {
    Op.MOVB_R_IND: ("reg", "ind"),
    Op.MOVB_IND_R: ("ind", "reg"),
    Op.MOVB_IND_IND: ("ind", "ind"),
    Op.MOVB_R_DISP: ("reg", "disp"),
    Op.MOVB_DISP_R: ("disp", "reg"),
    Op.MOVB_DISP_DISP: ("disp", "disp"),
    Op.MOVB_R_ABS: ("reg", "abs"),
    Op.MOVB_ABS_R: ("abs", "reg"),
    Op.MOVB_ABS_ABS: ("abs", "abs"),
    Op.MOVE_RR: ("reg", "reg"),
    Op.MOVE_R_IND: ("reg", "ind"),
    Op.MOVE_R_PREDEC: ("reg", "predec"),
    Op.MOVE_R_POSTINC: ("reg", "postinc"),
    Op.MOVE_IND_R: ("ind", "reg"),
    Op.MOVE_PREDEC_R: ("predec", "reg"),
    Op.MOVE_POSTINC_R: ("postinc", "reg"),
    Op.MOVE_IND_IND: ("ind", "ind"),
    Op.MOVE_PREDEC_PREDEC: ("predec", "predec"),
    Op.MOVE_POSTINC_POSTINC: ("postinc", "postinc"),
    Op.MOVE_R_DISP: ("reg", "disp"),
    Op.MOVE_DISP_R: ("disp", "reg"),
    Op.MOVE_DISP_POSTINC: ("disp", "postinc"),
    Op.MOVE_DISP_DISP: ("disp", "disp"),
    Op.MOVE_R_ABS: ("reg", "abs"),
    Op.MOVE_ABS_R: ("abs", "reg"),
    Op.MOVE_ABS_POSTINC: ("abs", "postinc"),
    Op.MOVE_ABS_ABS: ("abs", "abs"),
    Op.PIXT_R_IND: ("reg", "ind"),
    Op.PIXT_R_INDXY: ("reg", "xy"),
    Op.PIXT_IND_R: ("ind", "reg"),
    Op.PIXT_IND_IND: ("ind", "ind"),
    Op.PIXT_INDXY_R: ("xy", "reg"),
    Op.PIXT_INDXY_INDXY: ("xy", "xy"),
}


def _move(instr: DecodedInstr) -> List[Token]:
    src_mode, dst_mode = _MOVE_FORMS[instr.op]
    src = _mem_operand(instr, src_mode, "rs", "sdisp", "saddr")
    dst = _mem_operand(instr, dst_mode, "rd", "ddisp", "daddr")
    tokens = _join(src, dst)
    fsel = instr.binds.get("f")
    if isinstance(fsel, FieldSel) and fsel.value:
        tokens = _join(tokens, [TInt("1")])
    return tokens


def _build_forms() -> Dict[Op, OperandRenderer]:
    forms: Dict[Op, OperandRenderer] = {op: _move for op in _MOVE_FORMS}
    by_keys: Dict[Tuple[str, ...], OperandRenderer] = {
        (): _none,
        ("rd",): _rd,
        ("rs",): _rs,
        ("rs", "rd"): _rs_rd,
        ("iw", "rd"): _imm_rd,
        ("il", "rd"): _imm_rd,
        ("k", "rd"): _k_rd,
        ("count", "rd"): _count_rd,
        ("rd", "f"): _rd_f,
        ("fs", "fe", "f"): _setf,
        ("rd", "list"): _reg_list,
        ("n",): _count_n,
        ("z",): _line,
        ("raw",): _data_word,
        ("addr",): _jump_abs,
        ("cond", "addr"): _jump_abs,
        ("cond", "offset", "at"): _jump_rel,
        ("offset", "at"): _jump_rel,
        ("rd", "offset", "at"): _dsj,
        ("rd", "offset", "dir", "at"): _dsj,
    }
    for op, info in OPS.items():
        if op in forms:
            continue
        forms[op] = by_keys[info.keys]
    for op in (
        Op.PIXBLT_L_L,
        Op.PIXBLT_L_XY,
        Op.PIXBLT_XY_L,
        Op.PIXBLT_XY_XY,
        Op.PIXBLT_B_L,
        Op.PIXBLT_B_XY,
        Op.FILL_L,
        Op.FILL_XY,
    ):
        forms[op] = _suffix_parts
    return forms


OPERAND_FORMS: Dict[Op, OperandRenderer] = _build_forms()


def operand_tokens(instr: DecodedInstr) -> List[Token]:
    return OPERAND_FORMS[instr.op](instr)


def render_tokens(instr: DecodedInstr) -> List[Token]:
    operands = operand_tokens(instr)
    if not operands:
        return [TInstr(mnemonic(instr))]
    return [TInstr(mnemonic(instr)), TSep(" "), *operands]


def render(instr: DecodedInstr) -> Tuple[str, str]:
    """Return ``(mnemonic, operand text)`` for one instruction."""
    return mnemonic(instr), asm_str(operand_tokens(instr))


__all__ = [
    "COMPLEMENTED_IMMEDIATES",
    "OPERAND_FORMS",
    "PC_RELATIVE",
    "branch_target",
    "condition_name",
    "hex_addr",
    "mnemonic",
    "operand_tokens",
    "reg_name",
    "render",
    "render_tokens",
]
