from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional

from .bind import (
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
from .fields import Fields
from .model import DecodedInstr, Op, Record
from .reader import WordCursor

logger = logging.getLogger(__name__)

DecoderFunc = Callable[[Fields, WordCursor], Optional[DecodedInstr]]

# Low byte markers of the 1100 cccc family
JA_MARKER = 0x80
JR_LONG_MARKER = 0x00

# CALLA and CALLR carry 11111 in the register field
CALL_ABS_LOW5 = 0x1F

# LINE is 1101 1111 Z001 1010
LINE_OPCODE = 0x6F
LINE_MASK = 0x017F
LINE_BITS = 0x011A


def _imm16(cur: WordCursor) -> Imm16:
    return Imm16(cur.operand_word())


def _imm32(cur: WordCursor) -> Imm32:
    lo, hi = cur.operand_long()
    return Imm32(lo, hi)


def _addr32(cur: WordCursor) -> Addr32:
    return Addr32(_imm32(cur))


def _disp16(cur: WordCursor) -> Disp16:
    return Disp16(cur.operand_word())


def _here(cur: WordCursor) -> WordAddr:
    return WordAddr(cur.opcode_address())


def _rs(f: Fields) -> Reg:
    return Reg(f.src_reg)


def _rd(f: Fields) -> Reg:
    return Reg(f.dst_reg)


def _fsel(f: Fields) -> FieldSel:
    return FieldSel(f.f)


# --- generic shapes -------------------------------------------------------


def _no_operands(op: Op) -> DecoderFunc:
    def dec(f: Fields, cur: WordCursor) -> Optional[DecodedInstr]:
        if f.low5:
            return None
        return DecodedInstr(op, {})

    return dec


def _rd_only(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(op, {"rd": _rd(f)})


def _rs_low(op: Op) -> DecoderFunc:
    # Register in the Rd position acting as a source (JUMP, PUTST, CALL)
    return lambda f, cur: DecodedInstr(op, {"rs": _rd(f)})


def _rs_rd(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(op, {"rs": _rs(f), "rd": _rd(f)})


def _iw_rd(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(op, {"iw": _imm16(cur), "rd": _rd(f)})


def _il_rd(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(op, {"il": _imm32(cur), "rd": _rd(f)})


def _rd_f(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(op, {"rd": _rd(f), "f": _fsel(f)})


def _count_rd(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(op, {"count": Count5(f.k), "rd": _rd(f)})


def _count_low(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(op, {"n": Count5(f.low5)})


def _reg_list(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(
        op, {"rd": _rd(f), "list": RegList(cur.operand_word())}
    )


def _k_rd(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(op, {"k": KConst(f.k), "rd": _rd(f)})


def _k_or_unit(op: Op, unit_op: Op) -> DecoderFunc:
    def dec(f: Fields, cur: WordCursor) -> Optional[DecodedInstr]:
        if f.k == 1:
            return DecodedInstr(unit_op, {"rd": _rd(f)})
        return DecodedInstr(op, {"k": KConst(f.k), "rd": _rd(f)})

    return dec


def _field_move(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(
        op, {"rs": _rs(f), "rd": _rd(f), "f": _fsel(f)}
    )


def _sub(table: Dict[int, DecoderFunc]) -> DecoderFunc:
    def dec(f: Fields, cur: WordCursor) -> Optional[DecodedInstr]:
        handler = table.get(f.subop)
        if handler is None:
            return None
        return handler(f, cur)

    return dec


# --- specific forms -------------------------------------------------------


def _dec_setf(f: Fields, cur: WordCursor) -> DecodedInstr:
    return DecodedInstr(
        Op.SETF,
        {"fs": FieldSize(f.fs), "fe": FieldExt(f.fe), "f": _fsel(f)},
    )


def _dec_move_r_abs(f: Fields, cur: WordCursor) -> DecodedInstr:
    return DecodedInstr(
        Op.MOVE_R_ABS, {"rs": _rd(f), "daddr": _addr32(cur), "f": _fsel(f)}
    )


def _dec_move_abs_r(f: Fields, cur: WordCursor) -> DecodedInstr:
    return DecodedInstr(
        Op.MOVE_ABS_R, {"saddr": _addr32(cur), "rd": _rd(f), "f": _fsel(f)}
    )


def _dec_move_abs_abs(f: Fields, cur: WordCursor) -> Optional[DecodedInstr]:
    if f.low5:
        return None
    saddr = _addr32(cur)
    daddr = _addr32(cur)
    return DecodedInstr(
        Op.MOVE_ABS_ABS, {"saddr": saddr, "daddr": daddr, "f": _fsel(f)}
    )


def _dec_movb_abs(f: Fields, cur: WordCursor) -> DecodedInstr:
    # Same sub-opcode, F bit picks the direction
    if f.f:
        return DecodedInstr(Op.MOVB_ABS_R, {"saddr": _addr32(cur), "rd": _rd(f)})
    return DecodedInstr(Op.MOVB_R_ABS, {"rs": _rd(f), "daddr": _addr32(cur)})


def _dec_movb_abs_abs(f: Fields, cur: WordCursor) -> Optional[DecodedInstr]:
    if f.low5:
        return None
    saddr = _addr32(cur)
    daddr = _addr32(cur)
    return DecodedInstr(Op.MOVB_ABS_ABS, {"saddr": saddr, "daddr": daddr})


def _dec_callr(f: Fields, cur: WordCursor) -> Optional[DecodedInstr]:
    if f.low5 != CALL_ABS_LOW5:
        return None
    at = _here(cur)
    return DecodedInstr(Op.CALLR, {"offset": Offset16(cur.operand_word()), "at": at})


def _dec_calla(f: Fields, cur: WordCursor) -> Optional[DecodedInstr]:
    if f.low5 != CALL_ABS_LOW5:
        return None
    return DecodedInstr(Op.CALLA, {"addr": _addr32(cur)})


def _dec_dsj(op: Op) -> DecoderFunc:
    def dec(f: Fields, cur: WordCursor) -> DecodedInstr:
        at = _here(cur)
        offset = Offset16(cur.operand_word())
        return DecodedInstr(op, {"rd": _rd(f), "offset": offset, "at": at})

    return dec


def _dec_dsjs(f: Fields, cur: WordCursor) -> DecodedInstr:
    return DecodedInstr(
        Op.DSJS,
        {
            "rd": _rd(f),
            "offset": Offset5(f.k),
            "dir": Flag(f.d),
            "at": _here(cur),
        },
    )


def _dec_jump_cc(f: Fields, cur: WordCursor) -> DecodedInstr:
    cond = Cond(f.cc)
    if f.low8 == JA_MARKER:
        return DecodedInstr(Op.JA, {"cond": cond, "addr": _addr32(cur)})
    at = _here(cur)
    if f.low8 == JR_LONG_MARKER:
        offset16 = Offset16(cur.operand_word())
        return DecodedInstr(Op.JR_LONG, {"cond": cond, "offset": offset16, "at": at})
    return DecodedInstr(
        Op.JR_SHORT, {"cond": cond, "offset": Offset8(f.low8), "at": at}
    )


def _dec_xor(f: Fields, cur: WordCursor) -> DecodedInstr:
    if f.rs == f.rd:
        return DecodedInstr(Op.CLR, {"rd": _rd(f)})
    return DecodedInstr(Op.XOR, {"rs": _rs(f), "rd": _rd(f)})


def _dec_move_rr(f: Fields, cur: WordCursor) -> DecodedInstr:
    # M set: the source register sits in the other file
    m = f.opcode & 1
    return DecodedInstr(
        Op.MOVE_RR,
        {"rs": Reg.of(f.r ^ m, f.rs), "rd": _rd(f), "m": Flag(m)},
    )


def _dec_movb_r_disp(f: Fields, cur: WordCursor) -> DecodedInstr:
    return DecodedInstr(
        Op.MOVB_R_DISP, {"rs": _rs(f), "rd": _rd(f), "ddisp": _disp16(cur)}
    )


def _dec_movb_disp_r(f: Fields, cur: WordCursor) -> DecodedInstr:
    return DecodedInstr(
        Op.MOVB_DISP_R, {"rs": _rs(f), "sdisp": _disp16(cur), "rd": _rd(f)}
    )


def _dec_movb_disp_disp(f: Fields, cur: WordCursor) -> DecodedInstr:
    sdisp = _disp16(cur)
    ddisp = _disp16(cur)
    return DecodedInstr(
        Op.MOVB_DISP_DISP,
        {"rs": _rs(f), "sdisp": sdisp, "rd": _rd(f), "ddisp": ddisp},
    )


def _dec_move_r_disp(f: Fields, cur: WordCursor) -> DecodedInstr:
    return DecodedInstr(
        Op.MOVE_R_DISP,
        {"rs": _rs(f), "rd": _rd(f), "ddisp": _disp16(cur), "f": _fsel(f)},
    )


def _dec_move_disp_src(op: Op) -> DecoderFunc:
    return lambda f, cur: DecodedInstr(
        op, {"rs": _rs(f), "sdisp": _disp16(cur), "rd": _rd(f), "f": _fsel(f)}
    )


def _dec_move_disp_disp(f: Fields, cur: WordCursor) -> DecodedInstr:
    sdisp = _disp16(cur)
    ddisp = _disp16(cur)
    return DecodedInstr(
        Op.MOVE_DISP_DISP,
        {"rs": _rs(f), "sdisp": sdisp, "rd": _rd(f), "ddisp": ddisp, "f": _fsel(f)},
    )


def _dec_move_abs_postinc(f: Fields, cur: WordCursor) -> DecodedInstr:
    return DecodedInstr(
        Op.MOVE_ABS_POSTINC, {"saddr": _addr32(cur), "rd": _rd(f), "f": _fsel(f)}
    )


def _dec_line(f: Fields, cur: WordCursor) -> Optional[DecodedInstr]:
    if f.word & LINE_MASK != LINE_BITS:
        return None
    return DecodedInstr(Op.LINE, {"z": Flag(f.z)})


# --- dispatch tables ------------------------------------------------------

_SUB_00: Dict[int, DecoderFunc] = {
    1: _rd_only(Op.REV),
    8: _no_operands(Op.EMU),
    9: _rd_only(Op.EXGPC),
    10: _rd_only(Op.GETPC),
    11: _rs_low(Op.JUMP),
    12: _rd_only(Op.GETST),
    13: _rs_low(Op.PUTST),
    14: _no_operands(Op.POPST),
    15: _no_operands(Op.PUSHST),
}

_SUB_01: Dict[int, DecoderFunc] = {
    8: _no_operands(Op.NOP),
    9: _no_operands(Op.CLRC),
    10: _dec_movb_abs_abs,
    11: _no_operands(Op.DINT),
    12: _rd_only(Op.ABS),
    13: _rd_only(Op.NEG),
    14: _rd_only(Op.NEGB),
    15: _rd_only(Op.NOT),
}

# Majors 0x02 and 0x03 differ only in the F bit
_SUB_02: Dict[int, DecoderFunc] = {
    8: _rd_f(Op.SEXT),
    9: _rd_f(Op.ZEXT),
    10: _dec_setf,
    11: _dec_setf,
    12: _dec_move_r_abs,
    13: _dec_move_abs_r,
    14: _dec_move_abs_abs,
    15: _dec_movb_abs,
}

_SUB_04: Dict[int, DecoderFunc] = {
    8: _count_low(Op.TRAP),
    9: _rs_low(Op.CALL),
    10: _no_operands(Op.RETI),
    11: _count_low(Op.RETS),
    12: _reg_list(Op.MMTM),
    13: _reg_list(Op.MMFM),
    14: _iw_rd(Op.MOVI_IW),
    15: _il_rd(Op.MOVI_IL),
}

_SUB_05: Dict[int, DecoderFunc] = {
    8: _iw_rd(Op.ADDI_IW),
    9: _il_rd(Op.ADDI_IL),
    10: _iw_rd(Op.CMPI_IW),
    11: _il_rd(Op.CMPI_IL),
    12: _il_rd(Op.ANDI),
    13: _il_rd(Op.ORI),
    14: _il_rd(Op.XORI),
    15: _iw_rd(Op.SUBI_IW),
}

_SUB_06: Dict[int, DecoderFunc] = {
    8: _il_rd(Op.SUBI_IL),
    9: _dec_callr,
    10: _dec_calla,
    11: _no_operands(Op.EINT),
    12: _dec_dsj(Op.DSJ),
    13: _dec_dsj(Op.DSJEQ),
    14: _dec_dsj(Op.DSJNE),
    15: _no_operands(Op.SETC),
}

_SUB_07: Dict[int, DecoderFunc] = {
    8: _no_operands(Op.PIXBLT_L_L),
    9: _no_operands(Op.PIXBLT_L_XY),
    10: _no_operands(Op.PIXBLT_XY_L),
    11: _no_operands(Op.PIXBLT_XY_XY),
    12: _no_operands(Op.PIXBLT_B_L),
    13: _no_operands(Op.PIXBLT_B_XY),
    14: _no_operands(Op.FILL_L),
    15: _no_operands(Op.FILL_XY),
}

_SUB_6A: Dict[int, DecoderFunc] = {
    0: _dec_move_abs_postinc,
    8: _rd_f(Op.EXGF),
}


def _pair(table: Dict[int, DecoderFunc], major: int, handler: DecoderFunc) -> None:
    # Field moves use bit 9 (the low opcode bit) as F
    table[major] = handler
    table[major + 1] = handler


def _build_major_table() -> Dict[int, DecoderFunc]:
    table: Dict[int, DecoderFunc] = {
        0x00: _sub(_SUB_00),
        0x01: _sub(_SUB_01),
        0x04: _sub(_SUB_04),
        0x05: _sub(_SUB_05),
        0x06: _sub(_SUB_06),
        0x07: _sub(_SUB_07),
    }
    _pair(table, 0x02, _sub(_SUB_02))

    _pair(table, 0x08, _k_or_unit(Op.ADDK, Op.INC))
    _pair(table, 0x0A, _k_or_unit(Op.SUBK, Op.DEC))
    _pair(table, 0x0C, _k_rd(Op.MOVK))
    _pair(table, 0x0E, _count_rd(Op.BTST_K))

    _pair(table, 0x10, _count_rd(Op.SLA_K))
    _pair(table, 0x12, _count_rd(Op.SLL_K))
    _pair(table, 0x14, _count_rd(Op.SRA_K))
    _pair(table, 0x16, _count_rd(Op.SRL_K))
    _pair(table, 0x18, _count_rd(Op.RL_K))
    for major in range(0x1C, 0x20):
        table[major] = _dec_dsjs

    for major, op in (
        (0x20, Op.ADD),
        (0x21, Op.ADDC),
        (0x22, Op.SUB),
        (0x23, Op.SUBB),
        (0x24, Op.CMP),
        (0x25, Op.BTST_R),
        (0x28, Op.AND),
        (0x29, Op.ANDN),
        (0x2A, Op.OR),
        (0x2C, Op.DIVS),
        (0x2D, Op.DIVU),
        (0x2E, Op.MPYS),
        (0x2F, Op.MPYU),
        (0x30, Op.SLA_R),
        (0x31, Op.SLL_R),
        (0x32, Op.SRA_R),
        (0x33, Op.SRL_R),
        (0x34, Op.RL_R),
        (0x35, Op.LMO),
        (0x36, Op.MODS),
        (0x37, Op.MODU),
        (0x46, Op.MOVB_R_IND),
        (0x47, Op.MOVB_IND_R),
        (0x4E, Op.MOVB_IND_IND),
        (0x70, Op.ADDXY),
        (0x71, Op.SUBXY),
        (0x72, Op.CMPXY),
        (0x73, Op.CPW),
        (0x74, Op.CVXYL),
        (0x76, Op.MOVX),
        (0x77, Op.MOVY),
        (0x78, Op.PIXT_R_INDXY),
        (0x79, Op.PIXT_INDXY_R),
        (0x7A, Op.PIXT_INDXY_INDXY),
        (0x7B, Op.DRAV),
        (0x7C, Op.PIXT_R_IND),
        (0x7D, Op.PIXT_IND_R),
        (0x7E, Op.PIXT_IND_IND),
    ):
        table[major] = _rs_rd(op)
    _pair(table, 0x26, _dec_move_rr)
    table[0x2B] = _dec_xor

    for major, op in (
        (0x40, Op.MOVE_R_IND),
        (0x42, Op.MOVE_IND_R),
        (0x44, Op.MOVE_IND_IND),
        (0x48, Op.MOVE_R_POSTINC),
        (0x4A, Op.MOVE_POSTINC_R),
        (0x4C, Op.MOVE_POSTINC_POSTINC),
        (0x50, Op.MOVE_R_PREDEC),
        (0x52, Op.MOVE_PREDEC_R),
        (0x54, Op.MOVE_PREDEC_PREDEC),
    ):
        _pair(table, major, _field_move(op))
    table[0x56] = _dec_movb_r_disp
    table[0x57] = _dec_movb_disp_r
    _pair(table, 0x58, _dec_move_r_disp)
    _pair(table, 0x5A, _dec_move_disp_src(Op.MOVE_DISP_R))
    _pair(table, 0x5C, _dec_move_disp_disp)
    table[0x5E] = _dec_movb_disp_disp

    for major in range(0x60, 0x68):
        table[major] = _dec_jump_cc
    _pair(table, 0x68, _dec_move_disp_src(Op.MOVE_DISP_POSTINC))
    _pair(table, 0x6A, _sub(_SUB_6A))
    table[LINE_OPCODE] = _dec_line
    return table


MAJOR_TABLE: Dict[int, DecoderFunc] = _build_major_table()


def decode_instr(word: int, cur: WordCursor) -> DecodedInstr:
    """Decode the operation whose opcode word has just been fetched from `cur`."""
    fields = Fields.of(word)
    handler = MAJOR_TABLE.get(fields.opcode)
    decoded = handler(fields, cur) if handler is not None else None
    if decoded is None:
        logger.debug(
            "No opcode matches %04X at word %#x; emitting data word",
            word,
            cur.opcode_address(),
        )
        decoded = DecodedInstr(Op.DW, {"raw": RawWord(word)})
    return decoded


def decode_one(cur: WordCursor) -> Optional[Record]:
    word = cur.next_word()
    if word is None:
        return None
    decoded = decode_instr(word, cur)
    return Record(cur.opcode_address(), decoded, cur.fetched())


def _drain(cur: WordCursor) -> Iterator[Record]:
    while True:
        record = decode_one(cur)
        if record is None:
            return
        yield record


def iter_records(data: bytes, base: int = 0) -> Iterator[Record]:
    # Cursor built eagerly so malformed buffers fail before iteration starts
    return _drain(WordCursor(data, base))


def decode(data: bytes, base: int = 0) -> List[Record]:
    """Decode a whole buffer; `base` is the word address of its first byte."""
    records = list(iter_records(data, base))
    logger.debug("Decoded %d records from %d bytes", len(records), len(data))
    return records


__all__ = [
    "DecoderFunc",
    "MAJOR_TABLE",
    "decode",
    "decode_instr",
    "decode_one",
    "iter_records",
]
