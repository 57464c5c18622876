from binja_test_mocks import binja_api  # noqa: F401  # pyright: ignore

import struct
from typing import Tuple

import pytest
from binja_test_mocks.tokens import TInstr, TInt, TReg, TSep, asm_str

from ..decoding import DecodedInstr, Op, decode
from ..decoding.bind import Cond, Reg, WordAddr, Offset8
from .render import (
    OPERAND_FORMS,
    branch_target,
    condition_name,
    reg_name,
    render,
    render_tokens,
)


def decode_words(*values: int, base: int = 0) -> DecodedInstr:
    data = struct.pack(f"<{len(values)}H", *values)
    records = decode(data, base)
    assert len(records) == 1
    return records[0].instr


def render_words(*values: int, base: int = 0) -> Tuple[str, str]:
    return render(decode_words(*values, base=base))


def test_every_tag_has_an_operand_form() -> None:
    assert set(OPERAND_FORMS) == set(Op)


@pytest.mark.parametrize(
    "num, name",
    [(0, "A0"), (14, "A14"), (15, "SP"), (16, "B0"), (30, "B14"), (31, "SP")],
)
def test_register_names(num: int, name: str) -> None:
    assert reg_name(Reg(num)) == name


def test_condition_names() -> None:
    assert condition_name(Cond(0)) == "UC"
    assert condition_name(Cond(0xA)) == "EQ"
    assert condition_name(Cond(0xF)) == "NN"


def test_no_operand_tokens() -> None:
    instr = decode_words(0x0320)
    assert render_tokens(instr) == [TInstr("CLRC")]
    assert render(instr) == ("CLRC", "")


def test_register_tokens() -> None:
    tokens = render_tokens(decode_words(0x5757))
    assert tokens == [TInstr("XOR"), TSep(" "), TReg("B10"), TSep(","), TReg("B7")]
    assert asm_str(tokens) == "XOR B10,B7"


@pytest.mark.parametrize(
    "words, expected",
    [
        ((0x0021,), ("REV", "A1")),
        ((0x5739,), ("CLR", "B9")),
        ((0x41E0,), ("ADD", "SP,A0")),
        ((0x401F,), ("ADD", "B0,SP")),
        ((0x0B22, 0xAAAA, 0x5555), ("ADDI", "0x5555AAAA,A2")),
        ((0x0BB0, 0x5678, 0x1234), ("ORI", "0x12345678,B0")),
        ((0x09C0, 0x1234), ("MOVI", "0x1234,A0")),
        ((0x0905,), ("TRAP", "5")),
        ((0x0960,), ("RETS", "")),
        ((0x0962,), ("RETS", "2")),
        ((0x0FA0,), ("PIXBLT", "B,XY")),
        ((0x0FC0,), ("FILL", "L")),
        ((0xDF1A,), ("LINE", "0")),
        ((0xDF9A,), ("LINE", "1")),
        ((0xFFFF,), (".word", "0xFFFF")),
        ((0x0301,), (".word", "0x0301")),
    ],
)
def test_render_simple_forms(words, expected) -> None:
    assert render_words(*words) == expected


def test_k_constant_zero_is_32() -> None:
    assert render_words(0x1003) == ("ADDK", "32,A3")
    assert render_words(0x1811) == ("MOVK", "32,B1")
    assert render_words(0x10A3) == ("ADDK", "5,A3")
    assert render_words(0x1023) == ("INC", "A3")


def test_setf_field_size() -> None:
    assert render_words(0x0550) == ("SETF", "16,0,0")
    assert render_words(0x0540) == ("SETF", "32,0,0")


def test_complemented_immediates() -> None:
    assert render_words(0x0B81, 0xFF00, 0xFFFF) == ("ANDI", "0xFF,A1")
    assert render_words(0x0B40, 0xFFFE) == ("CMPI", "0x1,A0")
    assert render_words(0x0BE0, 0x0000) == ("SUBI", "0xFFFF,A0")


def test_shift_counts() -> None:
    assert render_words(0x2080) == ("SLA", "4,A0")
    assert render_words(0x2B80) == ("SRA", "4,A0")
    assert render_words(0x1F40) == ("BTST", "5,A0")


def test_relative_jumps() -> None:
    assert render_words(0xC002) == ("JRUC", "0x00000030")
    assert render_words(0xCAFF, base=0x10) == ("JREQ", "0x00000100")
    assert render_words(0xCB02) == ("JRNE", "0x00000030")
    assert render_words(0xC000, 0x0010) == ("JRUC", "0x00000110")


def test_absolute_jumps() -> None:
    assert render_words(0xC080, 0x0000, 0xFFC0) == ("JAUC", "0xFFC00000")
    assert render_words(0x0D5F, 0x0000, 0xFFC0) == ("CALLA", "0xFFC00000")


def test_call_relative_wraps_to_32_bits() -> None:
    assert render_words(0x0D3F, 0x0004) == ("CALLR", "0x00000060")
    assert render_words(0x0D3F, 0xFFF0) == ("CALLR", "0xFFFFFF20")


def test_decrement_and_skip() -> None:
    assert render_words(0x3861) == ("DSJS", "A1,0x00000040")
    assert render_words(0x3C61, base=0x100) == ("DSJS", "A1,0x00000FE0")
    assert render_words(0x0D85, 0xFFFE, base=0x10) == ("DSJ", "A5,0x000000F0")
    assert render_words(0x0DA5, 0x0004) == ("DSJEQ", "A5,0x00000050")
    assert render_words(0x0DD2, 0xFFFF, base=0x20) == ("DSJNE", "B2,0x00000200")


def test_branch_target_only_for_relative_forms() -> None:
    jr = DecodedInstr(
        Op.JR_SHORT, {"cond": Cond(0), "offset": Offset8(2), "at": WordAddr(0)}
    )
    assert branch_target(jr) == 0x30
    assert branch_target(decode_words(0x0320)) is None
    assert branch_target(decode_words(0xC080, 0x0000, 0xFFC0)) is None


def test_register_lists_use_companion_bank() -> None:
    assert render_words(0x098F, 0x0007) == ("MMTM", "SP,A0,A1,A2")
    assert render_words(0x099F, 0x8003) == ("MMTM", "SP,B0,B1,SP")


def test_field_moves() -> None:
    assert render_words(0x8022) == ("MOVE", "A1,*A2")
    assert render_words(0x8222) == ("MOVE", "A1,*A2,1")
    assert render_words(0x9422) == ("MOVE", "*A1+,A2")
    assert render_words(0xA422) == ("MOVE", "-*A1,A2")
    assert render_words(0xB022, 0xFFF0) == ("MOVE", "A1,*A2(-0x10)")
    assert render_words(0xD022, 0x0020) == ("MOVE", "*A1(0x20),*A2+")
    assert render_words(0x0581, 0x0000, 0xFFC0) == ("MOVE", "A1,@0xFFC00000")
    assert render_words(0xD401, 0x1000, 0x0000) == ("MOVE", "@0x00001000,*A1+")


def test_register_moves() -> None:
    assert render_words(0x4C22) == ("MOVE", "A1,A2")
    assert render_words(0x4E22) == ("MOVE", "B1,A2")


def test_byte_and_pixel_moves_share_mnemonic() -> None:
    assert render_words(0x8C22) == ("MOVB", "A1,*A2")
    assert render_words(0x05E1, 0x0000, 0x0100) == ("MOVB", "A1,@0x01000000")
    assert render_words(0x0340, 0x0000, 0x0010, 0x0000, 0x0020) == (
        "MOVB",
        "@0x00100000,@0x00200000",
    )
    assert render_words(0xF022) == ("PIXT", "A1,*A2.XY")


def test_field_select_always_shown_for_extends() -> None:
    assert render_words(0x0500) == ("SEXT", "A0,0")
    assert render_words(0x0700) == ("SEXT", "A0,1")


def test_integer_tokens() -> None:
    tokens = render_tokens(decode_words(0x0905))
    assert tokens == [TInstr("TRAP"), TSep(" "), TInt("5")]
