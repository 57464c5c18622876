import struct

import pytest

from ..decoding import MalformedBuffer, TruncatedOperand, decode
from .config import DisasmConfig
from .listing import disassemble, format_line, format_records

COMPACT = DisasmConfig(mnemonic_width=0, operand_width=0)


def words(*values: int) -> bytes:
    return struct.pack(f"<{len(values)}H", *values)


def test_format_line_default_columns() -> None:
    record = decode(bytes([0x20, 0x03]))[0]
    line = format_line(record, DisasmConfig())
    assert line == "00000000: CLRC" + " " * 38 + "0320"


def test_format_line_compact() -> None:
    record = decode(words(0x09C0, 0x1234), base=0x10)[0]
    assert format_line(record, COMPACT) == "00000100: MOVI 0x1234,A0 09C0 1234"


def test_format_line_lowercase_keeps_word_dump() -> None:
    record = decode(words(0x09C0, 0x1234))[0]
    config = DisasmConfig(mnemonic_width=0, operand_width=0, lowercase=True)
    assert format_line(record, config) == "00000000: movi 0x1234,a0 09C0 1234"


def test_address_column_wraps_to_32_bits() -> None:
    record = decode(words(0x0300), base=0x10000000)[0]
    assert format_line(record, COMPACT).startswith("00000000: NOP")


def test_disassemble_lines_track_addresses() -> None:
    data = words(0x0320, 0x0B22, 0xAAAA, 0x5555, 0xFFFF)
    assert disassemble(data, base=0x0FFC0000, config=COMPACT) == (
        "FFC00000: CLRC  0320\n"
        "FFC00010: ADDI 0x5555AAAA,A2 0B22 AAAA 5555\n"
        "FFC00040: .word 0xFFFF FFFF\n"
    )


def test_format_records_matches_disassemble() -> None:
    data = words(0x0320, 0x0300)
    lines = format_records(decode(data), COMPACT)
    assert "\n".join(lines) + "\n" == disassemble(data, config=COMPACT)


def test_disassemble_empty_buffer() -> None:
    assert disassemble(b"", config=COMPACT) == ""


def test_disassemble_propagates_errors() -> None:
    with pytest.raises(MalformedBuffer):
        disassemble(b"\x00", config=COMPACT)
    with pytest.raises(TruncatedOperand):
        disassemble(words(0x0320, 0x09E0, 0x0000), config=COMPACT)


def test_disassemble_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TMS_DISASM_MNEMONIC_WIDTH", "0")
    monkeypatch.setenv("TMS_DISASM_OPERAND_WIDTH", "0")
    monkeypatch.setenv("TMS_DISASM_LOWERCASE", "1")
    assert disassemble(words(0x5757)) == "00000000: xor b10,b7 5757\n"
