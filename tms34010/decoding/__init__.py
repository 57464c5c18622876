"""
Typed decoding of TMS34010 instruction words.

The decoder walks a byte buffer one 16-bit word at a time, dispatches on the
major opcode and emits one :class:`Record` per operation.  Words that match no
opcode become ``DW`` records so every input word is accounted for.
"""

from .bind import (  # noqa: F401
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
from .model import DecodedInstr, Family, Op, OPS, Record  # noqa: F401
from .reader import MalformedBuffer, TruncatedOperand, WordCursor  # noqa: F401
from .decode_map import decode, decode_one, iter_records  # noqa: F401
from . import decode_map  # noqa: F401

__all__ = [
    "Addr32",
    "Cond",
    "Count5",
    "Disp16",
    "FieldExt",
    "FieldSel",
    "FieldSize",
    "Flag",
    "Imm16",
    "Imm32",
    "KConst",
    "Offset5",
    "Offset8",
    "Offset16",
    "RawWord",
    "Reg",
    "RegList",
    "WordAddr",
    "DecodedInstr",
    "Family",
    "Op",
    "OPS",
    "Record",
    "MalformedBuffer",
    "TruncatedOperand",
    "WordCursor",
    "decode",
    "decode_one",
    "iter_records",
    "decode_map",
]
