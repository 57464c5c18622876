"""
Named bit ranges of the TMS34010 opcode word.

Every field the decoder looks at is declared once here.  Bit 0 is the least
significant bit and ranges are inclusive, matching the layout diagrams in the
TMS34010 User's Guide (``0100 000S SSSR DDDD`` and friends).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BitRange:
    lo: int
    hi: int

    def __post_init__(self) -> None:
        if not 0 <= self.lo <= self.hi <= 15:
            raise ValueError(f"Bit range {self.hi}..{self.lo} outside a 16-bit word")

    @property
    def width(self) -> int:
        return self.hi - self.lo + 1

    @property
    def mask(self) -> int:
        return ((1 << self.width) - 1) << self.lo

    def extract(self, word: int) -> int:
        return (word >> self.lo) & ((1 << self.width) - 1)

    def test(self, word: int) -> bool:
        return bool(self.extract(word))

    def insert(self, word: int, value: int) -> int:
        return (word & ~self.mask & 0xFFFF) | ((value << self.lo) & self.mask)


def bit(pos: int) -> BitRange:
    return BitRange(pos, pos)


OPCODE = BitRange(9, 15)
SUBOP = BitRange(5, 8)
RS = BitRange(5, 8)  # same bits as SUBOP, used as a register number
R = bit(4)
RD = BitRange(0, 3)
F = bit(9)
FS = BitRange(0, 4)
FE = bit(5)
K = BitRange(5, 9)
D = bit(10)
Z = bit(7)
CC = BitRange(8, 11)
LOW5 = BitRange(0, 4)
LOW8 = BitRange(0, 7)


@dataclass(frozen=True, slots=True)
class Fields:
    """All fields of one opcode word, extracted up front."""

    word: int
    opcode: int
    subop: int
    rs: int
    r: int
    rd: int
    f: int
    fs: int
    fe: int
    k: int
    d: int
    z: int
    cc: int
    low5: int
    low8: int

    @classmethod
    def of(cls, word: int) -> "Fields":
        if not 0 <= word <= 0xFFFF:
            raise ValueError(f"Opcode word out of range: {word:#x}")
        return cls(
            word=word,
            opcode=OPCODE.extract(word),
            subop=SUBOP.extract(word),
            rs=RS.extract(word),
            r=R.extract(word),
            rd=RD.extract(word),
            f=F.extract(word),
            fs=FS.extract(word),
            fe=FE.extract(word),
            k=K.extract(word),
            d=D.extract(word),
            z=Z.extract(word),
            cc=CC.extract(word),
            low5=LOW5.extract(word),
            low8=LOW8.extract(word),
        )

    @property
    def src_reg(self) -> int:
        """Source register number in the bank selected by R."""
        return (self.r << 4) | self.rs

    @property
    def dst_reg(self) -> int:
        return (self.r << 4) | self.rd


__all__ = [
    "BitRange",
    "Fields",
    "OPCODE",
    "SUBOP",
    "RS",
    "R",
    "RD",
    "F",
    "FS",
    "FE",
    "K",
    "D",
    "Z",
    "CC",
    "LOW5",
    "LOW8",
]
