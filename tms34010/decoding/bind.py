from __future__ import annotations

from dataclasses import dataclass


def _check(name: str, value: int, bits: int) -> None:
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{name} out of range: {value:#x}")


@dataclass(frozen=True, slots=True)
class Reg:
    """Register number: bank flag in bit 4, register field in bits 0-3."""

    num: int

    def __post_init__(self) -> None:
        _check("Reg", self.num, 5)

    @classmethod
    def of(cls, bank: int, field: int) -> "Reg":
        return cls((bank << 4) | field)

    @property
    def bank(self) -> int:
        return self.num >> 4

    @property
    def field(self) -> int:
        return self.num & 0xF

    @property
    def is_sp(self) -> bool:
        return self.field == 0xF


@dataclass(frozen=True, slots=True)
class Imm16:
    value: int

    def __post_init__(self) -> None:
        _check("Imm16", self.value, 16)


@dataclass(frozen=True, slots=True)
class Imm32:
    lo: int
    hi: int

    def __post_init__(self) -> None:
        _check("Imm32 lo", self.lo, 16)
        _check("Imm32 hi", self.hi, 16)

    @property
    def u32(self) -> int:
        return (self.hi << 16) | self.lo


@dataclass(frozen=True, slots=True)
class Addr32:
    v: Imm32

    @property
    def value(self) -> int:
        return self.v.u32


@dataclass(frozen=True, slots=True)
class KConst:
    value: int

    def __post_init__(self) -> None:
        _check("KConst", self.value, 5)

    @property
    def effective(self) -> int:
        return self.value or 32


@dataclass(frozen=True, slots=True)
class Count5:
    """Raw 5-bit count: shift amounts, trap numbers, RETS pop counts."""

    value: int

    def __post_init__(self) -> None:
        _check("Count5", self.value, 5)


@dataclass(frozen=True, slots=True)
class FieldSel:
    value: int

    def __post_init__(self) -> None:
        _check("FieldSel", self.value, 1)


@dataclass(frozen=True, slots=True)
class FieldSize:
    value: int

    def __post_init__(self) -> None:
        _check("FieldSize", self.value, 5)

    @property
    def effective(self) -> int:
        return self.value or 32


@dataclass(frozen=True, slots=True)
class FieldExt:
    value: int

    def __post_init__(self) -> None:
        _check("FieldExt", self.value, 1)


@dataclass(frozen=True, slots=True)
class Flag:
    """Single selector bit (M of MOVE Rs,Rd, Z of LINE, D of DSJS)."""

    value: int

    def __post_init__(self) -> None:
        _check("Flag", self.value, 1)

    def __bool__(self) -> bool:
        return bool(self.value)


@dataclass(frozen=True, slots=True)
class Offset8:
    raw: int

    def __post_init__(self) -> None:
        _check("Offset8", self.raw, 8)

    @property
    def signed(self) -> int:
        return self.raw - 0x100 if self.raw & 0x80 else self.raw


@dataclass(frozen=True, slots=True)
class Offset16:
    raw: int

    def __post_init__(self) -> None:
        _check("Offset16", self.raw, 16)

    @property
    def signed(self) -> int:
        return self.raw - 0x10000 if self.raw & 0x8000 else self.raw


@dataclass(frozen=True, slots=True)
class Offset5:
    """DSJS displacement; the direction bit lives in a separate Flag."""

    raw: int

    def __post_init__(self) -> None:
        _check("Offset5", self.raw, 5)


@dataclass(frozen=True, slots=True)
class Disp16:
    raw: int

    def __post_init__(self) -> None:
        _check("Disp16", self.raw, 16)

    @property
    def signed(self) -> int:
        return self.raw - 0x10000 if self.raw & 0x8000 else self.raw


@dataclass(frozen=True, slots=True)
class Cond:
    code: int

    def __post_init__(self) -> None:
        _check("Cond", self.code, 4)


@dataclass(frozen=True, slots=True)
class RegList:
    mask: int

    def __post_init__(self) -> None:
        _check("RegList", self.mask, 16)

    def fields(self) -> tuple[int, ...]:
        return tuple(i for i in range(16) if self.mask & (1 << i))


@dataclass(frozen=True, slots=True)
class WordAddr:
    """Word address of the instruction's own opcode word."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"WordAddr out of range: {self.value}")


@dataclass(frozen=True, slots=True)
class RawWord:
    value: int

    def __post_init__(self) -> None:
        _check("RawWord", self.value, 16)
