from __future__ import annotations

from typing import List, Optional, Tuple

from binja_test_mocks.coding import BufferTooShortErrorError, Decoder


class MalformedBuffer(ValueError):
    """Raised when the input cannot be split into 16-bit words."""


class TruncatedOperand(Exception):
    """Raised when the buffer ends inside an instruction's operand words."""

    def __init__(self, address: int, missing: int) -> None:
        super().__init__(
            f"Instruction at word {address:#x} is truncated: "
            f"{missing} operand word(s) missing"
        )
        self.address = address
        self.missing = missing


class WordCursor:
    """
    Sequential reader over a byte buffer as little-endian 16-bit words.

    `base` is added to the word index to form the addresses reported in
    errors; the index itself always starts at zero.
    """

    def __init__(self, data: bytes, base: int = 0) -> None:
        if len(data) % 2:
            raise MalformedBuffer(
                f"Buffer length {len(data)} is odd; expected whole 16-bit words"
            )
        self._decoder = Decoder(bytearray(data))
        self._words = len(data) // 2
        self.base = base
        self._start = 0
        self._fetched: List[int] = []

    def position(self) -> int:
        return self._decoder.get_pos() // 2

    def remaining(self) -> int:
        return self._words - self.position()

    def at_end(self) -> bool:
        return self.remaining() == 0

    def next_word(self) -> Optional[int]:
        """Fetch the next opcode word, or ``None`` at end of input."""
        if self.at_end():
            return None
        self._start = self.position()
        word = self._decoder.unsigned_word_le()
        self._fetched = [word]
        return word

    def operand_word(self) -> int:
        try:
            word = self._decoder.unsigned_word_le()
        except BufferTooShortErrorError as exc:
            raise TruncatedOperand(self.base + self._start, 1) from exc
        self._fetched.append(word)
        return word

    def operand_long(self) -> Tuple[int, int]:
        """Fetch a 32-bit operand as ``(lo, hi)`` halves."""
        if self.remaining() < 2:
            raise TruncatedOperand(self.base + self._start, 2 - self.remaining())
        lo = self.operand_word()
        hi = self.operand_word()
        return lo, hi

    def opcode_address(self) -> int:
        """Word address of the most recently fetched opcode word."""
        return self.base + self._start

    def fetched(self) -> Tuple[int, ...]:
        """Words consumed since the last opcode fetch, opcode word first."""
        return tuple(self._fetched)
