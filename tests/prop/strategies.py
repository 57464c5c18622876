from __future__ import annotations

import struct
from typing import List

from hypothesis import strategies as st

# Longest instruction: opcode word plus two 32-bit operands
MAX_INSTR_WORDS = 5

opcode_words = st.integers(min_value=0, max_value=0xFFFF)


def pack_words(values: List[int]) -> bytes:
    return struct.pack(f"<{len(values)}H", *values)


@st.composite
def word_buffers(draw, max_words: int = 64) -> bytes:
    values = draw(st.lists(opcode_words, max_size=max_words))
    return pack_words(values)


@st.composite
def padded_instructions(draw) -> bytes:
    """One opcode word followed by enough operand words for any encoding."""
    first = draw(opcode_words)
    operands = draw(
        st.lists(
            opcode_words,
            min_size=MAX_INSTR_WORDS - 1,
            max_size=MAX_INSTR_WORDS - 1,
        )
    )
    return pack_words([first, *operands])


base_addresses = st.integers(min_value=0, max_value=0x0FFFFFFF)
