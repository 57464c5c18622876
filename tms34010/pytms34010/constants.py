"""Shared architecture constants for the TMS34010 disassembler.

Addresses inside instructions and in listings are bit addresses; the decoder
works in 16-bit words.  ``BITS_PER_WORD`` converts between the two.
"""

BITS_PER_WORD = 16

# Bit addresses are 32 bits wide
ADDRESS_MASK = 0xFFFFFFFF

# Register file letters indexed by the bank bit
BANK_LETTERS = ("A", "B")

# One name per 4-bit condition code.  Codes 8-11 also go by
# LO/B, HS/NB, Z and NZ in TI's documentation.
CONDITION_NAMES = (
    "UC",
    "P",
    "LS",
    "HI",
    "LT",
    "GE",
    "LE",
    "GT",
    "C",
    "NC",
    "EQ",
    "NE",
    "V",
    "NV",
    "N",
    "NN",
)

DATA_WORD_DIRECTIVE = ".word"
