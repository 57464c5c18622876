"""
Plain-text listings of decoded TMS34010 code.

Each record becomes one line holding its bit address, the rendered mnemonic and
operands, and the raw words it was decoded from::

    00000000: CLRC                                      0320
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..decoding import Record, iter_records
from .config import DisasmConfig, load_disasm_config
from .constants import ADDRESS_MASK, BITS_PER_WORD
from .render import render

logger = logging.getLogger(__name__)


def format_line(record: Record, config: Optional[DisasmConfig] = None) -> str:
    if config is None:
        config = load_disasm_config()
    name, operands = render(record.instr)
    if config.lowercase:
        name = name.lower()
        operands = operands.lower()
    address = (record.address * BITS_PER_WORD) & ADDRESS_MASK
    words = " ".join(f"{word:04X}" for word in record.words)
    return (
        f"{address:08X}: {name:<{config.mnemonic_width}} "
        f"{operands:<{config.operand_width}} {words}"
    )


def format_records(
    records: Iterable[Record], config: Optional[DisasmConfig] = None
) -> List[str]:
    if config is None:
        config = load_disasm_config()
    return [format_line(record, config) for record in records]


def disassemble(
    data: bytes, base: int = 0, config: Optional[DisasmConfig] = None
) -> str:
    """
    Decode `data` and return the full listing.

    `base` is the word address of the first byte.  Raises `MalformedBuffer`
    for odd-length input and `TruncatedOperand` when the last instruction is
    cut short; no partial listing is returned in either case.
    """
    lines = format_records(iter_records(data, base), config)
    logger.debug("Listed %d instructions starting at word %#x", len(lines), base)
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


__all__ = ["disassemble", "format_line", "format_records"]
