#!/usr/bin/env python3
import logging
import sys
from typing import Optional

from plumbum import cli  # type: ignore[import-untyped]

from ..decoding import MalformedBuffer, TruncatedOperand
from .config import load_disasm_config
from .constants import BITS_PER_WORD
from .listing import disassemble

logger = logging.getLogger(__name__)


def parse_number(value: str) -> int:
    """Decimal or ``0x`` hex, never negative."""
    number = int(value.strip(), 0)
    if number < 0:
        raise ValueError(f"expected a non-negative number, got {value!r}")
    return number


def read_window(path: str, offset: int, size: Optional[int]) -> bytes:
    with open(path, "rb") as f:
        f.seek(offset)
        if size is None:
            return f.read()
        return f.read(size)


class DisassemblerCLI(cli.Application):
    """Disassembles a raw TMS34010 binary into a text listing."""

    PROGNAME = "tms34010-disasm"
    VERSION = "0.1.0"

    offset = cli.SwitchAttr(
        ["-o", "--offset"],
        parse_number,
        default=0,
        help="Byte offset in the input file to start reading from",
    )
    pc = cli.SwitchAttr(
        ["-p", "--pc"],
        parse_number,
        default=0,
        help="Bit address of the first word (a multiple of 16)",
    )
    size = cli.SwitchAttr(
        ["-s", "--size"],
        parse_number,
        default=None,
        help="Number of bytes to disassemble (default: to end of file)",
    )
    verbose = cli.Flag(["-v", "--verbose"], help="Enable debug logging")

    def main(self, input_file: cli.ExistingFile) -> int:
        logging.basicConfig(
            level=logging.DEBUG if self.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )
        if self.pc % BITS_PER_WORD:
            print(
                f"Error: --pc {self.pc:#x} is not a multiple of {BITS_PER_WORD}",
                file=sys.stderr,
            )
            return 1

        data = read_window(str(input_file), self.offset, self.size)
        logger.debug(
            "Read %d bytes from %s at offset %#x", len(data), input_file, self.offset
        )
        try:
            config = load_disasm_config()
            listing = disassemble(data, self.pc // BITS_PER_WORD, config)
        except (MalformedBuffer, TruncatedOperand, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        sys.stdout.write(listing)
        return 0


def main() -> None:
    DisassemblerCLI.run()


if __name__ == "__main__":
    main()
