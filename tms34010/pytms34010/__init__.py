"""TMS34010 rendering and listing facade exports."""

from .config import DisasmConfig, load_disasm_config
from .listing import disassemble, format_line, format_records
from .render import branch_target, mnemonic, render, render_tokens

__all__ = [
    "DisasmConfig",
    "load_disasm_config",
    "disassemble",
    "format_line",
    "format_records",
    "branch_target",
    "mnemonic",
    "render",
    "render_tokens",
]
