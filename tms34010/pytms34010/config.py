from __future__ import annotations

from dataclasses import dataclass
import os


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    return normalized not in {"0", "false", "off", ""}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip(), 0)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class DisasmConfig:
    mnemonic_width: int = 8
    operand_width: int = 32
    lowercase: bool = False


def load_disasm_config() -> DisasmConfig:
    return DisasmConfig(
        mnemonic_width=_env_int("TMS_DISASM_MNEMONIC_WIDTH", 8),
        operand_width=_env_int("TMS_DISASM_OPERAND_WIDTH", 32),
        lowercase=_env_flag("TMS_DISASM_LOWERCASE", default=False),
    )


__all__ = ["DisasmConfig", "load_disasm_config"]
