import pytest

from .config import DisasmConfig, load_disasm_config

ENV_VARS = (
    "TMS_DISASM_MNEMONIC_WIDTH",
    "TMS_DISASM_OPERAND_WIDTH",
    "TMS_DISASM_LOWERCASE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    assert load_disasm_config() == DisasmConfig()
    assert DisasmConfig().mnemonic_width == 8
    assert DisasmConfig().operand_width == 32
    assert not DisasmConfig().lowercase


def test_widths_accept_hex(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TMS_DISASM_MNEMONIC_WIDTH", "10")
    monkeypatch.setenv("TMS_DISASM_OPERAND_WIDTH", "0x20")
    config = load_disasm_config()
    assert config.mnemonic_width == 10
    assert config.operand_width == 32


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("yes", True), ("0", False), ("false", False), ("OFF", False), ("", False)],
)
def test_lowercase_flag(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("TMS_DISASM_LOWERCASE", raw)
    assert load_disasm_config().lowercase is expected


def test_bad_width_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TMS_DISASM_OPERAND_WIDTH", "wide")
    with pytest.raises(ValueError, match="TMS_DISASM_OPERAND_WIDTH"):
        load_disasm_config()
    monkeypatch.setenv("TMS_DISASM_OPERAND_WIDTH", "-1")
    with pytest.raises(ValueError):
        load_disasm_config()
