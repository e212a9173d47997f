from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from morpho_monitor.errors import UnknownChainError
from morpho_monitor.settings import MonitorSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ETH_RPC_URL",
        "TELEGRAM_CHAT_ID",
        "TELEGRAM_BOT_TOKEN",
        "MORPHO_MONITOR_RPC_URL",
        "MORPHO_MONITOR_TELEGRAM_CHAT_ID",
        "MORPHO_MONITOR_TELEGRAM_BOT_TOKEN",
        "MORPHO_MONITOR_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path):
    s = MonitorSettings(config_path=tmp_path / "config.json")

    assert s.rpc_url == "https://eth.llamarpc.com"
    assert s.console_alerts is True
    assert s.telegram_chat_id is None
    assert s.telegram_bot_token is None
    assert s.default_auto_add_threshold == Decimal(1_000_000)
    assert s.alert_log_path == tmp_path / "alerts.log"


def test_legacy_env_names(monkeypatch, tmp_path):
    monkeypatch.setenv("ETH_RPC_URL", "http://node:8545")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "-1001")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")

    s = MonitorSettings(config_path=tmp_path / "config.json")

    assert s.rpc_url == "http://node:8545"
    assert s.telegram_chat_id == "-1001"
    assert s.telegram_bot_token_value == "123:abc"


def test_prefixed_env_wins_over_legacy(monkeypatch, tmp_path):
    monkeypatch.setenv("ETH_RPC_URL", "http://legacy:8545")
    monkeypatch.setenv("MORPHO_MONITOR_RPC_URL", "http://prefixed:8545")

    s = MonitorSettings(config_path=tmp_path / "config.json")

    assert s.rpc_url == "http://prefixed:8545"


def test_blank_telegram_values_are_none(monkeypatch, tmp_path):
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "  ")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "")

    s = MonitorSettings(config_path=tmp_path / "config.json")

    assert s.telegram_chat_id is None
    assert s.telegram_bot_token is None


def test_as_safe_dict_redacts_token(tmp_path):
    s = MonitorSettings(config_path=tmp_path / "config.json", telegram_bot_token="secret")

    assert s.as_safe_dict()["telegram_bot_token"] == "***redacted***"
    assert "secret" not in repr(s)


def test_log_level_is_upper_cased(tmp_path):
    assert MonitorSettings(config_path=tmp_path / "c.json", log_level="debug").log_level == "DEBUG"


@pytest.mark.parametrize(
    "field,value",
    [
        ("fetch_timeout_seconds", 0),
        ("request_max_tries", 0),
        ("positions_page_size", 0),
        ("default_auto_add_threshold", -1),
    ],
)
def test_rejects_non_positive_values(tmp_path, field, value):
    with pytest.raises(ValidationError):
        MonitorSettings(config_path=tmp_path / "config.json", **{field: value})


def test_rpc_url_for(tmp_path):
    s = MonitorSettings(config_path=tmp_path / "config.json", rpc_url="http://default:8545")

    assert s.rpc_url_for("ethereum") == "http://default:8545"
    assert s.rpc_url_for("Ethereum", "http://config:8545") == "http://config:8545"
    assert s.rpc_url_for("base", "http://config:8545") == "https://mainnet.base.org"
    assert s.rpc_url_for("arbitrum") == "https://arb1.arbitrum.io/rpc"

    with pytest.raises(UnknownChainError):
        s.rpc_url_for("solana")
