from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from marketplace.core import ZERO_ADDRESS, LedgerDecodeError, MarketplaceConfig, parse_uint


def test_defaults():
    cfg = MarketplaceConfig()
    assert cfg.marketplace_address == ZERO_ADDRESS
    assert cfg.log_level == "INFO"


def test_contract_address_file_keys_are_accepted(tmp_path):
    path = tmp_path / "addresses.json"
    path.write_text(
        json.dumps(
            {
                "VOLTA_IDENTITY_MANAGER_ADDRESS": "0xident",
                "VOLTA_MARKETPLACE_ADDRESS": "0xmarket",
                "unrelated": "ignored",
            }
        )
    )
    cfg = MarketplaceConfig.from_json(path)
    assert cfg.identity_manager_address == "0xident"
    assert cfg.marketplace_address == "0xmarket"
    assert cfg.aggregator_address == ZERO_ADDRESS


def test_from_json_uses_field_names(tmp_path):
    path = tmp_path / "addresses.json"
    path.write_text(json.dumps({"marketplace_address": "0xm", "aggregator_address": "0xagg", "log_level": "warning"}))
    cfg = MarketplaceConfig.from_json(path)
    assert cfg.marketplace_address == "0xm"
    assert cfg.aggregator_address == "0xagg"
    assert cfg.log_level == "WARNING"


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("MARKETPLACE_MARKETPLACE_ADDRESS", "0xenv")
    monkeypatch.setenv("MARKETPLACE_AGGREGATOR_ADDRESS", "0xagg")
    monkeypatch.setenv("MARKETPLACE_LOG_LEVEL", "debug")
    cfg = MarketplaceConfig()
    assert cfg.marketplace_address == "0xenv"
    assert cfg.aggregator_address == "0xagg"
    assert cfg.log_level == "DEBUG"


def test_keyword_arguments_win_over_environment(monkeypatch):
    monkeypatch.setenv("MARKETPLACE_AGGREGATOR_ADDRESS", "0xenv")
    assert MarketplaceConfig(aggregator_address="0xarg").aggregator_address == "0xarg"


def test_config_is_frozen():
    cfg = MarketplaceConfig()
    with pytest.raises(ValidationError):
        cfg.log_level = "DEBUG"


def test_invalid_values_raise():
    with pytest.raises(ValueError):
        MarketplaceConfig(marketplace_address="")
    with pytest.raises(ValueError):
        MarketplaceConfig(log_level="chatty")


def test_parse_uint():
    assert parse_uint("123") == 123
    assert parse_uint(" 0x10 ") == 16
    assert parse_uint(5) == 5
    assert parse_uint("340282366920938463463374607431768211456") == 2**128
    for bad in ("-1", "1.5", "", None, True):
        with pytest.raises(LedgerDecodeError):
            parse_uint(bad)
