"""Tests for the token security scanner."""
from unittest.mock import patch

import pytest

from chain.rpc import Web3RPCError
from token_risk import (
    RiskLevel,
    TokenBasicInfo,
    TokenRiskConfig,
    TokenScanner,
    risk_level_for,
    score_token,
)

TOKEN = "0x5555555555555555555555555555555555555555"
USDC_MAINNET = "0x3894085Ef7Ff0f0aeDf52E2A2704928d1Ec074F1"


def test_full_metadata_scores_low_risk():
    info = TokenBasicInfo(address=TOKEN, name="A", symbol="A", decimals=18, total_supply=1, has_code=True)
    score, factors = score_token(info)
    assert score == 95
    assert risk_level_for(score) == RiskLevel.LOW
    assert all(f.impact > 0 for f in factors)


def test_code_without_metadata_is_medium():
    info = TokenBasicInfo(address=TOKEN, has_code=True)
    score, _ = score_token(info)
    assert score == 65
    assert risk_level_for(score) == RiskLevel.MEDIUM


def test_no_code_is_high_risk():
    info = TokenBasicInfo(address=TOKEN, has_code=False)
    score, factors = score_token(info)
    assert score == 35
    assert risk_level_for(score) == RiskLevel.HIGH
    assert {f.name for f in factors if f.impact < 0} == {"contract_code", "total_supply"}


def test_known_safe_short_circuits():
    score, factors = score_token(TokenBasicInfo(address=TOKEN), known_safe=True)
    assert score == 95
    assert factors[0].name == "known_safe"


def test_thresholds_are_inclusive():
    assert risk_level_for(70) == RiskLevel.LOW
    assert risk_level_for(69) == RiskLevel.MEDIUM
    assert risk_level_for(40) == RiskLevel.MEDIUM
    assert risk_level_for(39) == RiskLevel.HIGH


def test_known_safe_list_includes_configured_tokens(monkeypatch):
    monkeypatch.setenv("TOKEN_RISK_KNOWN_SAFE", TOKEN)
    config = TokenRiskConfig.from_env()
    assert config.is_known_safe(USDC_MAINNET)
    assert config.is_known_safe(TOKEN.upper().replace("0X", "0x"))


def test_analyze_builds_report_with_warnings():
    with (
        patch("chain.rpc.get_code", return_value=b"\x60"),
        patch("chain.rpc.erc20_name", side_effect=Web3RPCError("reverted")),
        patch("chain.rpc.erc20_symbol", return_value="X"),
        patch("chain.rpc.erc20_decimals", return_value=18),
        patch("chain.rpc.erc20_total_supply", side_effect=Web3RPCError("reverted")),
    ):
        report = TokenScanner(config=TokenRiskConfig()).analyze(TOKEN, network="testnet")

    assert report.security_score == 65
    assert report.risk_level == RiskLevel.MEDIUM
    assert report.warnings == ["totalSupply could not be read"]
    summary = report.to_summary()
    assert summary == {
        "address": TOKEN,
        "riskLevel": "MEDIUM",
        "securityScore": 65,
        "warnings": ["totalSupply could not be read"],
    }


def test_analyze_propagates_code_read_failure():
    with patch("chain.rpc.get_code", side_effect=Web3RPCError("rpc down")):
        with pytest.raises(Web3RPCError):
            TokenScanner(config=TokenRiskConfig()).analyze(TOKEN)
