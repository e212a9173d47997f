from __future__ import annotations

import pytest

from morpho_monitor.chains import CHAINS, DEFAULT_CHAINS, chain_id_for, get_chain
from morpho_monitor.errors import UnknownChainError


def test_chain_table():
    assert {key: chain.chain_id for key, chain in CHAINS.items()} == {
        "ethereum": 1,
        "base": 8453,
        "polygon": 137,
        "arbitrum": 42161,
    }
    assert DEFAULT_CHAINS == ("ethereum", "base", "polygon", "arbitrum")


def test_get_chain_is_case_insensitive():
    assert get_chain("Base").key == "base"


def test_get_chain_unknown_lists_supported_chains():
    with pytest.raises(UnknownChainError) as exc_info:
        get_chain("solana")

    assert exc_info.value.chain == "solana"
    assert "arbitrum" in str(exc_info.value)


def test_chain_id_for_unknown_is_none():
    assert chain_id_for("ARBITRUM") == 42161
    assert chain_id_for("optimism") is None
