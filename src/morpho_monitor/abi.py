"""Contract ABIs bundled with the package."""

from __future__ import annotations

import json
from functools import cache
from pathlib import Path

ABIS_DIR = Path(__file__).parent / "abis"

META_MORPHO_ABI_PATH = ABIS_DIR / "MetaMorpho.json"
ERC20_ABI_PATH = ABIS_DIR / "ERC20.json"


@cache
def load_abi(path: str | Path) -> list[dict]:
    """Read the ``abi`` array from a JSON artifact.

    Results are cached per path since every vault read builds two contracts.

    Raises:
        FileNotFoundError: If the artifact is missing
        KeyError: If the document has no ``abi`` field
    """
    with Path(path).open(encoding="utf-8") as f:
        return json.load(f)["abi"]


def load_vault_abi() -> list[dict]:
    """ERC-4626 subset of the MetaMorpho vault ABI."""
    return load_abi(META_MORPHO_ABI_PATH)


def load_erc20_abi() -> list[dict]:
    return load_abi(ERC20_ABI_PATH)
