from __future__ import annotations

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Any

import backoff
import requests

from ...constants import RETRYABLE_STATUS_CODES
from ...domain import PositionData
from ...errors import IndexQueryError
from ...logger import get_logger
from ...settings import MonitorSettings
from .base import BasePositionIndex

logger = get_logger(__name__)

VAULT_POSITIONS_QUERY = """
query VaultPositions($users: [String!], $chainIds: [Int!], $first: Int) {
  vaultPositions(
    where: { userAddress_in: $users, chainId_in: $chainIds }
    first: $first
  ) {
    items {
      vault {
        address
        name
        symbol
        chain {
          id
        }
        asset {
          address
          symbol
          decimals
        }
        state {
          totalAssets
          totalSupply
        }
      }
      shares
    }
  }
}
"""


def _is_permanent_http_error(e: Exception) -> bool:
    return (
        isinstance(e, requests.exceptions.HTTPError)
        and e.response is not None
        and e.response.status_code not in RETRYABLE_STATUS_CODES
    )


def _to_int(value: Any, field: str) -> int:
    """Parse a BigInt scalar, which the API returns as a number or a string."""
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise IndexQueryError(f"Invalid {field} value {value!r}") from e
    if not parsed.is_finite() or parsed < 0:
        raise IndexQueryError(f"Invalid {field} value {value!r}")
    return int(parsed)


class MorphoApiPositionIndex(BasePositionIndex):
    """Position lookups against the Morpho Blue GraphQL API."""

    def __init__(
        self,
        api_url: str,
        page_size: int = 100,
        timeout: float = 20.0,
        max_tries: int = 3,
    ):
        self.api_url = api_url
        self.page_size = page_size
        self.timeout = timeout
        self.max_tries = max_tries

    @classmethod
    def from_settings(cls, settings: MonitorSettings) -> "MorphoApiPositionIndex":
        return cls(
            api_url=settings.morpho_api_url,
            page_size=settings.positions_page_size,
            timeout=settings.fetch_timeout_seconds,
            max_tries=settings.request_max_tries,
        )

    @property
    def source_name(self) -> str:
        return "morpho_api"

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.max_tries,
            giveup=_is_permanent_http_error,
            jitter=backoff.full_jitter,
        )
        async def _send() -> dict[str, Any]:
            response = await asyncio.to_thread(
                requests.post,
                self.api_url,
                json=payload,
                headers={"content-type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()

        return await _send()

    async def query_positions(
        self, account: str, chain_ids: list[int]
    ) -> list[PositionData]:
        payload = {
            "query": VAULT_POSITIONS_QUERY,
            "variables": {
                "users": [account],
                "chainIds": list(chain_ids),
                "first": self.page_size,
            },
        }
        logger.debug("Querying positions for %s on chains %s", account, chain_ids)

        try:
            body = await self._post(payload)
        except requests.exceptions.RequestException as e:
            raise IndexQueryError(f"Position index request failed: {e}") from e

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            first = errors[0]
            message = first.get("message") if isinstance(first, dict) else first
            raise IndexQueryError(str(message))

        try:
            items = body["data"]["vaultPositions"]["items"]
            default_chain_id = chain_ids[0] if len(chain_ids) == 1 else None
            return [self._parse_position(item, default_chain_id) for item in items]
        except (KeyError, TypeError, IndexError) as e:
            raise IndexQueryError(f"Unexpected position index response: {e}") from e

    @staticmethod
    def _parse_position(item: dict[str, Any], default_chain_id: int | None) -> PositionData:
        vault = item["vault"]
        asset = vault["asset"]
        state = vault["state"] or {}

        chain = vault.get("chain") or {}
        chain_id = chain.get("id", default_chain_id)
        if chain_id is None:
            raise IndexQueryError(f"Position for {vault['address']} has no chain id")

        return PositionData(
            chain_id=int(chain_id),
            vault_address=vault["address"],
            vault_name=vault.get("name") or "",
            vault_symbol=vault.get("symbol") or "",
            asset_address=asset.get("address") or "",
            asset_symbol=asset.get("symbol") or "",
            asset_decimals=_to_int(asset["decimals"], "decimals"),
            total_assets_raw=_to_int(state.get("totalAssets", 0), "totalAssets"),
            total_supply_raw=_to_int(state.get("totalSupply", 0), "totalSupply"),
            user_shares_raw=_to_int(item.get("shares", 0), "shares"),
        )
