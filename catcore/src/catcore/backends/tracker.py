"""
HTTP backend combining a CAT token tracker with a mempool-style explorer API.

Tracker responses are wrapped in ``{"code": 0, "msg": "OK", "data": ...}``.
The explorer serves plain outputs and accepts raw transactions for broadcast.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from catcore.address import address_to_script
from catcore.backends.base import LedgerBackend
from catcore.errors import NetworkError, ValidationError
from catcore.models import MinterInstance, MinterState, Output, TokenMetadata, TokenOutput

DEFAULT_TIMEOUT = 30.0

# Page size used when listing token outputs
TOKEN_UTXO_PAGE = 100


class TrackerBackend(LedgerBackend):
    def __init__(
        self,
        tracker_url: str,
        mempool_api_url: str,
        network: str = "mainnet",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.tracker_url = tracker_url.rstrip("/")
        self.mempool_api_url = mempool_api_url.rstrip("/")
        self.network = network
        self.client = httpx.AsyncClient(timeout=timeout)

    async def _tracker_call(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.tracker_url}/{endpoint}"
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Tracker call failed: {endpoint} - {e}")
            raise NetworkError(f"Tracker call failed: {endpoint}: {e}") from e

        if body.get("code", 0) != 0:
            raise NetworkError(f"Tracker error {body.get('code')}: {body.get('msg')}")
        return body.get("data")

    async def get_utxos(self, address: str) -> list[Output]:
        try:
            script = address_to_script(address, self.network)
        except (ValueError, KeyError) as e:
            raise ValidationError(
                f"Wallet address does not decode on {self.network}: {address}"
            ) from e

        url = f"{self.mempool_api_url}/address/{address}/utxo"
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            entries = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch UTXOs for {address}: {e}")
            raise NetworkError(f"Failed to fetch UTXOs: {e}") from e

        utxos = [
            Output(txid=entry["txid"], vout=entry["vout"], script=script, value=entry["value"])
            for entry in entries
        ]
        logger.debug(f"Found {len(utxos)} UTXOs for {address}")
        return utxos

    async def get_token_outputs(
        self, metadata: TokenMetadata, address: str
    ) -> list[TokenOutput] | None:
        outputs: list[TokenOutput] = []
        offset = 0

        while True:
            data = await self._tracker_call(
                f"api/tokens/{metadata.token_id}/addresses/{address}/utxos",
                params={"offset": offset, "limit": TOKEN_UTXO_PAGE},
            )
            page = (data or {}).get("utxos", [])
            for entry in page:
                utxo = entry["utxo"]
                state = entry.get("state", {})
                outputs.append(
                    TokenOutput(
                        txid=utxo["txId"],
                        vout=utxo["outputIndex"],
                        script=utxo["script"],
                        value=int(utxo["satoshis"]),
                        token_id=metadata.token_id,
                        owner_address=state.get("address", address),
                        amount=int(state["amount"]),
                    )
                )
            if len(page) < TOKEN_UTXO_PAGE:
                break
            offset += TOKEN_UTXO_PAGE

        if not outputs:
            return None

        logger.debug(f"Found {len(outputs)} [{metadata.symbol}] token outputs for {address}")
        return outputs

    async def get_minter_count(self, token_id: str) -> int:
        data = await self._tracker_call(f"api/minters/{token_id}/utxoCount")
        return int((data or {}).get("count", 0))

    async def get_minter(self, metadata: TokenMetadata, offset: int) -> MinterInstance | None:
        data = await self._tracker_call(
            f"api/minters/{metadata.token_id}/utxos", params={"offset": offset, "limit": 1}
        )
        page = (data or {}).get("utxos", [])
        if not page:
            return None

        entry = page[0]
        utxo = entry["utxo"]
        raw_state = entry.get("state") or {}
        state = MinterState(
            is_premined=bool(raw_state.get("isPremined", False)),
            remaining_supply=_optional_int(raw_state.get("remainingSupply")),
            remaining_count=_optional_int(raw_state.get("remainingCount")),
            token_script=raw_state.get("tokenScript", ""),
        )
        output = Output(
            txid=utxo["txId"],
            vout=utxo["outputIndex"],
            script=utxo["script"],
            value=int(utxo["satoshis"]),
        )
        return MinterInstance(output=output, state=state)

    async def get_token_metadata(self, token_id: str) -> TokenMetadata | None:
        try:
            data = await self._tracker_call(f"api/tokens/{token_id}")
        except NetworkError as e:
            cause = e.__cause__
            if isinstance(cause, httpx.HTTPStatusError) and cause.response.status_code == 404:
                return None
            raise

        if not data:
            return None

        try:
            return TokenMetadata.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Tracker returned malformed metadata for {token_id}: {e}")
            return None

    async def broadcast_transaction(self, raw: str) -> str:
        try:
            response = await self.client.post(f"{self.mempool_api_url}/tx", content=raw)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            reason = e.response.text
            logger.error(f"Broadcast rejected: {reason}")
            raise NetworkError(f"Broadcast rejected: {reason}") from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to broadcast transaction: {e}")
            raise NetworkError(f"Broadcast failed: {e}") from e

        txid = response.text.strip()
        logger.info(f"Broadcast transaction: {txid}")
        return txid

    async def close(self) -> None:
        await self.client.aclose()


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)
