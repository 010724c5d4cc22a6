"""Chain client: the only code that talks to the identity contract.

``IssuanceService`` depends on the ``ChainClient`` protocol alone, so tests
inject a fake and production wires ``Web3ChainClient``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

logger = logging.getLogger(__name__)

# Fallback ABI fragment for the two contract calls used here. A full ABI
# exported by the contract build (``{"abi": [...]}`` or a bare list) can be
# supplied with SAFETOUR_CHAIN_ABI_PATH.
TOURIST_ID_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "issueTouristId",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "touristWallet", "type": "address"},
            {"name": "kycHash", "type": "string"},
            {"name": "itineraryHash", "type": "string"},
            {"name": "emergencyContact", "type": "string"},
            {"name": "validityDuration", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "getTouristInfo",
        "stateMutability": "view",
        "inputs": [{"name": "touristId", "type": "uint256"}],
        "outputs": [
            {"name": "wallet", "type": "address"},
            {"name": "kycHash", "type": "string"},
            {"name": "itineraryHash", "type": "string"},
            {"name": "emergencyContact", "type": "string"},
            {"name": "validUntil", "type": "uint256"},
            {"name": "isActive", "type": "bool"},
        ],
    },
]


class ChainClientError(Exception):
    """Raised by a chain client when a call fails at any step."""


class ChainClient(Protocol):
    async def issue_identity(
        self,
        wallet_address: str,
        kyc_hash: str,
        itinerary_hash: str,
        emergency_contact: str,
        duration_seconds: int,
    ) -> str:
        """Submit an issuance transaction and return its transaction reference."""
        ...

    async def get_identity_info(self, tourist_id: int) -> dict[str, Any]:
        ...


def load_abi(path: str | None) -> list[dict[str, Any]]:
    if not path:
        return TOURIST_ID_ABI
    raw = json.loads(Path(path).read_text())
    return raw["abi"] if isinstance(raw, dict) else raw


class UnconfiguredChainClient:
    """Stand-in used when no RPC endpoint is configured; every call fails."""

    async def issue_identity(self, *args: Any, **kwargs: Any) -> str:
        raise ChainClientError("Chain client is not configured (set SAFETOUR_CHAIN_RPC_URL)")

    async def get_identity_info(self, tourist_id: int) -> dict[str, Any]:
        raise ChainClientError("Chain client is not configured (set SAFETOUR_CHAIN_RPC_URL)")


class Web3ChainClient:
    """Signs and submits contract calls from the backend wallet."""

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        private_key: str,
        abi: list[dict[str, Any]] | None = None,
    ):
        self._w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        self._abi = abi or TOURIST_ID_ABI
        self._contract = self._w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=self._abi,
        )
        self._account = self._w3.eth.account.from_key(private_key)
        logger.info("Chain client initialized, admin address %s", self._account.address)

    async def issue_identity(
        self,
        wallet_address: str,
        kyc_hash: str,
        itinerary_hash: str,
        emergency_contact: str,
        duration_seconds: int,
    ) -> str:
        sender = self._account.address
        call = self._contract.functions.issueTouristId(
            Web3.to_checksum_address(wallet_address),
            kyc_hash,
            itinerary_hash,
            emergency_contact,
            duration_seconds,
        )
        gas = await call.estimate_gas({"from": sender})
        tx = await call.build_transaction({
            "from": sender,
            "gas": gas,
            "nonce": await self._w3.eth.get_transaction_count(sender, "pending"),
            "chainId": await self._w3.eth.chain_id,
        })
        signed = self._account.sign_transaction(tx)
        tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        receipt = await self._w3.eth.wait_for_transaction_receipt(tx_hash)
        tx_ref = Web3.to_hex(tx_hash)
        if receipt["status"] != 1:
            raise ChainClientError(f"Transaction {tx_ref} reverted")
        return tx_ref

    async def get_identity_info(self, tourist_id: int) -> dict[str, Any]:
        result = await self._contract.functions.getTouristInfo(tourist_id).call()
        outputs = next(
            item["outputs"] for item in self._abi
            if item.get("type") == "function" and item.get("name") == "getTouristInfo"
        )
        names = [o["name"] or f"field{i}" for i, o in enumerate(outputs)]
        values = result if isinstance(result, (list, tuple)) else [result]
        return {name: _jsonable(value) for name, value in zip(names, values)}


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
