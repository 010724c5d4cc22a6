"""Tests for the chain client adapters and wallet normalization."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from safetour.common.exceptions import ValidationError
from safetour.common.wallet import normalize_wallet_address
from safetour.issuance.chain import (
    TOURIST_ID_ABI,
    ChainClientError,
    UnconfiguredChainClient,
    Web3ChainClient,
    load_abi,
)


WALLET = "0x52908400098527886E0F7030069857D2E4169EE7"
CONTRACT = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
PRIVATE_KEY = "0x" + "11" * 32


class TestWallet:
    def test_lowercase_checksummed(self):
        assert normalize_wallet_address(WALLET.lower()) == WALLET

    def test_whitespace_trimmed(self):
        assert normalize_wallet_address(f"  {WALLET} ") == WALLET

    @pytest.mark.parametrize("value", ["", "0x1234", "52908400098527886E0F7030069857D2E4169EE", None, 42])
    def test_malformed(self, value):
        with pytest.raises(ValidationError):
            normalize_wallet_address(value)

    def test_bad_checksum(self):
        bad = WALLET[:-1] + "e"
        with pytest.raises(ValidationError):
            normalize_wallet_address(bad)


class TestLoadAbi:
    def test_default(self):
        assert load_abi("") is TOURIST_ID_ABI

    def test_hardhat_artifact(self, tmp_path):
        path = tmp_path / "TouristId.json"
        path.write_text(json.dumps({"abi": [{"type": "function", "name": "x"}]}))
        assert load_abi(str(path)) == [{"type": "function", "name": "x"}]

    def test_bare_list(self, tmp_path):
        path = tmp_path / "abi.json"
        path.write_text(json.dumps([{"type": "event", "name": "Issued"}]))
        assert load_abi(str(path))[0]["name"] == "Issued"


class TestUnconfigured:
    async def test_issue_fails(self):
        with pytest.raises(ChainClientError):
            await UnconfiguredChainClient().issue_identity(WALLET, "0x", "0x", "", 1)

    async def test_lookup_fails(self):
        with pytest.raises(ChainClientError):
            await UnconfiguredChainClient().get_identity_info(1)


class TestWeb3ChainClient:
    def _client(self):
        return Web3ChainClient("http://127.0.0.1:8545", CONTRACT.lower(), PRIVATE_KEY)

    def test_backend_account_derived_from_key(self):
        client = self._client()
        assert client._account.address.startswith("0x")
        assert len(client._account.address) == 42

    async def test_identity_info_named_by_abi_outputs(self):
        client = self._client()
        row = (WALLET, "0xkyc", "0xitin", "+91", 1_800_000_000, True)
        bound = MagicMock()
        bound.call = AsyncMock(return_value=row)
        client._contract = MagicMock()
        client._contract.functions.getTouristInfo.return_value = bound

        info = await client.get_identity_info(7)

        client._contract.functions.getTouristInfo.assert_called_once_with(7)
        assert info["wallet"] == WALLET
        assert info["validUntil"] == 1_800_000_000
        assert info["isActive"] is True
