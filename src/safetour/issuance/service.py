"""Identity issuance forwarder: validate, hash, forward, record a receipt."""

import asyncio
import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from web3 import Web3

from safetour.auth.guard import ISSUERS, authorize
from safetour.auth.tokens import Claims
from safetour.common.config import SafeTourSettings
from safetour.common.exceptions import (
    ChainError,
    ForbiddenError,
    StoreError,
    ValidationError,
)
from safetour.common.models import generate_uuid
from safetour.common.wallet import normalize_wallet_address
from safetour.issuance.chain import ChainClient
from safetour.issuance.models import IssuanceReceiptModel

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400


def compute_kyc_hash(kyc_data: dict[str, Any]) -> str:
    """Keccak-256 of the canonical JSON of the KYC fields, 0x-prefixed hex.

    Key order and whitespace in the input do not change the hash.
    """
    canonical = json.dumps(
        kyc_data, sort_keys=True, separators=(",", ":"), ensure_ascii=False,
    )
    return Web3.to_hex(Web3.keccak(text=canonical))


class IssuanceService:
    """Forwards admin-authorized issuance requests to the chain client.

    One request is exactly one chain call. Nothing is retried or
    deduplicated here.
    """

    def __init__(
        self,
        settings: SafeTourSettings,
        chain_client: ChainClient,
        audit_service=None,
    ):
        self.settings = settings
        self.chain_client = chain_client
        self.audit_service = audit_service

    async def request_issuance(
        self,
        session: AsyncSession,
        admin: Claims,
        tourist_address: str,
        kyc_data: dict[str, Any],
        itinerary_hash: str,
        emergency_contact: str,
        duration_days: int,
    ) -> IssuanceReceiptModel:
        decision = authorize(admin, ISSUERS)
        if not decision.authorized:
            raise ForbiddenError(decision.reason)

        wallet = normalize_wallet_address(tourist_address, field="tourist address")
        if isinstance(duration_days, bool) or not isinstance(duration_days, int):
            raise ValidationError("durationDays must be an integer")
        if duration_days <= 0:
            raise ValidationError("durationDays must be greater than 0")
        if not isinstance(kyc_data, dict) or not kyc_data:
            raise ValidationError("kycData is required")
        if not isinstance(itinerary_hash, str) or not itinerary_hash.strip():
            raise ValidationError("itineraryHash is required")
        if not isinstance(emergency_contact, str) or not emergency_contact.strip():
            raise ValidationError("emergencyContact is required")

        kyc_hash = compute_kyc_hash(kyc_data)
        duration_seconds = duration_days * SECONDS_PER_DAY
        request_id = generate_uuid()

        logger.info(
            "Issuance %s: forwarding for %s (kyc hash %s)", request_id, wallet, kyc_hash,
        )
        tx_ref = await self._call_chain(
            request_id,
            self.chain_client.issue_identity(
                wallet, kyc_hash, itinerary_hash.strip(),
                emergency_contact.strip(), duration_seconds,
            ),
        )

        chain_tx_ref = str(tx_ref)
        receipt = IssuanceReceiptModel(
            id=request_id,
            chain_tx_ref=chain_tx_ref,
            tourist_address=wallet,
            kyc_hash=kyc_hash,
            itinerary_hash=itinerary_hash.strip(),
            duration_seconds=duration_seconds,
            requested_by=admin.identity_id,
        )
        # The transaction is already submitted; failed writes keep its ids
        try:
            session.add(receipt)
            await session.flush()

            if self.audit_service:
                await self.audit_service.record_event(
                    session, request_id, "identity.issued", admin.identity_id,
                    {
                        "chain_tx_ref": chain_tx_ref,
                        "tourist_address": wallet,
                        "kyc_hash": kyc_hash,
                        "duration_seconds": duration_seconds,
                    },
                )
            await session.commit()
        except SQLAlchemyError as exc:
            logger.error(
                "Issuance %s: chain tx %s was submitted but the receipt was not stored: %s",
                request_id, chain_tx_ref, exc,
            )
            raise StoreError(
                "Identity was submitted to the chain but its receipt could not be stored",
                request_id=request_id,
                chain_tx_ref=chain_tx_ref,
            ) from exc
        logger.info("Issuance %s: chain tx %s", request_id, chain_tx_ref)
        return receipt

    async def lookup_identity(self, admin: Claims, tourist_id: int) -> dict[str, Any]:
        decision = authorize(admin, ISSUERS)
        if not decision.authorized:
            raise ForbiddenError(decision.reason)
        if isinstance(tourist_id, bool) or not isinstance(tourist_id, int) or tourist_id < 0:
            raise ValidationError("touristId must be a non-negative integer")
        return await self._call_chain(
            None, self.chain_client.get_identity_info(tourist_id),
        )

    async def _call_chain(self, request_id: str | None, call) -> Any:
        """Await one chain call under the configured timeout.

        A timeout abandons the wait only: the transaction may still land.
        """
        timeout = self.settings.chain_timeout
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Chain call %s timed out after %ss", request_id, timeout)
            raise ChainError(
                f"Chain client did not answer within {timeout}s; "
                "the transaction may still be processed",
                reason="timeout",
                request_id=request_id,
            ) from exc
        except Exception as exc:
            # The chain client is opaque; every failure it raises is a ChainError
            logger.warning("Chain call %s failed: %s", request_id, exc)
            raise ChainError(
                str(exc) or exc.__class__.__name__,
                request_id=request_id,
            ) from exc
