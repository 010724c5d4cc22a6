"""Dependency injection singletons for SafeTour."""

from safetour.common.config import get_settings
from safetour.common.database import DatabaseManager
from safetour.auth.tokens import TokenService
from safetour.identity.service import IdentityService
from safetour.alerts.service import AlertService
from safetour.audit.service import AuditService
from safetour.issuance.chain import (
    ChainClient,
    UnconfiguredChainClient,
    Web3ChainClient,
    load_abi,
)
from safetour.issuance.service import IssuanceService

_db: DatabaseManager | None = None
_tokens: TokenService | None = None
_identities: IdentityService | None = None
_alerts: AlertService | None = None
_audit: AuditService | None = None
_chain: ChainClient | None = None
_issuance: IssuanceService | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_token_service() -> TokenService:
    global _tokens
    if _tokens is None:
        settings = get_settings()
        _tokens = TokenService(settings.token_secret, settings.token_ttl)
    return _tokens


def get_identity_service() -> IdentityService:
    global _identities
    if _identities is None:
        _identities = IdentityService(get_settings())
    return _identities


def get_audit_service() -> AuditService:
    global _audit
    if _audit is None:
        _audit = AuditService(get_settings())
    return _audit


def get_alert_service() -> AlertService:
    global _alerts
    if _alerts is None:
        _alerts = AlertService(get_settings(), audit_service=get_audit_service())
    return _alerts


def get_chain_client() -> ChainClient:
    global _chain
    if _chain is None:
        settings = get_settings()
        if settings.chain_rpc_url:
            _chain = Web3ChainClient(
                settings.chain_rpc_url,
                settings.chain_contract_address,
                settings.chain_private_key,
                abi=load_abi(settings.chain_abi_path),
            )
        else:
            _chain = UnconfiguredChainClient()
    return _chain


def set_chain_client(client: ChainClient) -> None:
    """Replace the chain client (tests, alternative transports)."""
    global _chain, _issuance
    _chain = client
    _issuance = None


def get_issuance_service() -> IssuanceService:
    global _issuance
    if _issuance is None:
        _issuance = IssuanceService(
            get_settings(), get_chain_client(),
            audit_service=get_audit_service(),
        )
    return _issuance


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _tokens, _identities, _alerts, _audit, _chain, _issuance
    _db = None
    _tokens = None
    _identities = None
    _alerts = None
    _audit = None
    _chain = None
    _issuance = None
