"""SafeTour: tourist authentication, panic alerts and identity issuance."""

from safetour.auth.guard import ALERT_RESPONDERS, ISSUERS, AccessDecision, Role, authorize
from safetour.auth.tokens import Claims, TokenService, TokenVerification
from safetour.issuance.service import compute_kyc_hash

__all__ = [
    "ALERT_RESPONDERS",
    "ISSUERS",
    "AccessDecision",
    "Claims",
    "Role",
    "TokenService",
    "TokenVerification",
    "authorize",
    "compute_kyc_hash",
]
__version__ = "0.1.0"
