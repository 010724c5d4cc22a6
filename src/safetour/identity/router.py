"""Registration and login API router."""

from fastapi import APIRouter

from safetour.identity.schemas import (
    AuthResponse,
    IdentitySummary,
    LoginRequest,
    RegisterRequest,
)

router = APIRouter()


def _get_service():
    from safetour.deps import get_identity_service
    return get_identity_service()


def _get_tokens():
    from safetour.deps import get_token_service
    return get_token_service()


def _get_db():
    from safetour.deps import get_db
    return get_db()


def _auth_response(identity) -> AuthResponse:
    return AuthResponse(
        token=_get_tokens().issue(identity),
        identity=IdentitySummary.model_validate(identity),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        identity = await svc.register(
            session,
            email=body.email,
            password=body.password,
            wallet_address=body.wallet_address,
            name=body.name,
            emergency_contact=body.emergency_contact,
        )
        return _auth_response(identity)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        identity = await svc.authenticate(session, body.email, body.password)
        return _auth_response(identity)
