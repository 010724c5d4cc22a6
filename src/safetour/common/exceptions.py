"""SafeTour exception hierarchy.

Each class carries the HTTP status the application handlers render it with.
"""


class SafeTourError(Exception):
    """Base exception for all SafeTour errors."""

    status_code = 500

    def __init__(self, message: str = "", code: str = "SAFETOUR_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(SafeTourError):
    """Raised when input is malformed or out of range."""

    status_code = 400

    def __init__(self, message: str = "Invalid input", code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class InvalidLocationError(ValidationError):
    """Raised when alert coordinates fall outside the valid ranges."""

    def __init__(self, message: str = "Invalid location"):
        super().__init__(message, code="INVALID_LOCATION")


class UnauthenticatedError(SafeTourError):
    """Raised when a token is missing, malformed, forged or expired."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHENTICATED")


class ForbiddenError(SafeTourError):
    """Raised when a valid identity lacks the role an operation requires."""

    status_code = 403

    def __init__(self, message: str = "Insufficient role"):
        super().__init__(message, code="FORBIDDEN")


class NotFoundError(SafeTourError):
    """Raised when a record cannot be found in the store."""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class ConflictError(SafeTourError):
    """Raised when a registration reuses an existing email."""

    status_code = 409

    def __init__(self, message: str = "Already exists"):
        super().__init__(message, code="CONFLICT")


class ChainError(SafeTourError):
    """Raised when the chain client fails or does not answer in time.

    A timeout does not mean the transaction failed; it may still be mined.
    """

    status_code = 502

    def __init__(
        self,
        message: str = "Chain client error",
        reason: str = "failure",
        request_id: str | None = None,
    ):
        self.reason = reason
        self.request_id = request_id
        super().__init__(message, code="CHAIN_ERROR")


class StoreError(SafeTourError):
    """Raised when a record cannot be written after a chain call went out.

    The ids let an operator match the submitted transaction to the request.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Store failure",
        request_id: str | None = None,
        chain_tx_ref: str | None = None,
    ):
        self.request_id = request_id
        self.chain_tx_ref = chain_tx_ref
        super().__init__(message, code="STORE_ERROR")
