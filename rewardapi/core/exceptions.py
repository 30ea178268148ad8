from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": error_code,
                    "message": message,
                    "details": self.details
                }
            }
        )

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message


class AuthenticationError(BaseAPIException):
    """Authentication related errors"""
    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details
        )


class AuthorizationError(BaseAPIException):
    """Authorization related errors"""
    def __init__(self, message: str = "Access forbidden", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTH_002",
            message=message,
            details=details
        )


class ValidationError(BaseAPIException):
    """Validation errors"""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_001",
            message=message,
            details=details
        )


class BusinessLogicError(BaseAPIException):
    """Business logic errors"""
    def __init__(self, error_code: str, message: str, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            message=message,
            details=details
        )


class NotFoundError(BaseAPIException):
    """Resource not found errors"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
            details=details
        )


class ConflictError(BaseAPIException):
    """Resource conflict errors"""
    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[Dict] = None,
        error_code: str = "CONFLICT_001",
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code=error_code,
            message=message,
            details=details
        )


class InternalServerError(BaseAPIException):
    """Internal server errors"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details
        )


# ---------------------------------------------------------------------------
# Ledger errors
# ---------------------------------------------------------------------------


class AlreadyClaimedError(ConflictError):
    """Same-day duplicate claim"""
    def __init__(self, message: str = "Reward already claimed today", details: Optional[Dict] = None):
        super().__init__(message=message, details=details, error_code="LEDGER_ALREADY_CLAIMED")


class AlreadyOwnedError(ConflictError):
    """Duplicate reward purchase"""
    def __init__(self, message: str = "Reward already owned", details: Optional[Dict] = None):
        super().__init__(message=message, details=details, error_code="LEDGER_ALREADY_OWNED")


class InvalidStatusTransitionError(ConflictError):
    """Withdrawal request is no longer pending"""
    def __init__(self, message: str = "Invalid status transition", details: Optional[Dict] = None):
        super().__init__(message=message, details=details, error_code="WITHDRAWAL_STATUS")


class NotEligibleError(BusinessLogicError):
    """Completion condition not met"""
    def __init__(self, message: str = "Task completion condition not met", details: Optional[Dict] = None):
        super().__init__(error_code="LEDGER_NOT_ELIGIBLE", message=message, details=details)


class InsufficientCoinsError(BusinessLogicError):
    def __init__(self, message: str = "Insufficient coins", details: Optional[Dict] = None):
        super().__init__(error_code="COINS_001", message=message, details=details)


class InsufficientBalanceError(BusinessLogicError):
    """Insufficient balance errors"""
    def __init__(self, message: str = "Insufficient balance", details: Optional[Dict] = None):
        super().__init__(error_code="BALANCE_001", message=message, details=details)


class BelowMinimumError(BusinessLogicError):
    def __init__(self, message: str = "Amount is below the minimum", details: Optional[Dict] = None):
        super().__init__(error_code="LEDGER_BELOW_MINIMUM", message=message, details=details)
