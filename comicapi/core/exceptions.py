from typing import Any, Optional

from fastapi import HTTPException, status

from comicapi.schemas.base import envelope


class BaseAPIException(HTTPException):
    """Base exception for API errors

    detail 에는 항상 응답 envelope 가 담긴다.
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        data: Optional[Any] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.data = data

        super().__init__(
            status_code=status_code,
            detail=envelope(status_code, message, data),
        )

    def __str__(self) -> str:
        return self.message


class AuthenticationError(BaseAPIException):
    """Authentication related errors"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
        )


class AuthorizationError(BaseAPIException):
    """Authorization related errors"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTH_002",
            message=message,
        )


class PurchaseRequiredError(AuthorizationError):
    def __init__(self, message: str = "Purchase required"):
        super().__init__(message=message)
        self.error_code = "PURCHASE_001"


class NotFoundError(BaseAPIException):
    """Resource not found errors"""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
        )


class ConflictError(BaseAPIException):
    """Resource conflict errors"""

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT_001",
            message=message,
        )


class BusinessLogicError(BaseAPIException):
    """Business logic errors"""

    def __init__(self, message: str, error_code: str = "BUSINESS_001"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            message=message,
        )


class InvalidCodeError(BusinessLogicError):
    """일회용 코드가 없거나 만료/사용됨 - 호출자에게는 구분하지 않음"""

    def __init__(self, message: str = "Invalid code"):
        super().__init__(message=message, error_code="CODE_001")


class InsufficientBalanceError(BusinessLogicError):
    """Insufficient balance errors"""

    def __init__(self, message: str = "Insufficient balance"):
        super().__init__(message=message, error_code="BALANCE_001")


class InternalServerError(BaseAPIException):
    """Internal server errors"""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
        )
