"""Error codes and exceptions for the engine and its host."""
from enum import Enum

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes raised by commands and construction."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_STAKE = "INVALID_STAKE"
    INVALID_STAKE_ADJUSTMENT = "INVALID_STAKE_ADJUSTMENT"
    THEME_LOCKED = "THEME_LOCKED"
    INSUFFICIENT_ENERGY = "INSUFFICIENT_ENERGY"
    INSUFFICIENT_CURRENCY = "INSUFFICIENT_CURRENCY"
    SPIN_IN_PROGRESS = "SPIN_IN_PROGRESS"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INVALID_STAKE: 400,
    ErrorCode.INVALID_STAKE_ADJUSTMENT: 400,
    ErrorCode.THEME_LOCKED: 403,
    ErrorCode.INSUFFICIENT_ENERGY: 402,
    ErrorCode.INSUFFICIENT_CURRENCY: 402,
    ErrorCode.SPIN_IN_PROGRESS: 409,
    ErrorCode.INVALID_CONFIGURATION: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Recoverable: the same command may succeed later without changing it
ERROR_RECOVERABLE: dict[ErrorCode, bool] = {
    ErrorCode.INVALID_REQUEST: False,
    ErrorCode.INVALID_STAKE: False,
    ErrorCode.INVALID_STAKE_ADJUSTMENT: False,
    ErrorCode.THEME_LOCKED: True,
    ErrorCode.INSUFFICIENT_ENERGY: True,
    ErrorCode.INSUFFICIENT_CURRENCY: True,
    ErrorCode.SPIN_IN_PROGRESS: True,
    ErrorCode.INVALID_CONFIGURATION: False,
    ErrorCode.INTERNAL_ERROR: True,
}


class ErrorBody(BaseModel):
    """Error body shape."""

    code: str
    message: str
    recoverable: bool


class ErrorResponse(BaseModel):
    """Full error response."""

    error: ErrorBody


class GameError(Exception):
    """Base engine error that maps to an error response."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.message = message or f"Error: {code.value}"
        self.status_code = ERROR_HTTP_STATUS[code]
        self.recoverable = ERROR_RECOVERABLE[code]
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        """Convert to JSONResponse."""
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(
                error=ErrorBody(
                    code=self.code.value,
                    message=self.message,
                    recoverable=self.recoverable,
                )
            ).model_dump(),
        )


class ConfigurationError(GameError):
    """Programmer error in catalog, lines or settings, raised at construction."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.INVALID_CONFIGURATION, message)
