"""
Error kinds raised by the request pipeline.

Validation errors never reach the backend. `BackendError` wraps any SDK or
transport failure. Anything else is reported as `InternalError` by the
assembler.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    MISSING_INPUT = "MissingInput"
    MISSING_CREDENTIAL = "MissingCredential"
    INVALID_TEMPERATURE = "InvalidTemperature"
    INVALID_MESSAGE_SHAPE = "InvalidMessageShape"
    BACKEND_ERROR = "BackendError"
    INTERNAL_ERROR = "InternalError"


class ChatProxyError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL_ERROR


class InvalidRequestError(ChatProxyError):
    """Base for every validation-time rejection."""


class MissingInputError(InvalidRequestError):
    kind = ErrorKind.MISSING_INPUT

    def __init__(self) -> None:
        super().__init__("Missing required parameter: input or messageList")


class MissingCredentialError(InvalidRequestError):
    kind = ErrorKind.MISSING_CREDENTIAL

    def __init__(self) -> None:
        super().__init__("Missing required parameter: apikey")


class InvalidTemperatureError(InvalidRequestError):
    kind = ErrorKind.INVALID_TEMPERATURE

    def __init__(self) -> None:
        super().__init__("Temperature must be between 0 and 2")


class InvalidMessageShapeError(InvalidRequestError):
    kind = ErrorKind.INVALID_MESSAGE_SHAPE

    def __init__(self, message: str) -> None:
        super().__init__(message)


class BackendError(ChatProxyError):
    kind = ErrorKind.BACKEND_ERROR

    def __init__(self, detail: str, model: Optional[str] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.model = model
