"""Error types and the shared error-handling channel."""

import logging
from enum import Enum
from functools import partial
from typing import Any

logger = logging.getLogger(__name__)


class ErrorType(str, Enum):
    """Categories used to pick a user-facing message and a log prefix."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NETWORK = "network"
    SERVER = "server"
    DATABASE = "database"
    STORAGE = "storage"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class HopeCareError(Exception):
    """Base class for errors raised inside HopeCare."""


class ConfigError(HopeCareError):
    """Missing or invalid configuration value."""


class InvalidDataUrlError(HopeCareError, ValueError):
    """A data URL that cannot be decoded."""


class StorageError(HopeCareError):
    """Storage operation error."""

    def __init__(self, message: str, code: str = "storage-error"):
        super().__init__(message)
        self.message = message
        self.code = code


class StorageNotFoundError(StorageError):
    """The object at a storage path does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Object not found: {path}", code="object-not-found")
        self.path = path


USER_MESSAGES: dict[ErrorType, str] = {
    ErrorType.AUTHENTICATION: "Authentication failed. Please sign in again",
    ErrorType.AUTHORIZATION: "You do not have permission to perform this action",
    ErrorType.NETWORK: "Network error. Please check your connection and try again",
    ErrorType.SERVER: "Server error. Please try again later",
    ErrorType.DATABASE: "Database operation failed. Please try again",
    ErrorType.STORAGE: "Storage operation failed. Please try again",
    ErrorType.CONFIGURATION: "The application is misconfigured. Please contact an administrator",
}


def error_message(error: Any) -> str:
    """Best-effort readable message for an exception, string or SDK error payload."""
    if isinstance(error, str):
        return error
    if isinstance(error, StorageError):
        return error.message
    if isinstance(error, BaseException):
        return str(error) or error.__class__.__name__
    if isinstance(error, dict) and "message" in error:
        return str(error["message"])
    message = getattr(error, "message", None)
    if message:
        return str(message)
    return "An unknown error occurred"


def get_user_friendly_message(error_type: ErrorType, original_message: str = "") -> str:
    if error_type == ErrorType.VALIDATION:
        return original_message or "Please check your input and try again"
    return USER_MESSAGES.get(error_type, "An unexpected error occurred. Please try again")


def handle_error(
    error: Any,
    error_type: ErrorType = ErrorType.UNKNOWN,
    context: str = "application",
    user_message: str | None = None,
) -> str:
    """
    Log an error consistently and return the message to show a user.
    Never raises; callers decide what to do with the returned message.
    """
    message = error_message(error)
    logger.error("[%s][%s] %s", error_type.value.upper(), context, message)
    return user_message or get_user_friendly_message(error_type, message)


handle_storage_error = partial(handle_error, error_type=ErrorType.STORAGE)
handle_config_error = partial(handle_error, error_type=ErrorType.CONFIGURATION)
