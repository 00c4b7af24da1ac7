"""Relay exceptions with HTTP status codes and JSON renderings."""

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"message": str(self), "status": "error"}


class ValidationError(AppError):
    """Raised when an inbound payload cannot be parsed."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status_code=422)


class ConfigurationError(AppError):
    """Raised when the relay is missing or given unusable configuration."""

    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message, status_code=500)


class ConfigFetchError(ConfigurationError):
    """The secrets store is unreachable or the secret does not exist."""


class ConfigParseError(ConfigurationError):
    """The secret body is not a JSON object."""


class DispatchOperationError(ConfigurationError):
    """Raised for a chat operation name outside the supported set."""

    def __init__(self, operation: str):
        super().__init__(f"Unknown chat operation: {operation}")
        self.operation = operation


class PublishError(AppError):
    """SNS rejected the message or could not be reached."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message, status_code=400)
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["code"] = self.code
        return body


class ChatAPIError(AppError):
    """A Slack Web API call failed for one delivered message."""

    def __init__(self, operation: str, error: str):
        super().__init__(f"slack.chat.{operation} failed: {error}", status_code=502)
        self.operation = operation
        self.error = error
