"""Custom exception hierarchy for the EC2 provider extension."""


class ProviderError(Exception):
    """Base exception for all provider errors."""


class ConfigError(ProviderError):
    """Invalid or missing configuration."""


class ValidationError(ProviderError):
    """An action parameter is missing or has the wrong type."""


class ActionNotFoundError(ProviderError):
    """The requested action is not part of the catalog."""

    def __init__(self, action: str):
        super().__init__(f"Action '{action}' not found")
        self.action = action


class NotFoundError(ProviderError):
    """The requested cloud resource does not exist."""


class CloudAPIError(ProviderError):
    """Error returned by the EC2 API or the SDK transport."""

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code
