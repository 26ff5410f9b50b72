# pillhub/core/errors.py
"""
Error taxonomy shared by every handler. Each error carries the HTTP status
the API layer renders it with; the message is safe to return to the caller.
"""


class PillHubError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PillHubError):
    status_code = 400


class InvalidCredentials(PillHubError):
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class Unauthorized(PillHubError):
    status_code = 401


class DeviceNotFound(PillHubError):
    status_code = 404

    def __init__(self, message: str = "Device not found"):
        super().__init__(message)


class CommandNotFound(PillHubError):
    status_code = 404

    def __init__(self, message: str = "Command not found"):
        super().__init__(message)


class StoreError(PillHubError):
    status_code = 500


class CollaboratorError(PillHubError):
    """Push-dispatch service unreachable, timed out or reported failure."""
    status_code = 502
