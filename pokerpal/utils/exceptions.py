"""
Custom exceptions for PokerPal with user-facing error messages.

Every exception carries the HTTP status code it is reported with, so the
route layer never has to translate errors by hand.
"""

from typing import Any, Dict, Optional

class PokerPalError(Exception):
    """Base exception for application errors."""
    status_code = 500

    def __init__(self, message: str, user_message: str = None, details: Any = None):
        super().__init__(message)
        self.user_message = user_message or message
        self.details = details

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.user_message}
        if self.details is not None:
            body["details"] = self.details
        return body

class InvalidDataError(PokerPalError):
    """Raised when request data fails a business rule."""
    status_code = 400

class AuthenticationError(PokerPalError):
    """Raised when a request needs a logged-in user."""
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)

class PermissionDeniedError(PokerPalError):
    """Raised when the current user may not perform an action."""
    status_code = 403

class AccountDisabledError(PermissionDeniedError):
    """Raised when a disabled account tries to log in."""

    def __init__(self):
        super().__init__("Account is disabled")

class NotFoundError(PokerPalError):
    """Raised when an entity does not exist."""
    status_code = 404

    def __init__(self, entity: str, entity_id: Optional[str] = None):
        message = f"{entity} not found"
        if entity_id:
            super().__init__(f"{message}: {entity_id}", message)
        else:
            super().__init__(message)
        self.entity = entity

class ConflictError(PokerPalError):
    """Raised when a unique value is already taken."""
    status_code = 409

    def __init__(self, message: str, user_message: str = None, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message, user_message)
        self.payload = payload or {}

    def to_response(self) -> Dict[str, Any]:
        body = super().to_response()
        body.update(self.payload)
        return body

class PrizePoolLockedError(InvalidDataError):
    """Raised when a locked prize pool would grow."""

    def __init__(self, user_message: str):
        super().__init__(f"Prize pool locked: {user_message}", user_message)

class StorageError(PokerPalError):
    """Raised when an uploaded file cannot be stored."""
    status_code = 500
