"""Custom exceptions for the savings product configuration core."""


class SavingsConfigError(Exception):
    """Base exception for all savings configuration errors."""
    
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class InvariantViolationError(SavingsConfigError):
    """Raised when an edit would break a tier set or document set invariant.
    
    The edit is rejected and the state it was applied to is left unchanged.
    """
    
    def __init__(self, message: str, rule: str = None, **details):
        if rule:
            details['rule'] = rule
        super().__init__(message, details)
        self.rule = rule


class MalformedWireValueError(SavingsConfigError):
    """Raised when a loaded record carries a value the wire format forbids.
    
    Treated as unrecoverable for the whole load: nothing is coerced.
    """
    
    def __init__(self, field: str, value=None, reason: str = None):
        details = {'field': field, 'value': value}
        message = f"Malformed wire value for '{field}': {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, details)
        self.field = field
        self.value = value


class ServerValidationError(SavingsConfigError):
    """Raised when the persistence collaborator rejects a save.
    
    The server message is kept verbatim; no field attribution is attempted.
    """
    
    def __init__(self, message: str = None, response: dict = None):
        super().__init__(message or "Update failed", {})
        self.response = response or {}
