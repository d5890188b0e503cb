"""Result pattern for consistent return types in the edit session.

Session operations never raise for a rejected edit; they return a Result
carrying either the new snapshot or the reason the edit was refused.
"""
from dataclasses import dataclass
from typing import Optional, TypeVar, Generic

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Represents the outcome of an operation.
    
    Attributes:
        success: Whether the operation succeeded.
        value: The return value on success, None on failure.
        error: Error message on failure, None on success.
        error_type: Type/category of error (e.g., "INVARIANT", "SERVER_VALIDATION").
        
    Usage:
        result = session.add_tier()
        if result.success:
            render(result.value)
        else:
            show_message(result.error)
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    
    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        """Create a successful result."""
        return cls(success=True, value=value)
    
    @classmethod
    def fail(cls, error: str, error_type: str = None) -> 'Result[T]':
        """Create a failure result.
        
        Args:
            error: Error message describing what went wrong.
            error_type: Optional error category for programmatic handling.
            
        Returns:
            A Result with success=False and error details.
        """
        return cls(success=False, error=error, error_type=error_type)


# Common error types for consistency
class ErrorType:
    """Standard error type constants."""
    INVARIANT = "INVARIANT"
    MALFORMED = "MALFORMED"
    SERVER_VALIDATION = "SERVER_VALIDATION"
    NOTHING_TO_UNDO = "NOTHING_TO_UNDO"
    NOTHING_TO_REDO = "NOTHING_TO_REDO"
