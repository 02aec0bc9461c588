"""
Exception taxonomy for world generation.

Every failure surfaced by the pipeline is one of these types so callers can
tell a correctable input problem from a flaky content service, a failed
write, or a genuine bug in partitioning/assembly.

Hierarchy:
    WorldForgeError
      SeedValidationError   - bad user input, caught before any external call
      InvalidStateError     - operation not allowed in the current pipeline state
      InvariantViolation    - internal inconsistency (programming error)
      InvalidInput          - bad arguments to a pure helper (also a ValueError)
      GenerationError       - run failed; carries a short user-facing message
        ServiceError        - content service unreachable or returned bad data
        PersistenceError    - final world write (or import) failed
"""

from typing import Optional

PREVIEW_FAILED_MESSAGE = "Failed to generate world preview. Please try again."
FINALIZE_FAILED_MESSAGE = "Failed to finalize world. Please try again."


class WorldForgeError(Exception):
    """Base class for all worldforge errors."""


class SeedValidationError(WorldForgeError):
    """Raised when a required GenerationSeed field is missing or blank.

    Raised before any state change or external call, so the caller can simply
    correct the input and try again.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.user_message = message
        super().__init__(f"Invalid seed field '{field}': {message}")


class InvalidStateError(WorldForgeError):
    """Raised when a pipeline operation is invoked from the wrong state."""

    def __init__(self, *, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while pipeline is '{state}'.")


class InvariantViolation(WorldForgeError):
    """Raised when assembled data breaks an internal invariant.

    Not user-recoverable: it points at a partitioning or assembly bug and must
    never be reported as a service failure.
    """


class InvalidInput(WorldForgeError, ValueError):
    """Raised by pure helpers (e.g. the grid partitioner) on invalid arguments."""


class GenerationError(WorldForgeError):
    """A generation attempt failed as a whole.

    ``user_message`` is the short generic text meant for display; the exception
    message carries the diagnostic detail.
    """

    def __init__(self, message: str, *, user_message: str = FINALIZE_FAILED_MESSAGE) -> None:
        self.user_message = user_message
        super().__init__(message)


class ServiceError(GenerationError):
    """Raised when the content service fails or returns malformed data."""

    def __init__(
        self,
        *,
        stage: str,
        underlying: Optional[BaseException] = None,
        reason: Optional[str] = None,
        user_message: str = FINALIZE_FAILED_MESSAGE,
    ) -> None:
        self.stage = stage
        self.underlying = underlying
        detail = reason or (str(underlying) if underlying is not None else "unknown error")
        message = (
            f"Content service failed during '{stage}': {detail}\n\n"
            "Remediation tips:\n"
            "  - Verify LLM configuration (LLM_PROVIDER, LLM_MODEL, API key)\n"
            "  - For local models, check OLLAMA_BASE_URL and that the server is running\n"
            "  - Retry the preview or generation; no world was saved"
        )
        super().__init__(message, user_message=user_message)


class PersistenceError(GenerationError):
    """Raised when writing or importing worlds fails."""

    def __init__(
        self,
        message: str,
        *,
        underlying: Optional[BaseException] = None,
        user_message: str = FINALIZE_FAILED_MESSAGE,
    ) -> None:
        self.underlying = underlying
        super().__init__(message, user_message=user_message)


__all__ = [
    "PREVIEW_FAILED_MESSAGE",
    "FINALIZE_FAILED_MESSAGE",
    "WorldForgeError",
    "SeedValidationError",
    "InvalidStateError",
    "InvariantViolation",
    "InvalidInput",
    "GenerationError",
    "ServiceError",
    "PersistenceError",
]
