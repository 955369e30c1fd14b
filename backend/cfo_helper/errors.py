class CFOHelperError(Exception):
    """Base class for errors raised by the CFO Helper backend."""


class StoreUnavailableError(CFOHelperError):
    """The key-value store could not be read or written."""

    def __init__(self, operation, key, cause=None):
        self.operation = operation
        self.key = key
        self.cause = cause
        super().__init__(f"Key-value store {operation} failed for {key!r}: {cause}")


class InvalidScenarioError(CFOHelperError, ValueError):
    """Scenario parameters outside the domain the metrics engine accepts."""

    def __init__(self, errors):
        # field name -> list of messages, same shape as marshmallow's ValidationError.messages
        self.errors = errors
        super().__init__('; '.join(f"{field}: {', '.join(msgs)}" for field, msgs in errors.items()))
