from __future__ import annotations


class RadixAgentError(Exception):
    """Base class for every error raised by radix_agent_kit."""


class FormattingError(RadixAgentError):
    pass


class ValidationError(RadixAgentError, ValueError):
    """Bad caller input, detected before anything is built or submitted."""


class NetworkUnsupportedError(RadixAgentError):
    def __init__(self, operation: str, network: str, message: str | None = None):
        self.operation = operation
        self.network = network
        super().__init__(
            message or f"{operation} is not supported on network '{network}'"
        )


class BuildError(RadixAgentError):
    pass


class DuplicateTransactionError(RadixAgentError):
    def __init__(self, intent_hash: str, message: str | None = None):
        self.intent_hash = intent_hash
        super().__init__(message or f"Transaction already submitted: {intent_hash}")


class SubmissionError(RadixAgentError):
    def __init__(
        self,
        message: str,
        *,
        transient: bool = False,
        status_code: int | None = None,
    ):
        self.transient = transient
        self.status_code = status_code
        super().__init__(message)


class ExtractionTimeout(RadixAgentError):
    def __init__(self, intent_hash: str, attempts: int):
        self.intent_hash = intent_hash
        self.attempts = attempts
        super().__init__(
            f"Transaction {intent_hash} not committed after {attempts} attempts"
        )


class ExtractionNotFound(RadixAgentError):
    def __init__(self, intent_hash: str, status: str, message: str | None = None):
        self.intent_hash = intent_hash
        self.status = status
        super().__init__(
            message or f"No matching entity created by {intent_hash} (status={status})"
        )
