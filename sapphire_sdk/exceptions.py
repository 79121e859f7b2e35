"""
Exceptions for the Sapphire SDK.
"""
from typing import Optional


class SapphireError(Exception):
    """Base exception for all SDK errors."""

    def __init__(self, message: str, stage: Optional[str] = None):
        self.stage = stage
        super().__init__(message)


class HashingError(SapphireError):
    """
    Raised when a typed-data field cannot be encoded under its declared type.

    ``stage`` is ``"domain"`` when the domain separator failed and
    ``"message"`` when the primary message failed.
    """
    pass


class SigningError(SapphireError):
    """Raised when the injected signer fails or returns a malformed signature."""

    def __init__(self, message: str, stage: Optional[str] = "signer"):
        super().__init__(message, stage)


class EncryptionError(SapphireError):
    """Raised when the call body cannot be encrypted."""

    def __init__(self, message: str, stage: Optional[str] = "cipher"):
        super().__init__(message, stage)


class LeashError(SapphireError):
    """Raised when a leash is stale or its block window is unacceptable."""
    pass


class EnvelopeError(SapphireError):
    """Raised when an encoded envelope cannot be decoded."""
    pass


class NetworkError(SapphireError):
    """Raised for chain ID mismatches and failed node queries."""
    pass
