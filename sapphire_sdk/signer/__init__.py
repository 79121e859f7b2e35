"""
Signer capability for signed calls.

A signer only has to turn a 32-byte digest into a 65-byte ``R || S || V``
secp256k1 signature. It never sees the typed-data document.
"""
from typing import Callable, Protocol, Union, runtime_checkable

from .local import LocalSigner


@runtime_checkable
class Signer(Protocol):
    """Protocol for digest signers"""

    def sign(self, digest: bytes) -> bytes:
        """Return a 65-byte R || S || V signature over ``digest``"""
        ...


class _CallableSigner:
    def __init__(self, fn: Callable[[bytes], bytes]):
        self._fn = fn

    def sign(self, digest: bytes) -> bytes:
        return self._fn(digest)


def as_signer(signer: Union[Signer, Callable[[bytes], bytes]]) -> Signer:
    """Accept either a Signer or a plain ``digest -> signature`` function."""
    if isinstance(signer, Signer):
        return signer
    if callable(signer):
        return _CallableSigner(signer)
    raise TypeError(f"Expected a Signer or a callable, got {type(signer).__name__}")

__all__ = ["Signer", "LocalSigner", "as_signer"]
