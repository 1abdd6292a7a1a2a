from __future__ import annotations


class EcoreError(Exception):
    """Base class for errors raised while loading an Ecore document."""


class InvalidEcoreError(EcoreError, ValueError):
    """The document or a reference key inside it is malformed."""


class ContainmentError(EcoreError, RuntimeError):
    """A containment list invariant would be violated."""


class UnresolvedReferenceError(EcoreError, LookupError):
    def __init__(self, key: str, reason: str | None = None) -> None:
        self.key = key
        message = f"Unable to resolve reference {key!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ResourceStateError(EcoreError, RuntimeError):
    """A resource was asked to do something its load state does not allow."""
