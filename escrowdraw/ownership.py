"""Single-owner capability used to gate privileged draw operations."""

from __future__ import annotations

import logging

from .errors import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


class OwnershipCapability:
    """Holds the identity of the privileged account.

    The engine receives an instance at construction and consults it both for
    authorization and for the identity bound into the sealed seed.
    """

    def __init__(self, owner: str) -> None:
        self._owner = self._normalize(owner)

    @staticmethod
    def _normalize(identity: str) -> str:
        if not isinstance(identity, str):
            raise TypeError("owner identity must be a string")
        if not identity.strip():
            raise ValidationError("owner identity must not be empty")
        return identity

    def current_owner(self) -> str:
        """Return the identity of the privileged account."""
        return self._owner

    def is_owner(self, caller: str) -> bool:
        return caller == self._owner

    def require_owner(self, caller: str) -> None:
        """Raise :class:`AuthorizationError` unless ``caller`` is the owner."""
        if caller != self._owner:
            raise AuthorizationError(f"caller {caller!r} is not the owner")

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand the privilege to ``new_owner``.

        The sealed seed of an engine binds the owner identity at the time it
        was sealed, so after a transfer ``close_draw`` only accepts seeds that
        were sealed for ``new_owner``.
        """
        self.require_owner(caller)
        new_owner = self._normalize(new_owner)
        logger.info("Ownership transferred from %s to %s", self._owner, new_owner)
        self._owner = new_owner

    def __repr__(self) -> str:
        return f"<OwnershipCapability(owner={self._owner!r})>"


__all__ = ["OwnershipCapability"]
