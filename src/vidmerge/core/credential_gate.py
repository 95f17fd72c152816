"""Credential gate — validates caller-supplied API keys."""

from __future__ import annotations

import logging

from vidmerge.core.protocols import CredentialStore
from vidmerge.exceptions import (
    CredentialStoreError,
    InternalError,
    Unauthenticated,
    Unauthorized,
)

logger = logging.getLogger(__name__)

BEARER_SCHEME: str = "bearer"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Pull the token out of an ``Authorization: Bearer <token>`` header.

    Any other header shape counts as no token at all.
    """
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None
    return parts[1]


class CredentialGate:
    """Allows a request through only when its token is a known API key.

    Parameters
    ----------
    store:
        Any object satisfying the :class:`CredentialStore` protocol.
    """

    def __init__(self, store: CredentialStore) -> None:
        self._store: CredentialStore = store

    def authorize(self, token: str | None) -> None:
        """Return normally for a known token.

        Raises
        ------
        Unauthenticated
            If no token was supplied.
        Unauthorized
            If the token matches no stored key.
        InternalError
            If the store itself could not be queried.
        """
        if not token:
            raise Unauthenticated("No token provided")

        try:
            record = self._store.lookup(token)
        except CredentialStoreError as exc:
            logger.exception("Error authenticating API key")
            raise InternalError("Credential store lookup failed") from exc

        if record is None:
            logger.info("Rejected unknown API key", extra={"key_prefix": token[:8]})
            raise Unauthorized("Invalid API key")
