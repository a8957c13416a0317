"""Identity verification protocol.

Token verification is delegated to a hosted identity provider; the core only
consumes the principal it returns.
"""

from typing import Protocol, runtime_checkable

from statusboard.core.auth.types import Principal


@runtime_checkable
class IdentityVerifier(Protocol):
    """Resolves a bearer token into a verified principal."""

    async def verify(self, token: str) -> Principal:
        """Verify a bearer token.

        Raises:
            InvalidToken: If the provider rejects the token.
        """
        ...
