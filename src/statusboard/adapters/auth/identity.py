"""Hosted identity provider adapter."""

from dataclasses import dataclass
from uuid import UUID

import httpx
import structlog

from statusboard.core.auth.types import Principal
from statusboard.core.exceptions import InvalidToken

logger = structlog.get_logger()


@dataclass
class IdentityProviderConfig:
    """Identity provider configuration."""

    url: str
    api_key: str
    timeout_seconds: float = 10.0


class HttpIdentityVerifier:
    """Verifies bearer tokens against the provider's user endpoint.

    The provider answers ``GET /auth/v1/user`` with the token's user when the
    token is valid and with a 4xx otherwise.
    """

    def __init__(
        self,
        config: IdentityProviderConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            config: Provider settings.
            client: Shared HTTP client. One is created if not provided.
        """
        self.config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    async def verify(self, token: str) -> Principal:
        """Verify a bearer token and return the principal it belongs to."""
        try:
            response = await self._client.get(
                f"{self.config.url.rstrip('/')}/auth/v1/user",
                headers={
                    "Authorization": f"Bearer {token}",
                    "apikey": self.config.api_key,
                },
            )
        except httpx.TimeoutException:
            logger.warning("identity_provider_timeout")
            raise InvalidToken("Identity provider timed out") from None
        except httpx.RequestError as e:
            logger.error("identity_provider_error", error=str(e))
            raise InvalidToken("Identity provider unreachable") from None

        if not response.is_success:
            logger.warning("invalid_token", status_code=response.status_code)
            raise InvalidToken("Invalid or expired token")

        try:
            user = response.json()
            principal = Principal(user_id=UUID(str(user["id"])), email=user.get("email"))
        except (KeyError, TypeError, ValueError):
            logger.error("identity_provider_malformed_user")
            raise InvalidToken("Invalid or expired token") from None

        logger.debug("user_authenticated", user_id=str(principal.user_id))
        return principal

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
