"""Bearer token authentication middleware."""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from statusboard.core.auth.identity import IdentityVerifier
from statusboard.core.auth.types import Principal
from statusboard.core.exceptions import InvalidToken
from statusboard.entrypoints.api.deps import get_identity_verifier
from statusboard.entrypoints.api.errors import UNAUTHENTICATED_MESSAGE

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)

VerifierDep = Annotated[IdentityVerifier, Depends(get_identity_verifier)]


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=UNAUTHENTICATED_MESSAGE,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def verify_principal(
    request: Request,
    verifier: VerifierDep,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),  # noqa: B008
) -> Principal:
    """Verify the bearer token and return the caller's principal.

    Raises:
        HTTPException: 401 if the token is missing or rejected. The body
            never says which.
    """
    if not credentials:
        logger.info("missing_bearer_token")
        raise _unauthorized()

    try:
        principal = await verifier.verify(credentials.credentials)
    except InvalidToken as e:
        logger.warning("token_rejected", reason=str(e))
        raise _unauthorized() from None

    request.state.principal = principal
    return principal


CurrentPrincipal = Annotated[Principal, Depends(verify_principal)]
