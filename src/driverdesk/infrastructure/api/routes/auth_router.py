"""Authentication API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from driverdesk.core.logging import get_logger
from driverdesk.domain.errors import AuthenticationError
from driverdesk.infrastructure.api.dependencies import get_identity_provider
from driverdesk.infrastructure.api.schemas import ErrorResponse, LoginRequest, TokenResponse
from driverdesk.infrastructure.auth.identity_provider import IdentityProvider

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def login(
    request: LoginRequest,
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> TokenResponse:
    """Exchange email and password for an access token."""
    user = await identity_provider.authenticate(request.email, request.password)
    if user is None:
        logger.info("Login failed", email=request.email.strip().lower())
        raise AuthenticationError("Invalid email or password")

    user_id, email = user.id, user.email
    await identity_provider.session.commit()
    logger.info("Login succeeded", user_id=user_id)
    return TokenResponse(
        access_token=identity_provider.issue_token(user_id, email),
        expires_in=identity_provider.tokens.get_expires_in(),
        user_id=user_id,
    )
