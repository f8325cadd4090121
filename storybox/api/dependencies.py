"""FastAPI dependency injection for authentication and services."""

from typing import Annotated

from dotenv import find_dotenv, load_dotenv
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Load .env from project root (find_dotenv searches parent directories)
load_dotenv(find_dotenv())

from storybox.core.types import Principal  # noqa: E402
from .auth.tokens import verify_token  # noqa: E402
from .services.generation_manager import GenerationManager, generation_manager  # noqa: E402

# Security scheme for bearer token authentication
security = HTTPBearer()


def get_generation_manager() -> GenerationManager:
    """Get the process-wide GenerationManager."""
    return generation_manager


# Authentication dependency
async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)]
) -> Principal:
    """Verify the bearer token and return the signed-in user.

    Raises:
        HTTPException: 401 if token is invalid, expired or has no subject
    """
    payload = verify_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Principal(uid=payload["sub"], id_token=payload.get("id_token"))


# Type aliases for cleaner route signatures
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
Manager = Annotated[GenerationManager, Depends(get_generation_manager)]
