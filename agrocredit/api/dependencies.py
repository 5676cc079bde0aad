"""Dependency injection for FastAPI endpoints"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from agrocredit.domain.exceptions import AuthenticationError, AuthorizationError, DependencyFailure
from agrocredit.domain.models import Principal
from agrocredit.infrastructure.clients.identity import IdentityClient
from agrocredit.infrastructure.database.models import User
from agrocredit.infrastructure.database.session import get_db
from agrocredit.infrastructure.observability.metrics import identity_failures_counter
from agrocredit.services.users import resolve_user


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_identity_client() -> IdentityClient:
    """Provide identity provider client instance"""
    return IdentityClient()


async def get_principal(
    request: Request,
    authorization: Optional[str] = Header(None),
    identity_client: IdentityClient = Depends(get_identity_client),
) -> Principal:
    """Resolve the bearer token through the identity provider"""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Missing bearer token")

    try:
        return await identity_client.get_principal(token.strip())
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except DependencyFailure as e:
        identity_failures_counter.inc()
        logging.error(f"Identity provider error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Identity service unavailable")


def get_current_user(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> User:
    """Application user for the authenticated principal"""
    try:
        return resolve_user(db, principal)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except DependencyFailure:
        raise HTTPException(status_code=503, detail="Record store unavailable")


def require_role(*roles: str) -> Callable[..., User]:
    """Guard a route to the given roles"""

    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail=f"Requires role: {', '.join(roles)}")
        return user

    return checker


require_admin = require_role("admin")
require_agent = require_role("agent")
require_farmer = require_role("farmer")
