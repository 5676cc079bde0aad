"""Principal to user resolution"""

import logging

from sqlalchemy.orm import Session

from agrocredit.domain.exceptions import AuthorizationError
from agrocredit.domain.models import Principal, UserRole
from agrocredit.infrastructure.database.models import User
from agrocredit.infrastructure.database.repositories import UserRepository
from agrocredit.infrastructure.database.session import atomic

logger = logging.getLogger(__name__)

ROLES = {r.value for r in UserRole}


def resolve_user(db: Session, principal: Principal) -> User:
    """
    Load the user behind a principal, creating it on first sight.

    Role is immutable: once stored, a different role from the identity
    provider is ignored.

    Raises:
        AuthorizationError: New principal carries no recognised role
    """
    repo = UserRepository(db)
    user = repo.get_user_by_id(principal.id)
    if user is not None:
        if principal.role and principal.role != user.role:
            logger.warning(
                "Ignoring role change for user %s (%s -> %s)", user.id, user.role, principal.role
            )
        return user

    if principal.role not in ROLES:
        raise AuthorizationError("Account has no role assigned")

    with atomic(db):
        user = repo.create_user(principal, principal.role)
    logger.info("Registered %s user %s", user.role, user.id)
    return user
