"""Access control dependencies.

``get_current_user`` authenticates the bearer token; ``require_admin`` adds the
role gate. Ownership checks live with each service operation.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import ForbiddenError
from app.models.user import User
from app.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def authorize(user: User, required_role: str) -> User:
    if user.role != required_role:
        raise ForbiddenError("Not authorized as an admin" if required_role == "admin" else "Not authorized")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else None
    return UserService.authenticate(db, token)


def require_admin(user: User = Depends(get_current_user)) -> User:
    return authorize(user, "admin")
