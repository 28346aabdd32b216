"""Access control: bearer authentication, role gate and ownership checks."""

from fastapi import Depends, Request
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from pizzeria.identity.tokens import bearer_from_header, decode_token, peek_subject
from pizzeria.identity.user import User
from pizzeria.shared.errors import AccountInactive, Forbidden, TokenInvalid


def authenticate(token: str | None) -> User:
    """Resolve a bearer token to an active user."""
    user_id = decode_token(token)
    try:
        user = current_domain.repository_for(User).get(user_id)
    except ObjectNotFoundError:
        raise TokenInvalid("No user found with this token") from None
    if not user.is_active:
        raise AccountInactive()
    return user


def current_user(request: Request) -> User:
    return authenticate(bearer_from_header(request.headers.get("Authorization")))


def optional_user_id(request: Request) -> str | None:
    return peek_subject(bearer_from_header(request.headers.get("Authorization")))


def require_role(*roles: str):
    """Dependency factory: ``Depends(require_role("admin"))``."""

    def _dependency(user: User = Depends(current_user)) -> User:
        if user.role not in roles:
            raise Forbidden(f"User role {user.role} is not authorized to access this route")
        return user

    return _dependency


def require_verified_email(user: User = Depends(current_user)) -> User:
    if not user.is_email_verified:
        raise Forbidden("Please verify your email before accessing this feature")
    return user


def can_access(user: User, owner_id) -> bool:
    return user.is_admin or str(user.id) == str(owner_id)


def ensure_access(user: User, owner_id) -> None:
    if not can_access(user, owner_id):
        raise Forbidden()
