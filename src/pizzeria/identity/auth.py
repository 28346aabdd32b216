"""Authentication workflows: registration, login, email verification, password reset.

These operations carry secrets (passwords, raw email tokens), so they work on
the User repository directly instead of going through commands, which would
otherwise be recorded with their payload.
"""

from datetime import UTC, datetime

from protean.utils.globals import current_domain

from pizzeria.config import get_settings
from pizzeria.domain import logger
from pizzeria.identity.account import RecordLogin
from pizzeria.identity.passwords import hash_token
from pizzeria.identity.tokens import issue_token
from pizzeria.identity.user import RESET_TTL, Role, User
from pizzeria.notifications import dispatcher
from pizzeria.shared.errors import AccountInactive, DuplicateEntry, Unauthorized, ValidationFailure
from pizzeria.shared.query import fetch_one


def find_by_email(email):
    if not email:
        return None
    return fetch_one(User, email=email.strip().lower())


def register(name, email, password, phone=None, address=None):
    """Create a user account and send the verification email. Returns ``(user, token)``."""
    if find_by_email(email):
        raise DuplicateEntry("User already exists with this email")

    user, verification_token = User.register(name=name, email=email, password=password, phone=phone, address=address)
    current_domain.repository_for(User).add(user)
    logger.info("user_registered", user_id=str(user.id))

    try:
        dispatcher.notify_email_verification(user, verification_token)
    except Exception:
        logger.exception("verification_email_failed", user_id=str(user.id))

    return user, issue_token(str(user.id))


def login(email, password):
    user = find_by_email(email)
    if user is None or not user.check_password(password):
        logger.info("login_rejected", email=email)
        raise Unauthorized("Invalid credentials")
    if not user.is_active:
        raise AccountInactive()

    current_domain.process(RecordLogin(user_id=str(user.id), logged_in_at=datetime.now(UTC)), asynchronous=False)
    logger.info("user_logged_in", user_id=str(user.id))
    return current_domain.repository_for(User).get(user.id), issue_token(str(user.id))


def verify_email(raw_token):
    user = fetch_one(User, verification_token=hash_token(raw_token))
    if user is None:
        raise ValidationFailure("Invalid or expired verification token")
    user.verify_email(raw_token)
    current_domain.repository_for(User).add(user)
    logger.info("email_verified", user_id=str(user.id))
    return user


def resend_verification(user):
    if user.is_email_verified:
        return False
    raw_token = user.issue_verification_token()
    current_domain.repository_for(User).add(user)
    return dispatcher.notify_email_verification(user, raw_token)


def forgot_password(email):
    """Email a reset link if the address is known. Silent otherwise, so accounts can't be probed."""
    user = find_by_email(email)
    if user is None or not user.is_active:
        logger.info("password_reset_unknown_email")
        return

    raw_token = user.issue_password_reset()
    current_domain.repository_for(User).add(user)
    expires_in = int(RESET_TTL.total_seconds() // 60)
    if not dispatcher.notify_password_reset(user, raw_token, expires_in):
        logger.warning("password_reset_email_not_sent", user_id=str(user.id))


def reset_password(raw_token, new_password):
    user = fetch_one(User, reset_token=hash_token(raw_token))
    if user is None:
        raise ValidationFailure("Invalid or expired reset token")
    user.reset_password(raw_token, new_password)
    current_domain.repository_for(User).add(user)
    logger.info("password_reset", user_id=str(user.id))
    return user, issue_token(str(user.id))


def change_password(user, current_password, new_password):
    if not user.check_password(current_password):
        raise Unauthorized("Current password is incorrect")
    user.change_password(new_password)
    current_domain.repository_for(User).add(user)
    return issue_token(str(user.id))


def ensure_admin():
    """Create the configured admin account if it doesn't exist yet."""
    settings = get_settings()
    existing = find_by_email(settings.admin_email)
    if existing is not None:
        return existing, False

    admin, _ = User.register(
        name="Admin",
        email=settings.admin_email,
        password=settings.admin_password,
        role=Role.ADMIN.value,
    )
    admin.is_email_verified = True
    admin.verification_token = None
    admin.verification_expires = None
    current_domain.repository_for(User).add(admin)
    logger.info("admin_created", user_id=str(admin.id))
    return admin, True


def serialize_user(user):
    """Public representation of a user. Never includes the password hash or tokens."""
    address = user.address
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
        "address": (
            {
                "street": address.street,
                "city": address.city,
                "state": address.state,
                "zip_code": address.zip_code,
            }
            if address
            else None
        ),
        "is_email_verified": user.is_email_verified,
        "is_active": user.is_active,
        "last_login": user.last_login.isoformat() if user.last_login else None,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }
