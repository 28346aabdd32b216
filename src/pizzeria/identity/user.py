"""User aggregate: a customer or an admin who can sign in.

Email links (verification, password reset) carry a random token; only its
SHA-256 is stored, together with an expiry.
"""

import re
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, ValueObject

from pizzeria.domain import pizzeria
from pizzeria.identity.events import EmailVerified, PasswordChanged, UserActivationChanged, UserRegistered
from pizzeria.identity.passwords import hash_password, hash_token, new_token, verify_password

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\d{10}$")
MIN_PASSWORD_LENGTH = 6
VERIFICATION_TTL = timedelta(hours=24)
RESET_TTL = timedelta(minutes=10)


class Role(Enum):
    USER = "user"
    ADMIN = "admin"


@pizzeria.value_object(part_of="User")
class Address:
    street: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    zip_code: String(max_length=6)


@pizzeria.aggregate
class User:
    name: String(required=True, max_length=50)
    email: String(required=True, max_length=254, unique=True)
    password_hash: String(required=True, max_length=255)
    phone: String(max_length=10)
    role: String(choices=Role, default=Role.USER.value)
    address: ValueObject(Address)
    is_email_verified: Boolean(default=False)
    is_active: Boolean(default=True)
    verification_token: String(max_length=64)
    verification_expires: DateTime()
    reset_token: String(max_length=64)
    reset_expires: DateTime()
    last_login: DateTime()
    created_at: DateTime()

    @invariant.post
    def email_must_look_like_an_address(self):
        if self.email and not EMAIL_PATTERN.match(self.email):
            raise ValidationError({"email": ["Please provide a valid email"]})

    @invariant.post
    def phone_must_have_ten_digits(self):
        if self.phone and not PHONE_PATTERN.match(self.phone):
            raise ValidationError({"phone": ["Please provide a valid 10-digit phone number"]})

    @classmethod
    def register(cls, name, email, password, phone=None, role=Role.USER.value, address=None, now=None):
        """Create an account. Returns ``(user, raw_verification_token)``."""
        _check_password(password)
        now = now or datetime.now(UTC)
        user = cls(
            name=name.strip(),
            email=email.strip().lower(),
            password_hash=hash_password(password),
            phone=phone or None,
            role=role,
            address=Address(**address) if address else None,
            created_at=now,
        )
        raw_token = user.issue_verification_token(now)
        user.raise_(UserRegistered(user_id=str(user.id), email=user.email, role=user.role, registered_at=now))
        return user, raw_token

    @property
    def is_admin(self):
        return self.role == Role.ADMIN.value

    def check_password(self, password):
        return verify_password(password, self.password_hash)

    def record_login(self, now=None):
        self.last_login = now or datetime.now(UTC)

    # -------------------------------------------------------------------
    # Email verification
    # -------------------------------------------------------------------
    def issue_verification_token(self, now=None):
        now = now or datetime.now(UTC)
        raw, hashed = new_token()
        self.verification_token = hashed
        self.verification_expires = now + VERIFICATION_TTL
        return raw

    def verify_email(self, raw_token, now=None):
        now = now or datetime.now(UTC)
        if (
            not self.verification_token
            or self.verification_token != hash_token(raw_token)
            or self.verification_expires is None
            or self.verification_expires < now
        ):
            raise ValidationError({"token": ["Invalid or expired verification token"]})

        self.is_email_verified = True
        self.verification_token = None
        self.verification_expires = None
        self.raise_(EmailVerified(user_id=str(self.id), verified_at=now))

    # -------------------------------------------------------------------
    # Password reset
    # -------------------------------------------------------------------
    def issue_password_reset(self, now=None):
        now = now or datetime.now(UTC)
        raw, hashed = new_token()
        self.reset_token = hashed
        self.reset_expires = now + RESET_TTL
        return raw

    def reset_password(self, raw_token, new_password, now=None):
        now = now or datetime.now(UTC)
        if (
            not self.reset_token
            or self.reset_token != hash_token(raw_token)
            or self.reset_expires is None
            or self.reset_expires < now
        ):
            raise ValidationError({"token": ["Invalid or expired reset token"]})

        self.change_password(new_password, now)
        self.reset_token = None
        self.reset_expires = None

    def change_password(self, new_password, now=None):
        _check_password(new_password)
        self.password_hash = hash_password(new_password)
        self.raise_(PasswordChanged(user_id=str(self.id), changed_at=now or datetime.now(UTC)))

    # -------------------------------------------------------------------
    # Profile / account state
    # -------------------------------------------------------------------
    def update_profile(self, name=None, phone=None, address=None):
        if name is not None:
            self.name = name.strip()
        if phone is not None:
            self.phone = phone or None
        if address is not None:
            self.address = Address(**address)

    def set_active(self, is_active):
        if self.is_admin and not is_active:
            raise ValidationError({"user": ["Cannot modify admin user status"]})
        self.is_active = is_active
        self.raise_(UserActivationChanged(user_id=str(self.id), is_active=is_active))


def _check_password(password):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError({"password": [f"Password must be at least {MIN_PASSWORD_LENGTH} characters"]})
