"""FastAPI endpoints for authentication and the caller's own account."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from pizzeria.identity import auth
from pizzeria.identity.access import current_user
from pizzeria.identity.account import UpdateProfile
from pizzeria.identity.api.schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
)
from pizzeria.identity.ratelimit import rate_limit
from pizzeria.identity.user import User
from pizzeria.shared.api import Envelope, ok

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201, response_model=Envelope, response_model_exclude_none=True)
def register(body: RegisterRequest) -> Envelope:
    user, token = auth.register(
        name=body.name,
        email=body.email,
        password=body.password,
        phone=body.phone,
        address=body.address.model_dump() if body.address else None,
    )
    return ok(
        {"user": auth.serialize_user(user), "token": token},
        "User registered successfully. Please check your email to verify your account.",
    )


@router.post("/login", response_model=Envelope, response_model_exclude_none=True)
def login(body: LoginRequest) -> Envelope:
    user, token = auth.login(body.email, body.password)
    return ok({"user": auth.serialize_user(user), "token": token}, "Login successful")


@router.get("/me", response_model=Envelope, response_model_exclude_none=True)
def me(user: User = Depends(current_user)) -> Envelope:
    return ok({"user": auth.serialize_user(user)})


@router.put("/profile", response_model=Envelope, response_model_exclude_none=True)
def update_profile(body: UpdateProfileRequest, user: User = Depends(current_user)) -> Envelope:
    command = UpdateProfile(
        user_id=str(user.id),
        name=body.name,
        phone=body.phone,
        address=body.address.model_dump_json() if body.address else None,
    )
    current_domain.process(command, asynchronous=False)
    updated = current_domain.repository_for(User).get(user.id)
    return ok({"user": auth.serialize_user(updated)}, "Profile updated successfully")


@router.get("/verify-email/{token}", response_model=Envelope, response_model_exclude_none=True)
def verify_email(token: str) -> Envelope:
    auth.verify_email(token)
    return ok(message="Email verified successfully")


@router.post("/resend-verification", response_model=Envelope, response_model_exclude_none=True)
def resend_verification(user: User = Depends(current_user)) -> Envelope:
    if user.is_email_verified:
        return ok(message="Email is already verified")
    auth.resend_verification(user)
    return ok(message="Verification email sent")


@router.post(
    "/forgot-password",
    response_model=Envelope,
    response_model_exclude_none=True,
    dependencies=[Depends(rate_limit("forgot-password"))],
)
def forgot_password(body: ForgotPasswordRequest) -> Envelope:
    auth.forgot_password(body.email)
    return ok(message="If an account exists with this email, a password reset link has been sent")


@router.put("/reset-password/{token}", response_model=Envelope, response_model_exclude_none=True)
def reset_password(token: str, body: ResetPasswordRequest) -> Envelope:
    user, jwt = auth.reset_password(token, body.password)
    return ok({"user": auth.serialize_user(user), "token": jwt}, "Password reset successful")


@router.put("/change-password", response_model=Envelope, response_model_exclude_none=True)
def change_password(body: ChangePasswordRequest, user: User = Depends(current_user)) -> Envelope:
    token = auth.change_password(user, body.current_password, body.new_password)
    return ok({"token": token}, "Password changed successfully")
