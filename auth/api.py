"""HTTP routes for authentication.

Handlers are plain functions so FastAPI runs them on its threadpool; the
bcrypt work in AuthService never blocks the event loop. AuthError
subclasses propagate to the handlers in api/errors.py.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request

from api.base import success_response
from auth.rate_limiter import RateLimiter
from auth.service import AuthService
from auth.types import (
    ChangePasswordRequest,
    ResendVerificationRequest,
    SignInRequest,
    SignUpRequest,
    VerifyEmailRequest,
)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def create_auth_router(auth_service: AuthService, rate_limiter: RateLimiter) -> APIRouter:
    """Create auth router with injected service.

    Every route passes the per-client-IP default throttle before its handler
    runs; resend-verification and change-password add their own stricter
    scopes on top.
    """

    def throttle(request: Request) -> None:
        rate_limiter.check_rate_limit(RateLimiter.DEFAULT, _client_ip(request))

    router = APIRouter(tags=["auth"], dependencies=[Depends(throttle)])

    @router.post("/signup", status_code=201)
    def sign_up(request: Request, body: SignUpRequest):
        """Create an account. Responds with the new user's id only."""
        result = auth_service.sign_up(
            email=body.email,
            name=body.name,
            password=body.password,
        )
        return success_response({"id": str(result.id)}, _request_id(request))

    @router.post("/signin")
    def sign_in(request: Request, body: SignInRequest):
        """Exchange credentials for an access token.

        401 for unknown email or wrong password (same message), 403 for an
        unverified email.
        """
        result = auth_service.sign_in(email=body.email, password=body.password)
        return success_response(asdict(result), _request_id(request))

    @router.post("/verify-email")
    def verify_email(request: Request, body: VerifyEmailRequest):
        result = auth_service.verify_email(body.token)
        return success_response(asdict(result), _request_id(request))

    @router.post("/resend-verification")
    def resend_verification(request: Request, body: ResendVerificationRequest):
        """Always 200 with success=true, whatever the account's state."""
        rate_limiter.check_rate_limit(RateLimiter.RESEND_VERIFICATION, body.email)
        result = auth_service.resend_verification(body.email)
        return success_response(asdict(result), _request_id(request))

    @router.put("/change-password")
    def change_password(request: Request, body: ChangePasswordRequest):
        """Requires a bearer token (AuthMiddleware sets request.state.user_id)."""
        user_id = request.state.user_id
        rate_limiter.check_rate_limit(RateLimiter.CHANGE_PASSWORD, str(user_id))
        result = auth_service.change_password(
            user_id=user_id,
            current_password=body.current_password,
            new_password=body.new_password,
        )
        return success_response(asdict(result), _request_id(request))

    @router.get("/users/me")
    def get_current_user(request: Request):
        """Profile of the authenticated user."""
        profile = auth_service.get_profile(request.state.user_id)
        return success_response(profile.model_dump(mode="json"), _request_id(request))

    return router
