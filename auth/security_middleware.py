"""Security middleware for FastAPI - bearer token validation."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.directory import UserDirectory
from auth.exceptions import InvalidAccessTokenError
from auth.tokens import AccessTokenIssuer
from api.base import error_response, ErrorCodes


def _unauthorized(code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        headers={"WWW-Authenticate": "Bearer"},
        content=error_response(code, message).model_dump(mode="json"),
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that guards protected routes with a bearer access token.

    For protected routes:
    1. Extracts the token from 'Authorization: Bearer <token>'
    2. Verifies signature and expiry via AccessTokenIssuer
    3. Confirms the subject still exists in the directory
    4. Sets request.state.user_id

    Public paths and CORS preflight (OPTIONS) requests bypass
    authentication entirely.
    """

    PUBLIC_PATHS = [
        "/api/v1/signup",
        "/api/v1/signin",
        "/api/v1/verify-email",
        "/api/v1/resend-verification",
        "/api/healthz",
        "/docs",
        "/openapi.json",
    ]

    def __init__(self, app, token_issuer: AccessTokenIssuer, users: UserDirectory):
        super().__init__(app)
        self._token_issuer = token_issuer
        self._users = users

    def _is_public_path(self, path: str) -> bool:
        return path in self.PUBLIC_PATHS

    @staticmethod
    def _bearer_token(request: Request) -> str | None:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if request.method == "OPTIONS" or self._is_public_path(request.url.path):
            return await call_next(request)

        token = self._bearer_token(request)
        if token is None:
            return _unauthorized(ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            claims = self._token_issuer.verify(token)
        except InvalidAccessTokenError:
            return _unauthorized(ErrorCodes.INVALID_TOKEN, "Invalid or expired access token")

        user = self._users.find_by_id(claims.sub)
        if user is None:
            return _unauthorized(ErrorCodes.NOT_AUTHENTICATED, "User not found")

        request.state.user_id = user.id

        return await call_next(request)
