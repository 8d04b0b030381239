"""Application entry point.

Wires config, stores and clients into the FastAPI app. `create_app` takes
ready-made components so tests can build the app around in-memory stores;
`build_app` assembles the production graph from Vault and the environment.

Run with:
    uvicorn main:build_app --factory
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError
from starlette.responses import JSONResponse

from api.base import ErrorCodes, error_response, success_response
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from auth.api import create_auth_router
from auth.config import AuthConfig
from auth.database import PostgresUserDirectory, PostgresVerificationTokenRepository
from auth.directory import UserDirectory
from auth.notifications import NotificationDispatcher
from auth.password import PasswordHasher
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.tokens import AccessTokenIssuer
from auth.verification import VerificationTokenStore
from clients.email_client import EmailGatewayClient
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import (
    get_database_url,
    get_email_config,
    get_jwt_secret,
    get_valkey_url,
)

logger = logging.getLogger(__name__)

# Optional non-secret overrides: env var -> AuthConfig field
_ENV_OVERRIDES = {
    "JWT_EXPIRES_IN": "jwt_expires_in",
    "PASSWORD_HASH_ROUNDS": "password_hash_rounds",
    "VERIFICATION_TOKEN_EXPIRY_MINUTES": "verification_token_expiry_minutes",
    "FRONTEND_URL": "frontend_url",
    "APP_NAME": "app_name",
}


def load_config() -> AuthConfig:
    """Build AuthConfig from Vault (signing secret) and environment overrides.

    Raises:
        pydantic.ValidationError: Missing secret or malformed setting.
    """
    settings = {
        field: os.environ[env_var]
        for env_var, field in _ENV_OVERRIDES.items()
        if os.environ.get(env_var)
    }
    return AuthConfig(jwt_secret=get_jwt_secret(), **settings)


def create_app(
    config: AuthConfig,
    auth_service: AuthService,
    rate_limiter: RateLimiter,
    token_issuer: AccessTokenIssuer,
    users: UserDirectory,
) -> FastAPI:
    """FastAPI app with auth middleware, error handlers and auth routes."""
    app = FastAPI(title=config.app_name)

    # Starlette runs the last-added middleware first: CORS answers preflights,
    # then request IDs are assigned before the bearer guard can reject.
    app.add_middleware(AuthMiddleware, token_issuer=token_issuer, users=users)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(create_auth_router(auth_service, rate_limiter), prefix="/api/v1")

    @app.get("/api/healthz")
    def healthz(request: Request):
        request_id = getattr(request.state, "request_id", None)
        try:
            rate_limiter.ping()
        except RedisError as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(
                status_code=503,
                content=error_response(
                    ErrorCodes.SERVICE_UNAVAILABLE,
                    "Rate limit store unavailable",
                    request_id,
                ).model_dump(mode="json"),
            )
        return success_response({"status": "ok"}, request_id)

    return app


def build_app() -> FastAPI:
    """Assemble the production application."""
    load_dotenv(Path(__file__).parent / ".env")
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config()

    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())

    users = PostgresUserDirectory(postgres)
    verification_tokens = VerificationTokenStore(
        PostgresVerificationTokenRepository(postgres), config
    )
    token_issuer = AccessTokenIssuer(config)
    dispatcher = NotificationDispatcher(EmailGatewayClient(**get_email_config()))

    auth_service = AuthService(
        config=config,
        users=users,
        verification_tokens=verification_tokens,
        password_hasher=PasswordHasher(config),
        token_issuer=token_issuer,
        dispatcher=dispatcher,
        security_logger=SecurityLogger(postgres),
    )
    rate_limiter = RateLimiter(valkey, config)

    app = create_app(config, auth_service, rate_limiter, token_issuer, users)

    @app.on_event("startup")
    def purge_expired_tokens():
        purged = verification_tokens.purge_expired()
        if purged:
            logger.info("Purged %d expired verification tokens", purged)

    @app.on_event("shutdown")
    def close_clients():
        dispatcher.shutdown(wait_for_delivery=True)
        valkey.close()
        postgres.close()

    logger.info("Easy Auth application assembled")
    return app
