# backend/usergate/api/deps_auth.py

from typing import Optional, Type, TypeVar

import pydantic
from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from usergate.core.config import Settings
from usergate.core.errors import FORBIDDEN, INVALID_TOKEN, UNAUTHORIZED, AuthenticationError, AuthorizationError
from usergate.core.security import PasswordHasher, TokenClaims, TokenService
from usergate.models.user import Role
from usergate.services.user_store import UserStore

# auto_error=False: a missing header is not an error, the cookie may still carry the token.
# Also what Swagger's "Authorize" button talks to.
bearer_scheme = HTTPBearer(auto_error=False)


# ---------- APP-SCOPED DEPS (built once in create_app) ----------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> UserStore:
    return request.app.state.store


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


# ---------- ACCESS GUARD ----------

def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
    cookie_name: str = "token",
) -> Optional[str]:
    # Prefer Bearer token when explicitly provided.
    if credentials is not None and credentials.credentials:
        return credentials.credentials

    # Fall back to cookie.
    return request.cookies.get(cookie_name) or None


def authorize(
    token: Optional[str],
    tokens: TokenService,
    minimum_role: Optional[Role] = None,
) -> TokenClaims:
    """Authenticate, then authorize. Always in that order.

    An anonymous caller gets a 401 even on admin-only routes, so it can't
    tell which routes need ADMIN.
    """
    if not token:
        raise AuthenticationError(UNAUTHORIZED)

    claims = tokens.verify(token)
    if claims is None:
        raise AuthenticationError(INVALID_TOKEN)

    if minimum_role is not None and claims.role.rank < minimum_role.rank:
        raise AuthorizationError(FORBIDDEN)

    return claims


def get_current_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
    cfg: Settings = Depends(get_settings),
) -> TokenClaims:
    token = extract_token(request, credentials, cfg.cookie_name)
    return authorize(token, tokens)


def require_role(minimum_role: Role):
    def dependency(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        tokens: TokenService = Depends(get_token_service),
        cfg: Settings = Depends(get_settings),
    ) -> TokenClaims:
        token = extract_token(request, credentials, cfg.cookie_name)
        return authorize(token, tokens, minimum_role)

    return dependency


require_admin = require_role(Role.ADMIN)


# ---------- GUARDED BODIES ----------

Body = TypeVar("Body", bound=pydantic.BaseModel)


def guarded_body(model: Type[Body], guard):
    """Parse the JSON body only after `guard` has let the caller through.

    FastAPI reads declared body params before it runs any dependency, so a
    broken body on an admin route would answer 400 ahead of the 401/403.
    Routes that need the guard first take the body through this instead.
    """

    async def dependency(request: Request, _claims: TokenClaims = Depends(guard)) -> Body:
        raw = await request.body()
        try:
            return model.model_validate_json(raw)
        except pydantic.ValidationError as e:
            # same shape FastAPI produces for declared bodies
            errors = [{**err, "loc": ("body", *err["loc"])} for err in e.errors(include_url=False)]
            raise RequestValidationError(errors) from e

    return dependency
