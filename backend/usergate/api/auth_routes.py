# backend/usergate/api/auth_routes.py

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from usergate.api.deps_auth import get_current_claims, get_hasher, get_settings, get_store, get_token_service
from usergate.api.responses import success_response
from usergate.api.schemas import LoginIn, SignupIn, public_user
from usergate.core.config import Settings
from usergate.core.errors import INVALID_CREDENTIALS, AuthenticationError, NotFoundError, StoreError, from_store_error
from usergate.core.security import PasswordHasher, TokenClaims, TokenService
from usergate.models.user import Role, User
from usergate.services.user_store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_for(user: User, tokens: TokenService) -> str:
    return tokens.issue(TokenClaims(user_id=user.id, email=user.email, role=user.role))


def _set_session_cookie(response: JSONResponse, token: str, cfg: Settings) -> None:
    response.set_cookie(
        key=cfg.cookie_name,
        value=token,
        max_age=cfg.cookie_max_age,
        httponly=True,
        secure=cfg.is_production,
        samesite="lax",
    )


def _session_payload(user: User, token: str) -> dict:
    out = public_user(user)
    return {
        "user": {k: out[k] for k in ("id", "email", "name", "role")},
        "token": token,
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupIn,
    store: UserStore = Depends(get_store),
    hasher: PasswordHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_token_service),
    cfg: Settings = Depends(get_settings),
):
    try:
        user = store.create(
            email=payload.email,
            password_hash=hasher.hash(payload.password),
            name=payload.name,
            role=Role.USER,
        )
    except StoreError as e:
        raise from_store_error(e) from e

    token = _issue_for(user, tokens)
    logger.info("Signed up user %s", user.id)

    response = success_response(_session_payload(user, token), status.HTTP_201_CREATED)
    _set_session_cookie(response, token, cfg)
    return response


@router.post("/login")
def login(
    payload: LoginIn,
    store: UserStore = Depends(get_store),
    hasher: PasswordHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_token_service),
    cfg: Settings = Depends(get_settings),
):
    try:
        user = store.find_by_email(payload.email)
    except StoreError as e:
        raise from_store_error(e) from e

    # same answer, and the same hashing work, for unknown email and wrong password
    if user is None:
        valid = hasher.verify_dummy(payload.password)
    else:
        valid = hasher.verify(payload.password, user.password_hash)

    if not valid:
        logger.info("Rejected login attempt")
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = _issue_for(user, tokens)
    logger.info("Logged in user %s", user.id)

    response = success_response(_session_payload(user, token))
    _set_session_cookie(response, token, cfg)
    return response


@router.post("/logout")
def logout(cfg: Settings = Depends(get_settings)):
    # the JWT itself stays valid until exp; only the browser copy goes away
    response = success_response({"message": "Logged out successfully"})
    response.delete_cookie(
        key=cfg.cookie_name,
        httponly=True,
        secure=cfg.is_production,
        samesite="lax",
    )
    return response


@router.get("/me")
def me(
    claims: TokenClaims = Depends(get_current_claims),
    store: UserStore = Depends(get_store),
):
    try:
        user = store.find_by_id(claims.user_id)
    except StoreError as e:
        raise from_store_error(e) from e

    if not user:
        raise NotFoundError()

    out = public_user(user)
    return success_response({"user": {k: out[k] for k in ("id", "email", "name", "role")}})
