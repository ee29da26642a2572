# backend/usergate/api/user_routes.py

import logging

from fastapi import APIRouter, Depends, status

from usergate.api.deps_auth import get_hasher, get_store, guarded_body, require_admin
from usergate.api.responses import success_response
from usergate.api.schemas import CreateUserIn, UpdateUserIn, public_user
from usergate.core.errors import NotFoundError, StoreError, from_store_error
from usergate.core.security import PasswordHasher, TokenClaims
from usergate.services.user_store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------- USERS (admin only can list / write) ----------

@router.get("/users")
def list_users(
    store: UserStore = Depends(get_store),
    _admin: TokenClaims = Depends(require_admin),
):
    try:
        users = store.list_all()
    except StoreError as e:
        raise from_store_error(e) from e

    return success_response({"users": [public_user(u) for u in users]})


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: CreateUserIn = Depends(guarded_body(CreateUserIn, require_admin)),
    store: UserStore = Depends(get_store),
    hasher: PasswordHasher = Depends(get_hasher),
    admin: TokenClaims = Depends(require_admin),
):
    try:
        user = store.create(
            email=payload.email,
            password_hash=hasher.hash(payload.password),
            name=payload.name,
            role=payload.role,
        )
    except StoreError as e:
        raise from_store_error(e) from e

    logger.info("Admin %s created user %s (%s)", admin.user_id, user.id, user.role)
    return success_response({"user": public_user(user)}, status.HTTP_201_CREATED)


# ---------- SINGLE USER ----------

@router.get("/users/{user_id}")
def get_user(user_id: str, store: UserStore = Depends(get_store)):
    try:
        user = store.find_by_id(user_id)
    except StoreError as e:
        raise from_store_error(e) from e

    if not user:
        raise NotFoundError()

    return success_response({"user": public_user(user)})


@router.patch("/users/{user_id}")
def update_user(
    user_id: str,
    payload: UpdateUserIn = Depends(guarded_body(UpdateUserIn, require_admin)),
    store: UserStore = Depends(get_store),
    admin: TokenClaims = Depends(require_admin),
):
    changes = payload.changes()

    try:
        user = store.update(user_id, changes)
    except StoreError as e:
        raise from_store_error(e) from e

    logger.info("Admin %s updated user %s (%s)", admin.user_id, user.id, ", ".join(sorted(changes)))
    return success_response({"user": public_user(user)})


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    store: UserStore = Depends(get_store),
    admin: TokenClaims = Depends(require_admin),
):
    try:
        store.delete(user_id)
    except StoreError as e:
        raise from_store_error(e) from e

    logger.info("Admin %s deleted user %s", admin.user_id, user_id)
    return success_response({"message": "User deleted successfully"})
