"""
User accounts: registration, login, profile and admin role management.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from loguru import logger
from pymongo.errors import DuplicateKeyError

from auth import (
    MAX_PASSWORD_LENGTH,
    Identity,
    create_access_token,
    get_current_identity,
    get_optional_identity,
    get_settings,
    get_store,
    hash_password,
    is_admin_email,
    require_admin,
    require_same_email,
    verify_password,
)
from config import Settings
from crud import require_fields
from database import USER_PUBLIC_PROJECTION, Store, create_document, get_documents, parse_object_id, serialize_document, utcnow
from errors import Conflict, Forbidden, InvalidCredentials, InvalidField, NotFound, store_errors
from schemas import LoginRequest, ProfileUpdate, RegisterRequest, Role, RoleUpdate, User

router = APIRouter(tags=["Users"])


def set_user_role(store: Store, user_id: str, role: Role) -> Dict[str, Any]:
    """Assign role to the user with user_id. Raises NotFound if absent."""
    oid = parse_object_id(user_id)
    if oid is None:
        raise NotFound("User not found")
    with store_errors("updating user role"):
        result = store.users.update_one({"_id": oid}, {"$set": {"role": role.value, "updatedAt": utcnow()}})
    if result.matched_count == 0:
        raise NotFound("User not found")
    logger.info("User {} role set to {}", user_id, role.value)
    return {"matchedCount": result.matched_count, "modifiedCount": result.modified_count, "role": role.value}


def toggle_user_role(store: Store, user_id: str) -> Dict[str, Any]:
    oid = parse_object_id(user_id)
    if oid is None:
        raise NotFound("User not found")
    with store_errors("reading user role"):
        user = store.users.find_one({"_id": oid}, {"role": 1})
    if not user:
        raise NotFound("User not found")
    role = Role.member if user.get("role") == Role.admin.value else Role.admin
    return set_user_role(store, user_id, role)


# Auth endpoints
@router.post("/api/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    caller: Optional[Identity] = Depends(get_optional_identity),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    require_fields(payload, ("name", "email", "password"))
    if len(payload.password) > MAX_PASSWORD_LENGTH:
        raise InvalidField(f"Password must be at most {MAX_PASSWORD_LENGTH} characters")
    if payload.role == Role.admin and (caller is None or not is_admin_email(store, caller.email)):
        raise Forbidden("Only an admin can create admin accounts")

    with store_errors("registering user"):
        if store.users.find_one({"email": payload.email}, {"_id": 1}):
            raise Conflict()

        user = User(
            name=payload.name,
            email=payload.email,
            password=hash_password(payload.password),
            photo=payload.photo,
            role=payload.role,
        )
        try:
            user_id = create_document(store.users, user)
        except DuplicateKeyError:
            # lost the race against a concurrent registration
            raise Conflict()

    logger.info("User registered: {}", payload.email)
    token = create_access_token({"id": user_id, "email": payload.email}, settings)
    return {"message": "User registered successfully", "userId": user_id, "token": token}


@router.post("/api/login")
def login(
    payload: LoginRequest,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    require_fields(payload, ("email", "password"), "Email and password are required")

    with store_errors("logging in"):
        user = store.users.find_one({"email": payload.email})
    if not user:
        raise NotFound("User not found", status_code=status.HTTP_400_BAD_REQUEST)
    if not verify_password(payload.password, user.get("password", "")):
        raise InvalidCredentials()

    claims = {
        "id": str(user["_id"]),
        "name": user.get("name"),
        "email": user["email"],
        "role": user.get("role") or Role.member.value,
        "photo": user.get("photo"),
    }
    return {"message": "Login successful", "token": create_access_token(claims, settings)}


@router.put("/api/update-profile")
def update_profile(
    payload: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    store: Store = Depends(get_store),
):
    values = require_fields(payload, ("name", "photo"), "Name and photo are required")
    oid = parse_object_id(identity.id)
    if oid is None:
        raise NotFound("User not found")

    values["updatedAt"] = utcnow()
    with store_errors("updating profile"):
        result = store.users.update_one({"_id": oid}, {"$set": values})
    if result.matched_count == 0:
        raise NotFound("User not found")
    return {"message": "Profile updated successfully"}


@router.get("/api/user")
def get_user(identity: Identity = Depends(get_current_identity), store: Store = Depends(get_store)):
    oid = parse_object_id(identity.id)
    user = None
    if oid is not None:
        with store_errors("fetching user"):
            user = store.users.find_one({"_id": oid}, USER_PUBLIC_PROJECTION)
    if not user:
        raise NotFound("User not found")
    return {"user": serialize_document(user)}


# Admin endpoints
@router.get("/users/admin/{email}")
def is_admin(email: str, identity: Identity = Depends(get_current_identity), store: Store = Depends(get_store)):
    email = require_same_email(email, identity)
    return {"admin": is_admin_email(store, email)}


@router.patch("/users/admin/{user_id}")
def toggle_admin(user_id: str, _: Identity = Depends(require_admin), store: Store = Depends(get_store)):
    return toggle_user_role(store, user_id)


@router.put("/users/{user_id}/role")
def assign_role(
    user_id: str,
    payload: RoleUpdate,
    _: Identity = Depends(require_admin),
    store: Store = Depends(get_store),
):
    return set_user_role(store, user_id, payload.role)


@router.get("/users")
def list_users(_: Identity = Depends(require_admin), store: Store = Depends(get_store)):
    with store_errors("fetching users"):
        return get_documents(store.users, projection=USER_PUBLIC_PROJECTION)
