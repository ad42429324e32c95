"""
backend/trainerhub/services/user_service.py

Purpose:
    Account, favorites and saved-team operations on the ``users`` collection.
    List-valued fields are changed through ``JSONStore.modify`` so the read of
    the current list and the write of the new one happen in one critical
    section. Registration builds the new document through ``JSONStore.add_from``
    so the email and friend-code uniqueness checks see the stored users.

Dependencies:
    - trainerhub.database
    - trainerhub.services.auth_service (password hashing)
"""

import logging
import secrets
from typing import Any, Optional

from trainerhub.database import JSONStore
from trainerhub.models.user import UserInDB
from trainerhub.services.auth_service import hash_password, verify_password
from trainerhub.utils import time_id

logger = logging.getLogger("trainerhub.user_service")

USERS = "users"
FRIEND_CODE_ATTEMPTS = 20


class UserServiceError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateEmailError(UserServiceError):
    def __init__(self):
        super().__init__("User already exists.")


class UserNotFoundError(UserServiceError):
    def __init__(self, message: str = "User not found."):
        super().__init__(message)


class InvalidPasswordError(UserServiceError):
    status_code = 403

    def __init__(self):
        super().__init__("Wrong password.")


def generate_friend_code() -> str:
    """Six upper-case hex characters, e.g. ``A1B2C3``."""
    return secrets.token_hex(3).upper()


def _unique_friend_code(users: list[dict]) -> str:
    taken = {u.get("friendCode") for u in users}
    for _ in range(FRIEND_CODE_ATTEMPTS):
        code = generate_friend_code()
        if code not in taken:
            return code
    raise RuntimeError("Could not generate a unique friend code.")


def public_profile(user: dict) -> dict:
    """The user document without its password hash."""
    return {k: v for k, v in user.items() if k != "password"}


def summary(user: dict) -> dict:
    return {
        "id": user["id"],
        "name": user.get("name"),
        "email": user.get("email"),
        "friendCode": user.get("friendCode"),
    }


async def register_user(
    db: JSONStore, email: str, password: str, name: Optional[str] = None
) -> dict:
    """Store a new user; email and friend code are unique among stored users."""
    hashed = hash_password(password)

    def _new_user(users: list[dict]) -> dict:
        if any(u.get("email") == email for u in users):
            raise DuplicateEmailError()
        user = UserInDB(
            id=time_id(),
            email=email,
            password=hashed,
            name=name or email.split("@")[0],
            friend_code=_unique_friend_code(users),
        )
        return user.model_dump(by_alias=True)

    try:
        doc = await db.add_from(USERS, _new_user)
    except DuplicateEmailError:
        logger.warning("Registration rejected, email already in use")
        raise
    logger.info("User registered: %s", doc["id"])
    return doc


async def authenticate(db: JSONStore, email: str, password: str) -> dict:
    user = await db.find_one(USERS, {"email": email})
    if not user:
        raise UserNotFoundError()
    if not verify_password(password, user.get("password", "")):
        logger.warning("Failed login for user %s", user["id"])
        raise InvalidPasswordError()
    return user


async def get_user(db: JSONStore, user_id: str) -> Optional[dict]:
    return await db.find_one(USERS, {"id": user_id})


async def toggle_favorite(db: JSONStore, user_id: str, pokemon_id: Any) -> list[str]:
    """Add ``pokemon_id`` to the favorites, or remove it if already there."""
    pokemon_id = str(pokemon_id)

    def _toggle(user: dict) -> dict:
        favorites = [str(f) for f in user.get("favorites") or []]
        if pokemon_id in favorites:
            favorites = [f for f in favorites if f != pokemon_id]
        else:
            favorites.append(pokemon_id)
        return {"favorites": favorites}

    updated = await db.modify(USERS, {"id": user_id}, _toggle)
    if updated is None:
        raise UserNotFoundError()
    return updated["favorites"]


async def list_teams(db: JSONStore, user_id: str) -> list[dict]:
    user = await get_user(db, user_id)
    if user is None:
        raise UserNotFoundError()
    return user.get("teams") or []


def find_team(user: dict, team_id: Optional[str]) -> Optional[dict]:
    if team_id is None:
        return None
    return next((t for t in user.get("teams") or [] if t.get("id") == team_id), None)


async def save_team(db: JSONStore, user_id: str, team: dict) -> list[dict]:
    """Replace the team with the same id, or append it (assigning an id if needed)."""
    team = dict(team)
    if not team.get("id"):
        team["id"] = time_id()

    def _save(user: dict) -> dict:
        teams = list(user.get("teams") or [])
        for index, existing in enumerate(teams):
            if existing.get("id") == team["id"]:
                teams[index] = team
                break
        else:
            teams.append(team)
        return {"teams": teams}

    updated = await db.modify(USERS, {"id": user_id}, _save)
    if updated is None:
        raise UserNotFoundError()
    logger.info("User %s saved team %s", user_id, team["id"])
    return updated["teams"]


async def delete_team(db: JSONStore, user_id: str, team_id: str) -> list[dict]:
    updated = await db.modify(
        USERS,
        {"id": user_id},
        lambda user: {"teams": [t for t in user.get("teams") or [] if t.get("id") != team_id]},
    )
    if updated is None:
        raise UserNotFoundError()
    return updated["teams"]
