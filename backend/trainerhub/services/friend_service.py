import logging

from trainerhub.database import JSONStore
from trainerhub.models.friend import FriendSummary

logger = logging.getLogger("trainerhub.friend_service")

USERS = "users"


class FriendServiceError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FriendNotFoundError(FriendServiceError):
    status_code = 404

    def __init__(self):
        super().__init__("No user with that friend code.")


class SelfFriendError(FriendServiceError):
    def __init__(self):
        super().__init__("You cannot add yourself.")


class AlreadyFriendsError(FriendServiceError):
    def __init__(self):
        super().__init__("Already in your friend list.")


async def add_friend(db: JSONStore, user_id: str, friend_code: str) -> dict:
    """Link two users by friend code, in both directions.

    The two friend lists are written by separate updates; there is no
    cross-document transaction.
    """
    friend = await db.find_one(USERS, {"friendCode": friend_code.strip().upper()})
    if not friend:
        raise FriendNotFoundError()
    if friend["id"] == user_id:
        raise SelfFriendError()

    def _link(user: dict) -> dict:
        friends = list(user.get("friends") or [])
        if friend["id"] in friends:
            raise AlreadyFriendsError()
        return {"friends": [*friends, friend["id"]]}

    user = await db.modify(USERS, {"id": user_id}, _link)
    if user is None:
        raise FriendNotFoundError()

    await db.modify(
        USERS,
        {"id": friend["id"]},
        lambda f: None if user_id in (f.get("friends") or [])
        else {"friends": [*(f.get("friends") or []), user_id]},
    )
    logger.info("Users %s and %s are now friends", user_id, friend["id"])
    return {"id": friend["id"], "name": friend.get("name")}


async def list_friends(db: JSONStore, user_id: str) -> list[dict]:
    """Summaries of the user's friends; ids pointing at missing users are skipped."""
    users = await db.read(USERS)
    by_id = {u.get("id"): u for u in users}
    me = by_id.get(user_id)
    if me is None:
        return []
    out: list[dict] = []
    for fid in me.get("friends") or []:
        f = by_id.get(fid)
        if f:
            out.append(
                FriendSummary(id=f["id"], name=f.get("name", ""), friend_code=f.get("friendCode", ""))
                .model_dump(by_alias=True)
            )
    return out
