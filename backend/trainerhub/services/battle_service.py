import copy
import logging
from typing import Any, Optional

from trainerhub.database import JSONStore
from trainerhub.models.battle import BattleInDB
from trainerhub.models.user import Team
from trainerhub.utils import now_ms, time_id

logger = logging.getLogger("trainerhub.battle_service")

BATTLES = "battles"
DEFAULT_MOVE = "Attack"


class BattleError(Exception):
    """Recoverable battle failure; ``status_code`` is what the API answers with."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BattleNotFoundError(BattleError):
    status_code = 404

    def __init__(self, battle_id: str):
        super().__init__("Battle not found.")
        self.battle_id = battle_id


class BattleForbiddenError(BattleError):
    status_code = 403

    def __init__(self, message: str = "Not authorized."):
        super().__init__(message)


class TeamNotFoundError(BattleError):
    def __init__(self, message: str = "Team not found."):
        super().__init__(message)


class OutOfTurnError(BattleError):
    def __init__(self, message: str = "It is not your turn."):
        super().__init__(message)


async def create_battle(
    db: JSONStore,
    requester_id: str,
    opponent_id: str,
    requester_team: Optional[dict],
    requester_name: Optional[str] = None,
) -> dict:
    """Open a battle against ``opponent_id``; the creator moves first.

    Neither the opponent nor team ownership is checked here, callers validate
    upstream. The team is stored as a snapshot.
    """
    team_snapshot = copy.deepcopy(requester_team)
    if team_snapshot is not None:
        Team.model_validate(team_snapshot)
    battle = BattleInDB(
        id=time_id(),
        player1=requester_id,
        player2=opponent_id,
        status="waiting_for_opponent",
        turn=requester_id,
        logs=[f"Battle created by {requester_name or requester_id}"],
        last_update=now_ms(),
    )
    # Opaque team fields are stored exactly as the caller sent them
    doc = {**battle.model_dump(by_alias=True), "player1Team": team_snapshot}
    await db.add(BATTLES, doc)
    logger.info("Battle %s created: %s vs %s", doc["id"], requester_id, opponent_id)
    return doc


async def join_battle(
    db: JSONStore,
    battle_id: str,
    joiner_id: str,
    joiner_team: Optional[dict],
    joiner_name: Optional[str] = None,
) -> dict:
    """Accept a challenge as the designated second player.

    Moves the battle to ``active``. The turn stays with the creator.
    """

    def _join(battle: dict) -> dict[str, Any]:
        if battle.get("player2") != joiner_id:
            raise BattleForbiddenError()
        if joiner_team is None:
            raise TeamNotFoundError()
        return {
            "player2Team": copy.deepcopy(joiner_team),
            "status": "active",
            "logs": [*battle.get("logs", []), f"{joiner_name or joiner_id} joined the battle!"],
        }

    try:
        updated = await db.modify(BATTLES, {"id": battle_id}, _join)
    except BattleError as exc:
        logger.warning("Join rejected for battle %s by %s: %s", battle_id, joiner_id, exc.message)
        raise
    if updated is None:
        raise BattleNotFoundError(battle_id)
    logger.info("User %s joined battle %s", joiner_id, battle_id)
    return updated


async def submit_move(
    db: JSONStore, battle_id: str, requester_id: str, move: Optional[str] = None
) -> dict:
    """Log a move by the player whose turn it is and hand the turn over.

    Only turn ownership is enforced; the battle status is not checked and no
    game effect is computed.
    """

    def _move(battle: dict) -> dict[str, Any]:
        if battle.get("turn") != requester_id:
            raise OutOfTurnError()
        is_p1 = battle.get("player1") == requester_id
        next_turn = battle.get("player2") if is_p1 else battle.get("player1")
        return {
            "turn": next_turn,
            "logs": [*battle.get("logs", []), f"Player {requester_id} used {move or DEFAULT_MOVE}!"],
            "lastUpdate": now_ms(),
        }

    try:
        updated = await db.modify(BATTLES, {"id": battle_id}, _move)
    except OutOfTurnError:
        logger.warning("Out-of-turn move in battle %s by %s", battle_id, requester_id)
        raise
    if updated is None:
        raise BattleNotFoundError(battle_id)
    logger.info("Battle %s: %s used %s", battle_id, requester_id, move or DEFAULT_MOVE)
    return updated


async def get_battle(db: JSONStore, battle_id: str) -> Optional[dict]:
    return await db.find_one(BATTLES, {"id": battle_id})


async def list_active_battles(db: JSONStore, user_id: str) -> list[dict]:
    """Battles the user takes part in that have not finished."""
    return await db.find(
        BATTLES,
        lambda b: (b.get("player1") == user_id or b.get("player2") == user_id)
        and b.get("status") != "finished",
    )
