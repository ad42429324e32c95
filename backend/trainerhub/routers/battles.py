from fastapi import APIRouter, Depends, HTTPException, status

from trainerhub.database import JSONStore, get_db
from trainerhub.models.battle import BattleCreate, BattleJoin, BattleMove
from trainerhub.services import battle_service
from trainerhub.services.auth_service import get_current_user
from trainerhub.services.user_service import find_team

router = APIRouter(prefix="/api/battles", tags=["battles"])


@router.post("/create")
async def create(body: BattleCreate, user=Depends(get_current_user), db: JSONStore = Depends(get_db)):
    """Challenge another user. The creator takes the first turn."""
    return await battle_service.create_battle(
        db,
        user["id"],
        body.opponent_id,
        find_team(user, body.my_team_id),
        requester_name=user.get("name"),
    )


@router.get("")
async def active_battles(user=Depends(get_current_user), db: JSONStore = Depends(get_db)):
    return await battle_service.list_active_battles(db, user["id"])


@router.post("/{battle_id}/join")
async def join(
    battle_id: str, body: BattleJoin, user=Depends(get_current_user), db: JSONStore = Depends(get_db)
):
    """Accept a challenge with one of the caller's saved teams."""
    try:
        return await battle_service.join_battle(
            db, battle_id, user["id"], find_team(user, body.team_id), joiner_name=user.get("name"),
        )
    except battle_service.BattleError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)


@router.post("/{battle_id}/move")
async def move(
    battle_id: str, body: BattleMove, user=Depends(get_current_user), db: JSONStore = Depends(get_db)
):
    try:
        return await battle_service.submit_move(db, battle_id, user["id"], body.move)
    except battle_service.BattleError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)


@router.get("/{battle_id}")
async def get(battle_id: str, user=Depends(get_current_user), db: JSONStore = Depends(get_db)):
    battle = await battle_service.get_battle(db, battle_id)
    if battle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Battle not found.")
    return battle
