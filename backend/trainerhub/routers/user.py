from fastapi import APIRouter, Depends, HTTPException

from trainerhub.database import JSONStore, get_db
from trainerhub.models.user import FavoriteToggle, TeamSave
from trainerhub.services import user_service
from trainerhub.services.auth_service import get_current_user

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/favorites")
async def favorites(user=Depends(get_current_user)):
    return user.get("favorites") or []


@router.post("/favorites")
async def toggle_favorite(
    body: FavoriteToggle,
    user=Depends(get_current_user),
    db: JSONStore = Depends(get_db),
):
    """Add the Pokemon to the favorites, or remove it when already present."""
    try:
        return await user_service.toggle_favorite(db, user["id"], body.pokemon_id)
    except user_service.UserServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)


@router.get("/teams")
async def teams(user=Depends(get_current_user)):
    return user.get("teams") or []


@router.post("/teams")
async def save_team(
    body: TeamSave,
    user=Depends(get_current_user),
    db: JSONStore = Depends(get_db),
):
    """Create a team, or replace the saved team with the same id."""
    try:
        return await user_service.save_team(db, user["id"], body.team.model_dump())
    except user_service.UserServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)


@router.delete("/teams/{team_id}")
async def delete_team(
    team_id: str,
    user=Depends(get_current_user),
    db: JSONStore = Depends(get_db),
):
    try:
        return await user_service.delete_team(db, user["id"], team_id)
    except user_service.UserServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
