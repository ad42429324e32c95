from fastapi import APIRouter, Depends, HTTPException

from trainerhub.database import JSONStore, get_db
from trainerhub.models.friend import FriendAdd
from trainerhub.services import friend_service
from trainerhub.services.auth_service import get_current_user

router = APIRouter(prefix="/api/friends", tags=["friends"])


@router.post("/add")
async def add(body: FriendAdd, user=Depends(get_current_user), db: JSONStore = Depends(get_db)):
    try:
        friend = await friend_service.add_friend(db, user["id"], body.friend_code)
    except friend_service.FriendServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return {"message": "Friend added.", "friend": friend}


@router.get("")
async def friends(user=Depends(get_current_user), db: JSONStore = Depends(get_db)):
    return await friend_service.list_friends(db, user["id"])
