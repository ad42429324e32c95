from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from trainerhub.models.user import Team

BattleStatus = Literal["waiting_for_opponent", "active", "finished"]


class BattleInDB(BaseModel):
    """Battle document as stored in battles.json."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    player1: str
    player2: str
    player1_team: Optional[Team] = Field(default=None, alias="player1Team")  # Snapshot at creation
    player2_team: Optional[Team] = Field(default=None, alias="player2Team")  # Snapshot at join
    status: BattleStatus = "waiting_for_opponent"
    turn: str  # user id expected to move next
    logs: list[str] = Field(default_factory=list)
    last_update: int  # epoch millis


class BattleCreate(BaseModel):
    """Request body for challenging another user."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    opponent_id: str
    my_team_id: Optional[str] = None


class BattleJoin(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    team_id: Optional[str] = None


class BattleMove(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    move: Optional[str] = None
    pokemon_index: Optional[int] = None  # Accepted for client compatibility, not resolved
