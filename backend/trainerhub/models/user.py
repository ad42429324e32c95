from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class Team(BaseModel):
    """A saved team. Member entries are opaque to the backend."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None  # Assigned on first save
    name: str = ""
    members: list[Any] = Field(default_factory=list)


class UserInDB(BaseModel):
    """Full user document as stored in users.json."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    email: EmailStr
    password: str  # argon2 hash
    name: str
    friend_code: str
    favorites: list[str] = Field(default_factory=list)
    teams: list[Team] = Field(default_factory=list)
    friends: list[str] = Field(default_factory=list)  # user ids


class UserCreate(BaseModel):
    """Request body for registration."""
    email: EmailStr
    password: str = Field(min_length=1)
    name: Optional[str] = None


class UserLogin(BaseModel):
    """Request body for login."""
    email: EmailStr
    password: str


class FavoriteToggle(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    pokemon_id: Union[str, int]

    @field_validator("pokemon_id")
    @classmethod
    def as_string(cls, v: Union[str, int]) -> str:
        return str(v)


class TeamSave(BaseModel):
    """Request body for creating or replacing a team."""
    team: Team
