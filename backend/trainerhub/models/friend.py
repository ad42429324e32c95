from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FriendAdd(BaseModel):
    """Request body for adding a friend by their friend code."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    friend_code: str


class FriendSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    friend_code: str
