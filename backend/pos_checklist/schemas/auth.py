from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional


class LoginRequest(BaseModel):
    # Optional so that a missing field is reported as 400, not a schema error
    username: Optional[str] = None
    password: Optional[str] = None


class UserSummary(BaseModel):
    id: str
    username: str


class LoginResponse(BaseModel):
    message: str
    user: UserSummary
    token: str


class VerifiedUser(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    username: str


class VerifyResponse(BaseModel):
    authenticated: bool
    user: VerifiedUser


class MessageResponse(BaseModel):
    message: str
