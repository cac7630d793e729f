"""Session registry models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the frontend."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Session(CamelModel):
    """A process-wide record marking a user as logged in.

    Attributes:
        user_id: Identifier of the user (session key)
        email: Email cached at login time
        name: Display name cached at login time
        login_time: UTC time the session was created
    """

    user_id: str
    email: str
    name: str
    login_time: datetime


class SessionInfo(CamelModel):
    """Session metadata attached to profile and check-session responses.

    Attributes:
        login_time: UTC time the session was created
        session_duration: Milliseconds elapsed since login_time
    """

    login_time: datetime
    session_duration: int = Field(ge=0)
