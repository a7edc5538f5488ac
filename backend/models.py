from typing import Optional
from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr, model_validator

from database import INTEGER_MAX, INTEGER_MIN


class PlaylistCreateRequest(BaseModel):
    name: StrictStr = Field(..., min_length=1)

    model_config = {"extra": "forbid", "str_strip_whitespace": True}


class PlaylistPatchRequest(BaseModel):
    name: Optional[StrictStr] = Field(default=None, min_length=1)
    is_public: Optional[StrictBool] = None

    model_config = {"extra": "forbid", "str_strip_whitespace": True}

    @model_validator(mode="after")
    def require_a_change(self):
        if self.name is None and self.is_public is None:
            raise ValueError('Provide "name" or "is_public"')
        return self


class PublishRequest(BaseModel):
    is_public: StrictBool = True

    model_config = {"extra": "forbid"}


class TrackAddRequest(BaseModel):
    track_id: StrictStr = Field(..., min_length=1)
    position: Optional[StrictInt] = Field(default=None, ge=INTEGER_MIN, le=INTEGER_MAX)

    model_config = {"extra": "forbid", "str_strip_whitespace": True}
