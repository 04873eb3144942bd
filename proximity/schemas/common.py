# proximity/schemas/common.py
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

# Whitespace is stripped before the length checks, so blank text is a 422
ShortText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)]
LongText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]


class ErrorResponse(BaseModel):
    detail: str = Field(description="Error message")

    model_config = {"json_schema_extra": {"examples": [{"detail": "Not Found"}]}}


class OkResponse(BaseModel):
    ok: bool = Field(description="Always true on success")

    model_config = {"json_schema_extra": {"examples": [{"ok": True}]}}


class CoordinateIn(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0, description="Latitude (-90..90)")
    longitude: float = Field(ge=-180.0, le=180.0, description="Longitude (-180..180)")
