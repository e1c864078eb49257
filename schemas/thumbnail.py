# schemas/thumbnail.py
import json
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class CropSettings(BaseModel):
    top: float = Field(0.0, ge=0, le=100)
    right: float = Field(0.0, ge=0, le=100)
    bottom: float = Field(0.0, ge=0, le=100)
    left: float = Field(0.0, ge=0, le=100)


class DesignShape(BaseModel):
    id: Optional[str] = None
    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)
    rotation: float = 0.0
    color: str = Field("transparent", pattern=r"^[#(),.%\w\s-]+$")
    image: str
    crop_settings: Optional[CropSettings] = Field(None, alias="cropSettings")

    model_config = {"populate_by_name": True}


class DesignData(BaseModel):
    body: List[DesignShape] = Field(default_factory=list)


class ThumbnailRequest(BaseModel):
    design_data: DesignData
    fabric_image: Optional[str] = None

    @field_validator("design_data", mode="before")
    @classmethod
    def decode_json(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                raise ValueError("design_data is not valid JSON")
        return value
