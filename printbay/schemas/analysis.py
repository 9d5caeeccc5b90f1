# printbay/schemas/analysis.py
from __future__ import annotations

from typing import Optional

from pydantic import Field, confloat, conint

from printbay.schemas._base import APIModel as BaseModel


class Dimensions(BaseModel):
    """Axis-aligned bounding box extents, millimetres."""
    x: confloat(ge=0) = Field(..., example=30.0)
    y: confloat(ge=0) = Field(..., example=30.0)
    z: confloat(ge=0) = Field(..., example=30.0)


class ModelAnalysisRequest(BaseModel):
    file_name: str = Field(..., min_length=1, example="benchy.stl")
    file_size: conint(ge=0) = 0
    file_type: str = ""
    file_id: Optional[str] = None
    analysis_level: str = Field("detailed", example="detailed")


class ModelAnalysisResult(BaseModel):
    analysis_id: str
    file_name: str
    vertices: int
    faces: int
    volume: float = Field(..., description="cm³")
    dimensions: Dimensions
    analysis_time: int = Field(..., description="Milliseconds spent analysing")


class MeshStats(BaseModel):
    """Genuine geometry measured from mesh bytes."""
    vertices: int
    faces: int
    volume: float = Field(..., description="cm³ (absolute, watertight or not)")
    dimensions: Dimensions
    watertight: bool
