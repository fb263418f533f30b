from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False


class SnapModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    threshold_m: float = 10.0

    @field_validator("threshold_m")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("threshold_m must be > 0")
        return v


class SimplifyModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    angle_epsilon_deg: float = 0.5

    @field_validator("angle_epsilon_deg")
    @classmethod
    def _nonneg(cls, v: float) -> float:
        if v < 0:
            raise ValueError("angle_epsilon_deg must be >= 0")
        return v


# ----------------- DECIMATORS ---------------------


class DecimatorWeightedModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["weighted"] = "weighted"
    angle_threshold_deg: float = 10.0
    area_threshold_m2: float = 5.0
    distance_threshold_m: float | None = None  # None => snap threshold
    angle_factor: float = 1.0
    area_factor: float = 1.0
    distance_factor: float = 3.0

    @field_validator("angle_threshold_deg", "area_threshold_m2", "distance_threshold_m")
    def _positive(cls, v: float | None, info: ValidationInfo) -> float | None:
        if v is not None and v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v


class DecimatorAverageModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["average"] = "average"
    merge_threshold_m: float = 0.2

    @field_validator("merge_threshold_m")
    def _positive(cls, v: float, info: ValidationInfo) -> float:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v


DecimatorUnion = Annotated[
    DecimatorWeightedModel | DecimatorAverageModel, Field(discriminator="kind")
]


# ----------------- CANDIDATES ---------------------


class CandidateModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    natural: list[str] = Field(
        default_factory=lambda: [
            "wood",
            "scrub",
            "heath",
            "moor",
            "grassland",
            "fell",
            "water",
            "wetland",
            "beach",
            "coastline",
        ]
    )
    ignored_landuse: list[str] = Field(default_factory=lambda: ["military"])
    waterway: list[str] = Field(default_factory=lambda: ["riverbank", "dock"])
    highway: bool = True
    min_length_m: float = 100.0

    @field_validator("min_length_m")
    @classmethod
    def _nonneg(cls, v: float) -> float:
        if v < 0:
            raise ValueError("min_length_m must be >= 0")
        return v


# ------------------------------------------------------------------


class EngineModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    run_id: str = "local"
    log: LogModel = LogModel()
    snap: SnapModel = SnapModel()
    simplify: SimplifyModel = SimplifyModel()
    decimator: DecimatorUnion = Field(default_factory=DecimatorWeightedModel)
    merge: DecimatorAverageModel = Field(default_factory=DecimatorAverageModel)
    candidates: CandidateModel = Field(default_factory=CandidateModel)
