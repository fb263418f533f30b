# io/snapshot.py
import json
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from path_snap.domain.entities.geography import Coordinate, Path, Vertex
from path_snap.domain.state import DatasetSnapshot


class VertexRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: int
    lat: float
    lon: float
    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("lat")
    @classmethod
    def _lat_range(cls, v: float) -> float:
        if not -90.0 <= v <= 90.0:
            raise ValueError(f"latitude {v} out of range")
        return v

    @field_validator("lon")
    @classmethod
    def _lon_range(cls, v: float) -> float:
        if not -180.0 <= v <= 180.0:
            raise ValueError(f"longitude {v} out of range")
        return v


class PathRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: int
    vertices: list[int]
    tags: dict[str, str] = Field(default_factory=dict)


class SnapshotRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")
    vertices: list[VertexRecord] = Field(default_factory=list)
    paths: list[PathRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_refs(self):
        known = {v.id for v in self.vertices}
        if len(known) != len(self.vertices):
            raise ValueError("duplicate vertex ids")
        for p in self.paths:
            missing = [v for v in p.vertices if v not in known]
            if missing:
                raise ValueError(f"path {p.id} references unknown vertices {missing}")
        return self

    def to_snapshot(self) -> DatasetSnapshot:
        return DatasetSnapshot.build(
            (Vertex(v.id, Coordinate(v.lat, v.lon), dict(v.tags)) for v in self.vertices),
            (Path(p.id, list(p.vertices), dict(p.tags)) for p in self.paths),
        )


def load_snapshot(src: Mapping | str | os.PathLike) -> DatasetSnapshot:
    if isinstance(src, Mapping):
        return SnapshotRecord.model_validate(src).to_snapshot()
    with open(os.path.expandvars(os.path.expanduser(src)), encoding="utf-8") as f:
        return SnapshotRecord.model_validate(json.load(f)).to_snapshot()
