# runtime/registries.py
from collections.abc import Callable
from typing import Any

from path_snap.app.protocols import Decimator
from path_snap.config.models import (
    DecimatorAverageModel,
    DecimatorUnion,
    DecimatorWeightedModel,
)
from path_snap.domain.mechanics.mechanics_decimators import AverageMerger, WeightedDecimator

DecimatorFactory = Callable[[DecimatorUnion, dict[str, Any]], Decimator]

_decimator_registry: dict[str, DecimatorFactory] = {}


# ------------------- Decimator registries ---------------------------


def register_decimator(kind: str):
    def deco(fn: DecimatorFactory):
        _decimator_registry[kind] = fn
        return fn

    return deco


def make_decimator(cfg: DecimatorUnion, *, deps: dict[str, Any]) -> Decimator:
    """
    deps can include:
      - 'snap_threshold_m': float  # fallback for the cross-track threshold
    """
    try:
        factory = _decimator_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown decimator kind {cfg.kind!r}") from None
    return factory(cfg, deps)


@register_decimator("weighted")
def _make_weighted(cfg: DecimatorWeightedModel, deps):
    dist = cfg.distance_threshold_m
    if dist is None:
        dist = deps["snap_threshold_m"]
    return WeightedDecimator(
        distance_threshold_m=dist,
        angle_threshold_deg=cfg.angle_threshold_deg,
        area_threshold_m2=cfg.area_threshold_m2,
        angle_factor=cfg.angle_factor,
        area_factor=cfg.area_factor,
        distance_factor=cfg.distance_factor,
    )


@register_decimator("average")
def _make_average(cfg: DecimatorAverageModel, deps):
    return AverageMerger(merge_threshold_m=cfg.merge_threshold_m)
