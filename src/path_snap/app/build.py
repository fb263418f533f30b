# path_snap/app/build.py
from collections.abc import Mapping

from path_snap.app.engine import SnapEngine
from path_snap.app.hooks import NoopHooks
from path_snap.app.protocols import CommandSink
from path_snap.config.models import EngineModel
from path_snap.io.engine_logging import EngineLogging  # JSON logs
from path_snap.io.recorder import Recorder
from path_snap.runtime.registries import make_decimator


def build(
    cfg: EngineModel | Mapping | None = None,
    *,
    use_logging: bool = True,
    sinks: list[CommandSink] | None = None,
) -> SnapEngine:
    # 0) Validate config
    if cfg is None:
        model = EngineModel()
    else:
        model = cfg if isinstance(cfg, EngineModel) else EngineModel.model_validate(cfg)

    # 1) Hooks & recorder
    hooks = (
        EngineLogging(run_id=model.run_id, level=model.log.level, debug=model.log.debug)
        if use_logging
        else NoopHooks()
    )
    recorder = Recorder(*sinks) if sinks else None

    # 2) Decimators
    deps = {"snap_threshold_m": model.snap.threshold_m}
    decimator = make_decimator(model.decimator, deps=deps)
    merger = make_decimator(model.merge, deps=deps)

    return SnapEngine(model, decimator=decimator, merger=merger, hooks=hooks, recorder=recorder)
