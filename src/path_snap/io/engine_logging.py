# io/engine_logging.py
import json
import logging
import sys
from dataclasses import asdict

from path_snap.app.hooks import NoopHooks
from path_snap.domain.entities.geography import ReplacementInterval


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; hook payloads ride in `extra={"extra": {...}}`."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {"level": record.levelname, "msg": record.getMessage(), "logger": record.name}
        payload.update(getattr(record, "extra", None) or {})
        return json.dumps(payload, default=str)


def _default_json_logger(name="path_snap", level="INFO"):
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(JsonLineFormatter())
    logger.addHandler(h)
    logger.setLevel(level)
    return logger


class EngineLogging(NoopHooks):
    """
    One place to shape and emit structured logs for engine operations.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.debug = run_id, debug
        self.log = logger or _default_json_logger(level=level)

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        payload = {"run_id": self.run_id}
        self.log.log(getattr(logging, level), msg, extra={"extra": {**payload, **extra}})

    # --------------------------------------------------------

    # operation lifecycle

    def operation_start(self, op: str, **extra):
        self._emit("INFO", "operation_start", op=op, **extra)

    def operation_end(self, op: str, *, commands: int, **extra):
        self._emit("INFO", "operation_end", op=op, commands=commands, **extra)

    def noop(self, op: str, *, reason: str, **extra):
        self._emit("INFO", "noop", op=op, reason=reason, **extra)

    # scan diagnostics

    def interval_closed(
        self, interval: ReplacementInterval, *, source_id: int, destination_id: int
    ):
        if self.debug:
            self._emit(
                "DEBUG",
                "interval_closed",
                source_id=source_id,
                destination_id=destination_id,
                **asdict(interval),
            )

    def direction_reversal(
        self, *, source_id: int, destination_id: int, index: int, previous: int, current: int
    ):
        self._emit(
            "WARNING",
            "direction_reversal",
            source_id=source_id,
            destination_id=destination_id,
            index=index,
            previous=previous,
            current=current,
        )

    def degenerate(self, *, path_id: int, reason: str):
        self._emit("WARNING", "degenerate", path_id=path_id, reason=reason)
