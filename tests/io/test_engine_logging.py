import io
import json
import logging

from path_snap.domain.entities.commands import DeleteVertex, MoveVertex
from path_snap.domain.entities.geography import Coordinate, ReplacementInterval
from path_snap.io.engine_logging import EngineLogging, JsonLineFormatter, _default_json_logger
from path_snap.io.recorder import JsonlSink, MemorySink, Recorder


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


def _logging(debug=False):
    logger = logging.getLogger(f"path_snap.test.{debug}")
    logger.handlers[:] = []
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    h = ListHandler()
    logger.addHandler(h)
    return EngineLogging(run_id="r1", debug=debug, logger=logger), h


def test_lifecycle_events_carry_run_id():
    hooks, h = _logging()
    hooks.operation_start("snap", source_id=1, destination_id=2)
    hooks.noop("snap", reason="no_intervals")
    msgs = [(r.levelname, r.getMessage(), r.extra) for r in h.records]
    assert msgs[0] == (
        "INFO",
        "operation_start",
        {"run_id": "r1", "op": "snap", "source_id": 1, "destination_id": 2},
    )
    assert msgs[1][2]["reason"] == "no_intervals"


def test_interval_details_only_in_debug():
    iv = ReplacementInterval(1, 2, 0, 1, direction=1)
    hooks, h = _logging(debug=False)
    hooks.interval_closed(iv, source_id=1, destination_id=2)
    assert h.records == []

    hooks, h = _logging(debug=True)
    hooks.interval_closed(iv, source_id=1, destination_id=2)
    (rec,) = h.records
    assert rec.levelname == "DEBUG"
    assert rec.extra["src_start"] == 1 and rec.extra["direction"] == 1


def test_anomalies_are_warnings():
    hooks, h = _logging()
    hooks.direction_reversal(source_id=1, destination_id=2, index=3, previous=2, current=1)
    hooks.degenerate(path_id=1, reason="closed path below 3 vertices")
    assert [r.levelname for r in h.records] == ["WARNING", "WARNING"]


def test_default_logger_writes_json(capsys):
    logger = _default_json_logger(name="path_snap.test.json")
    logger.propagate = False
    hooks = EngineLogging(run_id="r2", logger=logger)
    hooks.operation_end("decimate", commands=3)
    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["msg"] == "operation_end"
    assert payload["run_id"] == "r2" and payload["commands"] == 3


def test_jsonl_sink_names_the_command():
    buf = io.StringIO()
    Recorder(JsonlSink(buf)).emit([MoveVertex(5, Coordinate(1.0, 2.0)), DeleteVertex(6)])
    rows = [json.loads(x) for x in buf.getvalue().splitlines()]
    assert rows[0] == {"command": "MoveVertex", "vertex_id": 5, "coord": {"lat": 1.0, "lon": 2.0}}
    assert rows[1] == {"command": "DeleteVertex", "vertex_id": 6}


def test_failing_sink_does_not_stop_the_others():
    class Broken:
        def write(self, cmd):
            raise OSError("disk full")

    mem = MemorySink()
    Recorder(Broken(), mem).emit([DeleteVertex(1)])
    assert mem.commands == [DeleteVertex(1)]


def test_formatter_handles_records_without_payload():
    rec = logging.LogRecord("path_snap", logging.INFO, __file__, 1, "plain %s", ("msg",), None)
    assert json.loads(JsonLineFormatter().format(rec)) == {
        "level": "INFO",
        "msg": "plain msg",
        "logger": "path_snap",
    }
