# io/recorder.py
import json
import logging
import sys
from dataclasses import asdict

from path_snap.app.protocols import CommandSink
from path_snap.domain.entities.commands import Command

logger = logging.getLogger("path_snap")


class JsonlSink:
    def __init__(self, fp=sys.stdout):
        self.fp = fp

    def write(self, cmd: Command) -> None:
        self.fp.write(json.dumps({"command": type(cmd).__name__, **asdict(cmd)}) + "\n")


class MemorySink:
    def __init__(self):
        self.commands: list[Command] = []

    def write(self, cmd: Command) -> None:
        self.commands.append(cmd)


class Recorder:
    def __init__(self, *sinks: CommandSink):
        self.sinks = sinks or (JsonlSink(),)

    def emit(self, commands: list[Command]):
        for s in self.sinks:
            try:
                for cmd in commands:
                    s.write(cmd)
            except Exception:
                logger.exception("command sink %s failed", type(s).__name__)  # never break the engine
