# app/engine.py
from collections import defaultdict

from path_snap.app.candidates import select_candidates
from path_snap.app.hooks import EngineHooks, NoopHooks
from path_snap.app.protocols import Decimator
from path_snap.app.results import NoOpReason, OperationResult
from path_snap.config.models import EngineModel
from path_snap.domain.entities.commands import (
    Command,
    DeleteVertex,
    MoveVertex,
    ReplacePathSequence,
)
from path_snap.domain.entities.geography import ReplacementInterval, close_sequence
from path_snap.domain.mechanics import mechanics_vertex_snapper as vertex_snapper
from path_snap.domain.mechanics.mechanics_decimators import AverageMerger, Decimation
from path_snap.domain.mechanics.mechanics_reconciler import Reconciliation, reconcile
from path_snap.domain.mechanics.mechanics_run_tracker import track_runs
from path_snap.domain.state import DatasetSnapshot
from path_snap.io.recorder import Recorder


class SnapEngine:
    """
    Entry points for the host application.

    Every operation reads a snapshot and returns an OperationResult whose command
    list the caller commits in one transaction. Failed preconditions come back as
    an empty command list with a reason, never as an exception.
    """

    def __init__(
        self,
        cfg: EngineModel,
        *,
        decimator: Decimator,
        merger: AverageMerger,
        hooks: EngineHooks | None = None,
        recorder: Recorder | None = None,
    ):
        self.cfg = cfg
        self.decimator, self.merger = decimator, merger
        self.hooks = hooks or NoopHooks()
        self.recorder = recorder

    # --------------- Pure entry points -------------------

    def snap_vertex_to_path(
        self,
        snapshot: DatasetSnapshot,
        source_id: int,
        destination_id: int,
        threshold_m: float | None = None,
    ) -> list[ReplacementInterval]:
        threshold = self.cfg.snap.threshold_m if threshold_m is None else threshold_m
        return track_runs(snapshot, source_id, destination_id, threshold, hooks=self.hooks)

    def reconcile(
        self,
        snapshot: DatasetSnapshot,
        source_id: int,
        destination_id: int,
        intervals: list[ReplacementInterval],
    ) -> Reconciliation:
        return reconcile(
            snapshot,
            source_id,
            destination_id,
            intervals,
            angle_epsilon_deg=self.cfg.simplify.angle_epsilon_deg,
            hooks=self.hooks,
        )

    def decimate(self, snapshot: DatasetSnapshot, path_id: int) -> Decimation:
        return self.decimator.decimate(snapshot, path_id)

    # --------------- Helpers -----------------------------

    @staticmethod
    def _check(snapshot: DatasetSnapshot, path_ids) -> NoOpReason | None:
        if not path_ids:
            return NoOpReason.WRONG_SELECTION
        for pid in path_ids:
            path = snapshot.paths.get(pid)
            if path is None:
                return NoOpReason.UNKNOWN_PATH
            if len(set(path.open_ids())) < (3 if path.closed else 2):
                return NoOpReason.PATH_TOO_SHORT
        return None

    def _noop(self, op: str, reason: NoOpReason, **extra) -> OperationResult:
        self.hooks.noop(op, reason=reason.value, **extra)
        return OperationResult.noop(op, reason)

    def _finish(self, op: str, commands: list[Command], **extra) -> OperationResult:
        if not commands:
            return self._noop(op, NoOpReason.NOTHING_TO_CHANGE, **extra)
        if self.recorder:
            self.recorder.emit(commands)
        self.hooks.operation_end(op, commands=len(commands), **extra)
        return OperationResult(op, commands)

    def _snap_pair(
        self, snapshot: DatasetSnapshot, source_id: int, destination_id: int
    ) -> tuple[list[Command], NoOpReason | None]:
        src = snapshot.paths[source_id]
        if all(snapshot.is_protected(v) for v in src.open_ids()):
            return [], NoOpReason.NO_ELIGIBLE_VERTICES
        intervals = self.snap_vertex_to_path(snapshot, source_id, destination_id)
        if not intervals:
            return [], NoOpReason.NO_INTERVALS
        rec = self.reconcile(snapshot, source_id, destination_id, intervals)
        if rec.degenerate:
            return [], NoOpReason.DEGENERATE_RESULT
        return rec.commands(), None

    # --------------- Operations --------------------------

    def snap(
        self, snapshot: DatasetSnapshot, source_id: int, destination_id: int
    ) -> OperationResult:
        op = "snap"
        self.hooks.operation_start(op, source_id=source_id, destination_id=destination_id)
        if source_id == destination_id:
            return self._noop(op, NoOpReason.WRONG_SELECTION)
        reason = self._check(snapshot, [source_id, destination_id])
        if reason:
            return self._noop(op, reason)
        commands, reason = self._snap_pair(snapshot, source_id, destination_id)
        if reason:
            return self._noop(op, reason)
        return self._finish(op, commands)

    def snap_to_candidates(
        self, snapshot: DatasetSnapshot, source_ids: list[int]
    ) -> OperationResult:
        op = "snap_to_candidates"
        self.hooks.operation_start(op, sources=len(source_ids))
        reason = self._check(snapshot, source_ids)
        if reason:
            return self._noop(op, reason)
        candidates = select_candidates(snapshot, self.cfg.candidates, exclude=source_ids)
        if not candidates:
            return self._noop(op, NoOpReason.NO_CANDIDATES)

        work, commands = snapshot, []
        for sid in source_ids:
            for cid in candidates:
                cmds, _ = self._snap_pair(work, sid, cid)
                if cmds:
                    work = work.applied(cmds)
                    commands.extend(cmds)
        return self._finish(op, commands, candidates=len(candidates))

    def snap_vertices(self, snapshot: DatasetSnapshot, path_ids: list[int]) -> OperationResult:
        op = "snap_vertices"
        self.hooks.operation_start(op, paths=len(path_ids))
        reason = self._check(snapshot, path_ids)
        if reason:
            return self._noop(op, reason)
        movable = vertex_snapper.movable_vertices(snapshot, path_ids)
        if not movable:
            return self._noop(op, NoOpReason.NO_ELIGIBLE_VERTICES)
        candidates = select_candidates(snapshot, self.cfg.candidates, exclude=path_ids)
        if not candidates:
            return self._noop(op, NoOpReason.NO_CANDIDATES)
        result = vertex_snapper.snap_vertices(
            snapshot, movable, candidates, self.cfg.snap.threshold_m
        )
        return self._finish(op, result.commands(), moved=len(result.moved))

    def decimate_path(self, snapshot: DatasetSnapshot, path_id: int) -> OperationResult:
        op = "decimate"
        self.hooks.operation_start(op, path_id=path_id)
        reason = self._check(snapshot, [path_id])
        if reason:
            return self._noop(op, reason)
        d = self.decimate(snapshot, path_id)
        return self._finish(op, d.commands(snapshot), removed=len(d.removed))

    def simplify(self, snapshot: DatasetSnapshot, path_ids: list[int]) -> OperationResult:
        op = "simplify"
        self.hooks.operation_start(op, paths=len(path_ids))
        reason = self._check(snapshot, path_ids)
        if reason:
            return self._noop(op, reason)

        dropped_by: dict[int, set[int]] = defaultdict(set)
        moved = {}
        decimations = {}
        for pid in path_ids:
            d = decimations[pid] = self.decimate(snapshot, pid)
            for vid in d.removed:
                dropped_by[vid].add(pid)
            moved.update(d.moved)
        # a vertex goes only when every path using it let go of it
        doomed = {
            vid
            for vid, pids in dropped_by.items()
            if not snapshot.vertices[vid].tagged and snapshot.referrers(vid) <= pids
        }

        commands: list[Command] = []
        for pid in path_ids:
            path, d = snapshot.paths[pid], decimations[pid]
            if doomed.issuperset(d.removed):
                seq = d.vertex_ids
            else:
                seq = close_sequence([v for v in path.open_ids() if v not in doomed], path.closed)
            if seq != path.vertex_ids:
                commands.append(ReplacePathSequence(pid, tuple(seq)))
        commands.extend(DeleteVertex(vid) for vid in sorted(doomed))
        commands.extend(
            MoveVertex(vid, c)
            for vid, c in moved.items()
            if vid not in doomed and snapshot.coord(vid) != c
        )

        work = snapshot.applied(commands)
        commands.extend(self.merger.merge(work, path_ids).commands(work))
        return self._finish(op, commands, removed=len(doomed))
