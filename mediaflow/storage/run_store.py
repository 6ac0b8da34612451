"""
Run Store - execution history, one JSON file per run.

Layout:
  {base_path}/runs/{run_id}.json

Run IDs embed their creation time (run_YYYYMMDD_HHMMSS_{hex8}), but history
is ordered on the recorded ``started_at`` so that runs from the same second
still come back newest first.
"""

import asyncio
import logging
from pathlib import Path

from mediaflow.schemas.workflow import RunRecord
from mediaflow.utils.io import atomic_write, validate_key

logger = logging.getLogger(__name__)


class RunStore:
    """File-backed store for ``RunRecord`` objects."""

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)
        self.runs_dir = self.base_path / "runs"

    def get_run_path(self, run_id: str) -> Path:
        validate_key(run_id)
        return self.runs_dir / f"{run_id}.json"

    async def save(self, record: RunRecord) -> None:
        """Atomically write a run record."""
        path = self.get_run_path(record.run_id)

        def _write():
            with atomic_write(path) as f:
                f.write(record.model_dump_json(indent=2))

        await asyncio.to_thread(_write)
        logger.debug(f"Saved run {record.run_id}")

    async def load(self, run_id: str, user_id: str | None = None) -> RunRecord | None:
        """
        Load a run record.

        Returns None if it does not exist, or if ``user_id`` is given and
        the run belongs to someone else.
        """
        path = self.get_run_path(run_id)

        def _read():
            if not path.exists():
                return None
            return RunRecord.model_validate_json(path.read_text(encoding="utf-8"))

        record = await asyncio.to_thread(_read)
        if record is not None and user_id is not None and record.user_id != user_id:
            return None
        return record

    async def list_runs(
        self,
        user_id: str | None = None,
        workflow_id: str | None = None,
        limit: int = 50,
    ) -> list[RunRecord]:
        """
        List runs, newest first.

        Args:
            user_id: Only runs by this user
            workflow_id: Only runs of this saved workflow
            limit: Maximum number of runs to return
        """

        def _scan():
            records = []
            if not self.runs_dir.exists():
                return records

            for path in self.runs_dir.glob("*.json"):
                try:
                    record = RunRecord.model_validate_json(path.read_text(encoding="utf-8"))
                except Exception as e:
                    logger.warning(f"Failed to load {path}: {e}")
                    continue

                if user_id and record.user_id != user_id:
                    continue
                if workflow_id and record.workflow_id != workflow_id:
                    continue
                records.append(record)

            records.sort(key=lambda r: (r.result.started_at, r.created_at), reverse=True)
            return records[:limit]

        return await asyncio.to_thread(_scan)
