"""
Workflow Store - saved workflow graphs, one JSON file per workflow.

Layout:
  {base_path}/workflows/{workflow_id}.json
"""

import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from mediaflow.graph.edge import EdgeLike, NodeLike
from mediaflow.schemas.workflow import SavedWorkflow
from mediaflow.utils.io import atomic_write, validate_key

logger = logging.getLogger(__name__)


class WorkflowNotFoundError(LookupError):
    """The workflow does not exist or is not owned by the requesting user."""

    def __init__(self, workflow_id: str):
        self.workflow_id = workflow_id
        super().__init__(f"Workflow not found: {workflow_id}")


class WorkflowStore:
    """
    File-backed store for saved workflows.

    Ownership is enforced on read: a workflow saved by one user is reported
    as not found to every other user.
    """

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)
        self.workflows_dir = self.base_path / "workflows"

    def get_workflow_path(self, workflow_id: str) -> Path:
        validate_key(workflow_id)
        return self.workflows_dir / f"{workflow_id}.json"

    async def save(
        self,
        user_id: str,
        nodes: list[NodeLike],
        edges: list[EdgeLike],
        name: str | None = None,
        description: str | None = None,
        workflow_id: str | None = None,
    ) -> SavedWorkflow:
        """
        Save a workflow graph.

        Passing ``workflow_id`` overwrites that workflow, keeping its
        ``created_at``; the caller must own it.

        Raises:
            WorkflowNotFoundError: If ``workflow_id`` is given but not owned by ``user_id``
        """
        fields: dict[str, Any] = {
            "user_id": user_id,
            "name": name,
            "description": description,
            "nodes": nodes,
            "edges": edges,
        }
        if workflow_id is not None:
            existing = await self.load(workflow_id, user_id)
            fields["id"] = existing.id
            fields["created_at"] = existing.created_at
            fields["updated_at"] = datetime.now(UTC)

        workflow = SavedWorkflow.model_validate(fields)
        path = self.get_workflow_path(workflow.id)

        def _write():
            with atomic_write(path) as f:
                f.write(workflow.model_dump_json(indent=2, by_alias=True))

        await asyncio.to_thread(_write)
        logger.info(f"💾 Saved workflow {workflow.id} ({len(workflow.nodes)} nodes)")
        return workflow

    async def load(self, workflow_id: str, user_id: str) -> SavedWorkflow:
        """
        Load a workflow owned by ``user_id``.

        Raises:
            WorkflowNotFoundError: If missing or owned by someone else
        """
        path = self.get_workflow_path(workflow_id)

        def _read():
            if not path.exists():
                return None
            return SavedWorkflow.model_validate_json(path.read_text(encoding="utf-8"))

        workflow = await asyncio.to_thread(_read)
        if workflow is None or workflow.user_id != user_id:
            raise WorkflowNotFoundError(workflow_id)
        return workflow

    async def list(self, user_id: str) -> list[SavedWorkflow]:
        """List a user's workflows, most recently updated first."""

        def _scan():
            workflows = []
            if not self.workflows_dir.exists():
                return workflows

            for path in self.workflows_dir.glob("*.json"):
                try:
                    workflow = SavedWorkflow.model_validate_json(path.read_text(encoding="utf-8"))
                except Exception as e:
                    logger.warning(f"Failed to load {path}: {e}")
                    continue
                if workflow.user_id == user_id:
                    workflows.append(workflow)

            workflows.sort(key=lambda w: w.updated_at, reverse=True)
            return workflows

        return await asyncio.to_thread(_scan)

    async def delete(self, workflow_id: str, user_id: str) -> bool:
        """Delete a workflow. Returns False if missing or not owned by ``user_id``."""
        try:
            await self.load(workflow_id, user_id)
        except WorkflowNotFoundError:
            return False

        path = self.get_workflow_path(workflow_id)
        await asyncio.to_thread(path.unlink, True)
        logger.info(f"Deleted workflow {workflow_id}")
        return True
