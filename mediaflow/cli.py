"""
Command-line interface for mediaflow.

Usage:
    mediaflow run workflow.json
    mediaflow run workflow.json --node text-1 --node llm-1 --mode partial
    mediaflow validate workflow.json
    mediaflow history --user alice --limit 10
    mediaflow sample > workflow.json

Results are printed to stdout as JSON; logs go to stderr.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mediaflow.errors import WorkflowError
from mediaflow.graph.catalog import validate_graph
from mediaflow.graph.edge import WorkflowGraph
from mediaflow.graph.executor import ExecutorConfig, WorkflowExecutor
from mediaflow.observability import configure_logging
from mediaflow.schemas.execution import ExecutionType, RunStatus

DEFAULT_USER = "local"


def _load_graph_file(path: str) -> dict[str, Any]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict) or "nodes" not in data:
        raise ValueError(f"{path}: expected a JSON object with 'nodes' and 'edges'")
    return {"nodes": data["nodes"], "edges": data.get("edges", [])}


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def cmd_run(args: argparse.Namespace) -> int:
    """Execute a workflow file."""
    from mediaflow.runtime import WorkflowRuntime

    try:
        graph = _load_graph_file(args.file)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    executor = WorkflowExecutor(
        config=ExecutorConfig(
            parallel=args.parallel,
            max_concurrency=args.max_concurrency,
            failed_dependency_policy="block" if args.block_on_failure else "proceed",
        )
    )
    runtime = WorkflowRuntime(executor=executor)

    try:
        result = asyncio.run(
            runtime.execute(
                args.user,
                node_ids=args.node or None,
                mode=args.mode,
                nodes=graph["nodes"],
                edges=graph["edges"],
                save=not args.no_save,
            )
        )
    except (WorkflowError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _print_json(result.model_dump(mode="json"))
    return 0 if result.status == RunStatus.SUCCESS else 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a workflow file without running it."""
    try:
        graph = WorkflowGraph.snapshot(**_load_graph_file(args.file))
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    errors = validate_graph(graph)
    _print_json({"valid": not errors, "errors": errors})
    return 0 if not errors else 1


def cmd_history(args: argparse.Namespace) -> int:
    """List recent runs for a user."""
    from mediaflow.runtime import WorkflowRuntime

    runtime = WorkflowRuntime(executor=WorkflowExecutor(dispatcher=_no_dispatch()))
    records = asyncio.run(runtime.history(args.user, limit=args.limit))
    _print_json(
        [
            {
                "run_id": record.run_id,
                "workflow_id": record.workflow_id,
                "type": record.result.type,
                "status": record.result.status,
                "duration": record.result.duration,
                "started_at": record.result.started_at.isoformat(),
                "nodes": len(record.result.node_results),
                "failed": record.result.failed_node_ids,
            }
            for record in records
        ]
    )
    return 0


def cmd_sample(args: argparse.Namespace) -> int:
    """Print the Product Marketing Kit sample workflow."""
    from mediaflow.samples import create_sample_workflow

    _print_json(create_sample_workflow(image_url=args.image_url, video_url=args.video_url))
    return 0


def _no_dispatch():
    # History never executes; skip building the LLM provider
    from mediaflow.graph.dispatcher import NodeDispatcher

    return NodeDispatcher()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mediaflow",
        description="mediaflow - run media and LLM workflow graphs",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Execute a workflow file")
    run_parser.add_argument("file", help="Workflow JSON: {\"nodes\": [...], \"edges\": [...]}")
    run_parser.add_argument(
        "--node",
        action="append",
        metavar="ID",
        help="Node to run (repeatable). Defaults to every node",
    )
    run_parser.add_argument(
        "--mode",
        choices=[t.value for t in ExecutionType],
        default=ExecutionType.FULL.value,
        help="Execution type recorded on the run",
    )
    run_parser.add_argument(
        "--parallel", action="store_true", help="Run independent nodes concurrently"
    )
    run_parser.add_argument("--max-concurrency", type=int, default=4)
    run_parser.add_argument(
        "--block-on-failure",
        action="store_true",
        help="Fail nodes whose upstream failed instead of running them",
    )
    run_parser.add_argument("--user", default=DEFAULT_USER, help="User recorded on the run")
    run_parser.add_argument("--no-save", action="store_true", help="Do not record the run")
    run_parser.set_defaults(func=cmd_run)

    validate_parser = subparsers.add_parser("validate", help="Validate a workflow file")
    validate_parser.add_argument("file")
    validate_parser.set_defaults(func=cmd_validate)

    history_parser = subparsers.add_parser("history", help="Show recent runs")
    history_parser.add_argument("--user", default=DEFAULT_USER)
    history_parser.add_argument("--limit", type=int, default=50)
    history_parser.set_defaults(func=cmd_history)

    sample_parser = subparsers.add_parser("sample", help="Print the sample workflow")
    sample_parser.add_argument("--image-url", default="")
    sample_parser.add_argument("--video-url", default="")
    sample_parser.set_defaults(func=cmd_sample)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
