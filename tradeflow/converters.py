"""
Format Converters
Translates between stored documents, database rows and Workflow models, and
renders execution results as the editor's text summary.
"""

import json
import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from .models import ExecutionResult, Workflow, WorkflowRecord

logger = logging.getLogger(__name__)


def normalize_legacy_node(node: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten the old `position` layout into top-level coordinates.

    Legacy format:
        {"id": "timer-1", "kind": "timer", "label": "...", "position": {"x": 260, "y": 260}}

    Current format:
        {"id": "timer-1", "kind": "timer", "label": "...", "x": 260, "y": 260}
    """
    position = node.get("position")
    if not isinstance(position, dict):
        return node
    flat = {k: v for k, v in node.items() if k != "position"}
    flat.setdefault("x", position.get("x", 0))
    flat.setdefault("y", position.get("y", 0))
    return flat


def document_to_workflows(document: Dict[str, Any]) -> Dict[str, Workflow]:
    """
    Parse a stored `{id: workflow}` document.

    Entries that fail validation are skipped with a warning so one bad
    workflow doesn't hide the others.
    """
    workflows: Dict[str, Workflow] = {}
    for workflow_id, raw in document.items():
        if not isinstance(raw, dict):
            logger.warning("Skipping stored workflow %s: not an object", workflow_id)
            continue
        nodes = raw.get("nodes")
        if isinstance(nodes, list):
            raw = {**raw, "nodes": [normalize_legacy_node(n) if isinstance(n, dict) else n for n in nodes]}
        try:
            workflows[workflow_id] = Workflow.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Skipping stored workflow %s: %s", workflow_id, exc)
    return workflows


def workflow_to_document(workflow: Workflow) -> Dict[str, Any]:
    return workflow.model_dump(mode="json", by_alias=True, exclude_none=True)


def workflows_to_document(workflows: Dict[str, Workflow]) -> Dict[str, Any]:
    return {wid: workflow_to_document(wf) for wid, wf in workflows.items()}


def workflow_to_record(workflow_id: str, workflow: Workflow, updated_at: str) -> WorkflowRecord:
    """Pack a workflow into its table row; nodes and edges go to `definition`"""
    document = workflow_to_document(workflow)
    definition = {"nodes": document["nodes"], "edges": document["edges"]}
    return WorkflowRecord(
        id=workflow_id,
        name=workflow.name,
        description=workflow.description,
        definition=json.dumps(definition),
        updated_at=updated_at,
    )


def record_to_workflow(record: WorkflowRecord) -> Workflow:
    definition = json.loads(record.definition) if record.definition else {}
    nodes = [normalize_legacy_node(n) for n in definition.get("nodes", [])]
    return Workflow.model_validate({
        "id": record.id,
        "name": record.name,
        "description": record.description,
        "nodes": nodes,
        "edges": definition.get("edges", []),
    })


def format_execution_summary(result: ExecutionResult) -> str:
    """
    Render the path the way the editor shows it:

        1. [TIMER] Every 5 minutes (timer-1)
        2. [CONDITION] If market open (condition-1)
    """
    if not result.steps:
        return "No steps executed."
    lines: List[str] = [
        f"{idx}. [{step.kind.value.upper()}] {step.label} ({step.id})"
        for idx, step in enumerate(result.steps, start=1)
    ]
    return "\n".join(lines)
