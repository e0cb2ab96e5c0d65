# tests/test_converters.py
import json

from tradeflow.converters import (
    document_to_workflows,
    format_execution_summary,
    normalize_legacy_node,
    record_to_workflow,
    workflow_to_document,
    workflow_to_record,
)
from tradeflow.models import ExecutionResult
from tradeflow.walker import walk


def test_legacy_position_is_flattened():
    legacy = {"id": "timer-1", "kind": "timer", "label": "t", "position": {"x": 260, "y": 120}}
    assert normalize_legacy_node(legacy) == {"id": "timer-1", "kind": "timer", "label": "t", "x": 260, "y": 120}


def test_current_layout_is_left_alone():
    current = {"id": "a", "kind": "output", "label": "a", "x": 1, "y": 2}
    assert normalize_legacy_node(current) is current


def test_document_with_legacy_nodes_loads():
    document = {
        "w": {
            "id": "w",
            "name": "legacy",
            "nodes": [{"id": "t", "kind": "timer", "label": "t", "position": {"x": 5, "y": 6}}],
            "edges": [],
        }
    }
    workflows = document_to_workflows(document)
    assert workflows["w"].nodes[0].x == 5
    assert workflows["w"].nodes[0].y == 6


def test_invalid_entries_are_skipped(chain_workflow):
    document = {
        "good": workflow_to_document(chain_workflow),
        "bad": {"id": "bad", "name": "bad", "nodes": "oops", "edges": []},
        "worse": ["not", "an", "object"],
    }
    assert list(document_to_workflows(document)) == ["good"]


def test_document_uses_wire_names(chain_workflow):
    document = workflow_to_document(chain_workflow)
    assert document["edges"][0] == {"id": "edge-1", "from": "timer-1", "to": "condition-1"}
    assert "description" not in document
    assert "data" not in document["nodes"][0]


def test_record_keeps_nodes_and_edges_in_definition(chain_workflow):
    record = workflow_to_record("chain", chain_workflow, "2026-01-01T00:00:00+00:00")
    definition = json.loads(record.definition)
    assert set(definition) == {"nodes", "edges"}
    assert record.name == "Chain"
    assert record_to_workflow(record) == chain_workflow


def test_summary_matches_editor_format(chain_workflow):
    summary = format_execution_summary(walk(chain_workflow))
    assert summary.splitlines() == [
        "1. [TIMER] Every 5 minutes (timer-1)",
        "2. [CONDITION] If market open (condition-1)",
        "3. [ORDER] Buy $10 SOL (order-1)",
        "4. [OUTPUT] Log fill (log-1)",
    ]


def test_summary_for_empty_path():
    assert format_execution_summary(ExecutionResult(workflow_id="w", steps=[])) == "No steps executed."
