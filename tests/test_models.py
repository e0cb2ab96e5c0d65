# tests/test_models.py
import pytest
from pydantic import ValidationError

from tradeflow.models import (
    ConditionData,
    ExecutionResult,
    OrderData,
    TimerData,
    Workflow,
    WorkflowEdge,
    WorkflowNode,
)


def raw_node(kind, data=None):
    out = {"id": "n1", "kind": kind, "label": "n", "x": 10, "y": 20}
    if data is not None:
        out["data"] = data
    return out


def test_data_is_parsed_by_kind():
    timer = WorkflowNode.model_validate(raw_node("timer", {"interval": "15", "unit": "h"}))
    order = WorkflowNode.model_validate(raw_node("order", {"asset": "ETH", "action": "sell", "amount": 2.5}))
    assert timer.data == TimerData(interval="15", unit="h")
    assert isinstance(order.data, OrderData)
    assert order.data.action == "sell"


def test_empty_data_takes_kind_defaults():
    condition = WorkflowNode.model_validate(raw_node("condition", {}))
    assert condition.data == ConditionData(expression="price > 0")
    output = WorkflowNode.model_validate(raw_node("output", {}))
    assert output.data.message == "Log message"


def test_data_is_optional():
    assert WorkflowNode.model_validate(raw_node("timer")).data is None


def test_data_from_another_kind_is_rejected():
    with pytest.raises(ValidationError) as exc:
        WorkflowNode.model_validate(raw_node("timer", {"asset": "SOL", "action": "buy", "amount": 1}))
    assert "data does not match node kind 'timer'" in str(exc.value)


def test_bad_enum_value_in_data_is_rejected():
    with pytest.raises(ValidationError):
        WorkflowNode.model_validate(raw_node("order", {"action": "hold"}))
    with pytest.raises(ValidationError):
        WorkflowNode.model_validate(raw_node("timer", {"unit": "s"}))


def test_unknown_kind_is_rejected():
    with pytest.raises(ValidationError):
        WorkflowNode.model_validate(raw_node("webhook"))


def test_edge_uses_from_on_the_wire():
    e = WorkflowEdge.model_validate({"id": "e1", "from": "a", "to": "b"})
    assert e.from_ == "a"
    assert e.model_dump(by_alias=True) == {"id": "e1", "from": "a", "to": "b"}


def test_workflow_requires_id_nodes_and_edges():
    with pytest.raises(ValidationError):
        Workflow.model_validate({"id": "", "name": "x", "nodes": [], "edges": []})
    with pytest.raises(ValidationError):
        Workflow.model_validate({"id": "w", "name": "x", "nodes": "nope", "edges": []})
    with pytest.raises(ValidationError):
        Workflow.model_validate({"id": "w", "name": "x", "nodes": []})


def test_node_lookup_returns_first_match():
    wf = Workflow.model_validate({
        "id": "w",
        "name": "w",
        "nodes": [raw_node("timer"), {**raw_node("output"), "label": "second"}],
        "edges": [],
    })
    assert wf.node("n1").kind.value == "timer"
    assert wf.node("missing") is None


def test_execution_result_serializes_camel_case():
    result = ExecutionResult(workflow_id="w", steps=[])
    assert result.model_dump(by_alias=True) == {"workflowId": "w", "steps": [], "truncatedDueToCycle": False}


def test_whole_numbers_keep_their_type():
    n = WorkflowNode.model_validate(raw_node("order", {"amount": 10}))
    assert n.model_dump()["x"] == 10 and isinstance(n.x, int)
    assert isinstance(n.data.amount, int)
    fractional = WorkflowNode.model_validate({**raw_node("order", {"amount": 0.25}), "x": 1.5})
    assert fractional.x == 1.5
    assert fractional.data.amount == 0.25
