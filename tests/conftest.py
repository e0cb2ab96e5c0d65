# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from tradeflow.main import app, get_repository
from tradeflow.models import NodeKind, Workflow, WorkflowEdge, WorkflowNode
from tradeflow.repository import JsonWorkflowRepository


def node(node_id: str, kind: NodeKind, label: str = "", **extra) -> WorkflowNode:
    return WorkflowNode(id=node_id, kind=kind, label=label or node_id, x=0, y=0, **extra)


def edge(edge_id: str, src: str, dst: str) -> WorkflowEdge:
    return WorkflowEdge(id=edge_id, from_=src, to=dst)


@pytest.fixture()
def chain_workflow() -> Workflow:
    """timer-1 -> condition-1 -> order-1 -> log-1"""
    return Workflow(
        id="chain",
        name="Chain",
        nodes=[
            node("timer-1", NodeKind.timer, "Every 5 minutes"),
            node("condition-1", NodeKind.condition, "If market open"),
            node("order-1", NodeKind.order, "Buy $10 SOL"),
            node("log-1", NodeKind.output, "Log fill"),
        ],
        edges=[
            edge("edge-1", "timer-1", "condition-1"),
            edge("edge-2", "condition-1", "order-1"),
            edge("edge-3", "order-1", "log-1"),
        ],
    )


@pytest.fixture()
def repo(tmp_path):
    """JSON store in a fresh temp dir, starting from the default dataset"""
    return JsonWorkflowRepository(tmp_path / "workflows.json")


@pytest.fixture()
def client(repo):
    """Test client wired to the temp store"""
    app.dependency_overrides[get_repository] = lambda: repo
    yield TestClient(app)
    app.dependency_overrides.clear()
