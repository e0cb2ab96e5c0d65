"""Default dataset used when no stored workflows exist yet."""

from typing import Dict

from .models import NodeKind, Workflow, WorkflowEdge, WorkflowNode


def default_workflows() -> Dict[str, Workflow]:
    workflow = Workflow(
        id="sol-dca-5m",
        name="SOL DCA every 5 minutes",
        description="Simple workflow that buys a fixed amount of SOL every 5 minutes on a paper exchange.",
        nodes=[
            WorkflowNode(id="timer-1", kind=NodeKind.timer, label="Every 5 minutes", x=260, y=260),
            WorkflowNode(id="condition-1", kind=NodeKind.condition, label="If market open", x=560, y=260),
            WorkflowNode(id="order-1", kind=NodeKind.order, label="Buy $10 SOL", x=860, y=260),
            WorkflowNode(id="log-1", kind=NodeKind.output, label="Log fill", x=1160, y=260),
        ],
        edges=[
            WorkflowEdge(id="edge-1", from_="timer-1", to="condition-1"),
            WorkflowEdge(id="edge-2", from_="condition-1", to="order-1"),
            WorkflowEdge(id="edge-3", from_="order-1", to="log-1"),
        ],
    )
    return {workflow.id: workflow}
