"""
Execution Path Walker
Computes the preview "execution" of a workflow: the ordered list of nodes
reached by following single outgoing edges from a start node.

No node is interpreted (timers don't fire, conditions aren't evaluated,
orders aren't placed); the walk only records which nodes would run and in
what order.
"""

from typing import Dict, List, Set

from .errors import NoStartNode
from .models import (
    ExecutionResult,
    ExecutionStep,
    NodeKind,
    Workflow,
    WorkflowEdge,
    WorkflowNode,
)


def outgoing_targets(edges: List[WorkflowEdge]) -> Dict[str, str]:
    """
    Map each source node id to its next node id.

    When a node has several outgoing edges the first one in edge order wins;
    the rest are never walked.
    """
    targets: Dict[str, str] = {}
    for edge in edges:
        targets.setdefault(edge.from_, edge.to)
    return targets


def incoming_counts(nodes: List[WorkflowNode], edges: List[WorkflowEdge]) -> Dict[str, int]:
    counts: Dict[str, int] = {node.id: 0 for node in nodes}
    for edge in edges:
        counts[edge.to] = counts.get(edge.to, 0) + 1
    return counts


def find_start_node(workflow: Workflow) -> WorkflowNode:
    """
    Pick the walk origin: the first timer node, else the first node with no
    incoming edges.

    Raises:
        NoStartNode: if neither exists
    """
    for node in workflow.nodes:
        if node.kind == NodeKind.timer:
            return node

    incoming = incoming_counts(workflow.nodes, workflow.edges)
    for node in workflow.nodes:
        if incoming.get(node.id, 0) == 0:
            return node

    raise NoStartNode(workflow.id)


def walk(workflow: Workflow) -> ExecutionResult:
    """
    Walk the workflow from its start node.

    Stops when the current node has no outgoing edge, when the edge points to
    an unknown node id, or when it leads back to a node already visited. The
    last case also sets `truncated_due_to_cycle`.

    Args:
        workflow: Workflow snapshot; not modified

    Returns:
        ExecutionResult with one step per visited node, in visit order

    Raises:
        NoStartNode: if no start node can be chosen
    """
    start = find_start_node(workflow)
    targets = outgoing_targets(workflow.edges)

    visited: Set[str] = set()
    steps: List[ExecutionStep] = []
    truncated = False

    current = start
    while True:
        visited.add(current.id)
        steps.append(ExecutionStep(id=current.id, kind=current.kind, label=current.label))

        next_id = targets.get(current.id)
        if next_id is None:
            break
        next_node = workflow.node(next_id)
        if next_node is None:
            break
        if next_node.id in visited:
            truncated = True
            break
        current = next_node

    return ExecutionResult(
        workflow_id=workflow.id,
        steps=steps,
        truncated_due_to_cycle=truncated,
    )
