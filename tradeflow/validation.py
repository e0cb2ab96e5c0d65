"""
Structural checks run before a workflow is executed.

Mirrors the editor's "Validate" button (a timer and an output are required)
and adds graph checks the walker would otherwise silently work around.
"""

from collections import Counter
from typing import List, Set

from .errors import NoStartNode
from .models import NodeKind, ValidationIssue, ValidationReport, Workflow
from .walker import find_start_node


def validate_workflow(workflow: Workflow) -> ValidationReport:
    issues: List[ValidationIssue] = []

    kinds = {node.kind for node in workflow.nodes}
    if NodeKind.timer not in kinds:
        issues.append(ValidationIssue(path="nodes", msg="workflow needs at least one timer node", level="error"))
    if NodeKind.output not in kinds:
        issues.append(ValidationIssue(path="nodes", msg="workflow needs at least one output node", level="error"))

    id_counts = Counter(node.id for node in workflow.nodes)
    for idx, node in enumerate(workflow.nodes):
        if id_counts[node.id] > 1:
            issues.append(ValidationIssue(path=f"nodes[{idx}].id", msg=f"duplicate node id '{node.id}'", level="error"))

    node_ids = set(id_counts)
    seen_sources: Set[str] = set()
    for idx, edge in enumerate(workflow.edges):
        if edge.from_ not in node_ids:
            issues.append(ValidationIssue(path=f"edges[{idx}].from", msg=f"unknown node '{edge.from_}'", level="warning"))
        if edge.to not in node_ids:
            issues.append(ValidationIssue(path=f"edges[{idx}].to", msg=f"unknown node '{edge.to}'", level="warning"))
        if edge.from_ in seen_sources:
            issues.append(ValidationIssue(
                path=f"edges[{idx}]",
                msg=f"node '{edge.from_}' already has an outgoing edge; only the first one is followed",
                level="warning",
            ))
        seen_sources.add(edge.from_)

    try:
        find_start_node(workflow)
    except NoStartNode as exc:
        issues.append(ValidationIssue(path="nodes", msg=exc.message, level="error"))

    valid = not any(issue.level == "error" for issue in issues)
    return ValidationReport(valid=valid, issues=issues)
