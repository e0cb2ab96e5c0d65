"""
Data Models
Workflow graph (nodes + edges) as edited in the canvas, the per-kind node
parameters, execution results and the SQL table used by the database store.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from sqlmodel import SQLModel
from sqlmodel import Field as SQLField


# ============================================================================
# NODE PARAMETERS
# ============================================================================

class NodeKind(str, Enum):
    timer = "timer"
    condition = "condition"
    order = "order"
    output = "output"


class TimerData(BaseModel):
    """Fires every `interval` minutes or hours"""
    model_config = ConfigDict(extra="forbid")

    interval: str = "5"
    unit: Literal["m", "h"] = "m"


class ConditionData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    expression: str = "price > 0"


class OrderData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    asset: str = "SOL"
    action: Literal["buy", "sell"] = "buy"
    amount: Union[int, float] = 1


class OutputData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str = "Log message"


NodeData = Union[TimerData, ConditionData, OrderData, OutputData]

NODE_DATA_MODELS: Dict[NodeKind, type[BaseModel]] = {
    NodeKind.timer: TimerData,
    NodeKind.condition: ConditionData,
    NodeKind.order: OrderData,
    NodeKind.output: OutputData,
}


# ============================================================================
# WORKFLOW GRAPH
# ============================================================================

class WorkflowNode(BaseModel):
    """Node placed on the canvas. `x`/`y` are layout only."""
    id: str
    kind: NodeKind
    label: str
    x: Union[int, float]
    y: Union[int, float]
    data: Optional[NodeData] = None

    @model_validator(mode="before")
    @classmethod
    def _data_matches_kind(cls, values: Any) -> Any:
        # The union alone can't tell an empty timer payload from an empty
        # output payload, so the kind picks the parameter model.
        if not isinstance(values, dict):
            return values
        data = values.get("data")
        kind = values.get("kind")
        model = NODE_DATA_MODELS.get(kind) if isinstance(kind, str) else None
        if data is None or model is None:
            return values
        kind_name = getattr(kind, "value", kind)
        if isinstance(data, BaseModel):
            if not isinstance(data, model):
                raise ValueError(f"data does not match node kind '{kind_name}'")
            return values
        try:
            parsed = model.model_validate(data)
        except ValidationError as exc:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "data" for err in exc.errors())
            raise ValueError(f"data does not match node kind '{kind_name}' ({fields})") from None
        return {**values, "data": parsed}


class WorkflowEdge(BaseModel):
    """Directed edge between two node ids. Dangling ids are tolerated."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_: str = Field(alias="from")
    to: str


class Workflow(BaseModel):
    id: str = Field(min_length=1)
    name: str
    description: Optional[str] = None
    nodes: List[WorkflowNode]
    edges: List[WorkflowEdge]

    def node(self, node_id: str) -> Optional[WorkflowNode]:
        """First node with the given id, in node order"""
        return next((n for n in self.nodes if n.id == node_id), None)


# ============================================================================
# EXECUTION
# ============================================================================

class ExecutionStep(BaseModel):
    id: str
    kind: NodeKind
    label: str


class ExecutionResult(BaseModel):
    """Ordered path produced by one walk over a workflow"""
    model_config = ConfigDict(populate_by_name=True)

    workflow_id: str = Field(alias="workflowId")
    steps: List[ExecutionStep]
    truncated_due_to_cycle: bool = Field(default=False, alias="truncatedDueToCycle")


# ============================================================================
# VALIDATION / CATALOG
# ============================================================================

class ValidationIssue(BaseModel):
    path: str
    msg: str
    level: Literal["error", "warning"]


class ValidationReport(BaseModel):
    valid: bool
    issues: List[ValidationIssue]


class NodeKindInfo(BaseModel):
    """Node kind definition (catalog)"""
    kind: NodeKind
    display_name: str
    id_prefix: str
    default_label: str
    default_data: Dict[str, Any]
    params_schema: Dict[str, Any]


class SaveResponse(BaseModel):
    ok: bool = True


# ============================================================================
# DATABASE MODELS
# ============================================================================

class WorkflowRecord(SQLModel, table=True):
    """
    One row per workflow. Nodes and edges are kept together as a JSON
    document in `definition`, replaced wholesale on every save.
    """
    __tablename__ = "workflows"

    id: str = SQLField(primary_key=True)
    name: str
    description: Optional[str] = None
    definition: str  # JSON with nodes and edges
    updated_at: str  # ISO timestamp
