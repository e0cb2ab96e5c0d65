"""
Trading Workflow API
Backend for the visual workflow editor: stores timer/condition/order/output
graphs and previews their execution path.
"""

import logging
from datetime import datetime, UTC
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from . import __version__
from .config import settings
from .converters import format_execution_summary
from .errors import InvalidWorkflow, NoStartNode, StoreError, WorkflowError, WorkflowNotFound
from .models import (
    NODE_DATA_MODELS,
    ExecutionResult,
    NodeKind,
    NodeKindInfo,
    SaveResponse,
    ValidationReport,
    Workflow,
)
from .repository import WorkflowRepository, build_repository
from .util.ids import new_id
from .validation import validate_workflow
from .walker import walk

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# ============================================================================
# App Configuration
# ============================================================================

app = FastAPI(
    title="Trading Workflow API",
    version=__version__,
    description="Stores trading workflows built in the editor and previews their execution path",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_repository() -> WorkflowRepository:
    """Store selected by configuration, built on first use"""
    return build_repository(settings)


def load_workflow(repo: WorkflowRepository, workflow_id: str) -> Workflow:
    workflow = repo.get(workflow_id)
    if workflow is None:
        raise WorkflowNotFound(workflow_id)
    return workflow


# ============================================================================
# Errors and Middleware
# ============================================================================

ERROR_STATUS = {
    WorkflowNotFound: 404,
    NoStartNode: 400,
    InvalidWorkflow: 400,
    StoreError: 500,
}


def error_response(status_code: int, code: str, message: str, details: Optional[list] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "details": details or []}},
    )


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    status_code = next((s for t, s in ERROR_STATUS.items() if isinstance(exc, t)), 400)
    if status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    else:
        logger.info("%s on %s: %s", exc.code, request.url.path, exc.message)
    return error_response(status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"path": ".".join(str(p) for p in err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return error_response(400, InvalidWorkflow.code, "Invalid workflow payload", details)


@app.exception_handler(Exception)
async def default_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    resp = error_response(500, "INTERNAL", "Unhandled error", [{"path": "", "msg": str(exc)}])
    # runs outside the request-id middleware, so the header is set here
    resp.headers["X-Request-Id"] = request_id_for(request)
    return resp


def request_id_for(request: Request) -> str:
    """Caller's X-Request-Id, else the one already assigned to this request, else a new one"""
    request_id = request.headers.get("X-Request-Id") or getattr(request.state, "request_id", None)
    if not request_id:
        request_id = new_id("req_")
        request.state.request_id = request_id
    return request_id


@app.middleware("http")
async def add_request_id_header(request: Request, call_next):
    request_id = request_id_for(request)
    resp: Response = await call_next(request)
    resp.headers.setdefault("X-Request-Id", request_id)
    return resp


# ============================================================================
# Node Kind Catalog
# ============================================================================

# kind, display name, id prefix for new nodes, label for new nodes
NODE_KINDS = [
    (NodeKind.timer, "Timer", "timer", "Every n minutes"),
    (NodeKind.condition, "Condition", "condition", "New condition"),
    (NodeKind.order, "Order", "order", "New order"),
    (NodeKind.output, "Output", "log", "New log"),
]


@app.get("/node-kinds", response_model=List[NodeKindInfo], tags=["catalog"])
def get_node_kinds() -> List[NodeKindInfo]:
    """
    Catalog of node kinds the editor can place.
    Default data is what a freshly added node starts with.
    """
    return [
        NodeKindInfo(
            kind=kind,
            display_name=display_name,
            id_prefix=id_prefix,
            default_label=default_label,
            default_data=NODE_DATA_MODELS[kind]().model_dump(),
            params_schema=NODE_DATA_MODELS[kind].model_json_schema(),
        )
        for kind, display_name, id_prefix, default_label in NODE_KINDS
    ]


# ============================================================================
# Workflow Endpoints
# ============================================================================

@app.get("/workflows", response_model=List[Workflow], response_model_exclude_none=True, tags=["workflows"])
def list_workflows(repo: WorkflowRepository = Depends(get_repository)) -> List[Workflow]:
    return repo.list()


@app.get("/workflows/{id}", response_model=Workflow, response_model_exclude_none=True, tags=["workflows"])
def get_workflow(id: str, repo: WorkflowRepository = Depends(get_repository)) -> Workflow:
    return load_workflow(repo, id)


@app.put("/workflows/{id}", response_model=SaveResponse, tags=["workflows"])
def save_workflow(
    id: str,
    workflow: Workflow,
    repo: WorkflowRepository = Depends(get_repository),
) -> SaveResponse:
    """Replace the stored workflow wholesale (creates it if new)"""
    if workflow.id != id:
        raise InvalidWorkflow(f"Workflow id '{workflow.id}' does not match path id '{id}'", id)
    repo.put(id, workflow)
    logger.info("Saved workflow %s (%d nodes, %d edges)", id, len(workflow.nodes), len(workflow.edges))
    return SaveResponse(ok=True)


# ============================================================================
# Execution Endpoints
# ============================================================================

@app.post("/workflows/{id}/execute", response_model=ExecutionResult, tags=["execution"])
def execute_workflow(id: str, repo: WorkflowRepository = Depends(get_repository)) -> ExecutionResult:
    """
    Walk the workflow once from its start node.
    Nothing is actually scheduled or traded; the response lists the nodes
    that would run, in order.
    """
    result = walk(load_workflow(repo, id))
    logger.info("Execution path for %s:\n%s", id, format_execution_summary(result))
    if result.truncated_due_to_cycle:
        logger.warning("Execution path for %s stopped at a cycle", id)
    return result


@app.post("/workflows/{id}/validate", response_model=ValidationReport, tags=["execution"])
def validate(id: str, repo: WorkflowRepository = Depends(get_repository)) -> ValidationReport:
    return validate_workflow(load_workflow(repo, id))


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health", tags=["health"])
def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "store": settings.store_backend,
    }


# ============================================================================
# Frontend
# ============================================================================

def mount_frontend(target: FastAPI, dist: Optional[Path]) -> bool:
    """
    Serve the built editor from `dist` at `/`.
    Must run after all API routes are registered, since the mount matches
    every path.
    """
    if dist is None or not Path(dist).is_dir():
        return False
    target.mount("/", StaticFiles(directory=dist, html=True), name="frontend")
    return True


if mount_frontend(app, settings.frontend_dist):
    logger.info("Serving frontend from %s", settings.frontend_dist)


def run():
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
