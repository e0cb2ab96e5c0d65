"""
Domain errors.

The walker and the stores raise these; the HTTP layer translates them into
responses (see ``main.py``).
"""


class WorkflowError(Exception):
    """Base class for workflow errors."""

    code = "WORKFLOW_ERROR"

    def __init__(self, message: str, workflow_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.workflow_id = workflow_id


class WorkflowNotFound(WorkflowError):
    code = "WORKFLOW_NOT_FOUND"

    def __init__(self, workflow_id: str):
        super().__init__("Workflow not found", workflow_id)


class NoStartNode(WorkflowError):
    """No timer node and no node without incoming edges."""

    code = "NO_START_NODE"

    def __init__(self, workflow_id: str):
        super().__init__("Cannot find a start node", workflow_id)


class InvalidWorkflow(WorkflowError):
    code = "INVALID_PAYLOAD"


class StoreError(WorkflowError):
    """Persisting the workflow mapping failed."""

    code = "STORE_ERROR"
