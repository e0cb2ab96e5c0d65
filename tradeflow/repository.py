"""
Repository Layer
Workflow store backends: a JSON file holding the whole `{id: workflow}`
mapping, and a SQLModel table for database deployments.

Both expose get / put / list and replace workflows wholesale.
"""

import json
import logging
import threading
from datetime import datetime, UTC
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine, select

from .config import Settings
from .converters import (
    document_to_workflows,
    record_to_workflow,
    workflow_to_record,
    workflows_to_document,
)
from .data import default_workflows
from .errors import StoreError
from .models import Workflow, WorkflowRecord

logger = logging.getLogger(__name__)


class WorkflowRepository(Protocol):
    def get(self, workflow_id: str) -> Optional[Workflow]: ...

    def put(self, workflow_id: str, workflow: Workflow) -> None: ...

    def list(self) -> List[Workflow]: ...


# ============================================================================
# JSON File Store
# ============================================================================

class JsonWorkflowRepository:
    """
    Keeps the mapping in memory and rewrites the whole file on every save.

    A missing or unreadable file means "start from the default dataset"; the
    file is only created on the first save.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._workflows: Dict[str, Workflow] = self._load()

    def _load(self) -> Dict[str, Workflow]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except FileNotFoundError:
            logger.info("No existing data file at %s, using defaults.", self.path)
            return default_workflows()
        except (OSError, ValueError) as exc:
            # ValueError covers both bad JSON and bytes that aren't UTF-8
            logger.warning("Could not read %s (%s), using defaults.", self.path, exc)
            return default_workflows()

        if not isinstance(document, dict):
            logger.warning("Data file %s is not a JSON object, using defaults.", self.path)
            return default_workflows()

        workflows = document_to_workflows(document)
        logger.info("Loaded %d workflows from %s.", len(workflows), self.path)
        return workflows

    def get(self, workflow_id: str) -> Optional[Workflow]:
        return self._workflows.get(workflow_id)

    def list(self) -> List[Workflow]:
        return list(self._workflows.values())

    def put(self, workflow_id: str, workflow: Workflow) -> None:
        with self._lock:
            updated = {**self._workflows, workflow_id: workflow}
            self._write(updated)
            self._workflows = updated

    def _write(self, workflows: Dict[str, Workflow]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                json.dump(workflows_to_document(workflows), handle, indent=2)
                handle.write("\n")
        except OSError as exc:
            logger.error("Failed to save workflows to %s: %s", self.path, exc)
            raise StoreError(f"Failed to save workflows: {exc}") from exc


# ============================================================================
# SQL Store
# ============================================================================

class SQLWorkflowRepository:
    """Workflow store backed by the `workflows` table"""

    def __init__(self, engine: Engine):
        self.engine = engine

    def create_schema(self, seed: bool = True):
        """Create the table; seed the default dataset when it's empty"""
        SQLModel.metadata.create_all(self.engine)
        if not seed:
            return
        with Session(self.engine) as session:
            if session.exec(select(WorkflowRecord)).first() is not None:
                return
        for workflow_id, workflow in default_workflows().items():
            self.put(workflow_id, workflow)
        logger.info("Seeded default workflows into %s.", self.engine.url)

    def get(self, workflow_id: str) -> Optional[Workflow]:
        with Session(self.engine) as session:
            record = session.get(WorkflowRecord, workflow_id)
            if not record:
                return None
            return record_to_workflow(record)

    def list(self) -> List[Workflow]:
        with Session(self.engine) as session:
            records = session.exec(select(WorkflowRecord)).all()
            return [record_to_workflow(r) for r in records]

    def put(self, workflow_id: str, workflow: Workflow) -> None:
        now = datetime.now(UTC).replace(microsecond=0).isoformat()
        new_record = workflow_to_record(workflow_id, workflow, now)

        try:
            with Session(self.engine) as session:
                record = session.get(WorkflowRecord, workflow_id)
                if record:
                    record.name = new_record.name
                    record.description = new_record.description
                    record.definition = new_record.definition
                    record.updated_at = new_record.updated_at
                else:
                    record = new_record
                session.add(record)
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to save workflow %s: %s", workflow_id, exc)
            raise StoreError(f"Failed to save workflow: {exc}") from exc


def build_repository(settings: Settings) -> WorkflowRepository:
    """Create the store selected by `settings.store_backend`"""
    if settings.store_backend == "sql":
        connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
        engine = create_engine(
            settings.database_url,
            connect_args=connect_args,
            echo=False,
        )
        repo = SQLWorkflowRepository(engine)
        repo.create_schema()
        logger.info("Using database store: %s", settings.database_url)
        return repo

    logger.info("Using JSON file store: %s", settings.data_file)
    return JsonWorkflowRepository(settings.data_file)
