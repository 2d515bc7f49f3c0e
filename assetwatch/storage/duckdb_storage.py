"""
DuckDB storage implementation for the AssetWatch inventory.

Provides a local storage backend using DuckDB for components, dependency
edges, workflows and the audit log. Nested data (component metadata,
workflow steps, audit details) is stored in JSON columns.

Key features:
- Thread-safe per-thread connections
- Automatic, idempotent schema creation
- Creation-order listings through per-table sequences
- Audit log retention cap applied on every append
- Comprehensive error handling with structured logging
"""

import json
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import duckdb
import structlog

from assetwatch.config import get_settings
from assetwatch.models.audit import AuditChanges, AuditLog
from assetwatch.models.inventory import Component, Dependency, Workflow, WorkflowStep

from .base import StorageBackend

logger = structlog.get_logger(__name__)


class StorageError(Exception):
    """Base exception for all storage operation failures."""

    pass


COMPONENT_COLUMNS = (
    "id, name, type, status, criticality, last_updated, metadata, "
    "description, location, owner, vendor, helpdesk_email"
)
DEPENDENCY_COLUMNS = (
    "id, source_id, target_id, type, criticality, description, last_updated"
)
WORKFLOW_COLUMNS = (
    "id, name, criticality, steps, business_process, description, owner, last_updated"
)
AUDIT_COLUMNS = (
    "id, timestamp, user_id, action, entity_type, entity_id, entity_name, "
    "details, changes"
)

TABLES = ["components", "dependencies", "workflows", "audit_logs"]


def _load_json(value: Any, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, (dict, list)):
        return value
    return json.loads(value)


class DuckDBStorage(StorageBackend):
    """
    DuckDB implementation of the storage backend.

    Architecture:
    - One table per entity kind plus ``audit_logs``
    - A ``seq`` column fed by a sequence records insertion order; updates
      keep the original position
    - Thread-safe connection management with per-thread connections

    Attributes:
        db_path: Path to the DuckDB database file
        _local: Thread-local storage for per-thread connections
        _lock: Thread lock for schema operations
        _initialized: Flag tracking whether schema is initialized
    """

    def __init__(self, db_path: str = "./data/assetwatch.duckdb"):
        """
        Initialize DuckDB storage backend.

        Args:
            db_path: Path to DuckDB database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._local = threading.local()
        self._lock = threading.Lock()
        self._initialized = False

        logger.info("duckdb_storage_initialized", db_path=str(self.db_path))

        self._initialize_schema()

    @contextmanager
    def _get_connection(self):
        """
        Get a thread-local DuckDB connection.

        Yields:
            DuckDB connection instance

        Raises:
            StorageError: If connection cannot be established
        """
        if not hasattr(self._local, "connection"):
            try:
                self._local.connection = duckdb.connect(str(self.db_path))
                logger.debug("duckdb_connection_created", thread_id=threading.get_ident())
            except Exception as e:
                logger.error("duckdb_connection_failed", error=str(e))
                raise StorageError(f"Failed to connect to DuckDB: {e}") from e

        try:
            yield self._local.connection
        except Exception:
            try:
                self._local.connection.rollback()
            except duckdb.Error as rollback_error:
                logger.debug("duckdb_rollback_skipped", error=str(rollback_error))
            raise

    def _initialize_schema(self):
        """
        Create all tables, sequences and indexes.

        Idempotent and safe to call multiple times.

        Raises:
            StorageError: If schema creation fails
        """
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return

            try:
                with self._get_connection() as conn:
                    for table in TABLES:
                        conn.execute(f"CREATE SEQUENCE IF NOT EXISTS {table}_seq")

                    conn.execute("""
                        CREATE TABLE IF NOT EXISTS components (
                            id VARCHAR PRIMARY KEY,
                            seq BIGINT NOT NULL DEFAULT nextval('components_seq'),
                            name VARCHAR NOT NULL,
                            type VARCHAR NOT NULL,
                            status VARCHAR NOT NULL,
                            criticality VARCHAR NOT NULL,
                            last_updated TIMESTAMP NOT NULL,
                            metadata JSON,
                            description VARCHAR,
                            location VARCHAR,
                            owner VARCHAR,
                            vendor VARCHAR,
                            helpdesk_email VARCHAR
                        )
                    """)

                    conn.execute("""
                        CREATE TABLE IF NOT EXISTS dependencies (
                            id VARCHAR PRIMARY KEY,
                            seq BIGINT NOT NULL DEFAULT nextval('dependencies_seq'),
                            source_id VARCHAR NOT NULL,
                            target_id VARCHAR NOT NULL,
                            type VARCHAR NOT NULL,
                            criticality VARCHAR NOT NULL,
                            description VARCHAR,
                            last_updated TIMESTAMP
                        )
                    """)

                    conn.execute("""
                        CREATE TABLE IF NOT EXISTS workflows (
                            id VARCHAR PRIMARY KEY,
                            seq BIGINT NOT NULL DEFAULT nextval('workflows_seq'),
                            name VARCHAR NOT NULL,
                            criticality VARCHAR NOT NULL,
                            steps JSON NOT NULL,
                            business_process VARCHAR,
                            description VARCHAR,
                            owner VARCHAR,
                            last_updated TIMESTAMP
                        )
                    """)

                    conn.execute("""
                        CREATE TABLE IF NOT EXISTS audit_logs (
                            id VARCHAR PRIMARY KEY,
                            seq BIGINT NOT NULL DEFAULT nextval('audit_logs_seq'),
                            timestamp TIMESTAMP NOT NULL,
                            user_id VARCHAR,
                            action VARCHAR NOT NULL,
                            entity_type VARCHAR NOT NULL,
                            entity_id VARCHAR,
                            entity_name VARCHAR,
                            details JSON,
                            changes JSON
                        )
                    """)

                    conn.execute("""
                        CREATE INDEX IF NOT EXISTS idx_audit_logs_timestamp
                        ON audit_logs(timestamp)
                    """)

                    conn.execute("""
                        CREATE INDEX IF NOT EXISTS idx_audit_logs_entity
                        ON audit_logs(entity_type, entity_id)
                    """)

                    conn.commit()
                    logger.info("duckdb_schema_initialized", table_count=len(TABLES))
                    self._initialized = True

            except Exception as e:
                logger.error("duckdb_schema_initialization_failed", error=str(e))
                raise StorageError(f"Failed to initialize schema: {e}") from e

    def clear_for_testing(self) -> None:
        """
        Delete all rows so each test starts from a clean slate.

        A no-op unless the testing flag is set in settings.
        """
        if not get_settings().testing:
            logger.warning("clear_for_testing_refused")
            return
        try:
            with self._get_connection() as conn:
                for table in TABLES:
                    conn.execute(f"DELETE FROM {table}")
                conn.commit()
        except Exception as e:
            logger.error("clear_for_testing_failed", error=str(e))
            raise StorageError(f"Failed to clear tables: {e}") from e

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _upsert(self, conn, table: str, columns: str, entity_id: str, values: list) -> None:
        """Update the row with ``entity_id`` in place, or insert it."""
        exists = conn.execute(
            f"SELECT 1 FROM {table} WHERE id = ?", [entity_id]
        ).fetchone()
        names = [c.strip() for c in columns.split(",")]
        if exists:
            assignments = ", ".join(f"{name} = ?" for name in names[1:])
            conn.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                values[1:] + [entity_id],
            )
        else:
            placeholders = ", ".join("?" for _ in names)
            conn.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                values,
            )

    def _delete(self, table: str, entity_id: str) -> bool:
        with self._get_connection() as conn:
            existed = conn.execute(
                f"SELECT 1 FROM {table} WHERE id = ?", [entity_id]
            ).fetchone()
            if existed is None:
                return False
            conn.execute(f"DELETE FROM {table} WHERE id = ?", [entity_id])
            conn.commit()
            return True

    @staticmethod
    def _row_to_component(row) -> Component:
        return Component(
            id=row[0],
            name=row[1],
            type=row[2],
            status=row[3],
            criticality=row[4],
            last_updated=row[5],
            metadata=_load_json(row[6], {}),
            description=row[7],
            location=row[8],
            owner=row[9],
            vendor=row[10],
            helpdesk_email=row[11],
        )

    @staticmethod
    def _row_to_dependency(row) -> Dependency:
        return Dependency(
            id=row[0],
            source_id=row[1],
            target_id=row[2],
            type=row[3],
            criticality=row[4],
            description=row[5],
            last_updated=row[6],
        )

    @staticmethod
    def _row_to_workflow(row) -> Workflow:
        return Workflow(
            id=row[0],
            name=row[1],
            criticality=row[2],
            steps=[WorkflowStep(**step) for step in _load_json(row[3], [])],
            business_process=row[4] or "",
            description=row[5],
            owner=row[6],
            last_updated=row[7],
        )

    @staticmethod
    def _row_to_audit_log(row) -> AuditLog:
        changes = _load_json(row[8], None)
        return AuditLog(
            id=row[0],
            timestamp=row[1],
            user_id=row[2],
            action=row[3],
            entity_type=row[4],
            entity_id=row[5],
            entity_name=row[6],
            details=_load_json(row[7], {}),
            changes=AuditChanges(**changes) if changes else None,
        )

    # =========================================================================
    # Components Implementation
    # =========================================================================

    def write_component(self, component: Component) -> str:
        """Insert or replace a component."""
        try:
            with self._get_connection() as conn:
                self._upsert(
                    conn,
                    "components",
                    COMPONENT_COLUMNS,
                    component.id,
                    [
                        component.id,
                        component.name,
                        component.type.value,
                        component.status.value,
                        component.criticality.value,
                        component.last_updated,
                        json.dumps(component.metadata, default=str),
                        component.description,
                        component.location,
                        component.owner,
                        component.vendor,
                        component.helpdesk_email,
                    ],
                )
                conn.commit()
                logger.info("component_written", component_id=component.id)
                return component.id

        except Exception as e:
            logger.error(
                "write_component_failed", component_id=component.id, error=str(e)
            )
            raise StorageError(f"Failed to write component: {e}") from e

    def read_components(self) -> list[Component]:
        """Read every component in creation order."""
        try:
            with self._get_connection() as conn:
                rows = conn.execute(
                    f"SELECT {COMPONENT_COLUMNS} FROM components ORDER BY seq"
                ).fetchall()
                components = [self._row_to_component(row) for row in rows]
                logger.debug("components_read", count=len(components))
                return components

        except Exception as e:
            logger.error("read_components_failed", error=str(e))
            raise StorageError(f"Failed to read components: {e}") from e

    def read_component(self, component_id: str) -> Optional[Component]:
        """Read one component by id."""
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    f"SELECT {COMPONENT_COLUMNS} FROM components WHERE id = ?",
                    [component_id],
                ).fetchone()
                return self._row_to_component(row) if row else None

        except Exception as e:
            logger.error(
                "read_component_failed", component_id=component_id, error=str(e)
            )
            raise StorageError(f"Failed to read component: {e}") from e

    def delete_component(self, component_id: str) -> bool:
        """Delete one component."""
        try:
            deleted = self._delete("components", component_id)
            logger.info("component_deleted", component_id=component_id, deleted=deleted)
            return deleted

        except Exception as e:
            logger.error(
                "delete_component_failed", component_id=component_id, error=str(e)
            )
            raise StorageError(f"Failed to delete component: {e}") from e

    # =========================================================================
    # Dependencies Implementation
    # =========================================================================

    def write_dependency(self, dependency: Dependency) -> str:
        """Insert or replace a dependency edge."""
        try:
            with self._get_connection() as conn:
                self._upsert(
                    conn,
                    "dependencies",
                    DEPENDENCY_COLUMNS,
                    dependency.id,
                    [
                        dependency.id,
                        dependency.source_id,
                        dependency.target_id,
                        dependency.type.value,
                        dependency.criticality.value,
                        dependency.description,
                        dependency.last_updated,
                    ],
                )
                conn.commit()
                logger.info(
                    "dependency_written",
                    dependency_id=dependency.id,
                    source_id=dependency.source_id,
                    target_id=dependency.target_id,
                )
                return dependency.id

        except Exception as e:
            logger.error(
                "write_dependency_failed", dependency_id=dependency.id, error=str(e)
            )
            raise StorageError(f"Failed to write dependency: {e}") from e

    def read_dependencies(
        self, component_id: Optional[str] = None
    ) -> list[Dependency]:
        """Read dependency edges, optionally only those touching one component."""
        try:
            with self._get_connection() as conn:
                query = f"SELECT {DEPENDENCY_COLUMNS} FROM dependencies WHERE 1=1"
                params: list = []

                if component_id:
                    query += " AND (source_id = ? OR target_id = ?)"
                    params.extend([component_id, component_id])

                query += " ORDER BY seq"

                rows = conn.execute(query, params).fetchall()
                dependencies = [self._row_to_dependency(row) for row in rows]
                logger.debug("dependencies_read", count=len(dependencies))
                return dependencies

        except Exception as e:
            logger.error("read_dependencies_failed", error=str(e))
            raise StorageError(f"Failed to read dependencies: {e}") from e

    def read_dependency(self, dependency_id: str) -> Optional[Dependency]:
        """Read one dependency by id."""
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    f"SELECT {DEPENDENCY_COLUMNS} FROM dependencies WHERE id = ?",
                    [dependency_id],
                ).fetchone()
                return self._row_to_dependency(row) if row else None

        except Exception as e:
            logger.error(
                "read_dependency_failed", dependency_id=dependency_id, error=str(e)
            )
            raise StorageError(f"Failed to read dependency: {e}") from e

    def delete_dependency(self, dependency_id: str) -> bool:
        """Delete one dependency."""
        try:
            deleted = self._delete("dependencies", dependency_id)
            logger.info(
                "dependency_deleted", dependency_id=dependency_id, deleted=deleted
            )
            return deleted

        except Exception as e:
            logger.error(
                "delete_dependency_failed", dependency_id=dependency_id, error=str(e)
            )
            raise StorageError(f"Failed to delete dependency: {e}") from e

    # =========================================================================
    # Workflows Implementation
    # =========================================================================

    def write_workflow(self, workflow: Workflow) -> str:
        """Insert or replace a workflow."""
        try:
            with self._get_connection() as conn:
                self._upsert(
                    conn,
                    "workflows",
                    WORKFLOW_COLUMNS,
                    workflow.id,
                    [
                        workflow.id,
                        workflow.name,
                        workflow.criticality.value,
                        json.dumps([s.model_dump(mode="json") for s in workflow.steps]),
                        workflow.business_process,
                        workflow.description,
                        workflow.owner,
                        workflow.last_updated,
                    ],
                )
                conn.commit()
                logger.info(
                    "workflow_written",
                    workflow_id=workflow.id,
                    step_count=len(workflow.steps),
                )
                return workflow.id

        except Exception as e:
            logger.error("write_workflow_failed", workflow_id=workflow.id, error=str(e))
            raise StorageError(f"Failed to write workflow: {e}") from e

    def read_workflows(self) -> list[Workflow]:
        """Read every workflow in creation order."""
        try:
            with self._get_connection() as conn:
                rows = conn.execute(
                    f"SELECT {WORKFLOW_COLUMNS} FROM workflows ORDER BY seq"
                ).fetchall()
                workflows = [self._row_to_workflow(row) for row in rows]
                logger.debug("workflows_read", count=len(workflows))
                return workflows

        except Exception as e:
            logger.error("read_workflows_failed", error=str(e))
            raise StorageError(f"Failed to read workflows: {e}") from e

    def read_workflow(self, workflow_id: str) -> Optional[Workflow]:
        """Read one workflow by id."""
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    f"SELECT {WORKFLOW_COLUMNS} FROM workflows WHERE id = ?",
                    [workflow_id],
                ).fetchone()
                return self._row_to_workflow(row) if row else None

        except Exception as e:
            logger.error("read_workflow_failed", workflow_id=workflow_id, error=str(e))
            raise StorageError(f"Failed to read workflow: {e}") from e

    def delete_workflow(self, workflow_id: str) -> bool:
        """Delete one workflow."""
        try:
            deleted = self._delete("workflows", workflow_id)
            logger.info("workflow_deleted", workflow_id=workflow_id, deleted=deleted)
            return deleted

        except Exception as e:
            logger.error(
                "delete_workflow_failed", workflow_id=workflow_id, error=str(e)
            )
            raise StorageError(f"Failed to delete workflow: {e}") from e

    # =========================================================================
    # Audit Log Implementation
    # =========================================================================

    def write_audit_log(self, entry: AuditLog, max_logs: Optional[int] = None) -> str:
        """Append an audit entry and enforce the retention cap."""
        try:
            with self._get_connection() as conn:
                conn.execute(
                    f"""
                    INSERT INTO audit_logs ({AUDIT_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        entry.id,
                        entry.timestamp,
                        entry.user_id,
                        entry.action.value,
                        entry.entity_type.value,
                        entry.entity_id,
                        entry.entity_name,
                        json.dumps(entry.details, default=str),
                        json.dumps(entry.changes.model_dump(mode="json"))
                        if entry.changes
                        else None,
                    ],
                )

                if max_logs is not None:
                    conn.execute(
                        """
                        DELETE FROM audit_logs
                        WHERE id NOT IN (
                            SELECT id FROM audit_logs
                            ORDER BY timestamp DESC, seq DESC
                            LIMIT ?
                        )
                        """,
                        [max_logs],
                    )

                conn.commit()
                logger.debug(
                    "audit_log_written",
                    audit_id=entry.id,
                    action=entry.action.value,
                    entity_type=entry.entity_type.value,
                )
                return entry.id

        except Exception as e:
            logger.error("write_audit_log_failed", audit_id=entry.id, error=str(e))
            raise StorageError(f"Failed to write audit log: {e}") from e

    def read_audit_logs(
        self,
        limit: Optional[int] = None,
        entity_type: Optional[str] = None,
        action: Optional[str] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        entity_id: Optional[str] = None,
    ) -> list[AuditLog]:
        """Read audit entries newest first with optional filters."""
        try:
            with self._get_connection() as conn:
                query = f"SELECT {AUDIT_COLUMNS} FROM audit_logs WHERE 1=1"
                params: list = []

                if entity_type:
                    query += " AND entity_type = ?"
                    params.append(entity_type)

                if action:
                    query += " AND action = ?"
                    params.append(action)

                if entity_id:
                    query += " AND entity_id = ?"
                    params.append(entity_id)

                if from_date:
                    query += " AND timestamp >= ?"
                    params.append(from_date)

                if to_date:
                    query += " AND timestamp <= ?"
                    params.append(to_date)

                query += " ORDER BY timestamp DESC, seq DESC"

                if limit:
                    query += " LIMIT ?"
                    params.append(limit)

                rows = conn.execute(query, params).fetchall()
                logs = [self._row_to_audit_log(row) for row in rows]
                logger.debug("audit_logs_read", count=len(logs))
                return logs

        except Exception as e:
            logger.error("read_audit_logs_failed", error=str(e))
            raise StorageError(f"Failed to read audit logs: {e}") from e
