"""Bootstrap — builds ready-to-use services from Settings.

Invariants:
    - Logging is configured once, before anything else logs
    - Tables exist before any repository is used
    - With snapshots enabled the service resumes from the latest persisted snapshot
    - With the audit log enabled every notification is persisted to audit_events
"""

import logging

from ballotkeeper.config import Settings, get_settings
from ballotkeeper.core.engines import FixedWorkflowEngine, MultiElectionEngine
from ballotkeeper.core.repository_protocols import Clock
from ballotkeeper.infrastructure.database import DatabaseSessionManager, init_db
from ballotkeeper.infrastructure.observability import setup_logging
from ballotkeeper.services.election_service import MultiElectionService
from ballotkeeper.services.notification_dispatch import NotificationDispatcher
from ballotkeeper.services.sql_repositories import SqlAuditLog, SqlSnapshotRepository
from ballotkeeper.services.workflow_service import WorkflowElectionService

logger = logging.getLogger(__name__)


async def _prepare(settings: Settings) -> tuple[DatabaseSessionManager, NotificationDispatcher]:
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await manager.create_schema()

    dispatcher = NotificationDispatcher()
    if settings.audit_log_enabled:
        dispatcher.subscribe(SqlAuditLog(manager.session))
    return manager, dispatcher


async def build_workflow_service(settings: Settings | None = None) -> WorkflowElectionService:
    settings = settings or get_settings()
    manager, dispatcher = await _prepare(settings)

    if settings.snapshot_enabled:
        service = await WorkflowElectionService.restore(
            settings.engine_name, settings.initial_owner,
            SqlSnapshotRepository(manager.session), dispatcher=dispatcher,
        )
    else:
        service = WorkflowElectionService(
            FixedWorkflowEngine(owner=settings.initial_owner),
            name=settings.engine_name, dispatcher=dispatcher,
        )
    logger.info("Workflow election service ready", extra={"engine": settings.engine_name})
    return service


async def build_election_service(
    settings: Settings | None = None, clock: Clock | None = None,
) -> MultiElectionService:
    settings = settings or get_settings()
    manager, dispatcher = await _prepare(settings)

    if settings.snapshot_enabled:
        service = await MultiElectionService.restore(
            settings.engine_name, settings.initial_owner,
            SqlSnapshotRepository(manager.session), dispatcher=dispatcher, clock=clock,
        )
    else:
        service = MultiElectionService(
            MultiElectionEngine(owner=settings.initial_owner),
            name=settings.engine_name, dispatcher=dispatcher, clock=clock,
        )
    logger.info("Multi-election service ready", extra={"engine": settings.engine_name})
    return service
