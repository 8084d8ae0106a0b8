"""Bootstrap — settings-driven wiring of logging, schema, audit log and snapshots."""

import json
import logging

from ballotkeeper.bootstrap import build_election_service, build_workflow_service
from ballotkeeper.config import Settings
from ballotkeeper.infrastructure import database as db_module
from ballotkeeper.infrastructure.observability import JSONFormatter, setup_logging
from ballotkeeper.services.sql_repositories import SqlAuditLog

from tests.factories import ALICE, DOC, PROFILE, T0, FakeClock


def _settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        "initial_owner": "0xboss",
        "log_format": "text",
    }
    values.update(overrides)
    return Settings(**values)


def test_postgres_url_is_rewritten_for_asyncpg():
    settings = Settings(database_url="postgresql://u:p@host/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@host/db"


async def test_workflow_service_survives_restart(tmp_path):
    settings = _settings(tmp_path, engine_name="board")
    service = await build_workflow_service(settings)
    assert service.owner == "0xboss"
    await service.register_voter(ALICE, DOC, PROFILE)
    await service.start_proposals_registration("0xboss")
    await db_module.db_manager.dispose()

    resumed = await build_workflow_service(settings)
    assert resumed.status.value == "proposals_registration_started"
    assert resumed.get_voter(ALICE).approval_status.value == "pending"

    audit = SqlAuditLog(db_module.db_manager.session)
    kinds = [e["kind"] for e in await audit.list_events("board")]
    assert kinds == ["participant_registered", "workflow_status_changed"]
    await db_module.db_manager.dispose()


async def test_snapshots_disabled_starts_fresh(tmp_path):
    settings = _settings(tmp_path, snapshot_enabled=False, audit_log_enabled=False)
    clock = FakeClock(T0)
    service = await build_election_service(settings, clock=clock)
    await service.register_user(ALICE, DOC, PROFILE)
    await service.create_election(ALICE, "e1", "Board", T0 + 10, T0 + 20, ["c1"])
    await db_module.db_manager.dispose()

    fresh = await build_election_service(settings, clock=clock)
    assert fresh.list_elections() == []
    await db_module.db_manager.dispose()


def test_setup_logging_replaces_its_own_handler():
    first = setup_logging("DEBUG", "json")
    second = setup_logging("INFO", "json")
    try:
        assert first not in logging.root.handlers
        assert second in logging.root.handlers
        assert logging.root.level == logging.INFO
    finally:
        logging.root.removeHandler(second)


def test_json_formatter_surfaces_ledger_context():
    record = logging.LogRecord(
        "ballotkeeper.services", logging.WARNING, __file__, 1, "vote rejected", None, None,
    )
    record.engine = "board"
    record.error_code = "ALREADY_VOTED"
    record.scope = "e1"

    payload = json.loads(JSONFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["engine"] == "board"
    assert payload["error_code"] == "ALREADY_VOTED"
    assert payload["scope"] == "e1"
    assert "caller" not in payload
