"""
Config -> Kernel Bridges.

Functions that turn a ``WorkflowConfiguration`` into kernel state and
kernel inputs.  They live in docflow_config (the producer) because the
kernel never imports docflow_config.

Usage:
    from docflow_config.bridges import (
        build_workflow_service, configure_from, seed_document_types,
    )

    config = get_active_config()
    configure_from(config)
    with session_scope() as session:
        types = seed_document_types(session, config)
        service = build_workflow_service(session, config)
"""

from __future__ import annotations

import os

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from docflow_config.schema import WorkflowConfiguration
from docflow_kernel.db.engine import init_engine_from_url
from docflow_kernel.domain.activity import NullActivitySink
from docflow_kernel.domain.clock import Clock
from docflow_kernel.domain.policy import DecisionAuthorization
from docflow_kernel.domain.workflow import DocumentType
from docflow_kernel.logging_config import configure_logging, get_logger, set_log_level
from docflow_kernel.models.document import DocumentTypeModel
from docflow_kernel.services.workflow_service import WorkflowService

logger = get_logger("config.bridges")


def seed_document_types(
    session: Session,
    config: WorkflowConfiguration,
) -> dict[str, DocumentType]:
    """Insert or update the configured document types, keyed by name.

    Existing rows are matched by name.  Types in the store but absent from
    the configuration are left alone; documents may still reference them.
    Flushes; the caller commits.
    """
    existing = {
        model.name: model
        for model in session.execute(select(DocumentTypeModel)).scalars()
    }

    created = updated = 0
    seeded: dict[str, DocumentTypeModel] = {}
    for definition in config.document_types:
        roles = list(definition.approval_roles) or None
        model = existing.get(definition.name)
        if model is None:
            model = DocumentTypeModel(
                name=definition.name,
                description=definition.description,
                required_approvals=definition.step_count,
                approval_roles=roles,
                sla_days=definition.sla_days,
            )
            session.add(model)
            created += 1
        elif (
            model.description != definition.description
            or model.required_approvals != definition.step_count
            or (model.approval_roles or None) != roles
            or model.sla_days != definition.sla_days
        ):
            model.description = definition.description
            model.required_approvals = definition.step_count
            model.approval_roles = roles
            model.sla_days = definition.sla_days
            updated += 1
        seeded[definition.name] = model

    session.flush()

    logger.info(
        "document_types_seeded",
        extra={
            "config_id": config.config_id,
            "checksum": config.checksum,
            "types_created": created,
            "types_updated": updated,
            "types_total": len(seeded),
        },
    )
    return {name: model.to_dto() for name, model in seeded.items()}


def build_workflow_service(
    session: Session,
    config: WorkflowConfiguration,
    clock: Clock | None = None,
    authorization: DecisionAuthorization | None = None,
) -> WorkflowService:
    """A WorkflowService honouring the configured engine settings."""
    return WorkflowService(
        session,
        clock=clock,
        authorization=authorization,
        activity_sink=None if config.settings.activity_log_enabled else NullActivitySink(),
    )


def configure_from(config: WorkflowConfiguration) -> Engine | None:
    """Apply the configured log level and open the configured database.

    ``DATABASE_URL`` is used when the configuration names no database.
    Returns the engine, or None when neither source gives a URL.
    """
    configure_logging(level=config.settings.log_level)
    set_log_level(config.settings.log_level)

    database_url = config.settings.database_url or os.environ.get("DATABASE_URL")
    if not database_url:
        logger.warning(
            "database_url_not_configured", extra={"config_id": config.config_id},
        )
        return None
    return init_engine_from_url(database_url)
