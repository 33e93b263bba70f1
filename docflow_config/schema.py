"""
Document workflow configuration schema.

The human-authored source artifact: YAML fragments in a configuration set
directory are parsed into these frozen types by the loader, checked by the
validator and seeded into the store by the bridges.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Engine settings (root.yaml)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkflowSettings:
    """Engine-wide settings."""

    database_url: str | None = None
    log_level: str = "INFO"
    activity_log_enabled: bool = True


# ---------------------------------------------------------------------------
# Document types (document_types.yaml)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DocumentTypeDef:
    """One document type in the catalog.

    Either ``required_approvals`` or ``approval_roles`` drives the step
    count; when both are given they must agree.
    """

    name: str
    required_approvals: int
    description: str | None = None
    approval_roles: tuple[str, ...] = ()
    sla_days: int | None = None

    @property
    def step_count(self) -> int:
        return len(self.approval_roles) if self.approval_roles else self.required_approvals


# ---------------------------------------------------------------------------
# Configuration set
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkflowConfiguration:
    """A complete configuration set, as loaded from one directory."""

    config_id: str
    version: int
    settings: WorkflowSettings
    document_types: tuple[DocumentTypeDef, ...] = ()
    checksum: str = ""
    source_dir: str | None = field(default=None, compare=False)

    def document_type(self, name: str) -> DocumentTypeDef | None:
        return next((t for t in self.document_types if t.name == name), None)
