"""
Configuration Validator (``docflow_config.validator``).

Checks a loaded ``WorkflowConfiguration`` before anything is seeded:

* Document type names are unique.
* Every type requires at least one approval.
* ``approval_roles``, when given, agree with ``required_approvals`` and
  contain no blank role names.
* ``sla_days``, when given, is at least 1.
* ``log_level`` names a standard logging level.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from docflow_config.schema import WorkflowConfiguration

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass
class ConfigValidationResult:
    """Errors block the configuration; warnings do not."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: WorkflowConfiguration) -> ConfigValidationResult:
    result = ConfigValidationResult()

    if config.settings.log_level not in _LOG_LEVELS:
        result.add_error(f"unknown log_level {config.settings.log_level!r}")

    seen: set[str] = set()
    for doc_type in config.document_types:
        label = f"document type {doc_type.name!r}"
        if doc_type.name in seen:
            result.add_error(f"{label}: duplicate name")
        seen.add(doc_type.name)

        if doc_type.required_approvals < 1:
            result.add_error(
                f"{label}: required_approvals must be >= 1 "
                f"(got {doc_type.required_approvals})"
            )
        if doc_type.approval_roles:
            if len(doc_type.approval_roles) != doc_type.required_approvals:
                result.add_error(
                    f"{label}: {len(doc_type.approval_roles)} approval role(s) "
                    f"but required_approvals={doc_type.required_approvals}"
                )
            if any(not role.strip() for role in doc_type.approval_roles):
                result.add_error(f"{label}: blank approval role")
        if doc_type.sla_days is not None and doc_type.sla_days < 1:
            result.add_error(f"{label}: sla_days must be >= 1 (got {doc_type.sla_days})")
        if doc_type.sla_days is None:
            result.add_warning(f"{label}: no sla_days, never reported overdue")

    if not config.document_types:
        result.add_warning("configuration declares no document types")

    return result
