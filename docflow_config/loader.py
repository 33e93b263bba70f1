"""
Configuration Loader (``docflow_config.loader``).

Responsibility
--------------
Loads the YAML files of one configuration set directory and parses them
into ``docflow_config.schema`` dataclasses.  Runtime callers go through
``docflow_config.get_active_config()`` instead.

Failure modes
-------------
* Missing ``root.yaml``  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys or wrong shapes  -> ``InvalidConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from docflow_config.schema import DocumentTypeDef, WorkflowConfiguration, WorkflowSettings
from docflow_kernel.exceptions import InvalidConfigurationError

ROOT_FILE = "root.yaml"
DOCUMENT_TYPES_FILE = "document_types.yaml"
SETTINGS_KEYS = frozenset({"database_url", "log_level", "activity_log_enabled"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_settings(data: dict[str, Any]) -> WorkflowSettings:
    """Parse the ``settings`` mapping of root.yaml.

    Unknown keys are rejected rather than ignored.
    """
    unknown = sorted(set(data) - SETTINGS_KEYS)
    if unknown:
        raise InvalidConfigurationError(
            "settings", f"unknown setting(s): {', '.join(unknown)}",
        )

    defaults = WorkflowSettings()
    activity_log_enabled = data.get("activity_log_enabled", defaults.activity_log_enabled)
    if not isinstance(activity_log_enabled, bool):
        raise InvalidConfigurationError(
            "settings",
            f"activity_log_enabled must be true or false (got {activity_log_enabled!r})",
        )
    return WorkflowSettings(
        database_url=data.get("database_url", defaults.database_url),
        log_level=str(data.get("log_level", defaults.log_level)).upper(),
        activity_log_enabled=activity_log_enabled,
    )


def parse_document_type(data: dict[str, Any]) -> DocumentTypeDef:
    """
    Parse one document type entry.

    ``required_approvals`` defaults to the length of ``approval_roles``
    when only roles are given.
    """
    if not isinstance(data, dict) or "name" not in data:
        raise InvalidConfigurationError(
            "document_types", f"entry without a name: {data!r}",
        )
    roles = data.get("approval_roles") or ()
    if isinstance(roles, str) or not isinstance(roles, (list, tuple)):
        raise InvalidConfigurationError(
            f"document type {data['name']!r}", "approval_roles must be a list",
        )
    required = data.get("required_approvals")
    if required is None:
        if not roles:
            raise InvalidConfigurationError(
                f"document type {data['name']!r}",
                "required_approvals or approval_roles is required",
            )
        required = len(roles)
    sla_days = data.get("sla_days")
    return DocumentTypeDef(
        name=str(data["name"]),
        description=data.get("description"),
        required_approvals=int(required),
        approval_roles=tuple(str(r) for r in roles),
        sla_days=int(sla_days) if sla_days is not None else None,
    )


def load_configuration(config_dir: Path) -> WorkflowConfiguration:
    """Load and parse the configuration set stored in ``config_dir``."""
    root = load_yaml_file(config_dir / ROOT_FILE)
    types_path = config_dir / DOCUMENT_TYPES_FILE
    types_doc = load_yaml_file(types_path) if types_path.exists() else {}

    raw_types = types_doc.get("document_types") or []
    if not isinstance(raw_types, list):
        raise InvalidConfigurationError(
            str(types_path), "document_types must be a list",
        )

    return WorkflowConfiguration(
        config_id=str(root.get("config_id", config_dir.name)),
        version=int(root.get("version", 1)),
        settings=parse_settings(root.get("settings") or {}),
        document_types=tuple(parse_document_type(t) for t in raw_types),
        checksum=compute_checksum({"root": root, "document_types": raw_types}),
        source_dir=str(config_dir),
    )
