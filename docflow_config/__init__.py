"""
docflow_config -- single public entrypoint for workflow configuration.

Responsibility:
    Provides the only way to obtain configuration at runtime through
    ``get_active_config()``: load a configuration set directory, validate
    it, and return a frozen ``WorkflowConfiguration``.

Architecture position:
    Configuration -- sits above ``docflow_kernel``.  The kernel never
    imports from ``docflow_config``; ``bridges`` translates configuration
    into kernel state (document type rows) and kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the configuration directory or its
      ``root.yaml`` does not exist.
    - ``InvalidConfigurationError`` -- parse or validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``docflow_config_loaded`` log entry with the config id, version and
    checksum, tying seeded document types back to their YAML source.
"""

from __future__ import annotations

from pathlib import Path

from docflow_config.loader import ROOT_FILE, load_configuration
from docflow_config.schema import DocumentTypeDef, WorkflowConfiguration, WorkflowSettings
from docflow_config.validator import ConfigValidationResult, validate_configuration
from docflow_kernel.exceptions import InvalidConfigurationError
from docflow_kernel.logging_config import get_logger

_logger = get_logger("config")

# Bundled configuration set
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets" / "default"


def get_active_config(config_dir: Path | str | None = None) -> WorkflowConfiguration:
    """Load and validate a configuration set.

    Args:
        config_dir: Directory holding ``root.yaml`` and
            ``document_types.yaml``.  Defaults to the bundled
            ``docflow_config/sets/default``.

    Raises:
        FileNotFoundError: If the directory or its root.yaml is missing.
        InvalidConfigurationError: If parsing or validation fails.
    """
    set_dir = Path(config_dir) if config_dir is not None else _DEFAULT_CONFIG_DIR
    if not (set_dir / ROOT_FILE).is_file():
        raise FileNotFoundError(f"Configuration set not found: {set_dir / ROOT_FILE}")

    config = load_configuration(set_dir)

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise InvalidConfigurationError(
            f"configuration set {config.config_id!r}",
            "; ".join(validation.errors),
        )
    for warning in validation.warnings:
        _logger.warning(
            "config_validation_warning",
            extra={"config_id": config.config_id, "warning": warning},
        )

    _logger.info(
        "docflow_config_loaded",
        extra={
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "document_type_count": len(config.document_types),
        },
    )
    return config


__all__ = [
    "get_active_config",
    "WorkflowConfiguration",
    "WorkflowSettings",
    "DocumentTypeDef",
    "ConfigValidationResult",
    "validate_configuration",
]
