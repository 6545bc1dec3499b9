"""
Configuration Models

Pydantic models for portal configuration validation.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from internship_portal.utils.validator import ConfigValidator


DEFAULT_ACCEPTED_TYPES: dict[str, list[str]] = {
    "cv": ["application/pdf"],
    "motivation_letter": ["application/pdf"],
    "report": ["application/pdf"],
    "presentation": ["application/pdf"],
    "plan": ["application/pdf"],
    "logo": ["image/*"],
    "profile_picture": ["image/*"],
}


class UploadPolicy(BaseModel):
    """Allow-list checked before a file is handed to the upload provider."""

    max_size_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    accepted_types: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_ACCEPTED_TYPES.items()}
    )

    @field_validator("accepted_types")
    @classmethod
    def validate_accepted_types(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        """Every document kind needs at least one MIME pattern."""
        for kind, patterns in v.items():
            if not patterns:
                raise ValueError(f"Upload kind '{kind}' has no accepted MIME types")
            for pattern in patterns:
                if "/" not in pattern:
                    raise ValueError(f"Invalid MIME pattern for '{kind}': {pattern}")
        return v


class WorkflowLimits(BaseModel):
    """Size rules for the student choice phases."""

    choose5_min_companies: int = Field(default=1, gt=0)
    choose5_max_companies: int = Field(default=5, gt=0)
    top3_required_choices: int = Field(default=3, gt=0)

    @field_validator("choose5_max_companies")
    @classmethod
    def validate_choose5_range(cls, v: int, info: ValidationInfo) -> int:
        """Validate that max >= min."""
        low = info.data.get("choose5_min_companies", 1)
        if v < low:
            raise ValueError(
                f"choose5_max_companies ({v}) must be >= choose5_min_companies ({low})"
            )
        return v


class PortalSettings(BaseModel):
    """Portal configuration model."""

    identity_storage_key: str = Field(default="user", min_length=1)
    storage_dir: str = Field(default=".portal-storage")
    seed_dir: str | None = Field(
        default=None, description="Directory of JSONL seed files (None = bundled data)"
    )
    log_file: str = Field(default="logs/internship-portal.log")
    log_level: str = Field(default="INFO")
    uploads: UploadPolicy = Field(default_factory=UploadPolicy)
    limits: WorkflowLimits = Field(default_factory=WorkflowLimits)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @classmethod
    def load(
        cls, config_path: Path | str | None = None, env_file: Path | str | None = ".env"
    ) -> "PortalSettings":
        """Load portal settings from a config file plus environment overrides.

        Environment variables named ``PORTAL_<FIELD>`` (e.g. ``PORTAL_LOG_LEVEL``)
        override top-level scalar fields. A ``.env`` file is loaded first if present.

        Args:
            config_path: Path to portal.json (defaults to config/portal.json)
            env_file: Optional dotenv file with PORTAL_* overrides

        Returns:
            PortalSettings: Validated configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If the file is not valid JSON or breaks the schema
            ValueError: If config validation fails
        """
        if config_path is None:
            config_path = Path("config/portal.json")
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}. "
                f"Copy {config_path.stem}.example.json to {config_path.name}"
            )

        config_data = ConfigValidator().validate_file(config_path, "portal_settings_schema.json")

        if env_file is not None and Path(env_file).exists():
            load_dotenv(env_file)

        for name in ("identity_storage_key", "storage_dir", "seed_dir", "log_file", "log_level"):
            override = os.getenv(f"PORTAL_{name.upper()}")
            if override:
                config_data[name] = override

        return cls(**config_data)
