"""Settings loader for AnsibleFormatter."""

from pathlib import Path
from typing import Any

import tomllib
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = Path("config.toml")


def _toml_settings_source() -> dict[str, Any]:
    """Load settings from config.toml with keys mapped to Settings fields.

    This source has LOWER priority than env/.env so those can override TOML.
    """
    if not CONFIG_PATH.exists():
        return {}
    with CONFIG_PATH.open("rb") as f:
        t = tomllib.load(f)

    fmt_cfg = t.get("formatter", {}) or {}
    log_cfg = t.get("logging", {}) or {}
    out: dict[str, Any] = {
        "language_id": fmt_cfg.get("language_id", "ansible-output"),
        "fold_delay_seconds": fmt_cfg.get("fold_delay_seconds", 0.2),
        "keywords_in_strings": fmt_cfg.get("keywords_in_strings", False),
        "logging_level": log_cfg.get("level", "INFO"),
        "logging_file_path": log_cfg.get("file_path", "logs/ansible-formatter.jsonl"),
        "logging_max_bytes": log_cfg.get("max_bytes", 5_000_000),
        "logging_backup_count": log_cfg.get("backup_count", 5),
    }

    # Per-handler levels: strings INFO|DEBUG|WARNING|ERROR|CRITICAL|NONE
    # Booleans map True -> overall level, False -> NONE
    overall = str(out["logging_level"]).upper()

    def _norm_level(v, default):
        if isinstance(v, str):
            return v.upper()
        if isinstance(v, bool):
            return overall if v else "NONE"
        return default

    out["logging_console"] = _norm_level(log_cfg.get("console"), "WARNING")
    out["logging_file"] = _norm_level(log_cfg.get("to_file"), "NONE")
    return out


class Settings(BaseSettings):
    # --- Formatter ---
    language_id: str = Field(
        default="ansible-output", description="Content type the host switches to after formatting."
    )
    fold_delay_seconds: float = Field(default=0.2, ge=0)
    keywords_in_strings: bool = False

    # --- Logging ---
    logging_level: str = "INFO"
    logging_console: str = "WARNING"
    logging_file: str = "NONE"
    logging_file_path: str = "logs/ansible-formatter.jsonl"
    logging_max_bytes: int = 5_000_000
    logging_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_prefix="ANSIBLE_FORMATTER_",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Precedence (highest to lowest):
        # 1) init_settings (explicit overrides in code/tests)
        # 2) dotenv (.env in cwd)
        # 3) env_settings (OS env)
        # 4) TOML (config.toml in cwd)
        # 5) file_secret_settings
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            _toml_settings_source,
            file_secret_settings,
        )


def load_settings() -> Settings:
    return Settings()
