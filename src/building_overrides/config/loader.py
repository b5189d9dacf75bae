"""Load YAML settings for the override store and its clients."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import ConfigError
from ..host import ServiceClassifier
from ..overrides.models import Category
from ..overrides.store import DEFAULT_STORE_PATH

CONFIG_DIR = Path("configs")
SETTINGS_PATH = CONFIG_DIR / "settings.yml"

STORE_ENV = "BUILDING_OVERRIDES_STORE"
DB_PATH_ENV = "BUILDING_OVERRIDES_DB_PATH"


class AuditSettings(BaseModel):
    enabled: bool = False
    db_path: Path = Path("building_overrides.db")


class AppConfig(BaseModel):
    store_path: Path = Field(DEFAULT_STORE_PATH, description="YAML file holding the overrides")
    default_category: Category = Category.WORKPLACE
    entities: Dict[str, str] = Field(
        default_factory=dict,
        description="Building name to host service, e.g. residential or office",
    )
    audit: AuditSettings = Field(default_factory=AuditSettings)

    def build_classifier(self) -> ServiceClassifier:
        return ServiceClassifier(services=dict(self.entities), default=self.default_category)


def load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def _apply_env(data: Dict[str, Any]) -> Dict[str, Any]:
    store = os.getenv(STORE_ENV)
    if store:
        data["store_path"] = store
    db_path = os.getenv(DB_PATH_ENV)
    if db_path:
        audit = data.get("audit")
        data["audit"] = {**(audit if isinstance(audit, dict) else {}), "db_path": db_path}
    return data


def load_config(path: Path | None = None) -> AppConfig:
    """Read settings from ``path`` (default ``configs/settings.yml``) and the environment.

    A missing file yields the defaults. Environment variables, including those
    in a ``.env`` file, win over the file.
    """
    load_dotenv()
    file_path = Path(path or SETTINGS_PATH)
    data: Dict[str, Any] = {}
    if file_path.exists():
        try:
            raw = load_yaml(file_path)
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {file_path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"could not read {file_path}: {exc}") from exc
        if raw is not None and not isinstance(raw, dict):
            raise ConfigError(f"{file_path} must contain a mapping")
        data = dict(raw or {})
    try:
        return AppConfig(**_apply_env(data))
    except (ValidationError, TypeError) as exc:
        raise ConfigError(f"invalid settings in {file_path}: {exc}") from exc
