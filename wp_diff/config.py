# === FILE: wp_diff/config.py ===
"""
Модуль для загрузки и валидации конфигурации сравнения wp_diff.
Используется Pydantic для описания схемы и проверки данных;
источники: YAML/JSON-файл или переменные окружения (.env).
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Union

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from wp_diff.errors import ConfigurationError

PLACEHOLDER_HOSTS: Dict[str, str] = {"site_a": "example-a.com", "site_b": "example-b.com"}

_ENV_KEYS: Dict[str, str] = {
    "WP_SITE_A": "site_a",
    "WP_SITE_B": "site_b",
    "WP_SCHEME": "scheme",
    "WP_EXCLUDE_FIELDS": "exclude_fields",
    "WP_TIMEOUT": "timeout",
    "WP_USER_AGENT": "user_agent",
    "WP_LOG_DIR": "log_dir",
}


class ComparatorConfig(BaseModel):
    """Конфигурация одного запуска сравнения origin (A) и mirror (B)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    site_a: str = Field(..., description="Хост исходного сайта (origin).")
    site_b: str = Field(..., description="Хост зеркала (mirror).")
    scheme: Literal["https", "http"] = Field("https", description="Схема URL для обоих сайтов.")
    exclude_fields: List[str] = Field(
        default_factory=lambda: ["count"],
        description="Имена полей, изменения которых не попадают в diff.",
    )
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field("wp-diff/0.1", min_length=1, description="Заголовок User-Agent.")
    log_dir: str = Field("logs", description="Каталог для лог-файлов запусков.")

    @field_validator("site_a", "site_b", mode="before")
    def _strip_host(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("site_a", "site_b")
    def _check_host(cls, v: str, info) -> str:
        if not v:
            raise ValueError(f"{info.field_name} must not be empty")
        if "://" in v or "/" in v:
            raise ValueError(f"{info.field_name} must be a bare host, got {v!r}")
        if v == PLACEHOLDER_HOSTS[info.field_name]:
            raise ValueError(f"{info.field_name} is still the placeholder {v!r}")
        return v

    @field_validator("exclude_fields", mode="before")
    def _split_fields(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [f.strip() for f in v.split(",") if f.strip()]
        return v

    @model_validator(mode="after")
    def _check_distinct(self) -> ComparatorConfig:
        if self.site_a == self.site_b:
            raise ValueError("site_a and site_b must differ")
        return self


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}"
        )
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}"
        )
    return data


def _build(data: Mapping[str, Any]) -> ComparatorConfig:
    try:
        return ComparatorConfig(**data)
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ())) or "config"
        raise ConfigurationError(
            f"Please specify WP_SITE_A and WP_SITE_B correctly ({where}: {first['msg']})"
        ) from exc


def load_config(path: Union[str, Path]) -> ComparatorConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ComparatorConfig.
    Любая ошибка превращается в ConfigurationError.
    """
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise ConfigurationError(f"Файл конфигурации не найден: {path_obj}")

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ConfigurationError(f"Неподдерживаемый формат конфига: {suffix}")
    return _build(data)


def load_env_config(env_file: Union[str, Path, None] = None) -> ComparatorConfig:
    """Собирает конфигурацию из переменных окружения ``WP_*`` (после загрузки .env)."""
    if env_file is not None:
        load_dotenv(dotenv_path=str(env_file))
    else:
        load_dotenv(find_dotenv(usecwd=True))

    data: dict[str, Any] = {}
    for env_key, field in _ENV_KEYS.items():
        value = os.environ.get(env_key)
        if value is not None:
            data[field] = value

    missing = [k for k in ("site_a", "site_b") if k not in data]
    if missing:
        raise ConfigurationError(
            "Please specify WP_SITE_A and WP_SITE_B environment variables in .env before proceeding"
        )
    return _build(data)


__all__ = ["ComparatorConfig", "load_config", "load_env_config", "PLACEHOLDER_HOSTS"]
