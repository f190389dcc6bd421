"""
Settings loading and logging setup.

Configuration comes from three layers, later ones winning:

1. ``.env`` (python-dotenv), so the variables below can live in a file
2. ``configs/config.yaml`` (or the file named by ``SYNCGRAPH_CONFIG``)
3. ``SYNCGRAPH_*`` environment variables

The database can be given either as a plain SQLAlchemy URL (``db.url``) or,
for Postgres deployments, as a driver plus the names of the environment
variables holding each connection part:

    db:
      driver: postgresql+psycopg2
      host_env: PGHOST
      port_env: PGPORT
      user_env: PGUSER
      pwd_env:  PGPASSWORD
      db_env:   PGDATABASE
"""

from __future__ import annotations
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from loguru import logger

from syncgraph.db.record_store import DEFAULT_DB_URL
from syncgraph.errors import ConfigError
from syncgraph.services.catalog import DEFAULT_AUDIO_TRACKS

DEFAULT_CONFIG_PATH = "configs/config.yaml"

_DB_ENV_KEYS = ("host_env", "port_env", "user_env", "pwd_env", "db_env")


@dataclass
class Settings:
    db_url: str = DEFAULT_DB_URL
    audio_upload_dir: str = "uploads/audio"
    audio_static_dir: str = "static"
    default_audio: List[str] = field(default_factory=lambda: list(DEFAULT_AUDIO_TRACKS))
    search_max_workers: int = 3
    suggestion_depth: int = 2
    discovery_size: int = 20
    radio_size: int = 30
    log_level: str = "INFO"
    log_file: Optional[str] = None


def db_url_from_env(db_cfg: Dict[str, Any]) -> str:
    """
    Build a database URL from env variables pointed to by the ``db`` section.

    Raises:
        ConfigError: If a referenced variable is missing
    """
    missing = [db_cfg[k] for k in _DB_ENV_KEYS if not os.getenv(db_cfg[k])]
    if missing:
        raise ConfigError(f"Missing database environment variables: {', '.join(missing)}")

    host = os.getenv(db_cfg["host_env"])
    port = os.getenv(db_cfg["port_env"])
    user = os.getenv(db_cfg["user_env"])
    pwd = os.getenv(db_cfg["pwd_env"])
    db = os.getenv(db_cfg["db_env"])
    return f"{db_cfg['driver']}://{user}:{pwd}@{host}:{port}/{db}"


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def _int(section: Dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be an integer, got {value!r}") from e


def load_settings(path: Optional[str | Path] = None) -> Settings:
    """
    Load settings from .env, the YAML config file and the environment.

    Args:
        path: Config file; defaults to ``SYNCGRAPH_CONFIG`` or configs/config.yaml.
            A missing default file is fine, a missing explicit file is not.

    Returns:
        Resolved settings
    """
    load_dotenv()

    explicit = path or os.getenv("SYNCGRAPH_CONFIG")
    config_path = Path(explicit or DEFAULT_CONFIG_PATH)
    if config_path.exists():
        cfg = _read_yaml(config_path)
        logger.debug(f"Loaded config from {config_path}")
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")
    else:
        cfg = {}

    db_cfg = cfg.get("db") or {}
    audio_cfg = cfg.get("audio") or {}
    search_cfg = cfg.get("search") or {}
    social_cfg = cfg.get("social") or {}
    rec_cfg = cfg.get("recommendations") or {}
    log_cfg = cfg.get("logging") or {}

    settings = Settings()
    if db_cfg.get("url"):
        settings.db_url = db_cfg["url"]
    elif db_cfg.get("driver"):
        settings.db_url = db_url_from_env(db_cfg)

    settings.audio_upload_dir = audio_cfg.get("upload_dir", settings.audio_upload_dir)
    settings.audio_static_dir = audio_cfg.get("static_dir", settings.audio_static_dir)
    if audio_cfg.get("defaults"):
        settings.default_audio = list(audio_cfg["defaults"])

    settings.search_max_workers = _int(search_cfg, "max_workers", settings.search_max_workers)
    settings.suggestion_depth = _int(social_cfg, "suggestion_depth", settings.suggestion_depth)
    settings.discovery_size = _int(rec_cfg, "discovery_size", settings.discovery_size)
    settings.radio_size = _int(rec_cfg, "radio_size", settings.radio_size)
    settings.log_level = str(log_cfg.get("level", settings.log_level)).upper()
    settings.log_file = log_cfg.get("file", settings.log_file)

    # Environment wins over the file
    settings.db_url = os.getenv("SYNCGRAPH_DB_URL", settings.db_url)
    settings.log_level = os.getenv("SYNCGRAPH_LOG_LEVEL", settings.log_level).upper()
    settings.audio_upload_dir = os.getenv("SYNCGRAPH_AUDIO_UPLOAD_DIR", settings.audio_upload_dir)
    settings.audio_static_dir = os.getenv("SYNCGRAPH_AUDIO_STATIC_DIR", settings.audio_static_dir)

    if settings.search_max_workers < 1:
        raise ConfigError("search.max_workers must be at least 1")
    return settings


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Replace loguru's default sink with one at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level=level.upper(), rotation="10 MB", retention=5)
