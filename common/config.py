from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv


def _default_env_file() -> str:
    # Reutiliza el .env del backend Node para no duplicar credenciales.
    repo_root = Path(__file__).resolve().parents[2]
    return str(repo_root / "iot_monitor_backend" / ".env")


@dataclass(frozen=True)
class Settings:
    backend_url: str
    backend_timeout_seconds: float
    internal_api_key: Optional[str]

    prediction_sink: str
    prediction_queue_size: int
    prediction_num_workers: int

    monitor_topics: Tuple[str, ...]
    monitor_timeframe: str

    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str

    odbc_driver: str


def _split_topics(raw: str) -> Tuple[str, ...]:
    return tuple(t.strip() for t in raw.split(",") if t.strip())


def get_settings() -> Settings:
    # Carga el env file (si existe) pero las variables reales siguen teniendo prioridad.
    env_file = os.getenv("PREDICTION_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    backend_url = os.getenv("BACKEND_URL", "http://localhost:4000").rstrip("/")
    backend_timeout = float(os.getenv("BACKEND_TIMEOUT_SECONDS", "5"))
    internal_api_key = os.getenv("INTERNAL_API_KEY") or None

    # http | sql | none
    prediction_sink = os.getenv("PREDICTION_SINK", "http").strip().lower()
    queue_size = int(os.getenv("PREDICTION_QUEUE_SIZE", "1000"))
    num_workers = int(os.getenv("PREDICTION_NUM_WORKERS", "2"))

    monitor_topics = _split_topics(os.getenv("MONITOR_TOPICS", ""))
    monitor_timeframe = os.getenv("MONITOR_TIMEFRAME", "2H")

    db_host = os.getenv("DB_HOST", "localhost")
    db_port = int(os.getenv("DB_PORT", "1434"))
    db_user = os.getenv("DB_USER", "sa")
    db_password = os.getenv("DB_PASSWORD", "")
    db_name = os.getenv("DB_NAME", "iot_monitoring_system")

    # Depende de la imagen del SO:
    # - ODBC Driver 17 for SQL Server
    # - ODBC Driver 18 for SQL Server
    odbc_driver = os.getenv("ODBC_DRIVER", "ODBC Driver 17 for SQL Server")

    return Settings(
        backend_url=backend_url,
        backend_timeout_seconds=backend_timeout,
        internal_api_key=internal_api_key,
        prediction_sink=prediction_sink,
        prediction_queue_size=queue_size,
        prediction_num_workers=num_workers,
        monitor_topics=monitor_topics,
        monitor_timeframe=monitor_timeframe,
        db_host=db_host,
        db_port=db_port,
        db_user=db_user,
        db_password=db_password,
        db_name=db_name,
        odbc_driver=odbc_driver,
    )
