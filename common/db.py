from __future__ import annotations

from typing import Optional
from urllib.parse import quote_plus
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from .config import Settings, get_settings


logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def build_sqlalchemy_url(settings: Settings) -> str:
    # Forma odbc_connect recomendada:
    # - contraseñas con caracteres especiales
    # - nombres de driver con espacios
    # - sintaxis de puerto SQL Server (SERVER=host,port)
    odbc_str = (
        f"DRIVER={{{settings.odbc_driver}}};"
        f"SERVER={settings.db_host},{settings.db_port};"
        f"DATABASE={settings.db_name};"
        f"UID={settings.db_user};"
        f"PWD={settings.db_password};"
        "TrustServerCertificate=yes;"
    )

    return f"mssql+pyodbc:///?odbc_connect={quote_plus(odbc_str)}"


def get_engine(settings: Optional[Settings] = None) -> Engine:
    """Engine compartido por proceso, creado en el primer uso."""
    global _engine
    if _engine is not None:
        return _engine

    settings = settings or get_settings()
    url = build_sqlalchemy_url(settings)

    # Log básico de parámetros de conexión (sin contraseña)
    logger.info(
        "[DB] Crear engine SQL Server host=%s port=%s db=%s user=%s driver=%s",
        settings.db_host,
        settings.db_port,
        settings.db_name,
        settings.db_user,
        settings.odbc_driver,
    )

    engine = create_engine(url, pool_pre_ping=True, future=True)

    try:
        with engine.connect() as conn:  # type: ignore[call-arg]
            conn.execute(text("SELECT 1"))
        logger.info("[DB] Test de conexión OK")
    except Exception:
        logger.exception("[DB] Test de conexión FALLÓ")

    _engine = engine
    return engine
