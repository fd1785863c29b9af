import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

from .config import config

# Variáveis Globais
engine = None
db_session = None

logger = logging.getLogger("controle-qualidade")


def normalize_database_url(database_url: Optional[str]) -> Optional[str]:
    """
    Normaliza a URL do banco.
    - Se for Postgres, garante que sslmode=require esteja presente.
    """
    if not database_url:
        return None

    try:
        url = make_url(database_url)
    except Exception:
        # Mantém a URL como está se não for parseável pelo SQLAlchemy
        return database_url

    if url.drivername.startswith("postgresql") and "sslmode" not in url.query:
        url = url.set(query={**url.query, "sslmode": "require"})

    return url.render_as_string(hide_password=False)


def mask_database_url(database_url: str) -> str:
    """Keep only the host part of the URL for logs."""
    return database_url.split("@")[-1] if "@" in database_url else "configured"


def build_engine(database_url: str):
    """Create the engine; SQLite (dev/tests) shares one connection across sessions."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_recycle=config.DB_POOL_RECYCLE,
    )


def init_db(database_url: Optional[str] = None):
    global engine, db_session
    database_url = normalize_database_url(database_url or config.DATABASE_URL)
    if not database_url:
        logger.warning("⚠️ DATABASE_URL não encontrada na Config. Verifique as variáveis de ambiente.")
        return None

    try:
        logger.info(f"🔌 Tentando conectar ao banco: {mask_database_url(database_url)}")
        engine = build_engine(database_url)
        db_session = scoped_session(sessionmaker(autocommit=False, autoflush=False, bind=engine))
        logger.info("✅ Conexão com Banco de Dados Inicializada")
    except Exception as e:
        logger.error(f"❌ Erro ao criar engine do banco: {e}")
        raise
    return engine


def get_db():
    """Yields the session of the current scope. Cleanup happens in app teardown."""
    if db_session is None:
        init_db()

    if db_session:
        yield db_session()
    else:
        yield None
