import logging

from sqlalchemy import inspect

from controle_qualidade.models_db import Base

logger = logging.getLogger("migration")


def run_migrations(engine):
    """Create any missing table. Existing tables are left untouched."""
    if engine is None:
        logger.error("❌ Engine não inicializada; migrações ignoradas.")
        return []

    existing = set(inspect(engine).get_table_names())
    missing = [t.name for t in Base.metadata.sorted_tables if t.name not in existing]
    if not missing:
        logger.info("✅ Esquema já está atualizado.")
        return []

    logger.info(f"🔄 Criando tabelas: {', '.join(missing)}")
    Base.metadata.create_all(bind=engine)
    logger.info("✅ Migrações executadas com sucesso")
    return missing
