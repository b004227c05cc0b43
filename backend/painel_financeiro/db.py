"""
Configuração do banco de dados SQLAlchemy
"""

import logging
from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool, StaticPool
from painel_financeiro.core.config import settings
from painel_financeiro.models.base import Base

# Importa modelos para garantir registro no metadata
from painel_financeiro.models import (
    Upload, PlanoContas, CentroCusto, Fornecedor, Filial,
    ContaAPagar, ContaAReceber, FolhaPagamento, SaldoBancario,
)  # noqa: F401

logger = logging.getLogger(__name__)


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """Habilita WAL mode e outras otimizações do SQLite"""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def criar_engine(database_url: str):
    """
    Cria o engine com as configurações adequadas ao banco.

    SQLite em arquivo usa NullPool (evita "database is locked");
    SQLite em memória usa StaticPool para compartilhar a mesma conexão.
    """
    connect_args = {}
    poolclass = None

    if database_url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": 20.0  # Timeout de 20 segundos
        }
        poolclass = StaticPool if ":memory:" in database_url or database_url == "sqlite://" else NullPool

    novo_engine = create_engine(
        database_url,
        connect_args=connect_args,
        poolclass=poolclass,
        pool_pre_ping=True,  # Verifica conexão antes de usar
        echo=False
    )

    if database_url.startswith("sqlite"):
        event.listen(novo_engine, "connect", _set_sqlite_pragma)

    return novo_engine


engine = criar_engine(settings.database_url)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Cria todas as tabelas no banco de dados e executa migrações"""
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    _migrate_add_new_columns(bind)


def _migrate_add_new_columns(bind):
    """
    Migração automática: adiciona colunas introduzidas depois da primeira
    versão do schema (filial e tipo de vínculo).
    Compatível com bancos de dados existentes.
    """
    novas_colunas = {
        "contas_a_pagar": {"cod_filial": "INTEGER"},
        "contas_a_receber": {"cod_filial": "INTEGER"},
        "folha_pagamento": {"tipo_vinculo": "VARCHAR(10)"},
    }

    try:
        inspector = inspect(bind)
        table_names = inspector.get_table_names()

        with bind.begin() as conn:  # begin() faz commit automático
            for tabela, colunas in novas_colunas.items():
                if tabela not in table_names:
                    continue  # Tabela não existe ainda, será criada pelo create_all

                existentes = {col['name'] for col in inspector.get_columns(tabela)}
                for coluna, tipo in colunas.items():
                    if coluna in existentes:
                        continue
                    logger.info(f"Migrando: adicionando {tabela}.{coluna}")
                    conn.execute(text(f"ALTER TABLE {tabela} ADD COLUMN {coluna} {tipo}"))

    except Exception as e:
        logger.warning(f"Erro na migração automática (pode ser ignorado): {e}")


def get_db() -> Session:
    """
    Dependency para obter sessão do banco de dados.
    Usar com Depends(get_db) no FastAPI.

    Garante que a sessão seja fechada corretamente e faz rollback em caso de erro.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Erro na sessão do banco: {e}", exc_info=True)
        raise
    finally:
        db.close()
