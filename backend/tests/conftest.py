"""
Fixtures compartilhadas: banco SQLite em memória, planilhas montadas com
openpyxl e cliente HTTP da API
"""

import io
import os
import sys
from datetime import datetime
from pathlib import Path

# Banco em memória antes de importar a aplicação (engine global)
os.environ.setdefault("DATABASE_URL", "sqlite://")

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from openpyxl import Workbook
from sqlalchemy.orm import sessionmaker

from painel_financeiro.db import criar_engine, init_db, get_db
from painel_financeiro.services.importacao import persistencia
from painel_financeiro.services.importacao.service import processar_planilha


def criar_planilha(abas: dict) -> bytes:
    """Monta um .xlsx em memória: {nome da aba: [linhas]}"""
    wb = Workbook()
    wb.remove(wb.active)
    for nome, linhas in abas.items():
        ws = wb.create_sheet(title=nome)
        for linha in linhas:
            ws.append(linha)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


CABECALHO_PAGO = [
    "Descrição Despesa Sintético", "Descrição CC SIntético", "Despesa Analítico",
    "Descrição Despesa Analítica", "FIXO OU VARIAVÉL", "DTLANC", "Fornecedor",
    "HISTORICO", "VALOR", "VPAGO", "DTPAGTO", "MÊS", "CODFILIAL",
]

CABECALHO_RECEBIDO = [
    "Descrição Receita Sintético", "DTEMISSAO", "NOME", "HISTÓRICO",
    "VALOR", "VPAGO", "DTPAG", "MÊS", "CODFILIAL",
]

CABECALHO_FOLHA = ["ÁREA", "CC", "NOME", None, 1, 2, 3, "TOTAL"]


def abas_padrao() -> dict:
    """
    Planilha com todas as abas.

    Contas a pagar: 1.500,00 pago (mês 3, filial 1), 800,00 em aberto
    (mês 3, filial 2), 300,00 pago (abril, filial 1), uma linha sem VALOR.
    Contas a receber: 2.000,00 recebido (mês 3, filial 1), 1.000,00 em
    aberto (mês 3, filial 3), 500,00 recebido (mês 5, sem filial).
    Folha: JOAO 1.000,00/mês nos meses 1-3 (TOTAL 3.000,00) e MARIA PJ
    500,00 nos meses 2-3 sem TOTAL.
    """
    return {
        "PG - GRC": [
            ["CODIGO", "DESCRICAO"],
            ["101001", "VENDAS DE MERCADORIAS"],
            [600017, "SALARIOS"],
            ["500010", "ALUGUEL"],
        ],
        "CC - GRC": [
            ["CODIGO", "DESCRICAO"],
            ["10", "ADMINISTRATIVO"],
            ["20", "COMERCIAL"],
        ],
        "Fornecedores": [
            ["CODIGO", "NOME"],
            ["F1", "ACME LTDA"],
        ],
        "PAGO": [
            CABECALHO_PAGO,
            ["PESSOAL", "ADMINISTRATIVO", "600017", "SALARIOS", "Fixo",
             datetime(2024, 3, 5), "ACME LTDA", "Salario marco", 1500.0, 1500.0,
             datetime(2024, 3, 10), 3, 1],
            ["ALUGUEL", "ADMINISTRATIVO", "500010", "ALUGUEL", "fixo",
             "05/03/2024", "IMOBILIARIA", "aluguel", "800,00", None,
             None, 3, 2],
            ["SERVICOS", "COMERCIAL", None, None, "variável",
             datetime(2024, 4, 2), "ACME LTDA", "Comissao vendas", 300.0, 300.0,
             datetime(2024, 4, 15), None, 1],
            ["SERVICOS", "COMERCIAL", None, None, None,
             datetime(2024, 4, 3), "SEM VALOR", "linha quebrada", None, None,
             None, 4, 1],
        ],
        "RECEBIDO": [
            CABECALHO_RECEBIDO,
            ["VENDAS", datetime(2024, 3, 1), "CLIENTE A", "nf 1", 2000.0, 2000.0,
             datetime(2024, 3, 20), 3, 1],
            ["VENDAS", datetime(2024, 3, 2), "CLIENTE B", "nf 2", 1000.0, 0,
             None, 3, 3],
            ["VENDAS", datetime(2024, 5, 2), "CLIENTE A", "nf 3", 500.0, 500.0,
             datetime(2024, 5, 3), 5, None],
        ],
        "CONSULTA FOLHA": [
            CABECALHO_FOLHA,
            ["ADM", "10", "JOAO", "SALÁRIO", 1000.0, 1000.0, 1000.0, 3000.0],
            ["COMERCIAL", "20", "MARIA", "PJ - NOTA FISCAL", 0, 500.0, 500.0, None],
            [None, None, "TOTAL GERAL", None, 1000.0, 1500.0, 1500.0, 3000.0],
        ],
        "DINÂMICA BANCOS": [
            ["RESUMO", None, None, None],
            ["EXTRATO BANCÁRIO", None, None, None],
            ["ITAU", 10000.0, 9000.0, 1000.0],
            ["BRADESCO", "1.500,00", 1500.0, 0],
            ["TOTAL", 11500.0, 10500.0, 1000.0],
        ],
    }


@pytest.fixture
def engine():
    eng = criar_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def planilha_padrao() -> bytes:
    return criar_planilha(abas_padrao())


def importar(db, conteudo: bytes, nome_arquivo: str = "financeiro.xlsx"):
    """Cria o upload e roda a importação de forma síncrona"""
    upload = persistencia.criar_upload(db, nome_arquivo, len(conteudo))
    db.commit()
    resumo = processar_planilha(db, upload.id, conteudo)
    return upload.id, resumo


@pytest.fixture
def upload_id(db, planilha_padrao) -> int:
    upload_id, resumo = importar(db, planilha_padrao)
    assert resumo.status == "completed", resumo.erro
    return upload_id


@pytest.fixture
def client(session_factory, monkeypatch):
    from fastapi.testclient import TestClient
    from painel_financeiro.main import app
    from painel_financeiro.services.importacao import service

    def _get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    # Worker de background usa a mesma base dos testes
    monkeypatch.setattr(service, "SessionLocal", session_factory)

    yield TestClient(app)

    app.dependency_overrides.clear()
