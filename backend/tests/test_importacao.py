"""
Testes da importação: orquestração, upserts de cadastros, registro de
filiais, falhas e limpeza
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import event
from sqlalchemy.orm import sessionmaker

from conftest import abas_padrao, criar_planilha, importar, CABECALHO_PAGO
from painel_financeiro.models import (
    CentroCusto,
    ContaAPagar,
    ContaAReceber,
    Filial,
    FolhaPagamento,
    Fornecedor,
    PlanoContas,
    SaldoBancario,
    Upload,
)
from painel_financeiro.db import criar_engine, init_db
from painel_financeiro.core.models import PlanoContasRegistro
from painel_financeiro.services.agregacao import filiais_disponiveis
from painel_financeiro.services.importacao import persistencia, processar_upload_background


def _contar_fatos(db, upload_id):
    return sum(
        db.query(modelo).filter(modelo.upload_id == upload_id).count()
        for modelo in (ContaAPagar, ContaAReceber, FolhaPagamento, SaldoBancario)
    )


def test_importacao_completa(db, planilha_padrao):
    upload_id, resumo = importar(db, planilha_padrao)

    assert resumo.status == "completed"
    assert resumo.erro is None
    assert resumo.contagens["contas_a_pagar"] == 3
    assert resumo.filiais_registradas == [1, 2, 3]
    assert len(resumo.issues) == 1

    upload = db.query(Upload).filter(Upload.id == upload_id).first()
    assert upload.status == "completed"
    assert upload.mensagem_erro is None
    assert upload.finalizado_em is not None

    assert db.query(ContaAPagar).filter(ContaAPagar.upload_id == upload_id).count() == 3
    assert db.query(ContaAReceber).filter(ContaAReceber.upload_id == upload_id).count() == 3
    assert db.query(FolhaPagamento).filter(FolhaPagamento.upload_id == upload_id).count() == 2
    assert db.query(SaldoBancario).filter(SaldoBancario.upload_id == upload_id).count() == 2
    assert db.query(PlanoContas).count() == 3
    assert db.query(CentroCusto).count() == 2
    assert db.query(Fornecedor).count() == 1


def test_filiais_registradas_com_nome_padrao(db, upload_id):
    nomes = {f.codigo: f.nome for f in db.query(Filial).all()}
    assert nomes == {1: "Matriz", 2: "Filial 2", 3: "Filial 3"}


def test_reimportar_plano_de_contas_atualiza_descricao(db):
    """Mesmo código em outra importação: uma linha, descrição nova"""
    primeira = criar_planilha({"PG - GRC": [["CODIGO", "DESCRICAO"], ["600017", "SALARIOS"]]})
    segunda = criar_planilha({"PG - GRC": [["CODIGO", "DESCRICAO"], ["600017", "SALARIOS E ORDENADOS"]]})

    importar(db, primeira)
    _, resumo = importar(db, segunda)

    assert resumo.status == "completed"
    contas = db.query(PlanoContas).filter(PlanoContas.codigo == "600017").all()
    assert len(contas) == 1
    assert contas[0].descricao == "SALARIOS E ORDENADOS"


def test_codigo_repetido_na_mesma_planilha_ultima_vence(db):
    conteudo = criar_planilha({
        "PG - GRC": [["CODIGO", "DESCRICAO"], ["500010", "ALUGUEL"], ["500010", "ALUGUEL SEDE"]],
        "Fornecedores": [["CODIGO", "NOME"], ["F1", "ACME"], ["F1", "ACME LTDA"]],
    })
    _, resumo = importar(db, conteudo)

    assert resumo.status == "completed"
    assert db.query(PlanoContas).one().descricao == "ALUGUEL SEDE"
    assert db.query(Fornecedor).one().nome == "ACME LTDA"


def test_upsert_devolve_contagens(db):
    persistencia.upsert_plano_contas(db, [PlanoContasRegistro(codigo="101001", descricao="VENDAS", tipo="receita")])
    resultado = persistencia.upsert_plano_contas(db, [
        PlanoContasRegistro(codigo="101001", descricao="VENDAS BRUTAS", tipo="receita"),
        PlanoContasRegistro(codigo="100001", descricao="CMV", tipo="cmv"),
    ])

    assert resultado == {"inseridos": 1, "atualizados": 1}


def test_nova_filial_registrada_uma_vez(db, upload_id):
    conteudo = criar_planilha({
        "PAGO": [
            CABECALHO_PAGO,
            [None, None, None, None, None, None, "ACME", None, 100.0, 100.0, None, 6, 1],
            [None, None, None, None, None, None, "ACME", None, 200.0, None, None, 6, 7],
            [None, None, None, None, None, None, "ACME", None, 300.0, None, None, 6, 7],
        ],
    })
    segundo_id, resumo = importar(db, conteudo)

    assert resumo.filiais_registradas == [7]
    assert db.query(Filial).filter(Filial.codigo == 7).count() == 1
    assert db.query(Filial).filter(Filial.codigo == 7).one().nome == "Filial 7"
    assert [f.codigo for f in filiais_disponiveis(db, segundo_id)] == [1, 7]
    # Filiais do primeiro upload não mudam
    assert [f.codigo for f in filiais_disponiveis(db, upload_id)] == [1, 2, 3]


def test_arquivo_ilegivel_marca_upload_como_failed(db):
    upload_id, resumo = importar(db, b"conteudo qualquer que nao e planilha")

    assert resumo.status == "failed"
    assert resumo.erro.startswith("PlanilhaInvalidaError")

    upload = db.query(Upload).filter(Upload.id == upload_id).first()
    assert upload.status == "failed"
    assert upload.mensagem_erro
    assert _contar_fatos(db, upload_id) == 0


def test_worker_background_nunca_levanta(session_factory):
    db = session_factory()
    try:
        upload = persistencia.criar_upload(db, "quebrado.xlsx", 3)
        db.commit()
        upload_id = upload.id
    finally:
        db.close()

    processar_upload_background(upload_id, b"xyz", session_factory=session_factory)

    db = session_factory()
    try:
        upload = persistencia.obter_upload(db, upload_id)
        assert upload.status == "failed"
        assert len(upload.mensagem_erro) <= 500
    finally:
        db.close()


def test_worker_background_importa_planilha(session_factory):
    conteudo = criar_planilha(abas_padrao())
    db = session_factory()
    try:
        upload = persistencia.criar_upload(db, "financeiro.xlsx", len(conteudo), usuario="ana")
        db.commit()
        upload_id = upload.id
    finally:
        db.close()

    processar_upload_background(upload_id, conteudo, session_factory=session_factory)

    db = session_factory()
    try:
        assert persistencia.obter_upload(db, upload_id).status == "completed"
        assert _contar_fatos(db, upload_id) == 10
    finally:
        db.close()


def test_inserir_em_lotes(db, monkeypatch):
    from painel_financeiro.core.config import settings

    monkeypatch.setattr(settings, "tamanho_lote", 2)
    linhas = [
        [None, None, None, None, None, None, f"FORNECEDOR {i}", None, 10.0 * i, None, None, 1, 1]
        for i in range(1, 6)
    ]
    upload_id, resumo = importar(db, criar_planilha({"PAGO": [CABECALHO_PAGO] + linhas}))

    assert resumo.status == "completed"
    assert db.query(ContaAPagar).filter(ContaAPagar.upload_id == upload_id).count() == 5


def test_listar_uploads_mais_recente_primeiro(db):
    primeiro, _ = importar(db, criar_planilha({"OUTRA": [["A"]]}), "a.xlsx")
    segundo, _ = importar(db, criar_planilha({"OUTRA": [["A"]]}), "b.xlsx")

    ids = [u.id for u in persistencia.listar_uploads(db)]
    assert ids[:2] == [segundo, primeiro]


def test_limpar_dados_financeiros(db, upload_id):
    removidos = persistencia.limpar_dados_financeiros(db)
    db.commit()

    assert removidos["contas_a_pagar"] == 3
    assert db.query(Upload).count() == 0
    assert db.query(Filial).count() == 0
    assert _contar_fatos(db, upload_id) == 0
    # Cadastros preservados por padrão
    assert db.query(PlanoContas).count() == 3

    persistencia.limpar_dados_financeiros(db, incluir_cadastros=True)
    db.commit()
    assert db.query(PlanoContas).count() == 0
    assert db.query(Fornecedor).count() == 0


# ============================================================================
# IMPORTAÇÕES SIMULTÂNEAS
# ============================================================================

def _engine_em_arquivo(tmp_path):
    """Banco em arquivo: cada sessão usa sua própria conexão"""
    eng = criar_engine(f"sqlite:///{tmp_path / 'painel.db'}")
    init_db(eng)
    return eng


def _antes_do_insert(engine, tabela, acao):
    """Roda `acao` uma única vez, logo antes do primeiro INSERT em `tabela`"""
    disparado = []

    def ouvinte(conn, cursor, statement, parameters, context, executemany):
        if not disparado and statement.startswith(f"INSERT INTO {tabela}"):
            disparado.append(True)
            acao()

    event.listen(engine, "before_cursor_execute", ouvinte)
    return ouvinte


def test_upsert_simultaneo_do_mesmo_codigo_ultima_escrita_vence(tmp_path):
    """Outra sessão grava o código entre a leitura e a escrita desta"""
    engine = _engine_em_arquivo(tmp_path)
    fabrica = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    outra, sessao = fabrica(), fabrica()

    def outra_importacao():
        persistencia.upsert_plano_contas(outra, [
            PlanoContasRegistro(codigo="600017", descricao="SALARIOS", tipo="despesa"),
        ])
        outra.commit()

    ouvinte = _antes_do_insert(engine, "plano_contas", outra_importacao)
    try:
        resultado = persistencia.upsert_plano_contas(sessao, [
            PlanoContasRegistro(codigo="600017", descricao="SALARIOS E ORDENADOS", tipo="despesa"),
        ])
        sessao.commit()
    finally:
        event.remove(engine, "before_cursor_execute", ouvinte)
        outra.close()
        sessao.close()

    # Leu antes da outra sessão gravar: contou como inserção
    assert resultado == {"inseridos": 1, "atualizados": 0}

    verificacao = fabrica()
    try:
        contas = verificacao.query(PlanoContas).all()
        assert [(c.codigo, c.descricao) for c in contas] == [("600017", "SALARIOS E ORDENADOS")]
    finally:
        verificacao.close()
        engine.dispose()


def test_filial_criada_por_outra_importacao_nao_falha_o_upload(tmp_path):
    engine = _engine_em_arquivo(tmp_path)
    fabrica = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    outra, sessao = fabrica(), fabrica()

    def outra_importacao():
        outra.add(Filial(codigo=7, nome="Loja Centro"))
        outra.commit()

    conteudo = criar_planilha({
        "PAGO": [
            CABECALHO_PAGO,
            [None, None, None, None, None, None, "ACME", None, 100.0, 100.0, None, 6, 7],
        ],
    })

    ouvinte = _antes_do_insert(engine, "filiais", outra_importacao)
    try:
        upload_id, resumo = importar(sessao, conteudo)
    finally:
        event.remove(engine, "before_cursor_execute", ouvinte)
        outra.close()

    try:
        assert resumo.status == "completed", resumo.erro
        filiais = sessao.query(Filial).all()
        # Nome dado pela outra importação é mantido
        assert [(f.codigo, f.nome) for f in filiais] == [(7, "Loja Centro")]
        assert [f.codigo for f in filiais_disponiveis(sessao, upload_id)] == [7]
    finally:
        sessao.close()
        engine.dispose()
