"""
Testes das consultas agregadas sobre a planilha padrão (ver conftest.abas_padrao)

Contas a pagar: 1.500,00 pago (mês 3, filial 1), 800,00 em aberto (mês 3,
filial 2), 300,00 pago (mês 4, filial 1).
Contas a receber: 2.000,00 recebido (mês 3, filial 1), 1.000,00 em aberto
(mês 3, filial 3), 500,00 recebido (mês 5, sem filial).
Folha: meses 1-3 = 1.000,00 / 1.500,00 / 1.500,00; total 4.000,00.
"""

import sys
from pathlib import Path
from datetime import date, datetime

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from pydantic import ValidationError

from conftest import criar_planilha, importar, CABECALHO_PAGO
from painel_financeiro.services.agregacao import (
    EscopoConsulta,
    resumo_dashboard,
    resumo_dre,
    resumo_dre_comparativo,
    dre_mensal,
    evolucao_mensal,
    top_fornecedores,
    top_clientes,
    despesas_por_categoria,
    despesas_por_centro_custo,
    despesas_pessoal_por_categoria,
    detalhes_fornecedor,
    detalhes_cliente,
    resumo_folha,
    resumo_saldos_bancarios,
)
from painel_financeiro.services.agregacao.escopo import percentual, resolver_filiais


def test_dre_realizado_filial_mes(db, upload_id):
    """Pago 1.500,00 e recebido 2.000,00 no mês 3, filial 1"""
    escopo = EscopoConsulta(upload_id=upload_id, mes=3, filiais=[1], modo="realizado")
    dre = resumo_dre(db, escopo)

    assert dre["receitas"] == 200000
    assert dre["despesas"] == 150000
    assert dre["lucro_operacional"] == 50000
    assert dre["margem_operacional"] == 25.0
    # Folha do mês 3 não depende de filial
    assert dre["folha"] == 150000
    assert dre["lucro_liquido"] == -100000
    assert dre["margem_liquida"] == -50.0


def test_dre_modos_de_visao(db, upload_id):
    projetado = resumo_dre(db, EscopoConsulta(upload_id=upload_id, mes=3, modo="projetado"))
    assert projetado["receitas"] == 100000
    assert projetado["despesas"] == 80000

    todos = resumo_dre(db, EscopoConsulta(upload_id=upload_id, mes=3, modo="todos"))
    assert todos["receitas"] == 300000
    assert todos["despesas"] == 230000


def test_consolidado_inclui_linhas_sem_filial(db, upload_id):
    for filiais in (None, "consolidado", []):
        dre = resumo_dre(db, EscopoConsulta(upload_id=upload_id, filiais=filiais))
        assert dre["receitas"] == 350000
        assert dre["despesas"] == 260000
        assert dre["folha"] == 400000

    # Lista explícita não inclui linhas sem filial
    dre = resumo_dre(db, EscopoConsulta(upload_id=upload_id, filiais=[1, 2, 3]))
    assert dre["receitas"] == 300000


def test_resolver_filiais(db, upload_id):
    assert resolver_filiais(db, EscopoConsulta(upload_id=upload_id, filiais="consolidado")) == [1, 2, 3]
    assert resolver_filiais(db, EscopoConsulta(upload_id=upload_id, filiais=[3, 1, 3])) == [1, 3]


def test_filial_explicita(db, upload_id):
    dre = resumo_dre(db, EscopoConsulta(upload_id=upload_id, mes=3, filiais=[2]))
    assert dre["despesas"] == 80000
    assert dre["receitas"] == 0
    # Sem receita: margens zeradas
    assert dre["margem_operacional"] == 0
    assert dre["margem_liquida"] == 0


def test_dre_comparativo(db, upload_id):
    comparativo = resumo_dre_comparativo(db, EscopoConsulta(upload_id=upload_id, mes=3))
    assert comparativo["mes"]["receitas"] == 300000
    assert comparativo["acumulado"]["receitas"] == 350000

    sem_mes = resumo_dre_comparativo(db, EscopoConsulta(upload_id=upload_id))
    assert sem_mes["mes"] is None


def test_dre_mensal_uniao_dos_meses(db, upload_id):
    resultado = dre_mensal(db, EscopoConsulta(upload_id=upload_id))
    por_mes = {linha["mes"]: linha for linha in resultado["meses"]}

    assert sorted(por_mes) == [1, 2, 3, 4, 5]

    # Mês só com folha: receitas e despesas zeradas, margens 0
    assert por_mes[1]["receitas"] == 0
    assert por_mes[1]["despesas"] == 0
    assert por_mes[1]["folha"] == 100000
    assert por_mes[1]["margem_operacional"] == 0

    assert por_mes[3]["receitas"] == 300000
    assert por_mes[3]["despesas"] == 230000
    assert por_mes[4]["despesas"] == 30000
    assert por_mes[4]["folha"] == 0
    assert por_mes[5]["receitas"] == 50000

    total = resultado["total"]
    assert total["receitas"] == 350000
    assert total["despesas"] == 260000
    assert total["folha"] == 400000
    assert total["lucro_operacional"] == 90000
    assert total["margem_operacional"] == percentual(90000, 350000)


def test_dre_mensal_sem_total(db, upload_id):
    resultado = dre_mensal(db, EscopoConsulta(upload_id=upload_id), incluir_total=False)
    assert resultado["total"] is None


def test_dashboard_recebido_nao_inclui_faturado(db, upload_id):
    dashboard = resumo_dashboard(db, EscopoConsulta(upload_id=upload_id, mes=3))

    assert dashboard["total_recebido"] == 200000
    assert dashboard["total_faturado"] == 300000
    assert dashboard["total_despesas"] == 150000
    assert dashboard["resultado"] == 50000
    assert dashboard["margem_bruta"] == 25.0
    assert dashboard["total_folha"] == 150000

    assert dashboard["contas_a_receber"] == {
        "total_valor": 300000,
        "total_liquidado": 200000,
        "em_aberto": 100000,
        "quantidade": 2,
    }
    assert dashboard["saldos_bancarios"]["total_saldo"] == 1150000
    assert dashboard["saldos_bancarios"]["total_bancos"] == 2


def test_upload_desconhecido_devolve_zeros(db):
    escopo = EscopoConsulta(upload_id=999)
    dashboard = resumo_dashboard(db, escopo)

    assert dashboard["total_recebido"] == 0
    assert dashboard["margem_bruta"] == 0
    assert dashboard["top_fornecedores"] == []
    assert dre_mensal(db, escopo) == {
        "meses": [],
        "total": {
            "receitas": 0,
            "despesas": 0,
            "folha": 0,
            "lucro_operacional": 0,
            "lucro_liquido": 0,
            "margem_operacional": 0,
            "margem_liquida": 0,
        },
    }


def test_evolucao_mensal_ignora_modo_e_mes(db, upload_id):
    esperado = [
        {"mes": 3, "receita": 200000, "despesa": 150000, "resultado": 50000},
        {"mes": 4, "receita": 0, "despesa": 30000, "resultado": -30000},
        {"mes": 5, "receita": 50000, "despesa": 0, "resultado": 50000},
    ]
    assert evolucao_mensal(db, EscopoConsulta(upload_id=upload_id)) == esperado
    assert evolucao_mensal(db, EscopoConsulta(upload_id=upload_id, mes=3, modo="projetado")) == esperado


def test_evolucao_mensal_agrupa_pelo_mes_do_lancamento(db):
    """Lançamento de junho pago em julho entra em junho"""
    conteudo = criar_planilha({
        "PAGO": [
            CABECALHO_PAGO,
            [None, None, None, None, None, datetime(2024, 6, 5), "ACME", None, 100.0, 100.0,
             datetime(2024, 7, 2), 6, 1],
        ],
    })
    upload_id, _ = importar(db, conteudo)

    assert evolucao_mensal(db, EscopoConsulta(upload_id=upload_id)) == [
        {"mes": 6, "receita": 0, "despesa": 10000, "resultado": -10000},
    ]


def test_top_fornecedores(db, upload_id):
    top = top_fornecedores(db, EscopoConsulta(upload_id=upload_id))

    # IMOBILIARIA não pagou nada: fica fora do ranking de pagamentos
    assert [t["nome"] for t in top] == ["ACME LTDA"]
    acme = top[0]
    assert acme["total"] == 180000
    assert acme["quantidade"] == 2
    assert acme["media"] == 90000
    assert acme["ultima_liquidacao"] == date(2024, 4, 15)
    assert len(top_fornecedores(db, EscopoConsulta(upload_id=upload_id), limite=1)) == 1


def test_top_fornecedores_projetado_soma_titulos_em_aberto(db, upload_id):
    top = top_fornecedores(db, EscopoConsulta(upload_id=upload_id, modo="projetado"))
    assert top == [{
        "nome": "IMOBILIARIA",
        "total": 80000,
        "quantidade": 1,
        "media": 80000,
        "ultima_liquidacao": None,
    }]


def test_top_clientes_ignora_titulos_nao_recebidos(db, upload_id):
    top = top_clientes(db, EscopoConsulta(upload_id=upload_id))
    assert [t["nome"] for t in top] == ["CLIENTE A"]
    assert top[0]["total"] == 250000


def test_top_clientes_realizado(db, upload_id):
    top = top_clientes(db, EscopoConsulta(upload_id=upload_id, modo="realizado"))

    assert top == [{
        "nome": "CLIENTE A",
        "total": 250000,
        "quantidade": 2,
        "media": 125000,
        "ultima_liquidacao": date(2024, 5, 3),
    }]


def test_despesas_agrupadas(db, upload_id):
    categorias = despesas_por_categoria(db, EscopoConsulta(upload_id=upload_id))
    assert [(c["descricao"], c["total"]) for c in categorias] == [
        ("PESSOAL", 150000),
        ("SERVICOS", 30000),
    ]
    assert categorias[0]["percentual"] == percentual(150000, 180000)

    centros = despesas_por_centro_custo(db, EscopoConsulta(upload_id=upload_id, modo="realizado"))
    assert [(c["descricao"], c["total"]) for c in centros] == [
        ("ADMINISTRATIVO", 150000),
        ("COMERCIAL", 30000),
    ]

    abertos = despesas_por_categoria(db, EscopoConsulta(upload_id=upload_id, modo="projetado"))
    assert [(c["descricao"], c["total"]) for c in abertos] == [("ALUGUEL", 80000)]


def test_agrupamentos_do_dashboard_fecham_com_total_de_despesas(db, upload_id):
    dashboard = resumo_dashboard(db, EscopoConsulta(upload_id=upload_id, mes=3))

    assert dashboard["total_despesas"] == 150000
    assert sum(c["total"] for c in dashboard["despesas_por_categoria"]) == 150000
    assert sum(c["total"] for c in dashboard["despesas_por_centro_custo"]) == 150000
    assert {t["nome"]: t["total"] for t in dashboard["top_fornecedores"]} == {"ACME LTDA": 150000}


def test_despesas_pessoal(db, upload_id):
    categorias = {
        c["categoria"]: c["total"]
        for c in despesas_pessoal_por_categoria(db, EscopoConsulta(upload_id=upload_id))
    }
    assert categorias == {
        "salario": 150000,
        "comissao": 30000,
        "bonus": 0,
        "prolabore": 0,
        "outras": 0,
    }

    projetado = {
        c["categoria"]: c["total"]
        for c in despesas_pessoal_por_categoria(db, EscopoConsulta(upload_id=upload_id, modo="projetado"))
    }
    assert projetado["outras"] == 80000
    assert projetado["salario"] == 0


def test_detalhes_fornecedor(db, upload_id):
    detalhes = detalhes_fornecedor(db, EscopoConsulta(upload_id=upload_id), "ACME LTDA")

    assert len(detalhes["lancamentos"]) == 2
    estatisticas = detalhes["estatisticas"]
    assert estatisticas["total_valor"] == 180000
    assert estatisticas["total_liquidado"] == 180000
    assert estatisticas["media"] == 90000
    assert estatisticas["ultima_liquidacao"] == date(2024, 4, 15)

    no_mes = detalhes_fornecedor(db, EscopoConsulta(upload_id=upload_id, mes=3), "ACME LTDA")
    assert no_mes["estatisticas"]["quantidade"] == 1


def test_detalhes_cliente_inexistente(db, upload_id):
    detalhes = detalhes_cliente(db, EscopoConsulta(upload_id=upload_id), "NINGUEM")
    assert detalhes["lancamentos"] == []
    assert detalhes["estatisticas"]["media"] == 0
    assert detalhes["estatisticas"]["ultima_liquidacao"] is None


def test_resumo_folha(db, upload_id):
    folha = resumo_folha(db, EscopoConsulta(upload_id=upload_id))
    assert folha["total"] == 400000
    assert folha["total_funcionarios"] == 2

    vinculos = {g["descricao"]: g["total"] for g in folha["por_tipo_vinculo"]}
    assert vinculos == {"CLT": 300000, "PJ": 100000}

    assert resumo_folha(db, EscopoConsulta(upload_id=upload_id, mes=2))["total"] == 150000
    # Planilha só tem 8 colunas mensais
    assert resumo_folha(db, EscopoConsulta(upload_id=upload_id, mes=11))["total"] == 0


def test_resumo_saldos(db, upload_id):
    saldos = resumo_saldos_bancarios(db, upload_id)
    assert saldos["total_saldo"] == 1150000
    assert saldos["total_sistema"] == 1050000
    assert saldos["total_desvio"] == 100000
    assert [s["banco"] for s in saldos["saldos"]] == ["ITAU", "BRADESCO"]


def test_escopo_valida_mes():
    with pytest.raises(ValidationError):
        EscopoConsulta(upload_id=1, mes=13)
    with pytest.raises(ValidationError):
        EscopoConsulta(upload_id=1, modo="futuro")


def test_percentual():
    assert percentual(50000, 200000) == 25.0
    assert percentual(1, 3) == 33.33
    assert percentual(100, 0) == 0
