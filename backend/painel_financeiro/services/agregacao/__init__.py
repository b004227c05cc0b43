"""
Consultas agregadas do painel (DRE, dashboard, rankings, folha)
"""

from painel_financeiro.services.agregacao.escopo import EscopoConsulta, CONSOLIDADO
from painel_financeiro.services.agregacao.dashboard import resumo_dashboard
from painel_financeiro.services.agregacao.dre import (
    resumo_dre,
    resumo_dre_comparativo,
    dre_mensal,
    evolucao_mensal,
)
from painel_financeiro.services.agregacao.rankings import (
    top_fornecedores,
    top_clientes,
    despesas_por_categoria,
    despesas_por_centro_custo,
    despesas_pessoal_por_categoria,
    detalhes_fornecedor,
    detalhes_cliente,
)
from painel_financeiro.services.agregacao.folha import (
    resumo_folha,
    resumo_saldos_bancarios,
    filiais_disponiveis,
)

__all__ = [
    "EscopoConsulta",
    "CONSOLIDADO",
    "resumo_dashboard",
    "resumo_dre",
    "resumo_dre_comparativo",
    "dre_mensal",
    "evolucao_mensal",
    "top_fornecedores",
    "top_clientes",
    "despesas_por_categoria",
    "despesas_por_centro_custo",
    "despesas_pessoal_por_categoria",
    "detalhes_fornecedor",
    "detalhes_cliente",
    "resumo_folha",
    "resumo_saldos_bancarios",
    "filiais_disponiveis",
]
