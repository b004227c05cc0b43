"""
Resumo do dashboard: totais recebidos/pagos, resultado, margem e os
rankings exibidos na página inicial.
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from painel_financeiro.models import ContaAPagar, ContaAReceber
from painel_financeiro.services.agregacao.escopo import (
    EscopoConsulta,
    coluna_liquidado,
    filtros_escopo,
    percentual,
    soma,
)
from painel_financeiro.services.agregacao.folha import resumo_saldos_bancarios, total_folha
from painel_financeiro.services.agregacao.rankings import (
    despesas_por_categoria,
    despesas_por_centro_custo,
    top_clientes,
    top_fornecedores,
)

logger = logging.getLogger(__name__)


def resumo_contas(db: Session, modelo, escopo: EscopoConsulta) -> dict:
    """Total dos títulos, total liquidado (> 0) e quantidade no escopo"""
    liquidado = coluna_liquidado(modelo)
    filtros = filtros_escopo(db, modelo, escopo)

    total_valor, quantidade = (
        db.query(soma(modelo.valor), func.count(modelo.id))
        .filter(*filtros)
        .one()
    )
    total_liquidado = (
        db.query(soma(liquidado))
        .filter(*filtros)
        .filter(liquidado > 0)
        .scalar()
    )

    total_valor = int(total_valor or 0)
    total_liquidado = int(total_liquidado or 0)
    return {
        "total_valor": total_valor,
        "total_liquidado": total_liquidado,
        "em_aberto": total_valor - total_liquidado,
        "quantidade": quantidade,
    }


def resumo_dashboard(db: Session, escopo: EscopoConsulta, limite: int = 10) -> dict:
    """
    Indicadores do dashboard.

    total_recebido considera só o que foi efetivamente recebido
    (valor_recebido > 0); o valor faturado vai em total_faturado.
    """
    contas_receber = resumo_contas(db, ContaAReceber, escopo)
    contas_pagar = resumo_contas(db, ContaAPagar, escopo)

    total_recebido = contas_receber["total_liquidado"]
    total_despesas = contas_pagar["total_liquidado"]
    resultado = total_recebido - total_despesas

    logger.debug(
        f"Dashboard upload {escopo.upload_id}: recebido={total_recebido}, despesas={total_despesas}"
    )

    return {
        "total_recebido": total_recebido,
        "total_faturado": contas_receber["total_valor"],
        "total_despesas": total_despesas,
        "total_folha": total_folha(db, escopo.upload_id, escopo.mes),
        "resultado": resultado,
        "margem_bruta": percentual(resultado, total_recebido),
        "top_fornecedores": top_fornecedores(db, escopo, limite),
        "top_clientes": top_clientes(db, escopo, limite),
        "despesas_por_categoria": despesas_por_categoria(db, escopo),
        "despesas_por_centro_custo": despesas_por_centro_custo(db, escopo),
        "contas_a_pagar": contas_pagar,
        "contas_a_receber": contas_receber,
        "saldos_bancarios": resumo_saldos_bancarios(db, escopo.upload_id),
    }
