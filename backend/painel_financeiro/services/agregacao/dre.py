"""
DRE (Demonstração do Resultado) do upload.

receitas - despesas = lucro operacional; lucro operacional - folha = lucro
líquido. Margens sobre as receitas, 0 quando não há receita.
"""

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from painel_financeiro.models import ContaAPagar, ContaAReceber
from painel_financeiro.services.agregacao.escopo import (
    EscopoConsulta,
    coluna_liquidado,
    coluna_valor,
    filtros_escopo,
    percentual,
    soma,
)
from painel_financeiro.services.agregacao.folha import folha_por_mes, total_folha

logger = logging.getLogger(__name__)


def montar_dre(receitas: int, despesas: int, folha: int) -> dict:
    lucro_operacional = receitas - despesas
    lucro_liquido = lucro_operacional - folha
    return {
        "receitas": receitas,
        "despesas": despesas,
        "folha": folha,
        "lucro_operacional": lucro_operacional,
        "lucro_liquido": lucro_liquido,
        "margem_operacional": percentual(lucro_operacional, receitas),
        "margem_liquida": percentual(lucro_liquido, receitas),
    }


def total_contas(db: Session, modelo, escopo: EscopoConsulta) -> int:
    """Soma das contas a pagar/receber do escopo, pelo valor do modo de visão"""
    total = (
        db.query(soma(coluna_valor(modelo, escopo.modo)))
        .filter(*filtros_escopo(db, modelo, escopo))
        .scalar()
    )
    return int(total or 0)


def resumo_dre(db: Session, escopo: EscopoConsulta) -> dict:
    receitas = total_contas(db, ContaAReceber, escopo)
    despesas = total_contas(db, ContaAPagar, escopo)
    folha = total_folha(db, escopo.upload_id, escopo.mes)
    return montar_dre(receitas, despesas, folha)


def resumo_dre_comparativo(db: Session, escopo: EscopoConsulta) -> dict:
    """DRE do mês selecionado ao lado do acumulado do upload"""
    return {
        "mes": resumo_dre(db, escopo) if escopo.mes is not None else None,
        "acumulado": resumo_dre(db, escopo.sem_mes()),
    }


def _contas_por_mes(db: Session, modelo, escopo: EscopoConsulta) -> Dict[int, int]:
    valor = soma(coluna_valor(modelo, escopo.modo))
    linhas = (
        db.query(modelo.mes, valor)
        .filter(*filtros_escopo(db, modelo, escopo, usar_mes=False))
        .filter(modelo.mes.isnot(None))
        .group_by(modelo.mes)
        .all()
    )
    return {mes: int(total) for mes, total in linhas}


def dre_mensal(db: Session, escopo: EscopoConsulta, incluir_total: bool = True) -> dict:
    """
    Uma linha de DRE por mês presente em receitas, despesas ou folha.

    Meses sem uma das categorias aparecem com zero. A linha total é a soma
    das colunas, com as margens recalculadas.
    """
    receitas = _contas_por_mes(db, ContaAReceber, escopo)
    despesas = _contas_por_mes(db, ContaAPagar, escopo)
    folha = folha_por_mes(db, escopo.upload_id)

    meses = sorted(set(receitas) | set(despesas) | set(folha))
    linhas = [
        {"mes": mes, **montar_dre(receitas.get(mes, 0), despesas.get(mes, 0), folha.get(mes, 0))}
        for mes in meses
    ]

    total: Optional[dict] = None
    if incluir_total:
        total = montar_dre(
            sum(linha["receitas"] for linha in linhas),
            sum(linha["despesas"] for linha in linhas),
            sum(linha["folha"] for linha in linhas),
        )

    logger.debug(f"DRE mensal do upload {escopo.upload_id}: meses {meses}")
    return {"meses": linhas, "total": total}


def _liquidado_por_mes(db: Session, modelo, escopo: EscopoConsulta) -> Dict[int, int]:
    liquidado = coluna_liquidado(modelo)
    linhas = (
        db.query(modelo.mes, soma(liquidado))
        .filter(*filtros_escopo(db, modelo, escopo, usar_mes=False, usar_modo=False))
        .filter(modelo.mes.isnot(None), liquidado > 0)
        .group_by(modelo.mes)
        .all()
    )
    return {mes: int(total) for mes, total in linhas}


def evolucao_mensal(db: Session, escopo: EscopoConsulta) -> list:
    """
    Recebido x pago por mês do lançamento (coluna mes, a mesma da DRE).

    Sempre realizado: ignora o mês e o modo do escopo.
    """
    receitas = _liquidado_por_mes(db, ContaAReceber, escopo)
    despesas = _liquidado_por_mes(db, ContaAPagar, escopo)

    return [
        {
            "mes": mes,
            "receita": receitas.get(mes, 0),
            "despesa": despesas.get(mes, 0),
            "resultado": receitas.get(mes, 0) - despesas.get(mes, 0),
        }
        for mes in sorted(set(receitas) | set(despesas))
    ]
