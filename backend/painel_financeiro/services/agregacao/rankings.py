"""
Rankings e detalhamentos: top fornecedores/clientes, despesas por
categoria e centro de custo, despesas de pessoal e extrato por nome.
"""

from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from painel_financeiro.models import ContaAPagar, ContaAReceber
from painel_financeiro.services.agregacao.escopo import (
    EscopoConsulta,
    NAO_INFORMADO,
    coluna_data_liquidacao,
    coluna_liquidado,
    coluna_nome,
    filtro_modo,
    filtros_escopo,
    percentual,
    soma,
)
from painel_financeiro.services.parsers.classificacao import categorizar_despesa_pessoal

CATEGORIAS_PESSOAL = ("salario", "comissao", "bonus", "prolabore", "outras")


def media_arredondada(total: int, quantidade: int) -> int:
    if not quantidade:
        return 0
    return round(total / quantidade)


def _valor_somado(modelo, modo: str):
    """
    Coluna somada nos rankings e agrupamentos e o filtro de linhas.

    Soma o valor pago/recebido das linhas liquidadas; no modo projetado soma
    o valor dos títulos em aberto.
    """
    if modo == "projetado":
        return modelo.valor, filtro_modo(modelo, modo)
    liquidado = coluna_liquidado(modelo)
    return liquidado, [liquidado > 0]


def _top_por_nome(db: Session, modelo, escopo: EscopoConsulta, limite: int) -> List[dict]:
    nome = coluna_nome(modelo)
    coluna, filtros_valor = _valor_somado(modelo, escopo.modo)
    valor = soma(coluna)

    linhas = (
        db.query(
            nome,
            valor,
            func.count(modelo.id),
            func.max(coluna_data_liquidacao(modelo)),
        )
        .filter(*filtros_escopo(db, modelo, escopo, usar_modo=False), *filtros_valor)
        .group_by(nome)
        .order_by(valor.desc())
        .limit(limite)
        .all()
    )

    return [
        {
            "nome": nome_linha or NAO_INFORMADO,
            "total": int(total),
            "quantidade": quantidade,
            "media": media_arredondada(int(total), quantidade),
            "ultima_liquidacao": ultima,
        }
        for nome_linha, total, quantidade, ultima in linhas
    ]


def top_fornecedores(db: Session, escopo: EscopoConsulta, limite: int = 10) -> List[dict]:
    return _top_por_nome(db, ContaAPagar, escopo, limite)


def top_clientes(db: Session, escopo: EscopoConsulta, limite: int = 10) -> List[dict]:
    return _top_por_nome(db, ContaAReceber, escopo, limite)


def _despesas_agrupadas(db: Session, escopo: EscopoConsulta, coluna) -> List[dict]:
    somada, filtros_valor = _valor_somado(ContaAPagar, escopo.modo)
    valor = soma(somada)
    linhas = (
        db.query(coluna, valor)
        .filter(*filtros_escopo(db, ContaAPagar, escopo, usar_modo=False), *filtros_valor)
        .group_by(coluna)
        .order_by(valor.desc())
        .all()
    )

    total_geral = sum(int(total) for _, total in linhas)
    return [
        {
            "descricao": descricao or NAO_INFORMADO,
            "total": int(total),
            "percentual": percentual(int(total), total_geral),
        }
        for descricao, total in linhas
    ]


def despesas_por_categoria(db: Session, escopo: EscopoConsulta) -> List[dict]:
    return _despesas_agrupadas(db, escopo, ContaAPagar.descricao_despesa_sintetico)


def despesas_por_centro_custo(db: Session, escopo: EscopoConsulta) -> List[dict]:
    return _despesas_agrupadas(db, escopo, ContaAPagar.descricao_cc_sintetico)


def despesas_pessoal_por_categoria(db: Session, escopo: EscopoConsulta) -> List[dict]:
    """
    Classifica as contas a pagar do escopo em salário, comissão, bônus,
    pró-labore ou outras (código analítico, descrição e histórico).
    """
    valor, filtros_valor = _valor_somado(ContaAPagar, escopo.modo)
    linhas = (
        db.query(
            ContaAPagar.despesa_analitico,
            ContaAPagar.descricao_despesa_analitica,
            ContaAPagar.historico,
            valor,
        )
        .filter(*filtros_escopo(db, ContaAPagar, escopo, usar_modo=False), *filtros_valor)
        .all()
    )

    totais = {categoria: 0 for categoria in CATEGORIAS_PESSOAL}
    quantidades = {categoria: 0 for categoria in CATEGORIAS_PESSOAL}
    for codigo, descricao, historico, valor_linha in linhas:
        categoria = categorizar_despesa_pessoal(codigo, descricao, historico)
        totais[categoria] += valor_linha or 0
        quantidades[categoria] += 1

    return [
        {"categoria": categoria, "total": totais[categoria], "quantidade": quantidades[categoria]}
        for categoria in CATEGORIAS_PESSOAL
    ]


def _detalhes_por_nome(db: Session, modelo, escopo: EscopoConsulta, nome: str) -> dict:
    """Todos os lançamentos do nome no escopo (mês e filiais) com estatísticas"""
    coluna = coluna_nome(modelo)
    filtro_nome = coluna.is_(None) if nome == NAO_INFORMADO else coluna == nome

    lancamentos = (
        db.query(modelo)
        .filter(*filtros_escopo(db, modelo, escopo, usar_modo=False))
        .filter(filtro_nome)
        .order_by(modelo.data_lancamento.desc(), modelo.id)
        .all()
    )

    liquidado = coluna_liquidado(modelo).key
    data_liquidacao = coluna_data_liquidacao(modelo).key

    total_valor = sum(l.valor or 0 for l in lancamentos)
    total_liquidado = sum(getattr(l, liquidado) or 0 for l in lancamentos)
    datas = [getattr(l, data_liquidacao) for l in lancamentos if getattr(l, data_liquidacao)]

    return {
        "nome": nome,
        "lancamentos": lancamentos,
        "estatisticas": {
            "total_valor": total_valor,
            "total_liquidado": total_liquidado,
            "quantidade": len(lancamentos),
            "media": media_arredondada(total_liquidado, len(lancamentos)),
            "ultima_liquidacao": max(datas) if datas else None,
        },
    }


def detalhes_fornecedor(db: Session, escopo: EscopoConsulta, nome: str) -> dict:
    return _detalhes_por_nome(db, ContaAPagar, escopo, nome)


def detalhes_cliente(db: Session, escopo: EscopoConsulta, nome: str) -> dict:
    return _detalhes_por_nome(db, ContaAReceber, escopo, nome)
