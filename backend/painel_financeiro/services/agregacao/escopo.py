"""
Escopo das consultas agregadas: upload, mês, filiais e modo de visão.

Toda consulta é restrita a um upload. O filtro de filiais é resolvido no
servidor: "consolidado" (ou nenhum filtro) vira a lista explícita de códigos
presentes no upload mais as linhas sem código de filial.
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from painel_financeiro.models import ContaAPagar, ContaAReceber
from painel_financeiro.services.importacao.persistencia import codigos_filiais_do_upload


ModoVisao = Literal["realizado", "projetado", "todos"]

CONSOLIDADO = "consolidado"
NAO_INFORMADO = "Não informado"


class EscopoConsulta(BaseModel):
    """Parâmetros comuns a todas as consultas do painel"""
    upload_id: int
    mes: Optional[int] = Field(None, ge=1, le=12)
    filiais: Optional[Union[List[int], Literal["consolidado"]]] = None
    modo: ModoVisao = "todos"

    @property
    def consolidado(self) -> bool:
        # Lista vazia equivale a nenhuma filial selecionada
        return self.filiais is None or self.filiais == CONSOLIDADO or not self.filiais

    def sem_mes(self) -> "EscopoConsulta":
        return self.model_copy(update={"mes": None})


# ============================================================================
# COLUNAS POR TIPO DE CONTA
# ============================================================================

def coluna_liquidado(modelo):
    """Valor pago (contas a pagar) ou recebido (contas a receber)"""
    if modelo is ContaAPagar:
        return ContaAPagar.valor_pago
    return ContaAReceber.valor_recebido


def coluna_data_liquidacao(modelo):
    if modelo is ContaAPagar:
        return ContaAPagar.data_pagamento
    return ContaAReceber.data_recebimento


def coluna_nome(modelo):
    """Fornecedor (contas a pagar) ou cliente (contas a receber)"""
    if modelo is ContaAPagar:
        return ContaAPagar.fornecedor
    return ContaAReceber.cliente


def coluna_valor(modelo, modo: str):
    """
    Valor considerado em cada modo:
    realizado -> valor liquidado; projetado/todos -> valor do título
    """
    if modo == "realizado":
        return coluna_liquidado(modelo)
    return modelo.valor


def soma(coluna):
    """SUM que devolve 0 em vez de NULL"""
    return func.coalesce(func.sum(coluna), 0)


# ============================================================================
# FILTROS
# ============================================================================

def resolver_filiais(db: Session, escopo: EscopoConsulta) -> List[int]:
    """Lista explícita de códigos de filial do escopo"""
    if escopo.consolidado:
        return sorted(codigos_filiais_do_upload(db, escopo.upload_id))
    return sorted(set(escopo.filiais))


def filtro_filiais(modelo, escopo: EscopoConsulta, codigos: List[int]):
    if escopo.consolidado:
        # Linhas sem filial fazem parte do consolidado
        return or_(modelo.cod_filial.in_(codigos), modelo.cod_filial.is_(None))
    return modelo.cod_filial.in_(codigos)


def filtro_modo(modelo, modo: str) -> list:
    liquidado = coluna_liquidado(modelo)
    if modo == "realizado":
        return [liquidado > 0]
    if modo == "projetado":
        return [or_(liquidado.is_(None), liquidado == 0)]
    return []


def filtros_escopo(
    db: Session,
    modelo,
    escopo: EscopoConsulta,
    usar_mes: bool = True,
    usar_modo: bool = True,
) -> list:
    """
    Critérios de filtro de uma conta a pagar/receber para o escopo.

    Args:
        modelo: ContaAPagar ou ContaAReceber
        usar_mes: aplica o filtro de mês, se houver
        usar_modo: aplica o filtro de realizado/projetado
    """
    filtros = [modelo.upload_id == escopo.upload_id]

    if usar_mes and escopo.mes is not None:
        filtros.append(modelo.mes == escopo.mes)

    filtros.append(filtro_filiais(modelo, escopo, resolver_filiais(db, escopo)))

    if usar_modo:
        filtros.extend(filtro_modo(modelo, escopo.modo))

    return filtros


def percentual(parte: int, total: int) -> float:
    """parte/total em %, com 2 casas; 0 quando o total é 0"""
    if not total:
        return 0.0
    return round(parte / total * 100, 2)
