"""
Rotas FastAPI para as consultas do painel (DRE, dashboard, rankings, folha)

Todas as rotas recebem o mesmo escopo: upload, mês, filiais e modo de visão.
Upload desconhecido ou ainda em processamento devolve zeros/listas vazias.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from painel_financeiro.api.schemas_financeiro import (
    DashboardSchema,
    DetalhesClienteSchema,
    DetalhesFornecedorSchema,
    DespesaAgrupadaSchema,
    DespesaPessoalSchema,
    DREComparativoSchema,
    DREMensalSchema,
    EvolucaoMensalSchema,
    FilialSchema,
    RankingSchema,
    ResumoFolhaSchema,
    ResumoSaldosSchema,
)
from painel_financeiro.core.config import settings
from painel_financeiro.db import get_db
from painel_financeiro.services import agregacao
from painel_financeiro.services.agregacao import CONSOLIDADO, EscopoConsulta
from painel_financeiro.services.agregacao.escopo import ModoVisao

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/financeiro", tags=["financeiro"])


def _parse_filiais(filiais: Optional[List[str]]):
    """?filiais=1&filiais=3 -> [1, 3]; ?filiais=consolidado -> consolidado"""
    if not filiais:
        return None

    if any(f.strip().lower() == CONSOLIDADO for f in filiais):
        return CONSOLIDADO

    try:
        return [int(f) for f in filiais]
    except ValueError:
        logger.warning(f"Parâmetro filiais inválido: {filiais}")
        raise HTTPException(
            status_code=400,
            detail=f"Filiais inválidas: {filiais}. Use códigos numéricos ou '{CONSOLIDADO}'"
        )


def obter_escopo(
    upload_id: int,
    mes: Optional[int] = Query(None, ge=1, le=12),
    filiais: Optional[List[str]] = Query(None),
    modo: ModoVisao = "todos",
) -> EscopoConsulta:
    return EscopoConsulta(
        upload_id=upload_id,
        mes=mes,
        filiais=_parse_filiais(filiais),
        modo=modo,
    )


def _limite(limite: Optional[int]) -> int:
    return limite or settings.limite_ranking_padrao


@router.get("/{upload_id}/dashboard", response_model=DashboardSchema)
def dashboard(
    limite: Optional[int] = Query(None, ge=1, le=100),
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    """Indicadores e rankings da página inicial"""
    return agregacao.resumo_dashboard(db, escopo, limite=_limite(limite))


@router.get("/{upload_id}/dre", response_model=DREComparativoSchema)
def dre(
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    """DRE do mês selecionado (se houver) e acumulado do upload"""
    return agregacao.resumo_dre_comparativo(db, escopo)


@router.get("/{upload_id}/dre-mensal", response_model=DREMensalSchema)
def dre_mensal(
    incluir_total: bool = True,
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    return agregacao.dre_mensal(db, escopo, incluir_total=incluir_total)


@router.get("/{upload_id}/evolucao-mensal", response_model=List[EvolucaoMensalSchema])
def evolucao_mensal(
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    return agregacao.evolucao_mensal(db, escopo)


@router.get("/{upload_id}/top-fornecedores", response_model=List[RankingSchema])
def top_fornecedores(
    limite: Optional[int] = Query(None, ge=1, le=100),
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    return agregacao.top_fornecedores(db, escopo, limite=_limite(limite))


@router.get("/{upload_id}/top-clientes", response_model=List[RankingSchema])
def top_clientes(
    limite: Optional[int] = Query(None, ge=1, le=100),
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    return agregacao.top_clientes(db, escopo, limite=_limite(limite))


@router.get("/{upload_id}/despesas-categoria", response_model=List[DespesaAgrupadaSchema])
def despesas_categoria(
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    return agregacao.despesas_por_categoria(db, escopo)


@router.get("/{upload_id}/despesas-centro-custo", response_model=List[DespesaAgrupadaSchema])
def despesas_centro_custo(
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    return agregacao.despesas_por_centro_custo(db, escopo)


@router.get("/{upload_id}/despesas-pessoal", response_model=List[DespesaPessoalSchema])
def despesas_pessoal(
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    """Salário, comissão, bônus, pró-labore e outras"""
    return agregacao.despesas_pessoal_por_categoria(db, escopo)


@router.get("/{upload_id}/folha", response_model=ResumoFolhaSchema)
def folha(
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    return agregacao.resumo_folha(db, escopo)


@router.get("/{upload_id}/saldos-bancarios", response_model=ResumoSaldosSchema)
def saldos_bancarios(upload_id: int, db: Session = Depends(get_db)):
    return agregacao.resumo_saldos_bancarios(db, upload_id)


@router.get("/{upload_id}/filiais", response_model=List[FilialSchema])
def filiais(upload_id: int, db: Session = Depends(get_db)):
    """Filiais presentes nas contas do upload"""
    return agregacao.filiais_disponiveis(db, upload_id)


@router.get("/{upload_id}/fornecedores/{nome}", response_model=DetalhesFornecedorSchema)
def detalhes_fornecedor(
    nome: str,
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    return agregacao.detalhes_fornecedor(db, escopo, nome)


@router.get("/{upload_id}/clientes/{nome}", response_model=DetalhesClienteSchema)
def detalhes_cliente(
    nome: str,
    escopo: EscopoConsulta = Depends(obter_escopo),
    db: Session = Depends(get_db),
):
    return agregacao.detalhes_cliente(db, escopo, nome)
