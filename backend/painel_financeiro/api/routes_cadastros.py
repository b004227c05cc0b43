"""
Rotas FastAPI para os cadastros globais (plano de contas, centros de custo,
fornecedores e filiais)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from painel_financeiro.api.schemas_financeiro import (
    CentroCustoSchema,
    FilialSchema,
    FornecedorSchema,
    PlanoContasSchema,
)
from painel_financeiro.db import get_db
from painel_financeiro.models import CentroCusto, Filial, Fornecedor, PlanoContas

router = APIRouter(prefix="/cadastros", tags=["cadastros"])


@router.get("/plano-contas", response_model=List[PlanoContasSchema])
def listar_plano_contas(
    tipo: Optional[str] = None,
    prefix: Optional[str] = None,
    skip: int = 0,
    limit: int = 1000,
    db: Session = Depends(get_db)
):
    """
    Lista o plano de contas com filtros opcionais.

    Args:
        tipo: receita, despesa, cmv ou outras
        prefix: Filtrar por prefixo do código
        skip: Paginação
        limit: Limite de resultados
    """
    query = db.query(PlanoContas)

    if tipo:
        query = query.filter(PlanoContas.tipo == tipo)

    if prefix:
        query = query.filter(PlanoContas.codigo.like(f"{prefix}%"))

    return query.order_by(PlanoContas.codigo).offset(skip).limit(limit).all()


@router.get("/centros-custo", response_model=List[CentroCustoSchema])
def listar_centros_custo(skip: int = 0, limit: int = 1000, db: Session = Depends(get_db)):
    return db.query(CentroCusto).order_by(CentroCusto.codigo).offset(skip).limit(limit).all()


@router.get("/fornecedores", response_model=List[FornecedorSchema])
def listar_fornecedores(
    nome: Optional[str] = None,
    skip: int = 0,
    limit: int = 1000,
    db: Session = Depends(get_db)
):
    query = db.query(Fornecedor)

    if nome:
        query = query.filter(Fornecedor.nome.ilike(f"%{nome}%"))

    return query.order_by(Fornecedor.nome).offset(skip).limit(limit).all()


@router.get("/filiais", response_model=List[FilialSchema])
def listar_filiais(db: Session = Depends(get_db)):
    """Todas as filiais registradas, de qualquer upload"""
    return db.query(Filial).order_by(Filial.codigo).all()
