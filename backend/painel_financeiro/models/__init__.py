"""
Modelos SQLAlchemy
"""

from painel_financeiro.models.base import Base
from painel_financeiro.models.upload import Upload
from painel_financeiro.models.cadastros import (
    PlanoContas,
    CentroCusto,
    Fornecedor,
    Filial,
)
from painel_financeiro.models.financeiro import (
    ContaAPagar,
    ContaAReceber,
    FolhaPagamento,
    SaldoBancario,
)

__all__ = [
    "Base",
    "Upload",
    "PlanoContas",
    "CentroCusto",
    "Fornecedor",
    "Filial",
    "ContaAPagar",
    "ContaAReceber",
    "FolhaPagamento",
    "SaldoBancario",
]
