"""
Módulo de parsers da planilha financeira
"""

from painel_financeiro.services.parsers.planilha_parser import (
    extrair_planilha,
    PlanilhaInvalidaError,
)
from painel_financeiro.services.parsers.normalizacao import (
    para_centavos,
    parse_data_flexivel,
    mes_da_data,
)

__all__ = [
    "extrair_planilha",
    "PlanilhaInvalidaError",
    "para_centavos",
    "parse_data_flexivel",
    "mes_da_data",
]
