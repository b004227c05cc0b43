"""
Módulo de importação da planilha financeira
"""

from painel_financeiro.services.importacao.service import (
    processar_planilha,
    processar_upload_background,
)

__all__ = [
    "processar_planilha",
    "processar_upload_background",
]
