"""
Modelo SQLAlchemy para uploads (histórico de importações)
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text

from painel_financeiro.models.base import Base


STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class Upload(Base):
    """Uma execução de importação de planilha"""

    __tablename__ = "uploads"

    id = Column(Integer, primary_key=True, index=True)
    usuario = Column(String(255), nullable=True)
    nome_arquivo = Column(String(255), nullable=False)
    tamanho_arquivo = Column(Integer, nullable=False)

    # Status da importação
    status = Column(String(20), default=STATUS_PROCESSING, nullable=False)  # processing, completed, failed
    mensagem_erro = Column(Text, nullable=True)

    criado_em = Column(DateTime, default=datetime.utcnow, nullable=False)
    finalizado_em = Column(DateTime, nullable=True)
