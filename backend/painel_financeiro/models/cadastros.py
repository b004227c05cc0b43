"""
Modelos SQLAlchemy para cadastros globais: Plano de Contas, Centros de Custo,
Fornecedores e Filiais
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text

from painel_financeiro.models.base import Base


class PlanoContas(Base):
    """Conta do plano de contas (compartilhada entre uploads)"""

    __tablename__ = "plano_contas"

    id = Column(Integer, primary_key=True, index=True)
    codigo = Column(String(50), nullable=False, unique=True, index=True)
    descricao = Column(Text, nullable=False)
    tipo = Column(String(20), nullable=False)  # receita, despesa, cmv, outras
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class CentroCusto(Base):
    """Modelo de Centro de Custo"""

    __tablename__ = "centros_custo"

    id = Column(Integer, primary_key=True, index=True)
    codigo = Column(String(50), nullable=False, unique=True, index=True)
    descricao = Column(Text, nullable=False)


class Fornecedor(Base):
    """Modelo de Fornecedor"""

    __tablename__ = "fornecedores"

    id = Column(Integer, primary_key=True, index=True)
    codigo = Column(String(50), nullable=False, unique=True, index=True)
    nome = Column(String(255), nullable=False)


class Filial(Base):
    """
    Filial da empresa.

    Não existe aba própria na planilha: as filiais são registradas
    automaticamente a partir do CODFILIAL das contas a pagar/receber.
    """

    __tablename__ = "filiais"

    id = Column(Integer, primary_key=True, index=True)
    codigo = Column(Integer, nullable=False, unique=True, index=True)
    nome = Column(String(255), nullable=False)
    criado_em = Column(DateTime, default=datetime.utcnow, nullable=False)
