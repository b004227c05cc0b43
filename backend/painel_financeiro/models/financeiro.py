"""
Modelos SQLAlchemy para os fatos financeiros de cada upload.

Todos os valores monetários são armazenados em centavos (Integer).
"""

from sqlalchemy import Column, Integer, String, Date, ForeignKey, Text

from painel_financeiro.models.base import Base


class ContaAPagar(Base):
    """Lançamento de contas a pagar (aba PAGO)"""

    __tablename__ = "contas_a_pagar"

    id = Column(Integer, primary_key=True, index=True)
    upload_id = Column(Integer, ForeignKey("uploads.id"), nullable=False, index=True)

    # Centro de custo
    cc_sintetico = Column(String(50), nullable=True)
    descricao_cc_sintetico = Column(Text, nullable=True)
    cc_analitico = Column(String(50), nullable=True)
    descricao_cc_analitico = Column(Text, nullable=True)

    # Classificação da despesa
    despesa_sintetico = Column(String(50), nullable=True)
    descricao_despesa_sintetico = Column(Text, nullable=True)
    despesa_analitico = Column(String(50), nullable=True)
    descricao_despesa_analitica = Column(Text, nullable=True)
    fixo_variavel = Column(String(10), nullable=True)  # FIXO | VARIÁVEL

    data_lancamento = Column(Date, nullable=True)
    cod_conta = Column(String(50), nullable=True)
    cod_fornecedor = Column(String(50), nullable=True)
    fornecedor = Column(String(255), nullable=True, index=True)
    historico = Column(Text, nullable=True)
    tipo_documento = Column(String(50), nullable=True)
    num_nota = Column(String(100), nullable=True)
    duplicata = Column(String(100), nullable=True)

    valor = Column(Integer, nullable=False)  # Centavos
    data_vencimento = Column(Date, nullable=True)
    valor_pago = Column(Integer, nullable=True)  # Centavos; null/0 = não pago
    data_pagamento = Column(Date, nullable=True)
    mes = Column(Integer, nullable=True, index=True)

    # Dados bancários
    num_banco = Column(String(50), nullable=True)
    banco = Column(String(100), nullable=True)
    agencia = Column(String(50), nullable=True)
    conta = Column(String(50), nullable=True)

    cod_filial = Column(Integer, nullable=True, index=True)


class ContaAReceber(Base):
    """Lançamento de contas a receber (aba RECEBIDO)"""

    __tablename__ = "contas_a_receber"

    id = Column(Integer, primary_key=True, index=True)
    upload_id = Column(Integer, ForeignKey("uploads.id"), nullable=False, index=True)

    cc_sintetico = Column(String(50), nullable=True)
    descricao_cc_sintetico = Column(Text, nullable=True)
    cc_analitico = Column(String(50), nullable=True)
    descricao_cc_analitico = Column(Text, nullable=True)

    # Classificação da receita
    receita_sintetico = Column(String(50), nullable=True)
    descricao_receita_sintetico = Column(Text, nullable=True)
    receita_analitico = Column(String(50), nullable=True)
    descricao_receita_analitica = Column(Text, nullable=True)

    data_lancamento = Column(Date, nullable=True)
    cliente = Column(String(255), nullable=True, index=True)
    historico = Column(Text, nullable=True)
    tipo_documento = Column(String(50), nullable=True)
    num_nota = Column(String(100), nullable=True)

    valor = Column(Integer, nullable=False)  # Centavos
    data_vencimento = Column(Date, nullable=True)
    valor_recebido = Column(Integer, nullable=True)  # Centavos; null/0 = não recebido
    data_recebimento = Column(Date, nullable=True)
    mes = Column(Integer, nullable=True, index=True)

    num_banco = Column(String(50), nullable=True)
    banco = Column(String(100), nullable=True)
    agencia = Column(String(50), nullable=True)
    conta = Column(String(50), nullable=True)

    cod_filial = Column(Integer, nullable=True, index=True)


class FolhaPagamento(Base):
    """Linha da folha de pagamento (uma por funcionário x tipo de pagamento)"""

    __tablename__ = "folha_pagamento"

    id = Column(Integer, primary_key=True, index=True)
    upload_id = Column(Integer, ForeignKey("uploads.id"), nullable=False, index=True)

    area = Column(String(100), nullable=True)
    cc = Column(String(50), nullable=True)
    nome = Column(String(255), nullable=False)
    tipo_pagamento = Column(String(50), nullable=True)  # SALÁRIO, PREMIAÇÃO, COMISSÃO
    tipo_vinculo = Column(String(10), nullable=True)  # CLT | PJ | INDEFINIDO

    # Centavos
    mes_1 = Column(Integer, default=0)
    mes_2 = Column(Integer, default=0)
    mes_3 = Column(Integer, default=0)
    mes_4 = Column(Integer, default=0)
    mes_5 = Column(Integer, default=0)
    mes_6 = Column(Integer, default=0)
    mes_7 = Column(Integer, default=0)
    mes_8 = Column(Integer, default=0)
    total = Column(Integer, default=0)


class SaldoBancario(Base):
    """Saldo de um banco extraído do bloco EXTRATO BANCÁRIO"""

    __tablename__ = "saldos_bancarios"

    id = Column(Integer, primary_key=True, index=True)
    upload_id = Column(Integer, ForeignKey("uploads.id"), nullable=False, index=True)

    banco = Column(String(100), nullable=False)
    tipo_conta = Column(String(50), nullable=True)  # PF ou PJ
    saldo_total = Column(Integer, nullable=False)  # Centavos
    saldo_sistema = Column(Integer, nullable=True)
    desvio = Column(Integer, nullable=True)
    mes = Column(Integer, nullable=True)
    ano = Column(Integer, nullable=True)
