"""
Schemas Pydantic para a API do painel financeiro

Valores monetários em centavos (int); percentuais com 2 casas.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel


class UploadSchema(BaseModel):
    """Upload e status da importação"""

    id: int
    nome_arquivo: str
    tamanho_arquivo: int
    usuario: Optional[str] = None
    status: str  # processing | completed | failed
    mensagem_erro: Optional[str] = None
    criado_em: datetime
    finalizado_em: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============================================================================
# DRE
# ============================================================================

class DRESchema(BaseModel):
    receitas: int
    despesas: int
    folha: int
    lucro_operacional: int
    lucro_liquido: int
    margem_operacional: float
    margem_liquida: float


class DREMesSchema(DRESchema):
    mes: int


class DREMensalSchema(BaseModel):
    meses: List[DREMesSchema]
    total: Optional[DRESchema] = None


class DREComparativoSchema(BaseModel):
    """DRE do mês selecionado (se houver) e acumulado do upload"""

    mes: Optional[DRESchema] = None
    acumulado: DRESchema


class EvolucaoMensalSchema(BaseModel):
    mes: int
    receita: int
    despesa: int
    resultado: int


# ============================================================================
# RANKINGS
# ============================================================================

class RankingSchema(BaseModel):
    nome: str
    total: int
    quantidade: int
    media: int
    ultima_liquidacao: Optional[date] = None


class DespesaAgrupadaSchema(BaseModel):
    descricao: str
    total: int
    percentual: float


class DespesaPessoalSchema(BaseModel):
    categoria: str  # salario | comissao | bonus | prolabore | outras
    total: int
    quantidade: int


# ============================================================================
# DASHBOARD
# ============================================================================

class ResumoContasSchema(BaseModel):
    total_valor: int
    total_liquidado: int
    em_aberto: int
    quantidade: int


class SaldoBancarioSchema(BaseModel):
    banco: str
    tipo_conta: Optional[str] = None
    saldo_total: int
    saldo_sistema: int
    desvio: int


class ResumoSaldosSchema(BaseModel):
    total_saldo: int
    total_sistema: int
    total_desvio: int
    total_bancos: int
    saldos: List[SaldoBancarioSchema]


class DashboardSchema(BaseModel):
    total_recebido: int
    total_faturado: int
    total_despesas: int
    total_folha: int
    resultado: int
    margem_bruta: float
    top_fornecedores: List[RankingSchema]
    top_clientes: List[RankingSchema]
    despesas_por_categoria: List[DespesaAgrupadaSchema]
    despesas_por_centro_custo: List[DespesaAgrupadaSchema]
    contas_a_pagar: ResumoContasSchema
    contas_a_receber: ResumoContasSchema
    saldos_bancarios: ResumoSaldosSchema


# ============================================================================
# FOLHA
# ============================================================================

class GrupoFolhaSchema(BaseModel):
    descricao: str
    total: int
    funcionarios: int


class ResumoFolhaSchema(BaseModel):
    total: int
    total_funcionarios: int
    por_area: List[GrupoFolhaSchema]
    por_tipo_vinculo: List[GrupoFolhaSchema]
    por_tipo_pagamento: List[GrupoFolhaSchema]


# ============================================================================
# DETALHAMENTO POR NOME
# ============================================================================

class ContaAPagarSchema(BaseModel):
    id: int
    data_lancamento: Optional[date] = None
    fornecedor: Optional[str] = None
    historico: Optional[str] = None
    descricao_despesa_sintetico: Optional[str] = None
    descricao_cc_sintetico: Optional[str] = None
    num_nota: Optional[str] = None
    valor: int
    data_vencimento: Optional[date] = None
    valor_pago: Optional[int] = None
    data_pagamento: Optional[date] = None
    mes: Optional[int] = None
    cod_filial: Optional[int] = None

    class Config:
        from_attributes = True


class ContaAReceberSchema(BaseModel):
    id: int
    data_lancamento: Optional[date] = None
    cliente: Optional[str] = None
    historico: Optional[str] = None
    descricao_receita_sintetico: Optional[str] = None
    descricao_cc_sintetico: Optional[str] = None
    num_nota: Optional[str] = None
    valor: int
    data_vencimento: Optional[date] = None
    valor_recebido: Optional[int] = None
    data_recebimento: Optional[date] = None
    mes: Optional[int] = None
    cod_filial: Optional[int] = None

    class Config:
        from_attributes = True


class EstatisticasNomeSchema(BaseModel):
    total_valor: int
    total_liquidado: int
    quantidade: int
    media: int
    ultima_liquidacao: Optional[date] = None


class DetalhesFornecedorSchema(BaseModel):
    nome: str
    lancamentos: List[ContaAPagarSchema]
    estatisticas: EstatisticasNomeSchema


class DetalhesClienteSchema(BaseModel):
    nome: str
    lancamentos: List[ContaAReceberSchema]
    estatisticas: EstatisticasNomeSchema


# ============================================================================
# CADASTROS
# ============================================================================

class FilialSchema(BaseModel):
    codigo: int
    nome: str

    class Config:
        from_attributes = True


class PlanoContasSchema(BaseModel):
    codigo: str
    descricao: str
    tipo: str  # receita | despesa | cmv | outras

    class Config:
        from_attributes = True


class CentroCustoSchema(BaseModel):
    codigo: str
    descricao: str

    class Config:
        from_attributes = True


class FornecedorSchema(BaseModel):
    codigo: str
    nome: str

    class Config:
        from_attributes = True
