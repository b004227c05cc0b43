"""
Modelos Pydantic para dados em memória (registros extraídos da planilha)

Valores monetários sempre em centavos (int).
"""

from datetime import date
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field


TipoConta = Literal["receita", "despesa", "cmv", "outras"]
FixoVariavel = Literal["FIXO", "VARIÁVEL"]
TipoVinculo = Literal["CLT", "PJ", "INDEFINIDO"]


class PlanoContasRegistro(BaseModel):
    """Conta do plano de contas"""
    codigo: str
    descricao: str
    tipo: TipoConta = "outras"


class CentroCustoRegistro(BaseModel):
    codigo: str
    descricao: str


class FornecedorRegistro(BaseModel):
    codigo: str
    nome: str


class ContaAPagarRegistro(BaseModel):
    """Linha normalizada da aba de contas a pagar"""
    upload_id: int

    cc_sintetico: Optional[str] = None
    descricao_cc_sintetico: Optional[str] = None
    cc_analitico: Optional[str] = None
    descricao_cc_analitico: Optional[str] = None
    despesa_sintetico: Optional[str] = None
    descricao_despesa_sintetico: Optional[str] = None
    despesa_analitico: Optional[str] = None
    descricao_despesa_analitica: Optional[str] = None
    fixo_variavel: Optional[FixoVariavel] = None

    data_lancamento: Optional[date] = None
    cod_conta: Optional[str] = None
    cod_fornecedor: Optional[str] = None
    fornecedor: Optional[str] = None
    historico: Optional[str] = None
    tipo_documento: Optional[str] = None
    num_nota: Optional[str] = None
    duplicata: Optional[str] = None

    valor: int = Field(0, ge=0)
    data_vencimento: Optional[date] = None
    valor_pago: Optional[int] = None
    data_pagamento: Optional[date] = None
    mes: Optional[int] = Field(None, ge=1, le=12)

    num_banco: Optional[str] = None
    banco: Optional[str] = None
    agencia: Optional[str] = None
    conta: Optional[str] = None
    cod_filial: Optional[int] = None


class ContaAReceberRegistro(BaseModel):
    """Linha normalizada da aba de contas a receber"""
    upload_id: int

    cc_sintetico: Optional[str] = None
    descricao_cc_sintetico: Optional[str] = None
    cc_analitico: Optional[str] = None
    descricao_cc_analitico: Optional[str] = None
    receita_sintetico: Optional[str] = None
    descricao_receita_sintetico: Optional[str] = None
    receita_analitico: Optional[str] = None
    descricao_receita_analitica: Optional[str] = None

    data_lancamento: Optional[date] = None
    cliente: Optional[str] = None
    historico: Optional[str] = None
    tipo_documento: Optional[str] = None
    num_nota: Optional[str] = None

    valor: int = Field(0, ge=0)
    data_vencimento: Optional[date] = None
    valor_recebido: Optional[int] = None
    data_recebimento: Optional[date] = None
    mes: Optional[int] = Field(None, ge=1, le=12)

    num_banco: Optional[str] = None
    banco: Optional[str] = None
    agencia: Optional[str] = None
    conta: Optional[str] = None
    cod_filial: Optional[int] = None


class FolhaPagamentoRegistro(BaseModel):
    """Linha da folha: um funcionário x tipo de pagamento, 8 meses + total"""
    upload_id: int
    area: Optional[str] = None
    cc: Optional[str] = None
    nome: str
    tipo_pagamento: Optional[str] = None
    tipo_vinculo: TipoVinculo = "INDEFINIDO"
    mes_1: int = 0
    mes_2: int = 0
    mes_3: int = 0
    mes_4: int = 0
    mes_5: int = 0
    mes_6: int = 0
    mes_7: int = 0
    mes_8: int = 0
    total: int = 0


class SaldoBancarioRegistro(BaseModel):
    upload_id: int
    banco: str
    tipo_conta: Optional[str] = None
    saldo_total: int = 0
    saldo_sistema: int = 0
    desvio: int = 0
    mes: Optional[int] = None
    ano: Optional[int] = None


class PlanilhaExtraida(BaseModel):
    """Resultado da extração de todas as abas de uma planilha"""
    plano_contas: List[PlanoContasRegistro] = []
    centros_custo: List[CentroCustoRegistro] = []
    fornecedores: List[FornecedorRegistro] = []
    contas_a_pagar: List[ContaAPagarRegistro] = []
    contas_a_receber: List[ContaAReceberRegistro] = []
    folha_pagamento: List[FolhaPagamentoRegistro] = []
    saldos_bancarios: List[SaldoBancarioRegistro] = []

    # Problemas encontrados em linhas ignoradas (diagnóstico)
    issues: List[str] = []

    def contagens(self) -> Dict[str, int]:
        return {
            "plano_contas": len(self.plano_contas),
            "centros_custo": len(self.centros_custo),
            "fornecedores": len(self.fornecedores),
            "contas_a_pagar": len(self.contas_a_pagar),
            "contas_a_receber": len(self.contas_a_receber),
            "folha_pagamento": len(self.folha_pagamento),
            "saldos_bancarios": len(self.saldos_bancarios),
        }


class ResumoImportacao(BaseModel):
    """Resumo devolvido pelo orquestrador ao final de uma importação"""
    upload_id: int
    status: str
    contagens: Dict[str, int] = {}
    filiais_registradas: List[int] = []
    issues: List[str] = []
    erro: Optional[str] = None
