"""
Regras de negócio de classificação aplicadas durante a extração
"""

from typing import Optional

from painel_financeiro.services.parsers.colunas import normalizar_nome


# Prefixo do código da conta -> tipo no plano de contas
PREFIXOS_TIPO_CONTA = {
    "100": "cmv",
    "101": "receita",
    "200": "receita",
    "500": "despesa",
    "600": "despesa",
    "700": "despesa",
    "800": "despesa",
}


def tipo_conta_por_codigo(codigo: str) -> str:
    """Infere receita/despesa/cmv/outras pelo prefixo de 3 dígitos do código"""
    return PREFIXOS_TIPO_CONTA.get(str(codigo).strip()[:3], "outras")


def normalizar_fixo_variavel(valor) -> Optional[str]:
    """'fixo' -> FIXO, 'variavel'/'variável' -> VARIÁVEL, resto -> None"""
    texto = normalizar_nome(valor)
    if texto == "FIXO":
        return "FIXO"
    if texto == "VARIAVEL":
        return "VARIÁVEL"
    return None


MARCADORES_PJ = (
    "PJ", "NOTA FISCAL", "NF", "PRESTACAO", "SERVICO", "CONSULTORIA",
    "TERCEIRIZADO", "PESSOA JURIDICA",
)
MARCADORES_CLT = (
    "SALARIO", "13O", "FERIAS", "ADICIONAL", "BONUS", "PREMIACAO",
    "COMISSAO", "RETIRADA",
)


def identificar_tipo_vinculo(tipo_pagamento: Optional[str], area: Optional[str]) -> str:
    """
    Identifica CLT/PJ pelo tipo de pagamento e pela área da folha.

    Marcadores de PJ têm prioridade sobre os de CLT.
    """
    if not tipo_pagamento:
        return "INDEFINIDO"

    tipo = normalizar_nome(tipo_pagamento)
    area_norm = normalizar_nome(area)

    if any(m in tipo for m in MARCADORES_PJ) or "PJ" in area_norm or "TERCEIRIZADO" in area_norm:
        return "PJ"

    if any(m in tipo for m in MARCADORES_CLT) or "CLT" in area_norm or "PF" in area_norm:
        return "CLT"

    return "INDEFINIDO"


# Códigos analíticos de despesa de pessoal
CODIGOS_PROLABORE = {"900002"}
CODIGOS_COMISSAO = {"200030", "200031"}
CODIGOS_BONUS = {"600020"}
CODIGOS_SALARIO = {"600017", "200001", "600026"}


def categorizar_despesa_pessoal(
    despesa_analitico: Optional[str],
    descricao_analitica: Optional[str],
    historico: Optional[str],
) -> str:
    """
    Classifica uma conta a pagar como salario, comissao, bonus, prolabore
    ou outras, pelo código analítico, descrição e histórico.
    """
    if not despesa_analitico and not descricao_analitica and not historico:
        return "outras"

    codigo = str(despesa_analitico).strip() if despesa_analitico else ""
    descricao = normalizar_nome(descricao_analitica)
    hist = normalizar_nome(historico)

    if codigo in CODIGOS_PROLABORE or "PRO-LABORE" in descricao or "PRO-LABORE" in hist:
        return "prolabore"

    # 200001 é salário de representante, nunca comissão
    if codigo != "200001" and (
        codigo in CODIGOS_COMISSAO
        or "COMISSAO VENDAS" in descricao
        or "COMISSAO" in hist
    ):
        return "comissao"

    if (
        codigo in CODIGOS_BONUS
        or "GRATIFICACAO" in descricao
        or any(m in hist for m in ("GRATIFICACAO", "PREMIO", "BONUS"))
    ):
        return "bonus"

    if (
        codigo in CODIGOS_SALARIO
        or any(m in descricao for m in ("SALARIO", "FOLHA"))
        or "SALARIO" in hist
    ):
        return "salario"

    return "outras"
