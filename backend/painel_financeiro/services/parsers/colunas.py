"""
Tabela declarativa de abas e cabeçalhos aceitos na planilha.

Cada campo canônico lista os cabeçalhos aceitos, incluindo as variações com e
sem acento e com espaço sobrando que aparecem nas planilhas reais. A
comparação é feita sobre o nome normalizado (ver `normalizar_nome`).
"""

import re
import unicodedata
from typing import Dict, Iterable, List, Optional


def normalizar_nome(nome) -> str:
    """
    Normaliza nome de aba ou coluna para comparação:
    maiúsculas, sem acentos, espaços colapsados e sem espaços nas pontas.
    """
    if nome is None:
        return ""
    if isinstance(nome, float) and nome.is_integer():
        nome = int(nome)
    texto = unicodedata.normalize("NFKD", str(nome))
    texto = "".join(c for c in texto if not unicodedata.combining(c))
    texto = re.sub(r"\s+", " ", texto)
    return texto.strip().upper()


# Nome da aba -> aliases (nome curto de produção, nome descritivo)
ABAS: Dict[str, List[str]] = {
    "plano_contas": ["PG - GRC", "PLANO DE CONTAS"],
    "centros_custo": ["CC - GRC", "CENTROS DE CUSTO"],
    "fornecedores": ["Fornecedores", "CADASTRO FORNECEDORES"],
    "contas_a_pagar": ["PAGO", "GERAL A PAGAR"],
    "contas_a_receber": ["RECEBIDO", "GERAL A RECEBER"],
    "folha_pagamento": ["CONSULTA FOLHA", "FOLHA DE PAGAMENTO"],
    "saldos_bancarios": ["DINÂMICA BANCOS", "SALDOS BANCÁRIOS"],
}


COLUNAS_CONTAS_A_PAGAR: Dict[str, List[str]] = {
    "cc_sintetico": ["CC Síntético", "CC Sintético", "CC SINTETICO"],
    "descricao_cc_sintetico": ["Descrição CC SIntético", "Descrição CC Sintético"],
    "cc_analitico": ["CC Analítico", "CC ANALITICO"],
    "descricao_cc_analitico": ["Descrição CC Analítico"],
    "despesa_sintetico": ["Despesa Sintético", "DESPESA SINTETICO"],
    "descricao_despesa_sintetico": ["Descrição Despesa Sintético"],
    "despesa_analitico": ["Despesa Analítico", "DESPESA ANALITICO"],
    "descricao_despesa_analitica": ["Descrição Despesa Analítica", "Descrição Despesa Analítico"],
    "fixo_variavel": ["FIXO OU VARIAVÉL", "FIXO OU VARIÁVEL", "FIXO/VARIAVEL"],
    "data_lancamento": ["DTLANC", "DATA LANCAMENTO"],
    "cod_conta": ["CODCONTA"],
    "cod_fornecedor": ["CODFORNEC", "COD FORNECEDOR"],
    "fornecedor": ["Fornecedor", "NOME FORNECEDOR"],
    "historico": ["HISTORICO", "HISTÓRICO"],
    "tipo_documento": ["TIPO DE DOCUMENTO", "TIPO DOCUMENTO"],
    "num_nota": ["NUMNOTA", "NUM NOTA"],
    "duplicata": ["DUPLIC", "DUPLICATA"],
    "valor": ["VALOR"],
    "data_vencimento": ["DTVENC", "DATA VENCIMENTO"],
    "valor_pago": ["VPAGO", "VALOR PAGO"],
    "data_pagamento": ["DTPAGTO", "DTPAG", "DATA PAGAMENTO"],
    "mes": ["MÊS", "MES"],
    "num_banco": ["NUMBANCO", "NUM BANCO"],
    "banco": ["BANCO"],
    "agencia": ["AGENCIA", "AGÊNCIA"],
    "conta": ["C/C", "CONTA CORRENTE"],
    "cod_filial": ["CODFILIAL", "COD FILIAL", "FILIAL"],
}


COLUNAS_CONTAS_A_RECEBER: Dict[str, List[str]] = {
    "cc_sintetico": ["CC Síntético", "CC Sintético"],
    "descricao_cc_sintetico": ["Descrição CC SIntético", "Descrição CC Sintético"],
    "cc_analitico": ["CC Analítico"],
    "descricao_cc_analitico": ["Descrição CC Analítico"],
    "receita_sintetico": ["Receita Sintético"],
    "descricao_receita_sintetico": ["Descrição Receita Sintético"],
    "receita_analitico": ["Receita Analítico"],
    "descricao_receita_analitica": ["Descrição Receita Analítica"],
    "data_lancamento": ["DTEMISSAO", "DTLANC", "DATA EMISSAO"],
    "cliente": ["NOME", "CLIENTE"],
    "historico": ["HISTÓRICO", "HISTORICO"],
    "tipo_documento": ["TIPO DE DOCUMENTO", "TIPO DOCUMENTO"],
    "num_nota": ["NUMNOTA", "NUM NOTA"],
    "valor": ["VALOR"],
    "data_vencimento": ["DTVENC", "DATA VENCIMENTO"],
    "valor_recebido": ["VPAGO", "VRECEBIDO", "VALOR RECEBIDO"],
    "data_recebimento": ["DTPAG", "DTRECEB", "DATA RECEBIMENTO"],
    "mes": ["MÊS", "MES"],
    "num_banco": ["NUM BANCO", "NUMBANCO"],
    "banco": ["BANCO"],
    "agencia": ["AGENCIA", "AGÊNCIA"],
    "conta": ["C/C", "CONTA CORRENTE"],
    "cod_filial": ["CODFILIAL", "COD FILIAL", "FILIAL"],
}


COLUNAS_FOLHA: Dict[str, List[str]] = {
    "area": ["ÁREA", "AREA"],
    "cc": ["CC"],
    "nome": ["NOME"],
    # A coluna de tipo de pagamento costuma vir sem cabeçalho
    "tipo_pagamento": ["TIPO PAGAMENTO", "TIPO DE PAGAMENTO", "Unnamed: 3", "__EMPTY"],
    "mes_1": ["1", "MÊS 1", "MES 1"],
    "mes_2": ["2", "MÊS 2", "MES 2"],
    "mes_3": ["3", "MÊS 3", "MES 3"],
    "mes_4": ["4", "MÊS 4", "MES 4"],
    "mes_5": ["5", "MÊS 5", "MES 5"],
    "mes_6": ["6", "MÊS 6", "MES 6"],
    "mes_7": ["7", "MÊS 7", "MES 7"],
    "mes_8": ["8", "MÊS 8", "MES 8"],
    "total": ["TOTAL"],
}


# Bloco de saldos dentro da aba DINÂMICA BANCOS
MARCADOR_EXTRATO_BANCARIO = "EXTRATO BANCÁRIO"
PREFIXO_FIM_BLOCO = "TOTAL"


def encontrar_aba(nomes_abas: Iterable[str], aliases: List[str]) -> Optional[str]:
    """Devolve o nome real da primeira aba que corresponde a um dos aliases"""
    por_nome = {normalizar_nome(nome): nome for nome in nomes_abas}
    for alias in aliases:
        nome_real = por_nome.get(normalizar_nome(alias))
        if nome_real is not None:
            return nome_real
    return None


def mapear_colunas(cabecalhos: Iterable, mapa: Dict[str, List[str]]) -> Dict[str, object]:
    """
    Resolve, uma vez por aba, campo canônico -> cabeçalho real da planilha.

    Campos sem cabeçalho correspondente ficam fora do resultado.
    """
    por_nome = {}
    for cabecalho in cabecalhos:
        por_nome.setdefault(normalizar_nome(cabecalho), cabecalho)

    resolvido = {}
    for campo, aliases in mapa.items():
        for alias in aliases:
            cabecalho = por_nome.get(normalizar_nome(alias))
            if cabecalho is not None:
                resolvido[campo] = cabecalho
                break
    return resolvido
