"""
Parser da planilha financeira (Excel) com as abas de plano de contas,
centros de custo, fornecedores, contas a pagar, contas a receber, folha de
pagamento e saldos bancários.

Aba ausente não é erro: a categoria correspondente fica vazia. Linha
malformada é ignorada e registrada em `issues`. Só uma planilha que não
pode ser aberta levanta `PlanilhaInvalidaError`.
"""

import io
import logging
from typing import Callable, Dict, List, Tuple

import pandas as pd

from painel_financeiro.core.models import (
    PlanoContasRegistro,
    CentroCustoRegistro,
    FornecedorRegistro,
    ContaAPagarRegistro,
    ContaAReceberRegistro,
    FolhaPagamentoRegistro,
    SaldoBancarioRegistro,
    PlanilhaExtraida,
)
from painel_financeiro.services.parsers.classificacao import (
    tipo_conta_por_codigo,
    normalizar_fixo_variavel,
    identificar_tipo_vinculo,
)
from painel_financeiro.services.parsers.colunas import (
    ABAS,
    COLUNAS_CONTAS_A_PAGAR,
    COLUNAS_CONTAS_A_RECEBER,
    COLUNAS_FOLHA,
    MARCADOR_EXTRATO_BANCARIO,
    PREFIXO_FIM_BLOCO,
    encontrar_aba,
    mapear_colunas,
    normalizar_nome,
)
from painel_financeiro.services.parsers.normalizacao import (
    para_centavos,
    parse_data_flexivel,
    parse_mes,
    parse_codigo_filial,
    mes_da_data,
    texto_ou_none,
)

logger = logging.getLogger(__name__)


class PlanilhaInvalidaError(ValueError):
    """A planilha não pode ser aberta/lida como arquivo Excel"""


def abrir_planilha(conteudo: bytes) -> pd.ExcelFile:
    """Abre o workbook uma única vez a partir dos bytes enviados"""
    if not conteudo:
        raise PlanilhaInvalidaError("Arquivo vazio")

    try:
        return pd.ExcelFile(io.BytesIO(conteudo), engine="openpyxl")
    except Exception as e:
        raise PlanilhaInvalidaError(f"Não foi possível abrir a planilha: {e}") from e


def _ler_aba(xls: pd.ExcelFile, nome_aba: str, com_cabecalho: bool) -> pd.DataFrame:
    try:
        if com_cabecalho:
            return xls.parse(nome_aba, dtype=object)
        return xls.parse(nome_aba, header=None, dtype=object)
    except Exception as e:
        raise PlanilhaInvalidaError(f"Não foi possível ler a aba '{nome_aba}': {e}") from e


def _celula(row: pd.Series, colunas: Dict[str, object], campo: str):
    """Valor bruto da célula de um campo canônico (None se a coluna não existe)"""
    cabecalho = colunas.get(campo)
    if cabecalho is None:
        return None
    return row.get(cabecalho)


def _linha_vazia(row: pd.Series) -> bool:
    return all(texto_ou_none(v) is None for v in row.tolist())


def _linhas_posicionais(df: pd.DataFrame, issues: List[str], aba: str) -> List[Tuple[str, str]]:
    """
    Lê pares (código, descrição) das duas primeiras colunas, pulando o
    cabeçalho e linhas sem um dos dois campos.
    """
    pares = []
    if df.shape[1] < 2:
        issues.append(f"Aba {aba}: menos de duas colunas, ignorada")
        return pares

    for idx in range(1, len(df)):
        codigo = texto_ou_none(df.iat[idx, 0])
        descricao = texto_ou_none(df.iat[idx, 1])
        if not codigo or not descricao:
            if codigo or descricao:
                issues.append(f"Aba {aba} linha {idx + 1}: código ou descrição ausente")
            continue
        pares.append((codigo, descricao))
    return pares


# ============================================================================
# ABAS POSICIONAIS (cadastros)
# ============================================================================

def extrair_plano_contas(xls: pd.ExcelFile, nome_aba: str, upload_id: int):
    issues: List[str] = []
    df = _ler_aba(xls, nome_aba, com_cabecalho=False)

    contas = [
        PlanoContasRegistro(codigo=codigo, descricao=descricao, tipo=tipo_conta_por_codigo(codigo))
        for codigo, descricao in _linhas_posicionais(df, issues, nome_aba)
    ]
    return contas, issues


def extrair_centros_custo(xls: pd.ExcelFile, nome_aba: str, upload_id: int):
    issues: List[str] = []
    df = _ler_aba(xls, nome_aba, com_cabecalho=False)

    centros = [
        CentroCustoRegistro(codigo=codigo, descricao=descricao)
        for codigo, descricao in _linhas_posicionais(df, issues, nome_aba)
    ]
    return centros, issues


def extrair_fornecedores(xls: pd.ExcelFile, nome_aba: str, upload_id: int):
    issues: List[str] = []
    df = _ler_aba(xls, nome_aba, com_cabecalho=False)

    fornecedores = [
        FornecedorRegistro(codigo=codigo, nome=nome)
        for codigo, nome in _linhas_posicionais(df, issues, nome_aba)
    ]
    return fornecedores, issues


# ============================================================================
# ABAS POR CABEÇALHO (fatos)
# ============================================================================

def _mes_do_lancamento(row, colunas, data_lancamento, data_liquidacao):
    """MÊS explícito; senão mês da data de lançamento; senão da liquidação"""
    mes = parse_mes(_celula(row, colunas, "mes"))
    if mes is not None:
        return mes
    return mes_da_data(data_lancamento) or mes_da_data(data_liquidacao)


def extrair_contas_a_pagar(xls: pd.ExcelFile, nome_aba: str, upload_id: int):
    issues: List[str] = []
    df = _ler_aba(xls, nome_aba, com_cabecalho=True)
    colunas = mapear_colunas(df.columns, COLUNAS_CONTAS_A_PAGAR)

    if "valor" not in colunas:
        issues.append(f"Aba {nome_aba}: coluna VALOR não encontrada. Colunas: {list(df.columns)}")
        return [], issues

    contas = []
    for idx, row in df.iterrows():
        num_linha = idx + 2  # Linha 1 é cabeçalho
        if _linha_vazia(row):
            continue

        if texto_ou_none(_celula(row, colunas, "valor")) is None:
            issues.append(f"Aba {nome_aba} linha {num_linha}: VALOR ausente")
            continue

        def texto(campo):
            return texto_ou_none(_celula(row, colunas, campo))

        try:
            data_lancamento = parse_data_flexivel(_celula(row, colunas, "data_lancamento"))
            data_pagamento = parse_data_flexivel(_celula(row, colunas, "data_pagamento"))

            contas.append(ContaAPagarRegistro(
                upload_id=upload_id,
                cc_sintetico=texto("cc_sintetico"),
                descricao_cc_sintetico=texto("descricao_cc_sintetico"),
                cc_analitico=texto("cc_analitico"),
                descricao_cc_analitico=texto("descricao_cc_analitico"),
                despesa_sintetico=texto("despesa_sintetico"),
                descricao_despesa_sintetico=texto("descricao_despesa_sintetico"),
                despesa_analitico=texto("despesa_analitico"),
                descricao_despesa_analitica=texto("descricao_despesa_analitica"),
                fixo_variavel=normalizar_fixo_variavel(_celula(row, colunas, "fixo_variavel")),
                data_lancamento=data_lancamento,
                cod_conta=texto("cod_conta"),
                cod_fornecedor=texto("cod_fornecedor"),
                fornecedor=texto("fornecedor"),
                historico=texto("historico"),
                tipo_documento=texto("tipo_documento"),
                num_nota=texto("num_nota"),
                duplicata=texto("duplicata"),
                valor=abs(para_centavos(_celula(row, colunas, "valor"))),
                data_vencimento=parse_data_flexivel(_celula(row, colunas, "data_vencimento")),
                valor_pago=para_centavos(_celula(row, colunas, "valor_pago")),
                data_pagamento=data_pagamento,
                mes=_mes_do_lancamento(row, colunas, data_lancamento, data_pagamento),
                num_banco=texto("num_banco"),
                banco=texto("banco"),
                agencia=texto("agencia"),
                conta=texto("conta"),
                cod_filial=parse_codigo_filial(_celula(row, colunas, "cod_filial")),
            ))
        except ValueError as e:
            issues.append(f"Aba {nome_aba} linha {num_linha}: erro ao processar: {e}")

    return contas, issues


def extrair_contas_a_receber(xls: pd.ExcelFile, nome_aba: str, upload_id: int):
    issues: List[str] = []
    df = _ler_aba(xls, nome_aba, com_cabecalho=True)
    colunas = mapear_colunas(df.columns, COLUNAS_CONTAS_A_RECEBER)

    if "valor" not in colunas:
        issues.append(f"Aba {nome_aba}: coluna VALOR não encontrada. Colunas: {list(df.columns)}")
        return [], issues

    contas = []
    for idx, row in df.iterrows():
        num_linha = idx + 2
        if _linha_vazia(row):
            continue

        if texto_ou_none(_celula(row, colunas, "valor")) is None:
            issues.append(f"Aba {nome_aba} linha {num_linha}: VALOR ausente")
            continue

        def texto(campo):
            return texto_ou_none(_celula(row, colunas, campo))

        try:
            data_lancamento = parse_data_flexivel(_celula(row, colunas, "data_lancamento"))
            data_recebimento = parse_data_flexivel(_celula(row, colunas, "data_recebimento"))

            contas.append(ContaAReceberRegistro(
                upload_id=upload_id,
                cc_sintetico=texto("cc_sintetico"),
                descricao_cc_sintetico=texto("descricao_cc_sintetico"),
                cc_analitico=texto("cc_analitico"),
                descricao_cc_analitico=texto("descricao_cc_analitico"),
                receita_sintetico=texto("receita_sintetico"),
                descricao_receita_sintetico=texto("descricao_receita_sintetico"),
                receita_analitico=texto("receita_analitico"),
                descricao_receita_analitica=texto("descricao_receita_analitica"),
                data_lancamento=data_lancamento,
                cliente=texto("cliente"),
                historico=texto("historico"),
                tipo_documento=texto("tipo_documento"),
                num_nota=texto("num_nota"),
                valor=abs(para_centavos(_celula(row, colunas, "valor"))),
                data_vencimento=parse_data_flexivel(_celula(row, colunas, "data_vencimento")),
                valor_recebido=para_centavos(_celula(row, colunas, "valor_recebido")),
                data_recebimento=data_recebimento,
                mes=_mes_do_lancamento(row, colunas, data_lancamento, data_recebimento),
                num_banco=texto("num_banco"),
                banco=texto("banco"),
                agencia=texto("agencia"),
                conta=texto("conta"),
                cod_filial=parse_codigo_filial(_celula(row, colunas, "cod_filial")),
            ))
        except ValueError as e:
            issues.append(f"Aba {nome_aba} linha {num_linha}: erro ao processar: {e}")

    return contas, issues


def extrair_folha_pagamento(xls: pd.ExcelFile, nome_aba: str, upload_id: int):
    issues: List[str] = []
    df = _ler_aba(xls, nome_aba, com_cabecalho=True)
    colunas = mapear_colunas(df.columns, COLUNAS_FOLHA)

    if "nome" not in colunas:
        issues.append(f"Aba {nome_aba}: coluna NOME não encontrada")
        return [], issues

    # Sem cabeçalho reconhecido, o tipo de pagamento é a 4ª coluna
    if "tipo_pagamento" not in colunas and len(df.columns) > 3:
        colunas["tipo_pagamento"] = df.columns[3]

    linhas = []
    for idx, row in df.iterrows():
        nome = texto_ou_none(_celula(row, colunas, "nome"))

        # Linhas de subtotal da planilha
        if not nome or "TOTAL" in normalizar_nome(nome):
            continue

        area = texto_ou_none(_celula(row, colunas, "area"))
        tipo_pagamento = texto_ou_none(_celula(row, colunas, "tipo_pagamento"))

        try:
            linhas.append(FolhaPagamentoRegistro(
                upload_id=upload_id,
                area=area,
                cc=texto_ou_none(_celula(row, colunas, "cc")),
                nome=nome,
                tipo_pagamento=tipo_pagamento,
                tipo_vinculo=identificar_tipo_vinculo(tipo_pagamento, area),
                total=para_centavos(_celula(row, colunas, "total")),
                **{f"mes_{m}": para_centavos(_celula(row, colunas, f"mes_{m}")) for m in range(1, 9)},
            ))
        except ValueError as e:
            issues.append(f"Aba {nome_aba} linha {idx + 2}: erro ao processar: {e}")

    return linhas, issues


def extrair_saldos_bancarios(xls: pd.ExcelFile, nome_aba: str, upload_id: int):
    """
    Lê o bloco de saldos que começa logo abaixo do marcador
    EXTRATO BANCÁRIO e termina na primeira linha vazia ou de total.
    """
    issues: List[str] = []
    df = _ler_aba(xls, nome_aba, com_cabecalho=False)

    marcador = normalizar_nome(MARCADOR_EXTRATO_BANCARIO)
    inicio = None
    for idx in range(len(df)):
        if normalizar_nome(texto_ou_none(df.iat[idx, 0])) == marcador:
            inicio = idx + 1
            break

    if inicio is None:
        issues.append(f"Aba {nome_aba}: marcador '{MARCADOR_EXTRATO_BANCARIO}' não encontrado")
        return [], issues

    def coluna(idx, pos):
        return df.iat[idx, pos] if pos < df.shape[1] else None

    saldos = []
    for idx in range(inicio, len(df)):
        banco = texto_ou_none(coluna(idx, 0))
        if not banco or normalizar_nome(banco).startswith(PREFIXO_FIM_BLOCO):
            break

        saldos.append(SaldoBancarioRegistro(
            upload_id=upload_id,
            banco=banco,
            saldo_total=para_centavos(coluna(idx, 1)),
            saldo_sistema=para_centavos(coluna(idx, 2)),
            desvio=para_centavos(coluna(idx, 3)),
        ))

    return saldos, issues


# Tipo de registro -> função de extração (aliases das abas em colunas.ABAS)
REGRAS_EXTRACAO: Dict[str, Callable] = {
    "plano_contas": extrair_plano_contas,
    "centros_custo": extrair_centros_custo,
    "fornecedores": extrair_fornecedores,
    "contas_a_pagar": extrair_contas_a_pagar,
    "contas_a_receber": extrair_contas_a_receber,
    "folha_pagamento": extrair_folha_pagamento,
    "saldos_bancarios": extrair_saldos_bancarios,
}


def extrair_planilha(conteudo: bytes, upload_id: int) -> PlanilhaExtraida:
    """
    Abre a planilha uma vez e aplica todas as regras de extração.

    Args:
        conteudo: Bytes do arquivo .xlsx
        upload_id: Upload ao qual os fatos extraídos pertencem

    Returns:
        PlanilhaExtraida com as sete listas tipadas e as issues de linhas ignoradas

    Raises:
        PlanilhaInvalidaError se o arquivo não puder ser aberto como planilha
    """
    xls = abrir_planilha(conteudo)
    resultado = PlanilhaExtraida()

    logger.info(f"Abas encontradas na planilha: {xls.sheet_names}")

    for tipo, extrair in REGRAS_EXTRACAO.items():
        nome_aba = encontrar_aba(xls.sheet_names, ABAS[tipo])
        if nome_aba is None:
            logger.info(f"Aba de {tipo} não encontrada (aliases: {ABAS[tipo]})")
            continue

        registros, issues = extrair(xls, nome_aba, upload_id)
        setattr(resultado, tipo, registros)
        resultado.issues.extend(issues)

        logger.info(f"Aba '{nome_aba}': {len(registros)} registros de {tipo}, {len(issues)} issues")
        for issue in issues:
            logger.debug(issue)

    return resultado
