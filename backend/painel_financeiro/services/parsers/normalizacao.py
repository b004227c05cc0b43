"""
Normalização de valores de células da planilha: moeda em centavos e datas.

Nenhuma função deste módulo levanta exceção por causa de dado inválido:
célula monetária inválida vira 0 e data inválida vira None.
"""

import logging
import math
import numbers
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

import pandas as pd
from openpyxl.utils.datetime import from_excel

logger = logging.getLogger(__name__)

# Ano com 2 dígitos: abaixo do corte = 20xx, a partir do corte = 19xx
CORTE_ANO_DOIS_DIGITOS = 50

_RE_NUMERO = re.compile(r"^-?(\d+\.?\d*|\.\d+)")
_RE_DATA_BR = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})(?:\s+.*)?$")
_RE_DATA_ISO = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T\s].*)?$")


def _vazio(valor: Any) -> bool:
    """True para None, NaN/NaT do pandas e strings em branco"""
    if valor is None:
        return True
    if isinstance(valor, str):
        return valor.strip() == ""
    try:
        return bool(pd.isna(valor))
    except (TypeError, ValueError):
        return False


def _decimal_para_centavos(numero: Decimal) -> int:
    # Arredonda meio para cima sobre o texto do número: 1.005 -> 101, e não
    # 100 como daria round(1.005 * 100) pela imprecisão do float
    return int((numero * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def para_centavos(valor: Any) -> int:
    """
    Converte valor monetário da planilha para centavos.

    Aceita números (float/int do Excel) e strings nos formatos
    brasileiro ('R$ 1.234,56'), só com vírgula ('1234,56') ou com ponto
    decimal ('1234.56'). Qualquer coisa não reconhecida vira 0.
    """
    if _vazio(valor) or isinstance(valor, bool):
        return 0

    try:
        if isinstance(valor, numbers.Number):
            if isinstance(valor, numbers.Real) and (math.isnan(valor) or math.isinf(valor)):
                return 0
            return _decimal_para_centavos(Decimal(str(valor)))

        texto = str(valor)

        # Mantém apenas dígitos, separadores e sinal
        limpo = re.sub(r"[^\d.,-]", "", texto)

        if "," in limpo and "." in limpo:
            # Formato brasileiro: 1.234,56 -> 1234.56
            limpo = limpo.replace(".", "").replace(",", ".", 1)
        elif "," in limpo:
            # Apenas vírgula -> separador decimal
            limpo = limpo.replace(",", ".", 1)

        match = _RE_NUMERO.match(limpo)
        if not match:
            return 0

        return _decimal_para_centavos(Decimal(match.group(0)))

    except (InvalidOperation, ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Valor monetário inválido ignorado: {valor!r} ({e})")
        return 0


def _ano_completo(ano: int, digitos: int) -> int:
    if digitos > 2:
        return ano
    return 2000 + ano if ano < CORTE_ANO_DOIS_DIGITOS else 1900 + ano


def parse_data_flexivel(valor: Any) -> Optional[date]:
    """
    Converte célula de data para date.

    - datetime/Timestamp/date: usa a própria data
    - número: serial de data do Excel (sistema 1900)
    - string: DD/MM/YYYY, DD/MM/YY ou YYYY-MM-DD
    """
    if _vazio(valor) or isinstance(valor, bool):
        return None

    try:
        if isinstance(valor, datetime):
            return valor.date()

        if isinstance(valor, date):
            return valor

        if isinstance(valor, numbers.Number):
            serial = float(valor)
            # Abaixo de 1 o serial é só horário
            if serial < 1 or math.isinf(serial) or math.isnan(serial):
                return None
            return from_excel(serial).date()

        if isinstance(valor, str):
            texto = valor.strip()

            match = _RE_DATA_BR.match(texto)
            if match:
                dia, mes, ano = match.groups()
                return date(_ano_completo(int(ano), len(ano)), int(mes), int(dia))

            match = _RE_DATA_ISO.match(texto)
            if match:
                ano, mes, dia = match.groups()
                return date(int(ano), int(mes), int(dia))

    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Data inválida ignorada: {valor!r} ({e})")
        return None

    return None


def mes_da_data(data: Optional[date]) -> Optional[int]:
    """Mês (1-12) de uma data, ou None"""
    if data is None:
        return None
    return data.month


def _inteiro_ou_none(valor: Any) -> Optional[int]:
    if _vazio(valor) or isinstance(valor, bool):
        return None

    if isinstance(valor, numbers.Number):
        try:
            numero = float(valor)
        except (TypeError, ValueError):
            return None
        if math.isnan(numero) or math.isinf(numero) or numero != int(numero):
            return None
        return int(numero)

    texto = str(valor).strip()
    if re.fullmatch(r"\d+(\.0+)?", texto):
        return int(float(texto))
    return None


def parse_mes(valor: Any) -> Optional[int]:
    """Célula de mês explícito: inteiro de 1 a 12, ou None"""
    mes = _inteiro_ou_none(valor)
    if mes is None or not 1 <= mes <= 12:
        return None
    return mes


def parse_codigo_filial(valor: Any) -> Optional[int]:
    """Célula CODFILIAL: código inteiro positivo, ou None"""
    codigo = _inteiro_ou_none(valor)
    if not codigo or codigo < 0:
        return None
    return codigo


def texto_ou_none(valor: Any) -> Optional[str]:
    """
    Texto limpo da célula, ou None se vazia.

    Códigos numéricos lidos como float ('600017.0') voltam a ser '600017'.
    """
    if _vazio(valor):
        return None

    if isinstance(valor, float) and valor.is_integer():
        return str(int(valor))

    texto = str(valor).strip()
    return texto or None
