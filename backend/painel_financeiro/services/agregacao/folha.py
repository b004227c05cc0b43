"""
Consultas de folha de pagamento, saldos bancários e filiais do upload.

A folha não tem filial nem data de pagamento: ignora o filtro de filiais e
o modo de visão, respeitando só o mês.
"""

from typing import Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from painel_financeiro.models import Filial, FolhaPagamento, SaldoBancario
from painel_financeiro.services.agregacao.escopo import EscopoConsulta, NAO_INFORMADO, soma
from painel_financeiro.services.importacao.persistencia import codigos_filiais_do_upload

MESES_FOLHA = 8


def coluna_mes_folha(mes: int):
    return getattr(FolhaPagamento, f"mes_{mes}")


def valor_folha(mes: Optional[int]):
    """
    Expressão do valor de uma linha da folha.

    Com mês: coluna do mês (0 para meses sem coluna).
    Sem mês: TOTAL se preenchido, senão a soma das colunas mensais.
    """
    if mes is not None:
        if mes > MESES_FOLHA:
            return 0
        return func.coalesce(coluna_mes_folha(mes), 0)

    soma_meses = sum(func.coalesce(coluna_mes_folha(m), 0) for m in range(1, MESES_FOLHA + 1))
    return case(
        (func.coalesce(FolhaPagamento.total, 0) != 0, FolhaPagamento.total),
        else_=soma_meses,
    )


def total_folha(db: Session, upload_id: int, mes: Optional[int] = None) -> int:
    if mes is not None and mes > MESES_FOLHA:
        return 0

    total = (
        db.query(soma(valor_folha(mes)))
        .filter(FolhaPagamento.upload_id == upload_id)
        .scalar()
    )
    return int(total or 0)


def folha_por_mes(db: Session, upload_id: int) -> Dict[int, int]:
    """Mês -> custo da folha, só para meses com valor diferente de zero"""
    somas = (
        db.query(*[soma(coluna_mes_folha(m)) for m in range(1, MESES_FOLHA + 1)])
        .filter(FolhaPagamento.upload_id == upload_id)
        .one()
    )
    return {
        mes: int(valor)
        for mes, valor in enumerate(somas, start=1)
        if valor
    }


def _agrupar_folha(db: Session, upload_id: int, mes: Optional[int], coluna) -> List[dict]:
    valor = soma(valor_folha(mes))
    linhas = (
        db.query(coluna, valor, func.count(func.distinct(FolhaPagamento.nome)))
        .filter(FolhaPagamento.upload_id == upload_id)
        .group_by(coluna)
        .order_by(valor.desc())
        .all()
    )
    return [
        {"descricao": nome or NAO_INFORMADO, "total": int(total), "funcionarios": funcionarios}
        for nome, total, funcionarios in linhas
    ]


def resumo_folha(db: Session, escopo: EscopoConsulta) -> dict:
    """Total, funcionários e custo por área, vínculo e tipo de pagamento"""
    mes = escopo.mes
    if mes is not None and mes > MESES_FOLHA:
        return {
            "total": 0,
            "total_funcionarios": 0,
            "por_area": [],
            "por_tipo_vinculo": [],
            "por_tipo_pagamento": [],
        }

    total_funcionarios = (
        db.query(func.count(func.distinct(FolhaPagamento.nome)))
        .filter(FolhaPagamento.upload_id == escopo.upload_id)
        .scalar()
    )

    return {
        "total": total_folha(db, escopo.upload_id, mes),
        "total_funcionarios": total_funcionarios or 0,
        "por_area": _agrupar_folha(db, escopo.upload_id, mes, FolhaPagamento.area),
        "por_tipo_vinculo": _agrupar_folha(db, escopo.upload_id, mes, FolhaPagamento.tipo_vinculo),
        "por_tipo_pagamento": _agrupar_folha(db, escopo.upload_id, mes, FolhaPagamento.tipo_pagamento),
    }


def resumo_saldos_bancarios(db: Session, upload_id: int) -> dict:
    saldos = (
        db.query(SaldoBancario)
        .filter(SaldoBancario.upload_id == upload_id)
        .order_by(SaldoBancario.id)
        .all()
    )
    return {
        "total_saldo": sum(s.saldo_total or 0 for s in saldos),
        "total_sistema": sum(s.saldo_sistema or 0 for s in saldos),
        "total_desvio": sum(s.desvio or 0 for s in saldos),
        "total_bancos": len({s.banco for s in saldos}),
        "saldos": [
            {
                "banco": s.banco,
                "tipo_conta": s.tipo_conta,
                "saldo_total": s.saldo_total or 0,
                "saldo_sistema": s.saldo_sistema or 0,
                "desvio": s.desvio or 0,
            }
            for s in saldos
        ],
    }


def filiais_disponiveis(db: Session, upload_id: int) -> List[Filial]:
    """Filiais cadastradas que aparecem nas contas do upload, por código"""
    codigos = codigos_filiais_do_upload(db, upload_id)
    if not codigos:
        return []

    return (
        db.query(Filial)
        .filter(Filial.codigo.in_(codigos))
        .order_by(Filial.codigo)
        .all()
    )
