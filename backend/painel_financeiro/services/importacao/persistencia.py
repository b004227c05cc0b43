"""
Gravação dos dados extraídos da planilha.

Cadastros globais (plano de contas, centros de custo, fornecedores, filiais)
são mesclados por código natural (INSERT ... ON CONFLICT); fatos (contas, folha, saldos) são
inseridos vinculados ao upload. As funções fazem flush e deixam o commit
para quem chama.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from painel_financeiro.core.config import settings
from painel_financeiro.core.models import (
    PlanoContasRegistro,
    CentroCustoRegistro,
    FornecedorRegistro,
    ContaAPagarRegistro,
    ContaAReceberRegistro,
    FolhaPagamentoRegistro,
    SaldoBancarioRegistro,
)
from painel_financeiro.models import (
    Upload,
    PlanoContas,
    CentroCusto,
    Fornecedor,
    Filial,
    ContaAPagar,
    ContaAReceber,
    FolhaPagamento,
    SaldoBancario,
)
from painel_financeiro.models.upload import STATUS_PROCESSING

logger = logging.getLogger(__name__)


# ============================================================================
# UPLOADS
# ============================================================================

def criar_upload(
    db: Session,
    nome_arquivo: str,
    tamanho_arquivo: int,
    usuario: Optional[str] = None,
) -> Upload:
    """Cria o registro do upload com status processing"""
    upload = Upload(
        nome_arquivo=nome_arquivo,
        tamanho_arquivo=tamanho_arquivo,
        usuario=usuario,
        status=STATUS_PROCESSING,
    )
    db.add(upload)
    db.flush()
    return upload


def atualizar_status_upload(
    db: Session,
    upload_id: int,
    status: str,
    mensagem_erro: Optional[str] = None,
) -> Optional[Upload]:
    upload = db.query(Upload).filter(Upload.id == upload_id).first()
    if not upload:
        logger.error(f"Upload {upload_id} não encontrado para atualizar status")
        return None

    upload.status = status
    upload.mensagem_erro = mensagem_erro
    upload.finalizado_em = datetime.utcnow()
    db.flush()
    return upload


def obter_upload(db: Session, upload_id: int) -> Optional[Upload]:
    return db.query(Upload).filter(Upload.id == upload_id).first()


def listar_uploads(db: Session, skip: int = 0, limit: int = 100) -> List[Upload]:
    """Uploads mais recentes primeiro"""
    return (
        db.query(Upload)
        .order_by(Upload.criado_em.desc(), Upload.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


# ============================================================================
# CADASTROS GLOBAIS (upsert por código)
# ============================================================================

def _deduplicar_por_codigo(registros: Iterable) -> List:
    """Mantém a última ocorrência de cada código (última escrita vence)"""
    por_codigo = {}
    for registro in registros:
        por_codigo[registro.codigo] = registro
    return list(por_codigo.values())


def _insert_do_dialeto(db: Session):
    """insert() com suporte a ON CONFLICT do banco em uso"""
    dialeto = db.get_bind().dialect.name
    if dialeto == "sqlite":
        return sqlite.insert
    if dialeto == "postgresql":
        return postgresql.insert
    raise ValueError(f"Banco sem suporte a upsert: {dialeto}")


def _codigos_existentes(db: Session, modelo, codigos: Iterable) -> Set:
    return {
        codigo for (codigo,) in db.query(modelo.codigo).filter(modelo.codigo.in_(list(codigos))).all()
    }


def _upsert_por_codigo(db: Session, modelo, registros: Iterable, campos: List[str]) -> Dict[str, int]:
    """
    INSERT ... ON CONFLICT (codigo) DO UPDATE, em lotes.

    Importações simultâneas com o mesmo código não conflitam: a última
    escrita vence. As contagens são informativas (lidas antes da escrita).
    """
    registros = _deduplicar_por_codigo(registros)
    if not registros:
        return {"inseridos": 0, "atualizados": 0}

    insert = _insert_do_dialeto(db)
    atualizados = len(_codigos_existentes(db, modelo, (r.codigo for r in registros)))

    for inicio in range(0, len(registros), settings.tamanho_lote):
        lote = registros[inicio:inicio + settings.tamanho_lote]
        stmt = insert(modelo).values([registro.model_dump() for registro in lote])
        valores = {campo: getattr(stmt.excluded, campo) for campo in campos}
        if "updated_at" in modelo.__table__.c:
            valores["updated_at"] = datetime.utcnow()
        db.execute(stmt.on_conflict_do_update(index_elements=["codigo"], set_=valores))

    inseridos = len(registros) - atualizados
    logger.info(
        f"Upsert {modelo.__tablename__}: inseridos={inseridos}, atualizados={atualizados}"
    )
    return {"inseridos": inseridos, "atualizados": atualizados}


def upsert_plano_contas(db: Session, contas: List[PlanoContasRegistro]) -> Dict[str, int]:
    return _upsert_por_codigo(db, PlanoContas, contas, ["descricao", "tipo"])


def upsert_centros_custo(db: Session, centros: List[CentroCustoRegistro]) -> Dict[str, int]:
    return _upsert_por_codigo(db, CentroCusto, centros, ["descricao"])


def upsert_fornecedores(db: Session, fornecedores: List[FornecedorRegistro]) -> Dict[str, int]:
    return _upsert_por_codigo(db, Fornecedor, fornecedores, ["nome"])


# ============================================================================
# FATOS DO UPLOAD
# ============================================================================

def _inserir_em_lotes(db: Session, modelo, registros: List, tamanho_lote: Optional[int] = None) -> int:
    """Insere em lotes para evitar problemas de memória em planilhas grandes"""
    if not registros:
        return 0

    tamanho_lote = tamanho_lote or settings.tamanho_lote
    for inicio in range(0, len(registros), tamanho_lote):
        lote = registros[inicio:inicio + tamanho_lote]
        db.add_all([modelo(**registro.model_dump()) for registro in lote])
        db.flush()

    logger.info(f"Inseridos {len(registros)} registros em {modelo.__tablename__}")
    return len(registros)


def inserir_contas_a_pagar(db: Session, contas: List[ContaAPagarRegistro]) -> int:
    return _inserir_em_lotes(db, ContaAPagar, contas)


def inserir_contas_a_receber(db: Session, contas: List[ContaAReceberRegistro]) -> int:
    return _inserir_em_lotes(db, ContaAReceber, contas)


def inserir_folha_pagamento(db: Session, linhas: List[FolhaPagamentoRegistro]) -> int:
    return _inserir_em_lotes(db, FolhaPagamento, linhas)


def inserir_saldos_bancarios(db: Session, saldos: List[SaldoBancarioRegistro]) -> int:
    return _inserir_em_lotes(db, SaldoBancario, saldos)


# ============================================================================
# FILIAIS
# ============================================================================

def nome_padrao_filial(codigo: int) -> str:
    """Nome dado a uma filial registrada automaticamente"""
    if codigo == 1:
        return "Matriz"
    return f"Filial {codigo}"


def codigos_filiais_do_upload(db: Session, upload_id: int) -> Set[int]:
    """Códigos de filial distintos nas contas a pagar e a receber do upload"""
    codigos = set()
    for modelo in (ContaAPagar, ContaAReceber):
        linhas = (
            db.query(modelo.cod_filial)
            .filter(modelo.upload_id == upload_id, modelo.cod_filial.isnot(None))
            .distinct()
            .all()
        )
        codigos.update(codigo for (codigo,) in linhas)
    return codigos


def registrar_filiais_do_upload(db: Session, upload_id: int) -> List[int]:
    """
    Registra as filiais que aparecem nos lançamentos já gravados do upload
    e ainda não existem no cadastro.

    Returns:
        Códigos das filiais criadas
    """
    codigos = codigos_filiais_do_upload(db, upload_id)
    if not codigos:
        return []

    novas = sorted(codigos - _codigos_existentes(db, Filial, codigos))
    if novas:
        # Outra importação pode ter criado a filial nesse meio tempo
        stmt = _insert_do_dialeto(db)(Filial).values(
            [{"codigo": codigo, "nome": nome_padrao_filial(codigo)} for codigo in novas]
        )
        db.execute(stmt.on_conflict_do_nothing(index_elements=["codigo"]))
        logger.info(f"Filiais registradas automaticamente: {novas}")
    return novas


# ============================================================================
# LIMPEZA
# ============================================================================

def limpar_dados_financeiros(db: Session, incluir_cadastros: bool = False) -> Dict[str, int]:
    """
    Remove todos os fatos financeiros, uploads e filiais.

    Operação administrativa: não deve rodar com importação em andamento.
    """
    modelos = [SaldoBancario, FolhaPagamento, ContaAReceber, ContaAPagar, Upload, Filial]
    if incluir_cadastros:
        modelos += [Fornecedor, CentroCusto, PlanoContas]

    removidos = {}
    for modelo in modelos:
        removidos[modelo.__tablename__] = db.query(modelo).delete(synchronize_session=False)

    db.flush()
    logger.warning(f"Dados financeiros removidos: {removidos}")
    return removidos
