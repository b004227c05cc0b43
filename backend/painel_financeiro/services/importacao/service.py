"""
Orquestração da importação de uma planilha financeira.

Fluxo: abre o workbook uma vez -> extrai todas as abas -> mescla cadastros ->
insere contas a pagar/receber -> registra filiais -> insere folha e saldos ->
marca o upload como completed. Qualquer exceção marca o upload como failed.
"""

import logging
import time
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from painel_financeiro.core.models import ResumoImportacao
from painel_financeiro.db import SessionLocal
from painel_financeiro.models.upload import STATUS_COMPLETED, STATUS_FAILED
from painel_financeiro.services.parsers import extrair_planilha
from painel_financeiro.services.importacao import persistencia

logger = logging.getLogger(__name__)

TAMANHO_MAXIMO_MENSAGEM_ERRO = 500


def formatar_erro(e: Exception) -> str:
    """'<TipoDaExcecao>: <mensagem>' truncado para caber em mensagem_erro"""
    return f"{type(e).__name__}: {e}"[:TAMANHO_MAXIMO_MENSAGEM_ERRO]


def processar_planilha(db: Session, upload_id: int, conteudo: bytes) -> ResumoImportacao:
    """
    Importa a planilha para o upload informado.

    Cada etapa faz commit ao terminar; uma falha desfaz só a etapa em
    andamento e grava status failed. O status final é gravado uma única vez.

    Args:
        db: Sessão do banco
        upload_id: Upload já criado com status processing
        conteudo: Bytes do arquivo .xlsx

    Returns:
        ResumoImportacao com contagens, filiais registradas e issues
    """
    inicio = time.time()
    contagens: Dict[str, int] = {}
    issues = []
    filiais_registradas = []

    try:
        extraida = extrair_planilha(conteudo, upload_id)
        contagens = extraida.contagens()
        issues = extraida.issues

        logger.info(f"Upload {upload_id}: extração concluída {contagens}, {len(issues)} issues")

        # 1) Cadastros globais
        persistencia.upsert_plano_contas(db, extraida.plano_contas)
        persistencia.upsert_centros_custo(db, extraida.centros_custo)
        persistencia.upsert_fornecedores(db, extraida.fornecedores)
        db.commit()

        # 2) Contas a pagar e a receber
        persistencia.inserir_contas_a_pagar(db, extraida.contas_a_pagar)
        db.commit()
        persistencia.inserir_contas_a_receber(db, extraida.contas_a_receber)
        db.commit()

        # 3) Filiais lidas de volta das contas já gravadas
        filiais_registradas = persistencia.registrar_filiais_do_upload(db, upload_id)
        db.commit()

        # 4) Folha e saldos
        persistencia.inserir_folha_pagamento(db, extraida.folha_pagamento)
        persistencia.inserir_saldos_bancarios(db, extraida.saldos_bancarios)
        db.commit()

        persistencia.atualizar_status_upload(db, upload_id, STATUS_COMPLETED)
        db.commit()

        logger.info(f"Upload {upload_id} concluído em {time.time() - inicio:.2f}s")
        return ResumoImportacao(
            upload_id=upload_id,
            status=STATUS_COMPLETED,
            contagens=contagens,
            filiais_registradas=filiais_registradas,
            issues=issues,
        )

    except Exception as e:
        logger.exception(f"Erro ao importar upload {upload_id}: {e}")
        db.rollback()

        mensagem = formatar_erro(e)
        persistencia.atualizar_status_upload(db, upload_id, STATUS_FAILED, mensagem)
        db.commit()

        return ResumoImportacao(
            upload_id=upload_id,
            status=STATUS_FAILED,
            contagens=contagens,
            filiais_registradas=filiais_registradas,
            issues=issues,
            erro=mensagem,
        )


def processar_upload_background(
    upload_id: int,
    conteudo: bytes,
    session_factory: Optional[Callable[[], Session]] = None,
):
    """
    Worker que processa o upload em background.

    IMPORTANTE: Este worker NUNCA deve crashar o processo principal.
    Todos os erros são capturados e salvos no banco.
    """
    db = None

    try:
        # Cria sessão própria (background task não tem acesso à sessão do request)
        db = (session_factory or SessionLocal)()

        logger.info(f"[BG] Iniciando importação do upload {upload_id} ({len(conteudo)} bytes)")
        resumo = processar_planilha(db, upload_id, conteudo)
        logger.info(f"[BG] Upload {upload_id} finalizado com status {resumo.status}")

    except Exception as e:
        # Falha ao gravar o próprio status (banco indisponível, etc.)
        logger.exception(f"[BG] Erro fatal no upload {upload_id}: {e}")
        if db:
            try:
                db.rollback()
                persistencia.atualizar_status_upload(db, upload_id, STATUS_FAILED, formatar_erro(e))
                db.commit()
            except Exception as e2:
                logger.error(f"[BG] Erro ao salvar status de falha do upload {upload_id}: {e2}")

    finally:
        if db:
            db.close()
