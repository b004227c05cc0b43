"""
Rotas FastAPI para upload e importação da planilha financeira
"""

import logging
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from painel_financeiro.api.schemas_financeiro import UploadSchema
from painel_financeiro.core.config import settings
from painel_financeiro.db import get_db
from painel_financeiro.services.importacao import persistencia
from painel_financeiro.services.importacao.service import processar_upload_background

logger = logging.getLogger(__name__)

router = APIRouter(tags=["importacao"])

EXTENSOES_PLANILHA = (".xlsx", ".xlsm")


@router.post("/uploads", response_model=UploadSchema, status_code=201)
async def criar_upload(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    usuario: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """
    Recebe a planilha e dispara a importação (processamento assíncrono).

    Retorna imediatamente com status="processing".
    Use GET /uploads/{id} para verificar o progresso.
    """
    filename = file.filename or ""
    if Path(filename).suffix.lower() not in EXTENSOES_PLANILHA:
        raise HTTPException(
            status_code=400,
            detail="Envie uma planilha Excel (.xlsx, .xlsm)"
        )

    conteudo = await file.read()
    if len(conteudo) == 0:
        raise HTTPException(status_code=400, detail="Arquivo vazio")

    limite_bytes = settings.tamanho_maximo_upload_mb * 1024 * 1024
    if len(conteudo) > limite_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Arquivo maior que {settings.tamanho_maximo_upload_mb} MB"
        )

    try:
        # Cria registro no banco com status="processing"
        upload = persistencia.criar_upload(db, filename, len(conteudo), usuario)
        db.commit()
        db.refresh(upload)

        logger.info(f"Upload {upload.id} criado ({filename}, {len(conteudo)} bytes). Disparando importação em background...")

        background_tasks.add_task(processar_upload_background, upload.id, conteudo)

        # Retorna imediatamente
        return upload

    except Exception as e:
        db.rollback()
        logger.exception(f"Erro ao criar upload: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/uploads", response_model=List[UploadSchema])
def listar_uploads(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """Lista todos os uploads (mais recentes primeiro)."""
    return persistencia.listar_uploads(db, skip=skip, limit=limit)


@router.get("/uploads/{upload_id}", response_model=UploadSchema)
def obter_upload(upload_id: int, db: Session = Depends(get_db)):
    """
    Obtém o status de um upload.

    - status="processing": importação em andamento
    - status="completed": dados disponíveis para consulta
    - status="failed": motivo em 'mensagem_erro'
    """
    upload = persistencia.obter_upload(db, upload_id)

    if not upload:
        raise HTTPException(status_code=404, detail="Upload não encontrado")

    return upload


@router.delete("/dados", status_code=204)
def limpar_dados(incluir_cadastros: bool = False, db: Session = Depends(get_db)):
    """
    Remove todos os dados financeiros importados, uploads e filiais.

    Com incluir_cadastros=true remove também plano de contas, centros de
    custo e fornecedores.
    """
    persistencia.limpar_dados_financeiros(db, incluir_cadastros=incluir_cadastros)
    db.commit()
    return None
