"""
Painel Financeiro - importação de planilha e DRE
API principal FastAPI
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from painel_financeiro.core.config import settings
from painel_financeiro.db import init_db
from painel_financeiro.api.routes_importacao import router as importacao_router
from painel_financeiro.api.routes_financeiro import router as financeiro_router
from painel_financeiro.api.routes_cadastros import router as cadastros_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Painel Financeiro",
    description="Importação da planilha financeira (contas a pagar/receber, folha, saldos) e DRE",
    version="1.0.0",
    redirect_slashes=False
)

# CORS - DEVE estar antes de include_router
cors_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
logger.info(f"CORS origins list: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Inicializa banco de dados na startup
@app.on_event("startup")
async def on_startup():
    """Inicializa banco de dados na startup"""
    init_db()


# Rotas
app.include_router(importacao_router)
app.include_router(financeiro_router)
app.include_router(cadastros_router)


@app.get("/health")
async def health_check():
    """Endpoint de saúde da API"""
    return {
        "status": "ok",
        "service": "Painel Financeiro",
        "version": "1.0.0"
    }


@app.get("/")
async def root():
    """Endpoint raiz"""
    return {
        "message": "Painel Financeiro - importação de planilha e DRE",
        "docs": "/docs",
        "endpoints": {
            "uploads": "/uploads",
            "financeiro": "/financeiro/{upload_id}",
            "cadastros": "/cadastros",
            "health": "/health"
        }
    }
