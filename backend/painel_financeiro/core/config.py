"""
Configurações da aplicação
"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configurações da aplicação carregadas do .env"""

    # Ambiente
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Database (suporta SQLite local e PostgreSQL/MySQL em produção)
    database_url: str = "sqlite:///./data/painel_financeiro.db"

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"  # Separado por vírgula

    # Paths
    data_dir: Path = Path("./data")

    # Importação
    tamanho_lote: int = 100  # Linhas por INSERT em contas a pagar/receber
    tamanho_maximo_upload_mb: int = 10

    # Consultas
    limite_ranking_padrao: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Instância global de settings
settings = Settings()


def ensure_directories():
    """Cria os diretórios necessários se não existirem"""
    settings.data_dir.mkdir(parents=True, exist_ok=True)


# Inicializar diretórios ao importar
ensure_directories()
