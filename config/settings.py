"""
設定管理 v0.1.0
Design原則: 42. よいデフォルト
"""
from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # プロジェクト
    PROJECT_NAME: str = "SoxWrap"
    VERSION: str = "0.1.0"
    DEBUG: bool = False

    # 外部コマンド
    SOX_BINARY: str = "sox"
    SOXI_BINARY: str = "soxi"

    # タイムアウト（None = 無制限）
    SOX_TIMEOUT_SEC: Optional[float] = None

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
