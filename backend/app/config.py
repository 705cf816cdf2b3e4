"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./team_tasks.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # 보고서/통계
    PROJECT_REPORT_LIMIT: int = 20
    HISTORY_EXPORT_LIMIT: int = 1000

    # 목록 기본 건수
    NOTIFICATION_LIST_LIMIT: int = 20
    PROJECT_HISTORY_LIMIT: int = 100
    USER_HISTORY_LIMIT: int = 50

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
