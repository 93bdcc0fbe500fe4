"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "Checklist Risk Assessment"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Google Sheets (Apps Script 웹앱). URL을 비우면 데모 데이터 인메모리 저장소로 동작
    SHEETS_API_URL: str = ""
    SHEETS_API_KEY: str = ""
    SHEETS_TIMEOUT_SECONDS: float = 30.0
    CHECKLIST_SHEET: str = "Checklist"  # 모든 단계의 단일 기준(SSOT) 시트

    # 위험 평가 매트릭스 (3x3 | 5x5) 및 허용 기준 (점수 ≤ 기준 이면 허용 가능)
    RISK_MATRIX: str = "5x5"
    ACCEPT_THRESHOLD: int = 7

    # Redis (체크리스트 스냅샷 캐시. 미연결 시 인메모리 폴백)
    REDIS_URL: str = "redis://127.0.0.1:6379/0"
    SNAPSHOT_CACHE_KEY: str = "checklist_cache_v1"
    SNAPSHOT_CACHE_TTL: int = 86400

    # 목록 화면 페이지 크기
    PAGE_SIZE: int = 20

    # CORS (쉼표 구분 문자열, 비우면 CORS_DEFAULT_ORIGINS 사용)
    CORS_ORIGINS: str = ""
    CORS_DEFAULT_ORIGINS: List[str] = [
        "http://localhost:5173", "http://localhost:5174",
        "http://127.0.0.1:5173", "http://127.0.0.1:5174",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def matrix_bound(self) -> int:
        """Impact/Likelihood 상한 (3x3 → 3, 그 외 5)."""
        return 3 if self.RISK_MATRIX.strip().lower() == "3x3" else 5


settings = Settings()
