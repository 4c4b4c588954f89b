"""Configuration models for the news ingestion and scoring services."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, List

from pydantic import (
    Field,
    PositiveInt,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_origins(value: Any) -> List[str]:
    text = str(value or "").strip()
    if not text:
        return ["*"]
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError("CORS_ALLOW_ORIGINS는 JSON 배열이어야 합니다.") from exc
        if not isinstance(parsed, list):
            raise ValueError("CORS_ALLOW_ORIGINS는 리스트 형태여야 합니다.")
        return [str(origin).strip() for origin in parsed if str(origin).strip()]
    return [part.strip() for part in text.split(",") if part.strip()]


class Settings(BaseSettings):
    """뉴스 동기화/점수 계산용 환경 설정."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    database_dsn: str = Field(..., alias="DATABASE_DSN", description="기사/점수 저장소 연결 문자열.")
    broker_url: str = Field(..., alias="CELERY_BROKER_URL", description="Celery 브로커/백엔드 DSN.")
    feed_timeout_seconds: PositiveInt = Field(10, alias="FEED_TIMEOUT_SECONDS", description="피드 요청 타임아웃(초)")
    feed_user_agent: str = Field(
        "Mozilla/5.0 (compatible; SportsPulse/1.0)",
        alias="FEED_USER_AGENT",
        description="피드 요청 시 사용할 User-Agent.",
    )
    feed_max_attempts: PositiveInt = Field(1, alias="FEED_MAX_ATTEMPTS", description="일시 오류 시 최대 시도 횟수")
    feed_max_items: PositiveInt = Field(3, alias="FEED_MAX_ITEMS", description="피드당 사이클별 최대 기사 수")
    feed_concurrency: PositiveInt = Field(8, alias="FEED_CONCURRENCY", description="동시 피드 요청 수 상한")
    article_retention_days: PositiveInt = Field(2, alias="ARTICLE_RETENTION_DAYS", description="기사 보관 기간(일)")
    excerpt_max_chars: PositiveInt = Field(200, alias="EXCERPT_MAX_CHARS", description="요약문 최대 길이")
    default_quality_score: float = Field(
        50.0,
        alias="DEFAULT_QUALITY_SCORE",
        description="품질 점수가 없을 때 사용할 기본값 (0~100).",
    )
    news_sync_interval_minutes: PositiveInt = Field(
        60,
        alias="NEWS_SYNC_INTERVAL_MINUTES",
        description="뉴스 동기화 주기 (분 단위).",
    )
    scoring_interval_minutes: PositiveInt = Field(
        1440,
        alias="SCORING_INTERVAL_MINUTES",
        description="수익/랭킹 계산 주기 (분 단위).",
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL", description="로그 레벨.")
    log_json: bool = Field(False, alias="LOG_JSON", description="로그를 JSON 형식으로 출력할지 여부.")
    celery_worker_concurrency: PositiveInt = Field(
        4,
        alias="CELERY_WORKER_CONCURRENCY",
        description="Celery 워커 동시 실행 수.",
    )
    celery_task_soft_time_limit: PositiveInt = Field(
        900,
        alias="CELERY_TASK_SOFT_TIME_LIMIT",
        description="Celery 태스크 소프트 타임아웃 (초).",
    )
    cors_origins_raw: str = Field(
        "*",
        alias="CORS_ALLOW_ORIGINS",
        description="CORS 허용 오리진 (JSON 배열 또는 콤마 구분 문자열).",
    )

    @property
    def cors_allow_origins(self) -> List[str]:
        return _parse_origins(self.cors_origins_raw)

    @field_validator("cors_origins_raw")
    @classmethod
    def _validate_origins(cls, value: str) -> str:
        _parse_origins(value)
        return value

    @field_validator("database_dsn")
    @classmethod
    def _validate_database_dsn(cls, value: str) -> str:
        if "://" not in value:
            raise ValueError("DATABASE_DSN은 유효한 DSN 문자열이어야 합니다.")
        return value

    @field_validator("feed_user_agent")
    @classmethod
    def _validate_user_agent(cls, value: str) -> str:
        agent = value.strip()
        if not agent:
            raise ValueError("FEED_USER_AGENT는 공백일 수 없습니다.")
        return agent

    @field_validator("feed_concurrency")
    @classmethod
    def _validate_concurrency(cls, v: int) -> int:
        if v > 64:
            raise ValueError("FEED_CONCURRENCY는 64 이하여야 합니다.")
        return v

    @field_validator("default_quality_score")
    @classmethod
    def _validate_quality(cls, v: float) -> float:
        if not 0 <= v <= 100:
            raise ValueError("DEFAULT_QUALITY_SCORE는 0~100 범위여야 합니다.")
        return v


@lru_cache()
def get_settings() -> Settings:
    """환경 변수를 기준으로 Settings 인스턴스를 반환한다."""
    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"환경 변수 검증에 실패했습니다: {exc}") from exc


def reset_settings_cache() -> None:
    """Settings LRU 캐시를 초기화한다 (테스트 용도)."""
    get_settings.cache_clear()  # type: ignore[attr-defined]
