"""공통 설정 모듈(Common configuration module)."""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# OSS Index accepts at most 128 coordinates per component-report request.
OSSINDEX_MAX_BATCH = 128


class Settings(BaseSettings):
    """시스템 환경설정(System environment settings)."""

    model_config = SettingsConfigDict(
        env_prefix="DA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="dependency-auditor", description="서비스 이름(Service name)")
    environment: str = Field(default="development", description="실행 환경(Runtime environment)")
    ecosystem: str = Field(default="maven", description="패키지 생태계 태그(Ecosystem tag)")

    ossindex_url: str = Field(
        default="https://ossindex.sonatype.org/api/v3",
        description="OSS Index API 기본 URL(OSS Index API base URL)",
    )
    ossindex_username: str = Field(default="", description="OSS Index 사용자명(OSS Index username)")
    ossindex_token: str = Field(default="", description="OSS Index API 토큰(OSS Index API token)")
    audit_batch_size: int = Field(
        default=OSSINDEX_MAX_BATCH,
        description="요청당 최대 좌표 수(Maximum coordinates per audit request)",
    )

    deps_dev_url: str = Field(
        default="https://api.deps.dev/v3",
        description="deps.dev API 기본 URL(deps.dev API base URL)",
    )
    http_timeout: float = Field(default=10.0, description="HTTP 타임아웃(HTTP timeout in seconds)")
    retry_attempts: int = Field(default=3, description="재시도 횟수(Attempts for transient HTTP errors)")
    allow_external_calls: bool = Field(
        default=True,
        description="외부 API 호출 허용 여부(Allow outbound API calls in this environment)",
    )

    enable_cache: bool = Field(
        default=False,
        description="Redis 캐시 사용 여부(Enable Redis caching of audit reports)",
    )
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis 접속 URL(Redis connection URL)")
    cache_ttl_seconds: int | None = Field(
        default=43200,
        description="Redis 캐시 TTL(Redis cache TTL in seconds)",
    )

    log_level: str = Field(default="INFO", description="로그 레벨(Log level)")

    @field_validator("audit_batch_size", mode="before")
    @classmethod
    def clamp_batch_size(cls, v: Any) -> int:
        """배치 크기를 1..128 범위로 제한(Clamp batch size into the OSS Index range)."""

        size = int(v)
        if size < 1:
            return 1
        return min(size, OSSINDEX_MAX_BATCH)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        if not v:
            return "INFO"
        return str(v).strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """설정 인스턴스 반환(Return a cached settings instance).

    Call ``get_settings.cache_clear()`` after changing ``DA_*`` variables.
    """

    return Settings()


def load_environment() -> None:
    """기본 환경변수를 로드(Load base environment variables)."""

    os.environ.setdefault("TZ", "UTC")
