from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, validator
from pathlib import Path
from functools import lru_cache
from typing import List, Optional

# socialnet 패키지 디렉토리
PACKAGE_DIR = Path(__file__).resolve().parent.parent
# 저장소 루트 (상대 경로 기준점, 기본 업로드 폴더와 sqlite 파일 위치)
PROJECT_DIR = PACKAGE_DIR.parent

DEFAULT_SQLITE_URL = f"sqlite+aiosqlite:///{PROJECT_DIR / 'socialnet.db'}"


def _absolute(raw: str) -> str:
    """상대 경로를 PROJECT_DIR 아래 경로로 바꿔서 돌려준다"""
    candidate = Path(raw)
    if candidate.is_absolute():
        return str(candidate)
    return str(PROJECT_DIR / candidate)


class Settings(BaseSettings):
    """
    서버 전역 설정
    - 프로세스 환경 변수가 우선이고 config/settings.env 는 있을 때만 읽는다
    - 값이 없는 항목은 로컬 개발용 기본값을 사용
    """
    model_config = SettingsConfigDict(
        env_file=str(PACKAGE_DIR / "config" / "settings.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 인증 토큰
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES_MINUTES: int = Field(
        7 * 24 * 60,
        description="액세스 토큰 유효 기간(분), 기본 7일",
    )

    # 데이터베이스 (DATABASE_URL 이 없을 때만 개별 항목으로 조합)
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: Optional[int] = None
    DB_NAME: Optional[str] = None
    DATABASE_URL: Optional[str] = Field(
        None,
        description="명시값 > DB_* 조합 > 로컬 sqlite 순으로 결정",
    )

    # 이미지 업로드
    UPLOAD_DIR: str = Field(
        default=str(PROJECT_DIR / "uploads"),
        description="게시글 이미지 저장 디렉토리",
    )
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_SIZE_BYTES: int = Field(
        5 * 1024 * 1024,
        description="업로드 이미지 최대 크기(바이트)",
    )
    ALLOWED_IMAGE_TYPES: List[str] = Field(
        default=["image/jpeg", "image/png", "image/gif", "image/webp"],
        description="업로드 허용 MIME 타입",
    )

    # 실행 환경
    ENVIRONMENT: str = Field(
        "production",
        description="development 일 때만 500 응답에 예외 상세를 포함",
    )
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    @validator("UPLOAD_DIR", pre=True)
    def _upload_dir_absolute(cls, v: str) -> str:
        return _absolute(v)

    @validator("DATABASE_URL", pre=True, always=True)
    def _database_url(cls, v: Optional[str], values) -> str:
        """
        DB_USER / DB_HOST / DB_NAME 이 모두 있으면 MySQL(asyncmy) URL 을 만들고
        하나라도 빠지면 sqlite 파일로 대체
        """
        if v:
            return v
        parts = {key: values.get(key) for key in ("DB_USER", "DB_PASSWORD", "DB_HOST", "DB_PORT", "DB_NAME")}
        if not all(parts[key] for key in ("DB_USER", "DB_HOST", "DB_NAME")):
            return DEFAULT_SQLITE_URL
        return (
            "mysql+asyncmy://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{port}/{DB_NAME}"
            "?charset=utf8mb4"
        ).format(port=parts["DB_PORT"] or 3306, **parts)

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        # validator 가 항상 값을 채운다
        return self.DATABASE_URL

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """프로세스당 한 번만 Settings 를 만든다"""
    return Settings()
