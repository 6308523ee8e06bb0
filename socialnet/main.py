import logging
import re
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from socialnet.core.config import Settings, get_settings
from socialnet.core.database import create_engine, create_session_factory, init_db
from socialnet.routers.auth_router import router as auth_router
from socialnet.routers.post_router import router as post_router
from socialnet.routers.user_router import router as user_router
from socialnet.services.storage_service import ImageStorage
from socialnet.utils.exceptions import ApiError

logger = logging.getLogger(__name__)

# 제약 조건 위반 메시지에서 컬럼명 추출 (sqlite / mysql)
_UNIQUE_FIELD_PATTERN = re.compile(r"(?:UNIQUE constraint failed: |for key ')\w+\.(\w+)")

# HTTPException 상태 코드 → 오류 코드 매핑
HTTP_ERROR_CODES = {
    400: "VALIDATION_ERROR",
    401: "AUTHENTICATION_ERROR",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "DUPLICATE_ENTRY",
    413: "FILE_TOO_LARGE",
}


def _error_response(status_code: int, message: str, error: str, **extra) -> ORJSONResponse:
    content = {"success": False, "message": message, "error": error}
    content.update(extra)
    return ORJSONResponse(status_code=status_code, content=content)


def _field_from_loc(loc) -> str:
    """('body', 'content') → 'content'"""
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in ("body", "query", "path", "header", "cookie"):
        parts = parts[1:]
    return ".".join(parts)


# ─── 애플리케이션 수명 주기 이벤트 핸들러 정의 ─────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    앱 시작 시 DB 테이블 생성, 종료 시 커넥션 풀 정리
    """
    await init_db(app.state.engine)
    logger.info("DB 초기화 완료")
    yield
    await app.state.engine.dispose()


# ─── 예외 처리 핸들러 ───────────────────────────────────────────────────
def register_exception_handlers(app: FastAPI) -> None:
    """
    모든 예외를 {success: false, message, error} envelope 으로 변환
    """

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        extra = {}
        if exc.status_code >= 500:
            logger.error("API 오류 (%s %s): %r", request.method, request.url.path, exc.__cause__ or exc)
            if app.state.settings.is_development:
                extra["detail"] = repr(exc.__cause__ or exc)
        return _error_response(exc.status_code, exc.message, exc.code, **extra)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"field": _field_from_loc(err.get("loc", ())), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        return _error_response(400, "입력값 검증 실패", "VALIDATION_ERROR", errors=errors)

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        match = _UNIQUE_FIELD_PATTERN.search(str(exc.orig))
        field = match.group(1) if match else "field"
        logger.info("유니크 제약 위반: %s", field)
        return _error_response(409, f"{field} 값이 이미 존재합니다.", "DUPLICATE_ENTRY")

    @app.exception_handler(NoResultFound)
    async def handle_no_result(request: Request, exc: NoResultFound):
        return _error_response(404, "데이터를 찾을 수 없습니다.", "NOT_FOUND")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        return _error_response(exc.status_code, str(exc.detail), code)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("처리되지 않은 예외 (%s %s)", request.method, request.url.path)
        extra = {"detail": repr(exc)} if app.state.settings.is_development else {}
        return _error_response(500, "서버 내부 오류가 발생했습니다.", "INTERNAL_ERROR", **extra)


# ─── FastAPI 애플리케이션 팩토리 ─────────────────────────────────────────
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    설정을 받아 FastAPI 애플리케이션 생성
    - DB 엔진 / 세션 팩토리 / 이미지 저장소는 여기서 한 번만 만들어 app.state에 보관
    """
    settings = settings or get_settings()

    # ─── 로그 설정 ─────────────────────────────────────────────────────
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # passlib 의 bcrypt 버전 확인 경고 억제
    logging.getLogger("passlib").setLevel(logging.ERROR)

    app = FastAPI(
        title="SocialNet API",
        description="회원가입 / 게시글 / 댓글 / 좋아요 / 팔로우 기능을 제공하는 소셜 네트워크 API",
        version="1.0.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    engine = create_engine(settings)
    storage = ImageStorage(
        upload_dir=settings.UPLOAD_DIR,
        max_bytes=settings.MAX_UPLOAD_SIZE_BYTES,
        allowed_types=settings.ALLOWED_IMAGE_TYPES,
        url_prefix=settings.UPLOAD_URL_PREFIX,
    )
    storage.ensure_dir()

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.image_storage = storage

    # ─── CORS 설정 ─────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def ensure_utf8(request: Request, call_next):
        """
        모든 JSON 응답에 UTF-8 charset을 명시적으로 추가
        """
        resp = await call_next(request)
        ctype = resp.headers.get("Content-Type", "")
        if ctype.startswith("application/json") and "charset" not in ctype.lower():
            resp.headers["Content-Type"] = "application/json; charset=utf-8"
        return resp

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        """
        서비스 상태 확인용 엔드포인트
        """
        return {"status": "ok"}

    register_exception_handlers(app)

    # ─── 라우터 등록 ───────────────────────────────────────────────────
    app.include_router(auth_router, prefix="/api")
    app.include_router(post_router, prefix="/api")
    app.include_router(user_router, prefix="/api")

    # 업로드 이미지 정적 서빙
    app.mount(
        settings.UPLOAD_URL_PREFIX,
        StaticFiles(directory=settings.UPLOAD_DIR),
        name="uploads",
    )
    return app


if __name__ == "__main__":
    uvicorn.run(
        "socialnet.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )
