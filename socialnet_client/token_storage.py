import json
import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

TOKEN_KEY = "social_media_token"
DEFAULT_TOKEN_FILE = Path.home() / ".socialnet" / "token.json"


class TokenStorage:
    """
    액세스 토큰 로컬 캐시
    - {"social_media_token": "<jwt>"} 형태의 JSON 파일 하나로 관리
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_TOKEN_FILE):
        self.path = Path(path)

    def get(self) -> Optional[str]:
        """저장된 토큰 반환 (없거나 파일이 깨졌으면 None)"""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"토큰 파일 읽기 실패: {e}")
            return None
        token = data.get(TOKEN_KEY) if isinstance(data, dict) else None
        return token or None

    def set(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({TOKEN_KEY: token}), encoding="utf-8")
        logger.debug("토큰 저장: %s", self.path)

    def remove(self) -> None:
        """토큰 파일 삭제 (이미 없으면 무시)"""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        logger.debug("토큰 삭제: %s", self.path)

    def is_authenticated(self) -> bool:
        return self.get() is not None
