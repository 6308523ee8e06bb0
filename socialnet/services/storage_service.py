import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from socialnet.utils.exceptions import FileTooLargeError, InvalidFileTypeError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

# MIME 타입 → 저장 확장자
_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


@dataclass(frozen=True)
class StoredImage:
    """디스크에 저장된 업로드 이미지"""
    filename: str
    path: Path
    url: str


class ImageStorage:
    """
    게시글 이미지 파일 저장소
    - 업로드 파일을 upload_dir에 스트리밍 저장하고 공개 URL(/uploads/<filename>)을 발급
    - DB 트랜잭션과는 독립적이므로 롤백 / 정리는 호출 측(PostService)이 담당
    """

    def __init__(
        self,
        upload_dir: str,
        max_bytes: int,
        allowed_types: Iterable[str],
        url_prefix: str = "/uploads",
    ):
        self.upload_dir = Path(upload_dir)
        self.max_bytes = max_bytes
        self.allowed_types = set(allowed_types)
        self.url_prefix = url_prefix.rstrip("/")

    def ensure_dir(self) -> None:
        """업로드 디렉토리가 없으면 생성"""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def _new_filename(self, upload: UploadFile) -> str:
        ext = _EXTENSIONS.get(upload.content_type) or Path(upload.filename or "").suffix.lower()
        return f"image-{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext}"

    def path_for_url(self, url: str) -> Path:
        """
        공개 URL에서 저장 경로 계산
        - 파일명만 사용하므로 상위 디렉토리로 벗어나는 경로는 만들어지지 않음
        """
        return self.upload_dir / Path(url).name

    async def save(self, upload: UploadFile) -> StoredImage:
        """
        업로드 파일 저장
        1) MIME 타입 검사 (허용 목록 외 → InvalidFileTypeError)
        2) 청크 단위로 기록하며 크기 검사 (초과 → FileTooLargeError)
        3) 실패 시 부분 저장된 파일 삭제 후 예외 전파
        """
        if upload.content_type not in self.allowed_types:
            raise InvalidFileTypeError(
                f"허용되지 않은 이미지 형식입니다: {upload.content_type}"
            )

        self.ensure_dir()
        filename = self._new_filename(upload)
        path = self.upload_dir / filename
        written = 0
        try:
            async with aiofiles.open(path, "wb") as out:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise FileTooLargeError(
                            f"이미지 크기는 {self.max_bytes} 바이트를 넘을 수 없습니다."
                        )
                    await out.write(chunk)
        except Exception:
            await self._remove_partial(path)
            raise

        logger.info("이미지 저장: %s (%d bytes)", filename, written)
        return StoredImage(filename=filename, path=path, url=f"{self.url_prefix}/{filename}")

    async def delete(self, url: str) -> None:
        """
        공개 URL에 해당하는 이미지 삭제
        - 실패 시 OSError를 그대로 전파 (치명적인지 여부는 호출 측이 결정)
        """
        path = self.path_for_url(url)
        await aiofiles.os.remove(path)
        logger.info("이미지 삭제: %s", path.name)

    async def _remove_partial(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("부분 저장된 이미지 삭제 실패: %s (%s)", path, e)
