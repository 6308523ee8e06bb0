import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String, Text
from socialnet.core.database import Base


def generate_id() -> str:
    """엔티티 고유 ID(UUID4 hex) 생성"""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """UTC 기준 현재 시각 (naive, DB 저장용)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """
    서비스 사용자(User) 모델
    - 게시글, 댓글, 좋아요의 소유자
    - 팔로우 관계에서 follower / following 양쪽으로 참여
    - 탈퇴 대신 is_active 플래그로 비활성화
    """
    __tablename__ = "users"

    id: str = Column(
        String(32),
        primary_key=True,
        default=generate_id,
        doc="사용자 고유 ID"
    )
    email: str = Column(
        String(255),
        unique=True,
        nullable=False,
        doc="사용자 이메일(로그인 ID)"
    )
    username: str = Column(
        String(30),
        unique=True,
        nullable=False,
        doc="서비스 내 사용자 이름"
    )
    first_name: str = Column(
        String(50),
        nullable=False,
        doc="이름"
    )
    last_name: str = Column(
        String(50),
        nullable=False,
        doc="성"
    )
    password: str = Column(
        String(255),
        nullable=False,
        doc="해시 처리된 비밀번호"
    )
    avatar: str = Column(
        String(500),
        nullable=True,
        doc="프로필 이미지 URL"
    )
    bio: str = Column(
        Text,
        nullable=True,
        doc="자기소개"
    )
    is_active: bool = Column(
        Boolean,
        nullable=False,
        default=True,
        doc="활성 계정 여부"
    )
    created_at: datetime = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        index=True,
        doc="가입 시각"
    )
    updated_at: datetime = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        doc="마지막 수정 시각"
    )
