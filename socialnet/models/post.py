from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from socialnet.core.database import Base
from socialnet.models.user import generate_id, utcnow


class Post(Base):
    """
    게시글 모델
    - 본문(1~2000자)과 선택적 이미지 URL 저장
    - 작성자(User)와 N:1 관계, 댓글/좋아요는 post_id 외래 키로 연결
    """
    __tablename__ = "posts"

    id: str = Column(
        String(32),
        primary_key=True,
        default=generate_id,
        doc="게시글 고유 ID"
    )
    content: str = Column(
        Text,
        nullable=False,
        doc="게시글 본문"
    )
    image_url: str = Column(
        String(500),
        nullable=True,
        doc="업로드된 이미지의 공개 URL (/uploads/<filename>)"
    )
    is_published: bool = Column(
        Boolean,
        nullable=False,
        default=True,
        doc="공개 여부 (비공개 게시글은 작성자에게도 보이지 않음)"
    )
    author_id: str = Column(
        String(32),
        ForeignKey(
            "users.id",
            ondelete="CASCADE"  # 작성자 삭제 시 관련 게시글 자동 제거
        ),
        nullable=False,
        index=True,
        doc="작성자 ID"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        index=True,
        doc="작성 시각"
    )
    updated_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        doc="수정 시각"
    )

    # User와의 관계 (Many-to-One)
    author = relationship(
        "User",
        lazy="joined",  # 기본 조회 시 조인으로 작성자 정보 미리 로딩
        doc="작성자(User) 관계"
    )
