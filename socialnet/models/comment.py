from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from socialnet.core.database import Base
from socialnet.models.user import generate_id, utcnow


class Comment(Base):
    """
    게시글 댓글 모델
    - 본문(1~500자), 대상 게시글, 작성자 저장
    """
    __tablename__ = "comments"

    id: str = Column(
        String(32),
        primary_key=True,
        default=generate_id,
        doc="댓글 고유 ID"
    )
    content: str = Column(
        Text,
        nullable=False,
        doc="댓글 본문"
    )
    post_id: str = Column(
        String(32),
        ForeignKey(
            "posts.id",
            ondelete="CASCADE"  # 게시글 삭제 시 댓글도 삭제
        ),
        nullable=False,
        index=True,
        doc="대상 게시글 ID"
    )
    user_id: str = Column(
        String(32),
        ForeignKey(
            "users.id",
            ondelete="CASCADE"
        ),
        nullable=False,
        doc="작성자 ID"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="작성 시각"
    )
    updated_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        doc="수정 시각"
    )

    user = relationship(
        "User",
        lazy="joined",
        doc="댓글 작성자(User)"
    )
