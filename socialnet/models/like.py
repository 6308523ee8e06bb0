from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from socialnet.core.database import Base
from socialnet.models.user import generate_id, utcnow

class Like(Base):
    """
    게시글 좋아요(Like) 모델
    - (user_id, post_id) 쌍 당 최대 1행, 유니크 제약으로 DB 레벨에서 보장
    """
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),
    )

    id: str = Column(
        String(32),
        primary_key=True,
        default=generate_id,
        doc="좋아요 기록 고유 ID"
    )
    user_id: str = Column(
        String(32),
        ForeignKey(
            "users.id",
            ondelete="CASCADE"  # 사용자 삭제 시 연관 좋아요도 삭제
        ),
        nullable=False,
        doc="좋아요를 누른 사용자 ID"
    )
    post_id: str = Column(
        String(32),
        ForeignKey(
            "posts.id",
            ondelete="CASCADE"  # 게시글 삭제 시 연관 좋아요도 삭제
        ),
        nullable=False,
        index=True,
        doc="좋아요 대상 게시글 ID"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
    )
