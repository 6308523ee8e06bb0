from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from socialnet.core.database import Base
from socialnet.models.user import generate_id, utcnow

class Follow(Base):
    """
    팔로우 관계 모델
    - follower_id 가 following_id 를 팔로우
    - (follower_id, following_id) 쌍 당 최대 1행
    - 자기 자신 팔로우 금지는 DB 제약이 아니라 서비스 계층에서 검사
    """
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
    )

    id: str = Column(
        String(32),
        primary_key=True,
        default=generate_id,
        doc="팔로우 기록 고유 ID"
    )
    follower_id: str = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="팔로우 하는 사용자 ID"
    )
    following_id: str = Column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="팔로우 당하는 사용자 ID"
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=utcnow,
    )
