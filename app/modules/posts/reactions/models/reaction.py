from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint

from app.db.session import Base, utcnow


class Reaction(Base):
    __tablename__ = "reactions"
    # One reaction per user per post
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_reactions_post_user"),)

    id = Column(String, primary_key=True, index=True)
    reaction_type = Column(String(32), nullable=False)  # raw token, see normalize_reaction()
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    post_id = Column(String, ForeignKey("posts.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
