from sqlalchemy import (
    Column,
    Integer,
    String,
    JSON,
    DateTime,
    Text,
    Index,
    func,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class BranchMenu(Base):
    """
    The menu text a branch published (pasted or extracted from a PDF).

    Parsed items are not stored; they are derived from menu_text on demand and
    cached in memory by MenuCache.
    """
    __tablename__ = "branch_menus"

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(String, unique=True, nullable=False, index=True)
    menu_text = Column(Text, nullable=False, default="")

    # Per-branch ordering settings; None means use the config default
    delivery_fee = Column(Integer, nullable=True)
    minimum_order = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<BranchMenu(branch_id='{self.branch_id}', chars={len(self.menu_text or '')})>"


# --- Recommendation sessions ---

class RecommendationSessionRecord(Base):
    """
    Persists recommendation sessions so they survive restarts.

    The full RecommendationSession is stored as JSON in `data`; status,
    phone_number and branch_id are duplicated into columns for lookups.
    """
    __tablename__ = "recommendation_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String, unique=True, nullable=False, index=True)  # "rec_<millis>_<random>"
    phone_number = Column(String, nullable=True)
    branch_id = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active", index=True)  # active/completed/abandoned
    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_recommendation_sessions_phone_branch", "phone_number", "branch_id"),
    )
