"""
SQLAlchemy ORM Models for the review store.

Defines learning items, the append-only review log, and the per-item
memory snapshot cache.
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class LearningItem(Base):
    """
    A front/back pair owned by one user.

    Never physically deleted by the engine; deleted_at marks soft deletion.
    """
    __tablename__ = 'learning_items'

    id = Column(String(64), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)

    front = Column(Text, nullable=False)
    back = Column(Text, nullable=False)
    source = Column(String(20), nullable=False, default="manual")  # "manual" or "ai"

    created_at = Column(DateTime(timezone=True), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<LearningItem({self.user_id}, {self.id})>"


class ReviewRecord(Base):
    """
    One graded review. Rows are never updated except to set deleted_at.
    """
    __tablename__ = 'reviews'

    id = Column(String(64), primary_key=True)
    user_id = Column(String(255), nullable=False)
    item_id = Column(String(64), ForeignKey('learning_items.id'), nullable=False)

    rating = Column(Integer, nullable=False)  # user score 1-5
    sequence = Column(Integer, nullable=False)  # insertion order within the item
    reviewed_at = Column(DateTime(timezone=True), nullable=False)
    next_due = Column(DateTime(timezone=True), nullable=False)

    deleted_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('idx_reviews_item_time', 'user_id', 'item_id', 'reviewed_at', 'sequence'),
        UniqueConstraint('user_id', 'item_id', 'sequence', name='uq_reviews_item_sequence'),
    )

    def __repr__(self):
        return f"<ReviewRecord(id={self.id}, item={self.item_id}, rating={self.rating})>"


class MemorySnapshot(Base):
    """
    Cached MemoryState for one (user, item), tagged with the review it
    was folded up to. Disposable: it can always be rebuilt by replay.
    """
    __tablename__ = 'memory_snapshots'

    user_id = Column(String(255), primary_key=True)
    item_id = Column(String(64), ForeignKey('learning_items.id'), primary_key=True)

    difficulty = Column(Float, nullable=False)
    stability = Column(Float, nullable=False)
    last_reviewed_at = Column(DateTime(timezone=True), nullable=False)

    last_review_id = Column(String(64), nullable=False)
    review_count = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<MemorySnapshot({self.user_id}, {self.item_id}, upto={self.last_review_id})>"
