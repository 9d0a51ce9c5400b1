"""SQLAlchemy models for people, their connections and activity streams."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base

# Connection statuses. A request writes "pending" on the requester's row and
# "requested" on the contact's row; accepting flips both to "accepted".
ACCEPTED = "accepted"
REQUESTED = "requested"
PENDING = "pending"


class Person(Base):
    __tablename__ = "people"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    crypted_password = Column(Text, nullable=True)
    remember_token = Column(String(255), nullable=True, index=True)
    remember_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    last_contacted_at = Column(DateTime(timezone=True), nullable=True)
    last_logged_in_at = Column(DateTime(timezone=True), nullable=True)
    forum_posts_count = Column(Integer, default=0, nullable=False)
    blog_post_comments_count = Column(Integer, default=0, nullable=False)
    wall_comments_count = Column(Integer, default=0, nullable=False)
    admin = Column(Boolean, default=False, nullable=False)
    deactivated = Column(Boolean, default=False, nullable=False)
    connection_notifications = Column(Boolean, default=True)
    message_notifications = Column(Boolean, default=True)
    wall_comment_notifications = Column(Boolean, default=True)
    blog_comment_notifications = Column(Boolean, default=True)
    email_verified = Column(Boolean, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    connections = relationship(
        "Connection",
        foreign_keys="Connection.person_id",
        back_populates="person",
        cascade="all,delete-orphan",
    )
    activities = relationship("Activity", back_populates="person", cascade="all,delete-orphan")

    def __repr__(self) -> str:
        return f"<Person id={self.id} email={self.email!r}>"


class Connection(Base):
    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    person_id = Column(Integer, ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True)
    contact_id = Column(Integer, ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(32), default=PENDING, nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    person = relationship("Person", foreign_keys=[person_id], back_populates="connections")
    contact = relationship("Person", foreign_keys=[contact_id])


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    person_id = Column(Integer, ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True)
    item_type = Column(String(64), nullable=False)
    item_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    person = relationship("Person", back_populates="activities")


class Feed(Base):
    __tablename__ = "feeds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    person_id = Column(Integer, ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True)
