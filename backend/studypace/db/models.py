"""
SQLAlchemy Database Models for Study Progress Tracking

Tables:
- users: Study participants with a cached streak
- milestones: Top-level goals with a deadline
- courses: Study units holding today's checked checklist items
- categories: Countable task buckets with lifetime and same-day counters
- daily_entries: Committed completions per category per calendar date
- study_logs: Per-course daily feedback (mood, difficulty, note)

ARCHITECTURE NOTE:
    This file contains SQLALCHEMY models for database persistence.
    There is a corresponding Pydantic file: studypace/models/progress.py

    Data flows: Service Layer → Pydantic → SQLAlchemy → Database
"""

import datetime as dt
from datetime import date, datetime, timezone
from typing import Optional


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


from sqlalchemy import (  # noqa: E402
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column  # noqa: E402

from studypace.db.base import Base  # noqa: E402


# ===========================================
# Users & Goals
# ===========================================


class User(Base):
    """
    A study participant.

    Identity lives with an external provider; this row only carries what the
    progress engine needs.

    Attributes:
        id: Primary key.
        name: Display name.
        email: Optional contact address.
        current_streak: Cached consecutive-day streak. Recomputable from
            activity dates (daily entries and study logs).
        longest_streak: Cached best streak. Never decreases.
        last_completed_date: Most recent calendar date with activity.
        created_at: Row creation time.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    email: Mapped[Optional[str]] = mapped_column(String(320), index=True)

    # Streak cache
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0)
    last_completed_date: Mapped[Optional[date]] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )


class Milestone(Base):
    """
    A user's top-level goal with a deadline.

    Courses under a milestone without their own end date are paced against
    the milestone deadline.
    """

    __tablename__ = "milestones"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text, default="")
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    color: Mapped[Optional[str]] = mapped_column(String(50))


# ===========================================
# Courses & Categories
# ===========================================


class Course(Base):
    """
    A study unit under a milestone.

    Attributes:
        id: Primary key.
        user_id: Owner.
        milestone_id: Optional parent milestone.
        title: Course title.
        description: Optional free text.
        start_date: When studying starts.
        end_date: Quota deadline for every category of the course.
        last_updated: Stamped by every checklist and progress mutation. Its
            local calendar date decides whether checked_items are today's.
        checked_items: Item ids ("<category_id>_<index>") checked today.
        color: UI color name.
        icon: UI icon name.
    """

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    milestone_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("milestones.id"), index=True
    )

    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Checklist state
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    checked_items: Mapped[list] = mapped_column(JSON, default=list)

    color: Mapped[str] = mapped_column(String(50), default="emerald")
    icon: Mapped[str] = mapped_column(String(50), default="book-open")


class Category(Base):
    """
    A countable bucket of tasks within a course (e.g. vocabulary items).

    Attributes:
        id: Primary key.
        course_id: Owning course.
        name: Display name.
        icon: UI icon name.
        color: UI color name.
        total: Items to complete overall. Never negative.
        completed: Lifetime progress, soft-bounded to [0, total].
        today_completed: Same-day scratch counter, floored at 0 but not
            capped at total. Folded into completed by "complete day".
        order: Display order within the course.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), index=True)

    name: Mapped[str] = mapped_column(String(200))
    icon: Mapped[str] = mapped_column(String(50))
    color: Mapped[str] = mapped_column(String(50))

    # Counters
    total: Mapped[int] = mapped_column(Integer, default=0)
    completed: Mapped[int] = mapped_column(Integer, default=0)
    today_completed: Mapped[int] = mapped_column(Integer, default=0)

    order: Mapped[int] = mapped_column(Integer, default=0)


# ===========================================
# Daily Ledger
# ===========================================


class DailyEntry(Base):
    """
    Committed completions for one category on one calendar date.

    At most one row exists per (category_id, date). Writing a row adjusts
    the category's completed counter by the difference to the previous value.
    """

    __tablename__ = "daily_entries"
    __table_args__ = (
        UniqueConstraint("category_id", "date", name="uq_daily_entries_category_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), index=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    date: Mapped[dt.date] = mapped_column(Date, index=True)
    completed: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )


class StudyLog(Base):
    """
    Daily study feedback for a course.

    One row per (course_id, date). Counts as a day of activity for streaks.

    Attributes:
        items_completed: Items the learner reports for the day.
        mood: Self-reported mood, 1 (poor) to 5 (great).
        difficulty: Perceived difficulty, 1 (easy) to 5 (hard).
        note: Optional free text.
        completed_at: Time of the latest write.
    """

    __tablename__ = "study_logs"
    __table_args__ = (
        UniqueConstraint("course_id", "date", name="uq_study_logs_course_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), index=True)

    date: Mapped[dt.date] = mapped_column(Date, index=True)
    items_completed: Mapped[int] = mapped_column(Integer, default=0)
    mood: Mapped[int] = mapped_column(Integer)
    difficulty: Mapped[int] = mapped_column(Integer)
    note: Mapped[Optional[str]] = mapped_column(Text)

    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
