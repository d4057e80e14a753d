"""SQLAlchemy models for the TELL history database."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class CommandHistory(Base):
    """One row per generation attempt.

    Attributes:
        id: Primary key, assigned on insert
        timestamp: When the entry was created, assigned on insert
        prompt: User's natural language request
        command: Generated shell command, empty when generation failed
        details: Explanation of the command
        show_details: Whether the model suggested showing the details
        error_message: Failure description, empty on success
        model: LLM model used
        input_tokens: Prompt token count
        output_tokens: Completion token count
        favorite: User-set favorite flag
        parent_id: Entry this one continues from, if any
    """

    __tablename__ = "command_history"
    __table_args__ = (
        Index("idx_command_history_prompt", "prompt"),
        Index("idx_command_history_command", "command"),
        Index("idx_command_history_timestamp", "timestamp"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.current_timestamp(),
    )
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    command: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[Optional[str]] = mapped_column(Text)
    show_details: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="0"
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text)
    model: Mapped[Optional[str]] = mapped_column(Text)
    input_tokens: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    output_tokens: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    favorite: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("command_history.id"), nullable=True
    )

    def __repr__(self) -> str:
        """String representation of the history entry."""
        return (
            f"CommandHistory(id={self.id}, "
            f"command='{(self.command or '')[:30]}...', "
            f"parent_id={self.parent_id})"
        )
