"""Command history store.

HistoryStore wraps the ``command_history`` table: append-only inserts,
favorite updates, deletes by id, and point/range/substring reads. Every
SQLAlchemy or filesystem failure surfaces as StorageError; missing rows
surface as NotFoundError.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import desc, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tell.config import TellConfig
from tell.exceptions import InvalidArgumentError, NotFoundError, StorageError
from tell.providers.base import CommandResponse, UsageInfo
from tell.storage.database import create_database_engine, create_session_factory
from tell.storage.models import CommandHistory


logger = logging.getLogger(__name__)


class HistoryEntry(BaseModel):
    """Read-only view of a persisted history row."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    timestamp: datetime
    prompt: str
    command: str = ""
    details: str = ""
    show_details: bool = False
    error_message: str = ""
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    favorite: bool = False
    parent_id: Optional[int] = None

    @field_validator("command", "details", "error_message", "model", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("show_details", "favorite", mode="before")
    @classmethod
    def _none_as_false(cls, value):
        return False if value is None else value

    @field_validator("input_tokens", "output_tokens", mode="before")
    @classmethod
    def _none_as_zero(cls, value):
        return 0 if value is None else value

    @property
    def failed(self) -> bool:
        """Whether generation or parsing failed for this entry."""
        return bool(self.error_message)

    @property
    def succeeded(self) -> bool:
        """Whether this entry can serve as a continuation parent."""
        return bool(self.command) and not self.error_message

    def to_dict(self) -> dict:
        """Convert history entry to dictionary.

        Returns:
            Dictionary representation with an ISO formatted timestamp
        """
        data = self.model_dump()
        data["timestamp"] = self.timestamp.isoformat()
        return data


class HistoryStore:
    """Durable CRUD and search over command history.

    Example:
        with HistoryStore(config) as store:
            entry_id = store.add("list files", response, usage)
            entry = store.get(entry_id)
    """

    def __init__(self, config: Optional[TellConfig] = None):
        """Open (and if needed create) the history database.

        Args:
            config: TellConfig instance. If None, loads default config.

        Raises:
            StorageError: If the database cannot be opened or initialized
        """
        self.config = config or TellConfig()
        try:
            self._engine = create_database_engine(self.config)
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Could not open history database: {e}", cause=e) from e
        self._session_factory = create_session_factory(self._engine)

    def __enter__(self) -> "HistoryStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Dispose of the database engine."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._engine is None:
            raise StorageError("History database is closed")

        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.debug(f"History storage failure: {e}")
            raise StorageError(f"History storage failure: {e}", cause=e) from e
        finally:
            session.close()

    def add(
        self,
        prompt: str,
        response: Optional[CommandResponse] = None,
        usage: Optional[UsageInfo] = None,
        error_message: str = "",
        parent_id: Optional[int] = None,
    ) -> int:
        """Insert one history entry.

        Args:
            prompt: User's natural language input
            response: Parsed command response, or None when generation failed
            usage: Usage information, or None when no LLM call completed
            error_message: Failure description, empty on success
            parent_id: Entry this one continues from

        Returns:
            The id assigned to the new entry

        Raises:
            InvalidArgumentError: If the prompt is empty
            StorageError: If the insert fails
        """
        if not prompt or not prompt.strip():
            raise InvalidArgumentError("Prompt cannot be empty")

        logger.debug(f"Adding history entry: prompt={prompt!r}, parent_id={parent_id}")

        row = CommandHistory(
            prompt=prompt,
            command=response.command if response else "",
            details=response.details if response else "",
            show_details=response.show_details if response else False,
            error_message=error_message or "",
            model=usage.model if usage else "",
            input_tokens=usage.input_tokens if usage else 0,
            output_tokens=usage.output_tokens if usage else 0,
            parent_id=parent_id,
        )

        with self._session() as session:
            session.add(row)
            session.commit()
            return row.id

    def get(self, entry_id: int) -> HistoryEntry:
        """Get a specific history entry by ID.

        Raises:
            NotFoundError: If no entry has that id
            StorageError: If the query fails
        """
        with self._session() as session:
            row = session.get(CommandHistory, entry_id)
            if row is None:
                raise NotFoundError(f"No history entry found with ID {entry_id}")
            return HistoryEntry.model_validate(row)

    def list(
        self,
        limit: int = 10,
        offset: int = 0,
        favorites_only: bool = False,
        search_term: str = "",
    ) -> List[HistoryEntry]:
        """List history entries, newest first.

        Args:
            limit: Maximum number of entries to return
            offset: Number of entries to skip
            favorites_only: Only return favorite entries
            search_term: Case-sensitive substring to match against the
                prompt or command; empty means no filter

        Returns:
            Matching entries; empty when nothing matches

        Raises:
            InvalidArgumentError: If limit or offset is negative
            StorageError: If the query fails
        """
        if limit < 0 or offset < 0:
            raise InvalidArgumentError("Limit and offset must not be negative")

        with self._session() as session:
            query = session.query(CommandHistory)

            if favorites_only:
                query = query.filter(CommandHistory.favorite.is_(True))

            if search_term:
                # instr() is case-sensitive and treats % and _ literally
                query = query.filter(
                    or_(
                        func.instr(CommandHistory.prompt, search_term) > 0,
                        func.instr(CommandHistory.command, search_term) > 0,
                    )
                )

            rows = (
                query.order_by(desc(CommandHistory.timestamp), desc(CommandHistory.id))
                .limit(limit)
                .offset(offset)
                .all()
            )
            return [HistoryEntry.model_validate(row) for row in rows]

    def search(self, term: str, limit: int = 10) -> List[HistoryEntry]:
        """Search entries whose prompt or command contains a term.

        Raises:
            InvalidArgumentError: If the term is empty
            StorageError: If the query fails
        """
        if not term:
            raise InvalidArgumentError("Search query cannot be empty")
        return self.list(limit=limit, offset=0, favorites_only=False, search_term=term)

    def set_favorite(self, entry_id: int, value: bool) -> None:
        """Mark or unmark an entry as favorite.

        Raises:
            NotFoundError: If no entry has that id
            StorageError: If the update fails
        """
        with self._session() as session:
            updated = (
                session.query(CommandHistory)
                .filter(CommandHistory.id == entry_id)
                .update({CommandHistory.favorite: bool(value)}, synchronize_session=False)
            )
            if updated == 0:
                raise NotFoundError(f"No history entry found with ID {entry_id}")
            session.commit()

    def toggle_favorite(self, entry_id: int) -> bool:
        """Flip the favorite flag of an entry.

        Returns:
            The new favorite value

        Raises:
            NotFoundError: If no entry has that id
            StorageError: If the read or update fails
        """
        new_value = not self.get(entry_id).favorite
        self.set_favorite(entry_id, new_value)
        return new_value

    def delete(self, entry_id: int) -> None:
        """Delete an entry. Entries continuing from it keep their parent_id.

        Raises:
            NotFoundError: If no entry has that id
            StorageError: If the delete fails
        """
        with self._session() as session:
            deleted = (
                session.query(CommandHistory)
                .filter(CommandHistory.id == entry_id)
                .delete(synchronize_session=False)
            )
            if deleted == 0:
                raise NotFoundError(f"No history entry found with ID {entry_id}")
            session.commit()

    def most_recent_successful(self) -> HistoryEntry:
        """Get the newest entry with a command and no error.

        Raises:
            NotFoundError: If no entry qualifies
            StorageError: If the query fails
        """
        with self._session() as session:
            row = (
                session.query(CommandHistory)
                .filter(CommandHistory.command != "")
                .filter(
                    or_(
                        CommandHistory.error_message.is_(None),
                        CommandHistory.error_message == "",
                    )
                )
                .order_by(desc(CommandHistory.timestamp), desc(CommandHistory.id))
                .first()
            )
            if row is None:
                raise NotFoundError("No previous successful command found")
            return HistoryEntry.model_validate(row)

    def count(self, favorites_only: bool = False) -> int:
        """Get total number of history entries.

        Raises:
            StorageError: If the query fails
        """
        with self._session() as session:
            query = session.query(CommandHistory)
            if favorites_only:
                query = query.filter(CommandHistory.favorite.is_(True))
            return query.count()
