"""SQLModel implementation of the option repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy import update as sa_update
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ...domain.repositories.option import TRANSIENT_PREFIX, OptionQuery, OptionRow
from ...logging_config import get_logger
from ...models.option import AUTOLOAD_NO, AUTOLOAD_YES, GlobalOption

logger = get_logger(__name__)

LIKE_ESCAPE = "\\"


def esc_like(text: str) -> str:
    """Escape LIKE metacharacters so ``text`` matches literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def glob_to_like(pattern: str) -> str:
    """Translate a ``*``/``?`` glob into an escaped LIKE pattern."""
    return esc_like(pattern).replace("*", "%").replace("?", "_")


def _to_row(obj: GlobalOption) -> OptionRow:
    return OptionRow(name=obj.name, value=obj.value, autoload=obj.autoload, id=obj.id)


class SQLModelOptionRepository:
    """SQLModel-based option repository.

    Write methods report durable failures as False instead of raising; reads
    let database errors propagate.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_row(self, name: str) -> Optional[OptionRow]:
        """Retrieve a row by option name."""
        with self.session_factory() as session:
            obj = session.exec(select(GlobalOption).where(GlobalOption.name == name).limit(1)).first()
            return _to_row(obj) if obj else None

    def upsert(self, name: str, value: str, autoload: str) -> bool:
        """Insert a row, overwriting value and autoload when the name exists."""
        try:
            with self.session_factory() as session:
                dialect = session.get_bind().dialect.name
                if dialect in ("sqlite", "postgresql"):
                    insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
                    stmt = insert(GlobalOption).values(name=name, value=value, autoload=autoload)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=["name"],
                        set_={"value": stmt.excluded["value"], "autoload": stmt.excluded["autoload"]},
                    )
                    session.execute(stmt)
                elif dialect in ("mysql", "mariadb"):
                    stmt = mysql.insert(GlobalOption).values(name=name, value=value, autoload=autoload)
                    stmt = stmt.on_duplicate_key_update(value=stmt.inserted["value"], autoload=stmt.inserted["autoload"])
                    session.execute(stmt)
                else:
                    existing = session.exec(select(GlobalOption).where(GlobalOption.name == name)).first()
                    if existing:
                        existing.value = value
                        existing.autoload = autoload
                        session.add(existing)
                    else:
                        session.add(GlobalOption(name=name, value=value, autoload=autoload))
                session.commit()
        except SQLAlchemyError:
            logger.warning("Upsert failed", extra={"option": name}, exc_info=True)
            return False
        return True

    def update(self, name: str, value: Optional[str] = None, autoload: Optional[str] = None) -> bool:
        """Update value and/or autoload of an existing row."""
        values: dict[str, str] = {}
        if value is not None:
            values["value"] = value
        if autoload is not None:
            values["autoload"] = autoload
        if not values:
            return False
        try:
            with self.session_factory() as session:
                result = session.execute(
                    sa_update(GlobalOption).where(GlobalOption.name == name).values(**values)
                )
                session.commit()
                return bool(result.rowcount)
        except SQLAlchemyError:
            logger.warning("Update failed", extra={"option": name}, exc_info=True)
            return False

    def delete(self, name: str) -> bool:
        """Delete a row by option name."""
        try:
            with self.session_factory() as session:
                result = session.execute(sa_delete(GlobalOption).where(GlobalOption.name == name))
                session.commit()
                return bool(result.rowcount)
        except SQLAlchemyError:
            logger.warning("Delete failed", extra={"option": name}, exc_info=True)
            return False

    def scan(self, query: OptionQuery) -> list[OptionRow]:
        """List rows matching the query, ordered by id."""
        statement = select(GlobalOption)
        if query.search:
            statement = statement.where(GlobalOption.name.like(glob_to_like(query.search), escape=LIKE_ESCAPE))
        if query.exclude:
            statement = statement.where(
                GlobalOption.name.not_like(glob_to_like(query.exclude), escape=LIKE_ESCAPE)
            )
        if query.autoload == "on":
            statement = statement.where(GlobalOption.autoload == AUTOLOAD_YES)
        elif query.autoload == "off":
            statement = statement.where(GlobalOption.autoload == AUTOLOAD_NO)
        transient_like = esc_like(TRANSIENT_PREFIX) + "%"
        if query.transients is True:
            statement = statement.where(GlobalOption.name.like(transient_like, escape=LIKE_ESCAPE))
        elif query.transients is False:
            statement = statement.where(GlobalOption.name.not_like(transient_like, escape=LIKE_ESCAPE))
        statement = statement.order_by(GlobalOption.id)  # type: ignore[arg-type]
        with self.session_factory() as session:
            return [_to_row(obj) for obj in session.exec(statement).all()]

    def load_autoloaded(self) -> dict[str, str]:
        """Return every autoloaded option, or all options when none are autoloaded."""
        with self.session_factory() as session:
            rows = session.exec(
                select(GlobalOption.name, GlobalOption.value)
                .where(GlobalOption.autoload == AUTOLOAD_YES)
                .order_by(GlobalOption.id)  # type: ignore[arg-type]
            ).all()
            if not rows:
                rows = session.exec(
                    select(GlobalOption.name, GlobalOption.value).order_by(GlobalOption.id)  # type: ignore[arg-type]
                ).all()
            return {name: value for name, value in rows}


__all__ = ["SQLModelOptionRepository", "esc_like", "glob_to_like"]
