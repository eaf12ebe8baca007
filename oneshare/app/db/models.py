from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oneshare.app.db.base import Base


class GlobalVar(Base):
    """Key/value metadata row; the schema version lives under ``name='version'``."""

    __tablename__ = "global_vars"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    integer_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    string_value: Mapped[str | None] = mapped_column(Text, nullable=True)


class User(Base):
    """Quota owner. Zero in any limit column means "no limit"."""

    __tablename__ = "users"
    __table_args__ = (
        Index("token_index", "token", unique=True),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(String, nullable=False)
    retention_limit_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    max_size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    message_creation_limit_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    # NULL until the first message is created
    last_message_creation_timestamp: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id})>"


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        Index("message_token_index", "message_token", unique=True),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message_token: Mapped[str] = mapped_column(String, nullable=False)
    # Unix seconds; 0 means the message never expires
    expire_timestamp: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, expire_timestamp={self.expire_timestamp})>"
