# src/dailyreps_backup/models/identity.py
"""Registered accounts, keyed by the hash of a client-chosen username."""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from dailyreps_backup.db.session import Base

IDENTIFIER_LENGTH = 64


class Identity(Base):
    """One registered account. The server never learns the username itself."""

    __tablename__ = "identities"

    id: Mapped[str] = mapped_column(String(IDENTIFIER_LENGTH), primary_key=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
