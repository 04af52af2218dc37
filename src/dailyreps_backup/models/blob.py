# src/dailyreps_backup/models/blob.py
"""Encrypted backup blobs addressed by client-derived storage keys."""

from sqlalchemy import BigInteger, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from dailyreps_backup.db.session import Base
from dailyreps_backup.models.identity import IDENTIFIER_LENGTH


class Blob(Base):
    """One stored backup envelope.

    `owner_id` references `identities.id` but carries no database-level foreign
    key; ownership is enforced by the record store inside each transaction.
    """

    __tablename__ = "blobs"

    storage_key: Mapped[str] = mapped_column(String(IDENTIFIER_LENGTH), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(IDENTIFIER_LENGTH), nullable=False, index=True)
    payload: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    @property
    def data(self) -> str:
        """Return the stored envelope as the text the client uploaded."""
        return self.payload.decode("utf-8")
