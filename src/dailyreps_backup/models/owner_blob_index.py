# src/dailyreps_backup/models/owner_blob_index.py
"""Owner to storage-key mapping used by cascade deletion."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from dailyreps_backup.db.session import Base
from dailyreps_backup.models.identity import IDENTIFIER_LENGTH


class OwnerBlobIndex(Base):
    """Row existence means `storage_key` belongs to `owner_id`."""

    __tablename__ = "owner_blob_index"

    owner_id: Mapped[str] = mapped_column(String(IDENTIFIER_LENGTH), primary_key=True)
    storage_key: Mapped[str] = mapped_column(String(IDENTIFIER_LENGTH), primary_key=True)
