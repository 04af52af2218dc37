"""Backup and account Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(_WireModel):
    """Registration of a hashed username."""

    user_id: str = Field(..., alias="userId", description="SHA-256 hex of the username")


class RegisterResponse(_WireModel):
    success: bool = True


class StoreBackupRequest(_WireModel):
    """Signed upload of an encrypted envelope."""

    user_id: str = Field(..., alias="userId", description="SHA-256 hex of the username")
    storage_key: str = Field(..., alias="storageKey", description="Client-derived SHA-256 hex key")
    data: str = Field(..., description="JSON envelope carrying the ciphertext")
    signature: str = Field(..., description="Hex HMAC-SHA256 over the canonical request")
    timestamp: int = Field(..., description="Client Unix time in seconds")


class StoreBackupResponse(_WireModel):
    success: bool = True
    updated_at: str = Field(..., alias="updatedAt", description="RFC 3339 time of this write")


class RetrieveBackupResponse(_WireModel):
    data: str = Field(..., description="Envelope exactly as uploaded")
    updated_at: str = Field(..., alias="updatedAt")


class DeleteUserRequest(_WireModel):
    """Signed request to remove an identity and all its data."""

    user_id: str = Field(..., alias="userId")
    storage_key: str = Field(..., alias="storageKey", description="Proves knowledge of the client secret")
    signature: str = Field(...)
    timestamp: int = Field(...)


class DeleteUserResponse(_WireModel):
    success: bool = True
    message: str = "User and all associated data permanently deleted"
