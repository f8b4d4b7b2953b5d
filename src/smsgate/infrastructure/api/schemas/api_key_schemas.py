"""Request and response bodies for the caller's own API keys."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class APIKeyCreateRequest(BaseModel):
    name: str = Field("default", min_length=1, max_length=100, description="Label for the key")


class APIKeyResponse(BaseModel):
    """Stored key metadata. Only the lookup prefix of the secret is exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    key_prefix: str = Field(..., description="First characters of the key, used for lookup")
    created_at: datetime
    last_used_at: datetime | None = Field(None, description="Last successful authentication")
    revoked_at: datetime | None = Field(None, description="Set once the key is revoked")


class APIKeyCreateResponse(APIKeyResponse):
    key: str = Field(..., description="The plaintext key. It cannot be retrieved again")
