from datetime import datetime
from pydantic import BaseModel, ConfigDict


class Identity(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: str
    verified: bool
    credential_token_id: int | None = None
    verified_at: datetime | None = None


class VerificationStatus(BaseModel):
    address: str
    verified: bool
