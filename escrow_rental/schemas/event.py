from datetime import datetime
from typing import Any
from pydantic import BaseModel, ConfigDict


class RentalEvent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    kind: str
    item_id: int
    payload: dict[str, Any]
    created_at: datetime
