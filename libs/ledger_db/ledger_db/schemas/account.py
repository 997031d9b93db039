from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AccountResponse(BaseModel):
    id: int
    username: str
    balance_minor: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
