# app/schemas/email.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class OutboundEmail(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender: str = Field(..., alias="from")
    to: List[str]
    subject: str
    html: str
    reply_to: Optional[str] = None

    def to_provider(self) -> dict:
        """Corps JSON attendu par l'API Resend (POST /emails)."""
        return self.model_dump(by_alias=True, exclude_none=True)
