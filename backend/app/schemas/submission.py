# app/schemas/submission.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Dict, Optional


class FormPayload(BaseModel):
    """Schéma ouvert : les champs connus sont validés, les autres sont conservés."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    email: EmailStr
    subject: Optional[str] = Field(None, max_length=160)
    message: Optional[str] = Field(None, max_length=5000)
    page: Optional[str] = None
    location: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def reject_display_name(cls, v):
        # EmailStr accepte "Jo <jo@x.com>" et garde l'adresse ; on veut l'adresse seule
        if isinstance(v, str) and ("<" in v or ">" in v):
            raise ValueError("Invalid email: display names are not accepted")
        return v


class Submission(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    subject: str
    message: str
    page: Optional[str] = None
    location: Optional[str] = None
    extras: Dict[str, str] = Field(default_factory=dict)


class SubmitResult(BaseModel):
    ok: bool
    error: Optional[str] = None


class HealthOut(BaseModel):
    ok: bool = True
    ts: int
