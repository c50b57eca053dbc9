# app/services/intake.py
import json
from typing import Any, AsyncGenerator, Dict, List, Mapping

from fastapi import Request
from starlette.formparsers import FormParser

from app.core.config import Settings
from app.schemas.submission import FormPayload, Submission

DEFAULT_NAME = "Visitor"
DEFAULT_SUBJECT = "Website Inquiry"
KNOWN_FIELDS = set(FormPayload.model_fields)

JSON_TYPES = ("application/json",)
URLENCODED_TYPE = "application/x-www-form-urlencoded"


class PayloadTooLarge(Exception):
    pass


class InvalidBody(ValueError):
    pass


async def read_body(request: Request, max_bytes: int) -> bytes:
    """Lit le flux en comptant les octets ; on s'arrête dès que la limite est dépassée."""
    chunks: List[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_bytes:
            raise PayloadTooLarge(f"more than {max_bytes} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


async def _replay(body: bytes) -> AsyncGenerator[bytes, None]:
    # le chunk vide final déclenche finalize() côté FormParser
    yield body
    yield b""


async def read_payload(request: Request, settings: Settings) -> Dict[str, Any]:
    """
    Lit le corps brut de la requête (JSON ou urlencoded selon le Content-Type).
    Un type inconnu ou un corps vide donne un dict vide : la validation
    échouera ensuite sur `email`.
    """
    body = await read_body(request, settings.MAX_BODY_BYTES)
    if not body:
        return {}

    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in JSON_TYPES or content_type.endswith("+json"):
        try:
            data = json.loads(body)
        except ValueError as e:
            raise InvalidBody("Malformed JSON body") from e
        if isinstance(data, dict):
            return data
        if isinstance(data, list):
            return {str(i): v for i, v in enumerate(data)}
        raise InvalidBody("JSON body must be an object or an array")

    if content_type == URLENCODED_TYPE and settings.ACCEPT_URLENCODED:
        form = await FormParser(request.headers, _replay(body)).parse()
        fields: Dict[str, Any] = {}
        for key, value in form.multi_items():
            # clé répétée -> liste, comme qs côté navigateur
            if key in fields:
                previous = fields[key]
                fields[key] = previous + [value] if isinstance(previous, list) else [previous, value]
            else:
                fields[key] = value
        return fields

    return {}


def normalize_fields(raw: Mapping[str, Any]) -> Dict[str, str]:
    """Name → name, Email → email… ; les valeurs non textuelles sont sérialisées en JSON."""
    out: Dict[str, str] = {}
    for key, value in (raw or {}).items():
        out[str(key).lower()] = value if isinstance(value, str) else json.dumps(
            value, separators=(",", ":"), ensure_ascii=False
        )
    return out


def compile_message(fields: Mapping[str, str]) -> str:
    lines: List[str] = [f"{key}: {value}" for key, value in fields.items()]
    return "\n".join(lines)


def _or_default(value, default: str) -> str:
    return (value or "").strip() or default


def build_submission(raw: Mapping[str, Any]) -> Submission:
    """
    Normalise puis valide le corps reçu.
    Lève pydantic.ValidationError si `email` manque ou si une borne est dépassée.
    """
    fields = normalize_fields(raw)
    payload = FormPayload.model_validate(fields)

    message = (payload.message or "").strip() or compile_message(fields)

    return Submission(
        name=_or_default(payload.name, DEFAULT_NAME),
        email=payload.email,
        subject=_or_default(payload.subject, DEFAULT_SUBJECT),
        message=message,
        page=payload.page,
        location=payload.location,
        extras={k: v for k, v in fields.items() if k not in KNOWN_FIELDS},
    )
