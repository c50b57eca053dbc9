# app/api/form.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.core.config import Settings
from app.core.deps import get_app_settings, get_mailer
from app.core.logging import logger
from app.core.security import payload_too_large
from app.schemas.submission import SubmitResult
from app.services.intake import InvalidBody, PayloadTooLarge, build_submission, read_payload
from app.services.mailer import EmailSender, MailerError
from app.services.notifications import dispatch_submission
from app.utils.validation import flatten_errors

router = APIRouter()


@router.post("/submit", response_model=SubmitResult)
async def submit_form(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    mailer: EmailSender = Depends(get_mailer),
):
    try:
        raw = await read_payload(request, settings)
    except PayloadTooLarge:
        return payload_too_large()
    except InvalidBody as e:
        logger.info("Invalid body", reason=str(e))
        return JSONResponse(status_code=400, content={"ok": False, "error": "InvalidBody"})

    logger.debug("Incoming body", content_type=request.headers.get("content-type"), fields=sorted(raw))

    try:
        submission = build_submission(raw)
    except ValidationError as e:
        details = flatten_errors(e)
        logger.info("Validation failed", fields=sorted(details["fieldErrors"]))
        return JSONResponse(
            status_code=400,
            content={"ok": False, "error": "ValidationError", "details": details},
        )

    try:
        await dispatch_submission(submission, settings, mailer)
    except MailerError as e:
        logger.exception(
            "ServerError",
            subject=submission.subject,
            provider_status=e.status_code,
            provider_response=e.body,
        )
        return server_error()
    except Exception:
        logger.exception("ServerError", subject=submission.subject)
        return server_error()

    return JSONResponse(content={"ok": True})


def server_error() -> JSONResponse:
    return JSONResponse(status_code=500, content={"ok": False, "error": "ServerError"})
