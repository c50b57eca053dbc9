# app/services/notifications.py
from app.core.config import Settings
from app.schemas.email import OutboundEmail
from app.schemas.submission import Submission
from app.services.mailer import EmailSender
from app.utils.formatting import escape_html, nl_to_br

FONT_STACK = "font-family:system-ui,Segoe UI,Arial,sans-serif"


class MailConfigError(RuntimeError):
    pass


def render_owner_html(submission: Submission) -> str:
    location = f"<p><b>Location:</b> {escape_html(submission.location)}</p>" if submission.location else ""
    page = f"<p><b>Page:</b> {escape_html(submission.page)}</p>" if submission.page else ""
    return f"""
      <div style="{FONT_STACK}">
        <h2>New form submission</h2>
        <p><b>Name:</b> {escape_html(submission.name)}</p>
        <p><b>Email:</b> {escape_html(submission.email)}</p>
        {location}
        {page}
        <p><b>Subject:</b> {escape_html(submission.subject)}</p>
        <p><b>Message / Fields:</b><br/>{nl_to_br(escape_html(submission.message))}</p>
      </div>"""


def render_autoreply_html(submission: Submission) -> str:
    # <pre> conserve les retours à la ligne, pas de <br/>
    return f"""
      <div style="{FONT_STACK}">
        <p>Hi {escape_html(submission.name)},</p>
        <p>Thanks for reaching out. We received your submission and will get back to you shortly.</p>
        <hr>
        <p><b>Your submission</b></p>
        <pre style="white-space:pre-wrap">{escape_html(submission.message)}</pre>
        <p>— Team</p>
      </div>"""


def build_owner_email(submission: Submission, settings: Settings) -> OutboundEmail:
    return OutboundEmail(
        sender=settings.MAIL_FROM,
        to=[settings.MAIL_TO],
        reply_to=submission.email,
        subject=f"📝 New form submission: {submission.subject}",
        html=render_owner_html(submission),
    )


def build_autoreply_email(submission: Submission, settings: Settings) -> OutboundEmail:
    return OutboundEmail(
        sender=settings.MAIL_FROM,
        to=[submission.email],
        subject=f"We got your message: {submission.subject}",
        html=render_autoreply_html(submission),
    )


async def dispatch_submission(submission: Submission, settings: Settings, mailer: EmailSender) -> None:
    """
    Notifie le propriétaire puis envoie l'accusé de réception.
    Strictement séquentiel : si le premier envoi échoue, le second n'est pas tenté.
    """
    missing = settings.missing_mail_settings()
    if missing:
        raise MailConfigError(f"Mail configuration incomplete: {', '.join(missing)}")

    await mailer.send(build_owner_email(submission, settings))
    await mailer.send(build_autoreply_email(submission, settings))
