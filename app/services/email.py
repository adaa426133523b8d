import os
import logging
from typing import Optional, Tuple
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, To, From, Subject, HtmlContent, PlainTextContent
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.core.settings import settings
from app.services import audit
from app.utils.datetime import utc_now

logger = logging.getLogger("app.email")

SENDER_NAME = "Reform Agenda"


def strftime_filter(value, format='%Y'):
    """Custom Jinja2 filter for strftime formatting."""
    if isinstance(value, str) and value == 'now':
        return utc_now().strftime(format)
    return value


def get_email_template_env():
    """Get Jinja2 environment for email templates."""
    template_dir = os.path.join(os.path.dirname(__file__), '../templates/email')
    env = Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(['html', 'xml'])
    )
    env.filters['strftime'] = strftime_filter
    return env


def get_sendgrid_client():
    """Get SendGrid client if configured and log diagnostics (without leaking key)."""
    api_key = os.getenv("SENDGRID_API_KEY")
    if not api_key:
        logger.warning("[email] SENDGRID_API_KEY missing from environment")
        return None
    logger.debug(f"[email] SendGrid key loaded (length={len(api_key)})")
    if api_key.startswith("your_"):
        logger.warning("[email] SENDGRID_API_KEY appears to be a placeholder (starts with 'your_')")
        return None
    try:
        return SendGridAPIClient(api_key)
    except Exception as e:
        logger.error(f"[email] Failed to instantiate SendGrid client: {e}")
        return None


def render_suggestion_notification(author_name: str, content: str, agenda_title: str) -> Tuple[str, str]:
    """Render HTML and plain-text bodies for a new-suggestion alert."""
    plain_text = f"""
New suggestion received

Agenda: {agenda_title}
From: {author_name}

{content}

Review pending suggestions: {settings.site_url.rstrip('/')}/admin/suggestions
    """.strip()

    try:
        template = get_email_template_env().get_template('suggestion_notification.html')
        html_content = template.render(
            author_name=author_name,
            content=content,
            agenda_title=agenda_title,
            review_url=f"{settings.site_url.rstrip('/')}/admin/suggestions",
        )
        return html_content, plain_text
    except Exception as e:
        logger.error(f"Failed to render suggestion email template: {e}")
        return plain_text, plain_text


def send_email(to_email: str, subject: str, html_content: str,
               plain_content: str, from_email: Optional[str] = None) -> bool:
    """Send one email through SendGrid; False when skipped or failed."""
    diagnostics = {
        "to": to_email,
        "subject": subject,
        "from_default": settings.email_from_address,
    }
    client = get_sendgrid_client()
    if not client:
        logger.warning(f"[email] Skipping send (client unavailable) diagnostics={diagnostics}")
        return False

    from_email = from_email or settings.email_from_address
    if not from_email:
        logger.error(f"[email] No from_email resolved; aborting send diagnostics={diagnostics}")
        return False

    message = Mail(
        from_email=From(from_email, SENDER_NAME),
        to_emails=To(to_email),
        subject=Subject(subject),
        html_content=HtmlContent(html_content),
        plain_text_content=PlainTextContent(plain_content),
    )
    try:
        response = client.send(message)
        status_code = getattr(response, "status_code", None)
        if status_code is not None and status_code >= 400:
            logger.error(f"[email] SendGrid rejected message status={status_code} diagnostics={diagnostics}")
            return False
        logger.info(f"[email] Sent '{subject}' to {to_email} status={status_code}")
        return True
    except Exception as e:
        logger.error(f"[email] Send failed: {e} diagnostics={diagnostics}")
        return False


def send_suggestion_notification(author_name: str, content: str, agenda_title: str) -> bool:
    """Notify the configured admin inboxes about a new suggestion."""
    recipients = settings.admin_notification_emails
    if not recipients:
        logger.info("[email] No ADMIN_NOTIFICATION_EMAILS configured; suggestion notification skipped")
        audit.log_email_send("suggestion", recipients=0, sent=False)
        return False

    html_content, plain_content = render_suggestion_notification(author_name, content, agenda_title)
    subject = f"[Suggestion] {agenda_title} - {author_name}"
    results = [send_email(to, subject, html_content, plain_content) for to in recipients]
    sent = any(results)
    audit.log_email_send("suggestion", recipients=len(recipients), sent=sent, agenda_title=agenda_title)
    return sent


def notify_suggestion_in_background(author_name: str, content: str, agenda_title: str) -> None:
    """Background-task entry point; failures are logged and never propagate."""
    try:
        if not send_suggestion_notification(author_name, content, agenda_title):
            logger.warning(f"[email] Suggestion notification not delivered for '{agenda_title}'")
    except Exception as e:
        logger.error(f"Failed to send suggestion notification: {e}", exc_info=True)
