import logging

from celery import group, shared_task
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


@shared_task
def send_email_task(subject=None, html_message=None, from_email=None, recipient_list=None):
    sent = send_mail(
        subject=subject,
        message=strip_tags(html_message or ""),
        from_email=from_email,
        recipient_list=recipient_list,
        html_message=html_message,
    )
    logger.info(f"[EMAIL] '{subject}' sent to {', '.join(recipient_list or [])}")
    return sent


def email_signature(template_name, context, subject, recipients):
    html = render_to_string(f"notifications/{template_name}", context)
    return send_email_task.s(subject=subject, html_message=html, recipient_list=list(recipients))


def dispatch_emails(signatures):
    """Queue the prepared email tasks as one celery group."""
    if not signatures:
        return 0
    job = group(signatures)
    job.apply_async()
    logger.info(f"[NOTIFY] Queued {len(signatures)} emails")
    return len(signatures)
