"""
Report email delivery through Resend.
"""

import logging

import resend

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "Your CRO Full Report"
EMAIL_TEXT = "Thanks for your purchase! Find your PDF report attached."


class EmailDeliveryError(RuntimeError):
    """Raised when the email provider rejects or fails a send"""

    pass


def send_report_email(
    recipient: str,
    pdf_bytes: bytes,
    filename: str,
    api_key: str,
    from_email: str,
) -> str:
    """
    Email a PDF report as an attachment.

    Returns:
        Provider message id

    Raises:
        EmailDeliveryError: missing configuration or a failed send
    """
    if not api_key:
        raise EmailDeliveryError("Email service is not configured")

    resend.api_key = api_key
    params = {
        "from": from_email,
        "to": [recipient],
        "subject": EMAIL_SUBJECT,
        "text": EMAIL_TEXT,
        "attachments": [{"filename": filename, "content": list(pdf_bytes)}],
    }

    try:
        response = resend.Emails.send(params)
    except Exception as e:
        logger.error(f"❌ Report email to {recipient} failed: {e}")
        raise EmailDeliveryError(f"Email delivery failed: {e}") from e

    message_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
    if not message_id:
        raise EmailDeliveryError(f"Unexpected response from Resend: {response}")

    logger.info(f"📧 Report {filename} emailed to {recipient} ({message_id})")
    return message_id
