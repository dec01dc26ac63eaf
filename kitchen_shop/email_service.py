"""
Email service for order and enquiry notifications.

Sends real emails via SMTP when configured, falls back to logging in mock mode.

Environment variables:
- SMTP_HOST: SMTP server hostname (e.g., smtp.gmail.com)
- SMTP_PORT: SMTP server port (default: 587 for TLS)
- SMTP_USERNAME: SMTP authentication username
- SMTP_PASSWORD: SMTP authentication password
- SMTP_FROM_EMAIL: Sender email address
- SALES_NOTIFICATION_EMAIL: Where contact form enquiries are sent
"""

import html
import logging
import os
import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Any, Optional

from .config import SALES_NOTIFICATION_EMAIL, SHOP_NAME

logger = logging.getLogger(__name__)

# SMTP configuration from environment
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")

SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "hello@kitchen-os.com")
SHOP_URL = os.getenv("SHOP_URL", "https://kitchen-os.com/shop")


def is_email_configured() -> bool:
    """Check if SMTP is properly configured."""
    return all([SMTP_HOST, SMTP_USERNAME, SMTP_PASSWORD, SMTP_FROM_EMAIL])


def send_email(
    to_email: str,
    subject: str,
    body_text: str,
    body_html: Optional[str] = None,
) -> dict:
    """
    Send an email, or log it when SMTP is not configured.

    Args:
        to_email: Recipient address
        subject: Subject line
        body_text: Plain text body
        body_html: Optional HTML alternative

    Returns:
        dict with status ("sent" or "error"), to_email, subject and mock flag
    """
    if not is_email_configured():
        # Mock mode - just log the email
        logger.info(
            "MOCK EMAIL: Subject: %s | Body: %s",
            subject,
            body_text[:200] + "..."
        )
        return {
            "status": "sent",
            "to_email": to_email,
            "subject": subject,
            "mock": True,
            "message": "Email logged (SMTP not configured)",
        }

    try:
        if body_html:
            msg = MIMEMultipart("alternative")
            msg.attach(MIMEText(body_text, "plain"))
            msg.attach(MIMEText(body_html, "html"))
        else:
            msg = MIMEText(body_text, "plain")
        msg["Subject"] = subject
        msg["From"] = SMTP_FROM_EMAIL
        msg["To"] = to_email

        # Connect and send with secure SSL context
        context = ssl.create_default_context()
        with smtplib.SMTP(SMTP_HOST, SMTP_PORT) as server:
            server.starttls(context=context)
            server.login(SMTP_USERNAME, SMTP_PASSWORD)
            server.sendmail(SMTP_FROM_EMAIL, to_email, msg.as_string())

        logger.info("Email sent: %s", subject)

        return {
            "status": "sent",
            "to_email": to_email,
            "subject": subject,
            "mock": False,
            "message": "Email sent successfully",
        }

    except (smtplib.SMTPException, OSError) as e:
        logger.error("Failed to send email '%s': %s", subject, str(e))
        return {
            "status": "error",
            "to_email": to_email,
            "subject": subject,
            "error": str(e),
            "mock": False,
            "message": f"Failed to send email: {str(e)}",
        }


def _money(value: Any) -> str:
    return f"£{float(value or 0):.2f}"


def send_order_confirmation_email(order: Any) -> dict:
    """
    Send the "order received" email right after checkout.

    Args:
        order: Saved Order (ORM object) with items loaded

    Returns:
        dict with status
    """
    subject = f"Order Received - {SHOP_NAME} {order.order_number}"

    items_text = ""
    items_html = ""
    for item in order.items:
        items_text += f"  {item.quantity}x {item.product_name} ({item.variant_name}) - {_money(item.line_total)}\n"
        items_html += (
            f"<tr><td style='padding: 8px; border-bottom: 1px solid #eee;'>{item.quantity}x {html.escape(item.product_name)}</td>"
            f"<td style='padding: 8px; border-bottom: 1px solid #eee; color: #666;'>{html.escape(item.variant_name)}</td>"
            f"<td style='padding: 8px; border-bottom: 1px solid #eee; text-align: right;'>{_money(item.line_total)}</td></tr>"
        )

    tax_label = "VAT (20%)" if float(order.tax or 0) > 0 else "VAT"
    shipping_label = "FREE" if float(order.shipping_cost or 0) == 0 else _money(order.shipping_cost)

    totals_text = (
        f"\nSubtotal: {_money(order.subtotal)}\n"
        f"Shipping: {shipping_label}\n"
        f"{tax_label}: {_money(order.tax)}\n"
        f"Total: {_money(order.total)}\n"
    )

    body_text = f"""Hi {order.customer_name},

Thank you for your order with {SHOP_NAME}!

Order Number: {order.order_number}

Items:
{items_text}{totals_text}
We'll email you again as soon as your payment is confirmed.

Thanks,
{SHOP_NAME}
"""

    body_html = f"""
<html>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
<p>Hi {html.escape(order.customer_name)},</p>
<p>Thank you for your order with <strong>{SHOP_NAME}</strong>!</p>
<p><strong>Order Number:</strong> {order.order_number}</p>
<table style='border-collapse: collapse; width: 100%; max-width: 500px; border: 1px solid #eee;'>
{items_html}
<tr><td colspan='2' style='padding: 8px; text-align: right; border-top: 1px solid #ddd;'>Subtotal:</td><td style='padding: 8px; text-align: right; border-top: 1px solid #ddd;'>{_money(order.subtotal)}</td></tr>
<tr><td colspan='2' style='padding: 8px; text-align: right;'>Shipping:</td><td style='padding: 8px; text-align: right;'>{shipping_label}</td></tr>
<tr><td colspan='2' style='padding: 8px; text-align: right;'>{tax_label}:</td><td style='padding: 8px; text-align: right;'>{_money(order.tax)}</td></tr>
<tr style='background: #f9f9f9;'><td colspan='2' style='padding: 8px; text-align: right;'><strong>Total:</strong></td><td style='padding: 8px; text-align: right;'><strong>{_money(order.total)}</strong></td></tr>
</table>
<p>We'll email you again as soon as your payment is confirmed.</p>
<p>Thanks,<br><strong>{SHOP_NAME}</strong></p>
</body>
</html>
"""

    return send_email(order.customer_email, subject, body_text, body_html)


def send_payment_confirmation_email(order: Any, payment_method: Optional[str] = None) -> dict:
    """Send the "payment confirmed" email after a completed payment."""
    method = payment_method or order.payment_method or "Card"
    subject = f"Payment Confirmed - Order {order.order_number}"

    body_text = f"""Payment Confirmed!

Thank you for your payment. Your order is being processed.

Order Number: {order.order_number}
Amount Paid: {_money(order.total)}
Payment Method: {method}

We'll send you another email with tracking information once your order ships.

Questions? Reply to this email or contact us at {SUPPORT_EMAIL}
"""

    body_html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1 style="color: #00B589;">Payment Confirmed!</h1>
  <p>Thank you for your payment. Your order is being processed.</p>
  <div style="background: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <h2 style="margin-top: 0;">Order Details</h2>
    <p><strong>Order Number:</strong> {order.order_number}</p>
    <p><strong>Amount Paid:</strong> {_money(order.total)}</p>
    <p><strong>Payment Method:</strong> {html.escape(method)}</p>
  </div>
  <p>We'll send you another email with tracking information once your order ships.</p>
  <p style="color: #666; font-size: 14px; margin-top: 30px;">
    Questions? Reply to this email or contact us at {SUPPORT_EMAIL}
  </p>
</div>
"""

    return send_email(order.customer_email, subject, body_text, body_html)


def send_order_cancelled_email(order: Any) -> dict:
    """Tell the customer their order was cancelled."""
    subject = f"Order Cancelled - {order.order_number}"
    body_text = (
        f"Your order {order.order_number} has been cancelled.\n\n"
        f"If you didn't request this cancellation or have questions, "
        f"please contact us at {SUPPORT_EMAIL}\n"
    )
    return send_email(order.customer_email, subject, body_text)


def send_payment_failed_email(order: Any) -> dict:
    """Tell the customer their payment did not go through."""
    subject = f"Payment Issue - Order {order.order_number}"
    body_text = f"""We were unable to process your payment for order {order.order_number}.

Common reasons include:
  - Insufficient funds
  - Card declined by bank
  - Incorrect card details

You can try again at {SHOP_URL}

Need help? Contact us at {SUPPORT_EMAIL}
"""
    return send_email(order.customer_email, subject, body_text)


def send_contact_notification_email(submission: Any) -> dict:
    """
    Forward a contact form enquiry to the sales inbox.

    Skipped (status "skipped") when SALES_NOTIFICATION_EMAIL is not set.
    """
    if not SALES_NOTIFICATION_EMAIL:
        logger.debug("SALES_NOTIFICATION_EMAIL not set, skipping contact notification")
        return {"status": "skipped", "mock": True, "message": "No sales inbox configured"}

    subject = f"New enquiry from {submission.name}"
    if submission.company:
        subject += f" ({submission.company})"

    sites = submission.number_of_sites if submission.number_of_sites is not None else "-"
    body_text = f"""New contact form submission

Name: {submission.name}
Email: {submission.email}
Phone: {submission.phone or "-"}
Company: {submission.company or "-"}
Number of sites: {sites}
Interested in: {submission.product_interest or "-"}

Message:
{submission.message}
"""
    return send_email(SALES_NOTIFICATION_EMAIL, subject, body_text)
