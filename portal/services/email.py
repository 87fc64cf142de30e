"""Email service for magic link delivery, via Resend or Brevo."""

from __future__ import annotations

import html
import logging

import httpx
import resend

from portal import config

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"
SUBJECT = "Votre lien magique pour vous connecter"


class EmailDeliveryError(Exception):
    """Raised when the email provider rejects or fails to send a message."""


def email_configured() -> bool:
    """Whether the selected provider has the credentials it needs."""
    if config.settings.EMAIL_PROVIDER == "brevo":
        return bool(config.settings.BREVO_API_KEY and config.settings.BREVO_FROM_EMAIL)
    return bool(config.settings.RESEND_API_KEY)


def render_magic_link_email(magic_link_url: str) -> tuple[str, str]:
    """
    Render the magic link email.

    Args:
        magic_link_url: Absolute sign-in URL

    Returns:
        (html, text) bodies
    """
    minutes = config.settings.MAGIC_LINK_EXPIRY_MINUTES
    href = html.escape(magic_link_url, quote=True)

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <title>Connexion à Net&amp;Connect</title>
        <style>
            body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ text-align: center; margin-bottom: 40px; }}
            .logo {{ color: #A4D65E; font-size: 24px; font-weight: bold; }}
            .button {{
                display: inline-block;
                background-color: #A4D65E;
                color: black;
                padding: 12px 24px;
                border-radius: 24px;
                text-decoration: none;
                font-weight: 500;
                margin: 20px 0;
            }}
            .footer {{ margin-top: 40px; font-size: 14px; color: #666; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <div class="logo">Net&amp;Connect</div>
                <h1>Connectez-vous à votre compte</h1>
            </div>
            <p>Bonjour,</p>
            <p>Vous avez demandé à vous connecter à votre compte Net&amp;Connect. Cliquez sur le bouton ci-dessous :</p>
            <div style="text-align: center;">
                <a href="{href}" class="button">Se connecter à Net&amp;Connect</a>
            </div>
            <p>Si vous n'avez pas fait cette demande, vous pouvez ignorer cet email en toute sécurité.</p>
            <p>Ce lien expirera dans {minutes} minutes.</p>
            <div class="footer">
                <p>Cordialement,<br>L'équipe Net&amp;Connect</p>
                <p><em>Si le bouton ne fonctionne pas, copiez ce lien dans votre navigateur :</em><br>
                <a href="{href}">{href}</a></p>
            </div>
        </div>
    </body>
    </html>
    """

    text_content = (
        "Connectez-vous à Net&Connect\n\n"
        "Cliquez sur le lien ci-dessous pour vous connecter :\n"
        f"{magic_link_url}\n\n"
        f"Ce lien expirera dans {minutes} minutes."
    )

    return html_content, text_content


async def _send_with_resend(email: str, html_content: str, text_content: str) -> None:
    resend.api_key = config.settings.RESEND_API_KEY
    params = {
        "from": config.settings.EMAIL_FROM,
        "to": [email],
        "subject": SUBJECT,
        "html": html_content,
        "text": text_content,
    }
    try:
        resend.Emails.send(params)
    except Exception as e:
        # The resend SDK raises its own error hierarchy and requests errors
        raise EmailDeliveryError("Resend failed to send magic link email") from e


async def _send_with_brevo(email: str, html_content: str) -> None:
    payload = {
        "sender": {"name": config.settings.BREVO_FROM_NAME, "email": config.settings.BREVO_FROM_EMAIL},
        "to": [{"email": email}],
        "subject": SUBJECT,
        "htmlContent": html_content,
    }
    headers = {"api-key": config.settings.BREVO_API_KEY, "Content-Type": "application/json"}
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.post(BREVO_API_URL, json=payload, headers=headers)
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise EmailDeliveryError("Brevo failed to send magic link email") from e


async def send_magic_link(email: str, magic_link_url: str) -> None:
    """
    Send a magic link email through the configured provider.

    Args:
        email: Recipient email address
        magic_link_url: Absolute sign-in URL to include

    Raises:
        EmailDeliveryError: If sending fails
    """
    html_content, text_content = render_magic_link_email(magic_link_url)

    if config.settings.EMAIL_PROVIDER == "brevo":
        await _send_with_brevo(email, html_content)
    else:
        await _send_with_resend(email, html_content, text_content)

    logger.info("Magic link email sent via %s", config.settings.EMAIL_PROVIDER)
