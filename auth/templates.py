"""Verification email content."""

from dataclasses import dataclass
from html import escape
from urllib.parse import urlencode

VERIFICATION_SUBJECT = "Verify your email address"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def verification_link(frontend_url: str, token: str) -> str:
    """Link the frontend's verify-email page handles."""
    return f"{frontend_url.rstrip('/')}/verify-email?{urlencode({'token': token})}"


def render_verification_email(
    name: str, link: str, expiry_minutes: int, app_name: str
) -> RenderedEmail:
    safe_name = escape(name)
    safe_app_name = escape(app_name)
    safe_link = escape(link, quote=True)

    html = f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Verify Your Email - {safe_app_name}</title>
</head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f4f4f4;">
  <table role="presentation" style="width: 100%; border-collapse: collapse;">
    <tr>
      <td align="center" style="padding: 40px 0;">
        <table role="presentation" style="width: 600px; background-color: #ffffff; border-radius: 8px;">
          <tr>
            <td style="padding: 40px 30px;">
              <h1 style="margin: 0 0 20px 0; font-size: 24px; color: #333333;">Verify Your Email Address</h1>
              <p style="font-size: 16px; color: #666666;">Hi {safe_name},</p>
              <p style="font-size: 16px; color: #666666;">
                Thank you for signing up for {safe_app_name}! Please verify your email address by clicking the button below.
              </p>
              <p style="margin: 30px 0;">
                <a href="{safe_link}" target="_blank"
                   style="display: inline-block; padding: 12px 24px; color: #ffffff; background-color: #007bff; text-decoration: none; border-radius: 4px;">
                  Verify Email Address
                </a>
              </p>
              <p style="font-size: 14px; color: #999999;">Or copy and paste this link into your browser:</p>
              <p style="font-size: 14px; color: #007bff; word-break: break-all;">{safe_link}</p>
              <p style="font-size: 14px; color: #999999;"><strong>This link will expire in {expiry_minutes} minutes.</strong></p>
              <p style="font-size: 14px; color: #999999;">If you didn't create a {safe_app_name} account, you can safely ignore this email.</p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""

    text = f"""Hi {name},

Thank you for signing up for {app_name}! Please verify your email address by clicking the link below:

{link}

This link will expire in {expiry_minutes} minutes.

If you didn't create a {app_name} account, you can safely ignore this email.

- The {app_name} team"""

    return RenderedEmail(subject=VERIFICATION_SUBJECT, html=html, text=text)
