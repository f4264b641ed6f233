"""Welcome message rendering.

Every interpolated value is HTML-escaped; guardian and student names come
straight from a public registration form.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Final

WELCOME_SUBJECT: Final[str] = "🎉 Registration Approved - Your EduDash Pro Account is Ready!"
FALLBACK_SCHOOL_NAME: Final[str] = "Your School"


@dataclass(frozen=True, slots=True)
class WelcomeMessage:
    guardian_name: str
    student_name: str
    school_name: str
    email: str
    one_time_password: str
    reset_link: str
    login_url: str
    trial_days: int


def _credentials_section(message: WelcomeMessage) -> str:
    return (
        "<div class=\"credentials\">"
        "<p><strong>Your login credentials</strong></p>"
        f"<p><strong>Email:</strong> {escape(message.email)}</p>"
        "<p><strong>Temporary Password:</strong></p>"
        f"<code>{escape(message.one_time_password)}</code>"
        "<p>You can log in immediately with these credentials, "
        "then change your password to something memorable.</p>"
        "</div>"
    )


def render_welcome_html(message: WelcomeMessage) -> str:
    school = escape(message.school_name or FALLBACK_SCHOOL_NAME)
    login_url = escape(message.login_url, quote=True)
    return "\n".join(
        [
            "<!DOCTYPE html>",
            "<html>",
            '<head><meta name="viewport" content="width=device-width, initial-scale=1.0"></head>',
            "<body>",
            "<h1>🎉 Registration Approved!</h1>",
            f"<p>Dear {escape(message.guardian_name)},</p>",
            f"<p>Great news! <strong>{escape(message.student_name)}'s</strong> registration at "
            f"<strong>{school}</strong> has been approved! We've created your parent account "
            f"with a <strong>{message.trial_days}-day Premium trial</strong>.</p>",
            _credentials_section(message),
            f'<p><a href="{escape(message.reset_link, quote=True)}">Set Your Password</a></p>',
            "<h3>What's Next?</h3>",
            "<ul>",
            f'<li><strong>Login Now:</strong> <a href="{login_url}">{login_url}</a></li>',
            "<li><strong>Change Password:</strong> use the Set Your Password link "
            "or your profile settings</li>",
            "<li><strong>Explore Dashboard:</strong> view your child's progress, attendance "
            "and messages from teachers</li>",
            "</ul>",
            "<p>Best regards,<br><strong>The EduDash Pro Team</strong></p>",
            "</body>",
            "</html>",
        ]
    )
