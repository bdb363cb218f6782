"""
Outbound email.

Transport settings are resolved once from the app config into an
``EmailSettings`` value and handed to a ``Mailer``; nothing reads SMTP
credentials from the environment at send time. With no provider configured
the mailer logs what it would have sent.
"""
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from flask import current_app

EXTENSION_KEY = "simoly.mailer"

PROVIDER_GMAIL = "gmail"
PROVIDER_BREVO = "brevo"
PROVIDER_NONE = "none"

_SMTP_HOSTS = {
    PROVIDER_GMAIL: ("smtp.gmail.com", 587),
    PROVIDER_BREVO: ("smtp-relay.brevo.com", 587),
}


@dataclass(frozen=True)
class EmailSettings:
    provider: str = PROVIDER_NONE
    username: str | None = None
    password: str | None = None
    sender: str | None = None
    timeout: float = 10.0

    @classmethod
    def from_config(cls, config) -> "EmailSettings":
        timeout = config.get("MAIL_TIMEOUT", 10.0)
        if config.get("GMAIL_EMAIL") and config.get("GMAIL_APP_PASSWORD"):
            return cls(
                provider=PROVIDER_GMAIL,
                username=config["GMAIL_EMAIL"],
                password=config["GMAIL_APP_PASSWORD"],
                sender=config["GMAIL_EMAIL"],
                timeout=timeout,
            )
        if config.get("BREVO_EMAIL") and config.get("BREVO_API_KEY"):
            return cls(
                provider=PROVIDER_BREVO,
                username=config["BREVO_EMAIL"],
                password=config["BREVO_API_KEY"],
                sender=config["BREVO_EMAIL"],
                timeout=timeout,
            )
        return cls(timeout=timeout)

    @property
    def enabled(self) -> bool:
        return self.provider in _SMTP_HOSTS

    @property
    def host(self) -> str | None:
        return _SMTP_HOSTS.get(self.provider, (None, None))[0]

    @property
    def port(self) -> int | None:
        return _SMTP_HOSTS.get(self.provider, (None, None))[1]


class Mailer:
    def __init__(self, settings: EmailSettings, logger: logging.Logger | None = None):
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)

    def send(self, to: str, subject: str, body: str) -> bool:
        """Send a plain-text message. Returns False on transport failure, never raises."""
        if not self.settings.enabled:
            self.logger.info("Email not configured, would send %r to %s", subject, to)
            self.logger.debug("Email body:\n%s", body)
            return True

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.sender
        msg["To"] = to
        msg.set_content(body)

        try:
            with smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.settings.timeout) as smtp:
                smtp.starttls()
                smtp.login(self.settings.username, self.settings.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError):
            self.logger.exception("Failed to send %r to %s via %s", subject, to, self.settings.provider)
            return False

        self.logger.info("Email %r sent to %s via %s", subject, to, self.settings.provider)
        return True

    def send_welcome(self, profile, plan=None) -> bool:
        plan_name = plan.name if plan else "Piano Selezionato"
        subject = f"Benvenuto in SimolyAI - {plan_name}!"
        lines = [
            f"Ciao {profile.first_name} {profile.last_name},",
            "",
            "il tuo account SimolyAI è stato creato con successo.",
        ]
        if plan:
            price = "Gratuito" if plan.is_free else f"€{plan.price / 100:.2f}"
            lines.append(f"Piano: {plan.name} ({price})")
        lines += ["", "Il team SimolyAI"]
        return self.send(profile.email, subject, "\n".join(lines))


def init_mail(app):
    settings = EmailSettings.from_config(app.config)
    app.extensions[EXTENSION_KEY] = Mailer(settings, app.logger)
    app.logger.info("Email provider: %s", settings.provider)


def get_mailer() -> Mailer:
    return current_app.extensions[EXTENSION_KEY]
