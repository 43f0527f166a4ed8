# SMTP adapter for transactional email
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid

from flask import render_template

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self, host='smtp.gmail.com', port=587, username=None, password=None, from_address=None,
                 frontend_url='http://localhost:3000', timeout=30):
        self.host = host
        self.port = int(port or 587)
        self.username = username
        self.password = password
        self.from_address = from_address or username
        self.frontend_url = frontend_url
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            host=config.get('SMTP_HOST'),
            port=config.get('SMTP_PORT'),
            username=config.get('SMTP_USER'),
            password=config.get('SMTP_PASS'),
            from_address=config.get('SMTP_FROM'),
            frontend_url=config.get('FRONTEND_URL'),
        )

    @property
    def configured(self):
        return bool(self.host and self.username and self.password)

    def _connect(self):
        context = ssl.create_default_context()
        if self.port == 465:
            return smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.starttls(context=context)
        return server

    def send_email(self, to, subject, html):
        """Send one HTML message; returns a result dict instead of raising."""
        if not self.configured:
            logger.warning(f"SMTP not configured, skipping email to {to}")
            return {'success': False, 'error': 'SMTP is not configured'}

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f'"PetSched" <{self.from_address}>'
        msg['To'] = to
        msg['Message-ID'] = make_msgid(domain=self.from_address.split('@')[-1])
        msg.attach(MIMEText(html, 'html', 'utf-8'))

        try:
            server = self._connect()
            try:
                server.login(self.username, self.password)
                server.sendmail(self.from_address, [to], msg.as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email sending failed: {e}")
            return {'success': False, 'error': str(e)}

        logger.info(f"Email sent successfully: {msg['Message-ID']}")
        return {'success': True, 'message_id': msg['Message-ID']}

    def send_appointment_confirmation(self, appointment, pet, user):
        html = render_template('email/appointment_confirmation.html', appointment=appointment, pet=pet,
                               user=user, frontend_url=self.frontend_url)
        return self.send_email(user['email'], f"Appointment Confirmed - {pet['name']}", html)

    def send_appointment_reminder(self, appointment, pet, user):
        html = render_template('email/appointment_reminder.html', appointment=appointment, pet=pet,
                               user=user, frontend_url=self.frontend_url)
        return self.send_email(user['email'], f"Appointment Reminder - {pet['name']}", html)

    def send_welcome_email(self, user):
        html = render_template('email/welcome.html', user=user, frontend_url=self.frontend_url)
        return self.send_email(user['email'], 'Welcome to PetSched!', html)
