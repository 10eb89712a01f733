# Email service module: SMTP delivery, retry loop and the background send pool
import logging
import smtplib
import ssl
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait as wait_futures
from email.mime.text import MIMEText
from flask import current_app
from . import email_templates

logger = logging.getLogger(__name__)


def smtp_transport(settings, to, subject, body):
    """Send one plain-text message over SMTP. Raises on any failure."""
    msg = MIMEText(body, 'plain', 'utf-8')
    msg['Subject'] = subject
    msg['From'] = settings['sender']
    msg['To'] = to

    if settings['port'] == 465:
        server = smtplib.SMTP_SSL(settings['host'], settings['port'], context=ssl.create_default_context(), timeout=30)
    else:
        server = smtplib.SMTP(settings['host'], settings['port'], timeout=30)
        if settings['use_tls']:
            server.starttls(context=ssl.create_default_context())
    try:
        if settings['username']:
            server.login(settings['username'], settings['password'])
        server.sendmail(settings['sender'], [to], msg.as_string())
    finally:
        server.quit()


def send_email_with_retry(to, subject, body, max_attempts=3, transport=None, base_delay=1.0, sleep=time.sleep):
    """Try ``transport`` up to ``max_attempts`` times with a linear backoff.

    Waits ``attempt * base_delay`` seconds between attempts. Never raises:
    returns True once a send succeeds and False after giving up. Without a
    ``transport`` the current app's configured one is used.
    """
    if transport is None:
        transport = get_dispatcher().transport
    logger.info(f"📧 Attempting to send email to: {to} | Subject: {subject}")
    for attempt in range(1, max_attempts + 1):
        try:
            transport(to, subject, body)
            logger.info(f"✅ Email sent successfully to {to} on attempt {attempt}/{max_attempts}")
            return True
        except Exception as e:
            logger.error(f"❌ Failed to send email to {to} on attempt {attempt}/{max_attempts}: {e}")
            if attempt < max_attempts:
                wait_seconds = attempt * base_delay
                logger.info(f"⏳ Waiting {wait_seconds}s before retry {attempt + 1} for email to {to}")
                sleep(wait_seconds)
    logger.error(f"💥 Failed to send email to {to} after {max_attempts} attempts - giving up")
    return False


class EmailDispatcher:
    """Bounded pool of background email senders.

    ``submit`` returns a Future resolving to the bool from
    ``send_email_with_retry``. Outcome counters and the pending set are
    kept for the reminder status endpoint and for graceful shutdown.
    """

    def __init__(self, transport, max_workers=4, max_attempts=3, base_delay=1.0):
        self.transport = transport
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.outbox = []
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='email-sender')
        self._lock = threading.Lock()
        self._pending = set()
        self._stats = {'queued': 0, 'sent': 0, 'failed': 0}
        self._closed = False

    @classmethod
    def from_config(cls, config):
        dispatcher = cls(
            transport=None,
            max_workers=config.get('MAIL_MAX_WORKERS', 4),
            max_attempts=config.get('MAIL_MAX_ATTEMPTS', 3),
            base_delay=config.get('MAIL_RETRY_BASE_DELAY', 1.0)
        )
        if config.get('MAIL_SUPPRESS_SEND'):
            dispatcher.transport = dispatcher.record
        else:
            settings = {
                'host': config['MAIL_SERVER'],
                'port': config['MAIL_PORT'],
                'username': config.get('MAIL_USERNAME'),
                'password': config.get('MAIL_PASSWORD'),
                'use_tls': config.get('MAIL_USE_TLS', True),
                'sender': config['MAIL_DEFAULT_SENDER']
            }
            dispatcher.transport = lambda to, subject, body: smtp_transport(settings, to, subject, body)
        return dispatcher

    def record(self, to, subject, body):
        """Transport used when sending is suppressed: keeps the message in ``outbox``."""
        logger.info(f"📭 Mail sending suppressed, recorded message to {to} | Subject: {subject}")
        with self._lock:
            self.outbox.append({'to': to, 'subject': subject, 'body': body})

    def _deliver(self, to, subject, body):
        return self.transport(to, subject, body)

    def _run(self, to, subject, body):
        sent = send_email_with_retry(to, subject, body, self.max_attempts, self._deliver, self.base_delay)
        with self._lock:
            self._stats['sent' if sent else 'failed'] += 1
        return sent

    def submit(self, to, subject, body):
        future = self._executor.submit(self._run, to, subject, body)
        with self._lock:
            self._stats['queued'] += 1
            self._pending.add(future)
        future.add_done_callback(self._on_done)
        return future

    def _on_done(self, future):
        with self._lock:
            self._pending.discard(future)

    def pending(self):
        with self._lock:
            return len(self._pending)

    def snapshot(self):
        with self._lock:
            stats = dict(self._stats)
            stats['pending'] = len(self._pending)
        stats['closed'] = self._closed
        return stats

    def wait(self, timeout=None):
        """Block until every queued email has finished. Returns True if none is left pending."""
        with self._lock:
            futures = list(self._pending)
        done, not_done = wait_futures(futures, timeout=timeout)
        return not not_done

    def shutdown(self, wait=True):
        if self._closed:
            return
        self._closed = True
        logger.info(f"Shutting down email dispatcher with {self.pending()} pending message(s)")
        self._executor.shutdown(wait=wait)


def get_dispatcher():
    return current_app.extensions['email_dispatcher']


def _clinic():
    return email_templates.clinic_from_config(current_app.config)


def _queue(kind, to, subject, body, appointment_id):
    future = get_dispatcher().submit(to, subject, body)
    logger.info(f"📧 {kind} email queued for sending to {to} for appointment ID: {appointment_id}")
    return future


def send_owner_confirmation(data):
    subject, body = email_templates.owner_confirmation(
        data, data.owner_name, data.veterinarian_name, data.pet_name, _clinic())
    return _queue('Owner confirmation', data.owner_email, subject, body, data.appointment_id)


def send_vet_confirmation(data):
    subject, body = email_templates.vet_confirmation(
        data, data.veterinarian_name, data.owner_name, data.pet_name, _clinic())
    return _queue('Veterinarian confirmation', data.veterinarian_email, subject, body, data.appointment_id)


def send_owner_reminder(data):
    subject, body = email_templates.owner_reminder(
        data, data.owner_name, data.veterinarian_name, data.pet_name, _clinic())
    return _queue('Owner reminder', data.owner_email, subject, body, data.appointment_id)


def send_vet_reminder(data):
    subject, body = email_templates.vet_reminder(
        data, data.veterinarian_name, data.owner_name, data.pet_name, _clinic())
    return _queue('Veterinarian reminder', data.veterinarian_email, subject, body, data.appointment_id)


def send_message_reply(to, sender_name, original_subject, reply_content):
    subject, body = email_templates.message_reply(original_subject, sender_name, reply_content, _clinic())
    future = get_dispatcher().submit(to, subject, body)
    logger.info(f"📧 Reply email queued for sending to {to}")
    return future
