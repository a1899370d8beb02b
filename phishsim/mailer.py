# phishsim/mailer.py
# SMTP transport for the simulation service.
# Sends multipart/alternative messages over a small pool of reusable connections.

import logging
import smtplib
import threading
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid, formatdate
from typing import Optional

from phishsim.config import settings
from phishsim.utils import anonymize_email

logger = logging.getLogger(__name__)


@dataclass
class OutgoingMessage:
    sender: str
    to: str
    subject: str
    html: str
    text: str


@dataclass
class DeliveryResult:
    success: bool
    message_id: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None


def error_code_for(exc: Exception) -> str:
    """Map smtplib/socket exceptions to short, transport-style error codes."""
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return "EAUTH"
    if isinstance(exc, (smtplib.SMTPRecipientsRefused, smtplib.SMTPSenderRefused)):
        return "EENVELOPE"
    if isinstance(exc, (smtplib.SMTPServerDisconnected, smtplib.SMTPConnectError)):
        return "ECONNECTION"
    # SMTPException subclasses OSError, so protocol errors are matched first
    if isinstance(exc, smtplib.SMTPException):
        return "SMTP_ERROR"
    if isinstance(exc, OSError):
        return "ECONNECTION"
    return "SMTP_ERROR"


def build_mime(message: OutgoingMessage) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = message.subject
    msg["From"] = message.sender
    msg["To"] = message.to
    msg["Date"] = formatdate(localtime=False)
    msg["Message-ID"] = make_msgid()

    msg.attach(MIMEText(message.text, "plain"))
    msg.attach(MIMEText(message.html, "html"))
    return msg


class _PooledConnection:
    def __init__(self, smtp: smtplib.SMTP):
        self.smtp = smtp
        self.sent = 0


class SMTPTransport:
    """
    Pooled SMTP client.

    At most ``max_connections`` connections are open at once; callers beyond
    that wait for a free one. A connection is retired after
    ``max_messages`` messages or after any error. A pooled connection the
    server dropped while idle is replaced and the send retried once.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = False,
        max_connections: int = 5,
        max_messages: int = 100,
        timeout: float = 10,
    ):
        if max_connections < 1 or max_messages < 1:
            raise ValueError("pool bounds must be positive")
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.max_connections = max_connections
        self.max_messages = max_messages
        self.timeout = timeout

        self._slots = threading.BoundedSemaphore(max_connections)
        self._idle = []
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "SMTPTransport":
        return cls(
            host=settings.SMTP_SERVER,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            use_tls=settings.SMTP_USE_TLS,
            max_connections=settings.SMTP_MAX_CONNECTIONS,
            max_messages=settings.SMTP_MAX_MESSAGES,
            timeout=settings.SMTP_TIMEOUT,
        )

    # ── connections ─────────────────────────────────────────────────────────

    def _connect(self) -> smtplib.SMTP:
        smtp = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            smtp.ehlo()
            if self.use_tls:
                smtp.starttls()
                smtp.ehlo()
            # MailHog and similar test relays need no auth
            if self.username and self.password:
                smtp.login(self.username, self.password)
        except Exception:
            _quietly_close(smtp)
            raise
        return smtp

    def _checkout(self) -> _PooledConnection:
        with self._lock:
            if self._idle:
                return self._idle.pop()
        return _PooledConnection(self._connect())

    def _checkin(self, conn: _PooledConnection, healthy: bool):
        if healthy and conn.sent < self.max_messages:
            with self._lock:
                self._idle.append(conn)
        else:
            _quietly_close(conn.smtp)

    # ── public API ──────────────────────────────────────────────────────────

    def send(self, message: OutgoingMessage) -> DeliveryResult:
        mime = build_mime(message)
        with self._slots:
            conn = None
            try:
                conn = self._checkout()
                try:
                    conn.smtp.send_message(mime)
                except (smtplib.SMTPException, OSError) as e:
                    # only a reused connection can have been dropped while idle
                    if conn.sent == 0 or not _is_disconnect(e):
                        raise
                    logger.info("Pooled SMTP connection went stale (%s), reconnecting", e)
                    _quietly_close(conn.smtp)
                    conn = None
                    conn = _PooledConnection(self._connect())
                    conn.smtp.send_message(mime)
                conn.sent += 1
            except (smtplib.SMTPException, OSError) as e:
                if conn is not None:
                    self._checkin(conn, healthy=False)
                code = error_code_for(e)
                logger.warning("SMTP delivery to %s failed (%s): %s",
                               anonymize_email(message.to), code, e)
                return DeliveryResult(success=False, error_code=code, error_message=str(e) or code)
            self._checkin(conn, healthy=True)

        logger.info("Email delivered to %s, Message-ID %s", anonymize_email(message.to), mime["Message-ID"])
        return DeliveryResult(success=True, message_id=mime["Message-ID"])

    def health_check(self) -> bool:
        """Open a fresh connection and NOOP; used for liveness reporting only."""
        try:
            smtp = self._connect()
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP verify against %s:%s failed: %s", self.host, self.port, e)
            return False
        try:
            code, _ = smtp.noop()
            return code == 250
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP NOOP failed: %s", e)
            return False
        finally:
            _quietly_close(smtp)

    def close(self):
        with self._lock:
            idle, self._idle = self._idle, []
        for conn in idle:
            _quietly_close(conn.smtp)

    @property
    def idle_connections(self) -> int:
        with self._lock:
            return len(self._idle)


def _quietly_close(smtp: smtplib.SMTP):
    try:
        smtp.quit()
    except (smtplib.SMTPException, OSError):
        smtp.close()


def _is_disconnect(exc: Exception) -> bool:
    if isinstance(exc, smtplib.SMTPServerDisconnected):
        return True
    # socket-level failure, not an SMTP reply
    return isinstance(exc, OSError) and not isinstance(exc, smtplib.SMTPException)
