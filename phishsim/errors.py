# phishsim/errors.py
# Domain errors raised by the service layer; main.py maps them to HTTP.


class PhishingError(Exception):
    code = "PHISHING_ERROR"
    status_code = 400

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def __str__(self):
        return f"{self.code}: {self.message}"


class ValidationError(PhishingError):
    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, errors: list = None):
        super().__init__(message)
        self.errors = errors or [message]


class NotFound(PhishingError):
    code = "NOT_FOUND"
    status_code = 404


class InvalidState(PhishingError):
    code = "INVALID_STATE"
    status_code = 409


class SendFailed(PhishingError):
    """A dispatched send that ended with the campaign marked FAILED."""

    code = "SEND_FAILED"
    status_code = 502

    def __init__(self, message: str, code: str = None, campaign=None):
        super().__init__(message, code)
        self.campaign = campaign


class ChannelError(SendFailed):
    """Timeout, connection failure or unusable reply on the private channel."""

    code = "CHANNEL_ERROR"


class TransportError(SendFailed):
    """SMTP-level failure reported back by the simulation service."""

    code = "SMTP_ERROR"
