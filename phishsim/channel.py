# phishsim/channel.py
"""
Client side of the private management → simulation channel.

A channel sends ``{pattern, data}`` and waits a bounded time for the reply.
Two transports share the same ``request`` contract:

* ``HttpChannelClient`` POSTs the envelope to the simulation service.
* ``InProcessChannelClient`` calls ``dispatch_message`` on a worker thread,
  for single-process deployments and tests.

Every transport failure surfaces as ``ChannelError`` with a ``CHANNEL_*`` code.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout

import requests
from pydantic import ValidationError as PydanticValidationError

from phishsim.config import settings
from phishsim.errors import ChannelError
from phishsim.schemas import (
    HealthStatus, SendRequest, SendResult,
    SEND_PHISHING_EMAIL, HEALTH_CHECK,
)
from phishsim.dispatcher import UnknownPattern, dispatch_message

logger = logging.getLogger(__name__)

CHANNEL_TIMEOUT = "CHANNEL_TIMEOUT"
CHANNEL_CONNECTION_ERROR = "CHANNEL_CONNECTION_ERROR"
CHANNEL_BAD_STATUS = "CHANNEL_BAD_STATUS"
CHANNEL_MALFORMED_RESPONSE = "CHANNEL_MALFORMED_RESPONSE"


class HttpChannelClient:
    def __init__(self, base_url: str, timeout: float = 30):
        self.url = f"{base_url.rstrip('/')}/messages"
        self.timeout = timeout

    def request(self, pattern: str, data: dict = None) -> dict:
        try:
            resp = requests.post(self.url, json={"pattern": pattern, "data": data or {}}, timeout=self.timeout)
        except requests.Timeout:
            raise ChannelError(f"No reply to '{pattern}' within {self.timeout}s", CHANNEL_TIMEOUT)
        except requests.ConnectionError as e:
            raise ChannelError(f"Cannot reach simulation service: {e}", CHANNEL_CONNECTION_ERROR)
        except requests.RequestException as e:
            raise ChannelError(str(e), CHANNEL_CONNECTION_ERROR)

        if not resp.ok:
            raise ChannelError(f"Simulation service answered HTTP {resp.status_code}", CHANNEL_BAD_STATUS)
        try:
            body = resp.json()
        except ValueError:
            raise ChannelError("Reply is not JSON", CHANNEL_MALFORMED_RESPONSE)
        if not isinstance(body, dict):
            raise ChannelError("Reply is not a JSON object", CHANNEL_MALFORMED_RESPONSE)
        return body

    def close(self):
        pass


class InProcessChannelClient:
    """
    Runs the simulation handler in this process, still with a bounded wait.
    A handler that overruns the timeout keeps running on its worker thread;
    only the caller gives up.
    """

    def __init__(self, dispatcher, timeout: float = 30, max_workers: int = 4):
        self.dispatcher = dispatcher
        self.timeout = timeout
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="channel")

    def request(self, pattern: str, data: dict = None) -> dict:
        future = self._pool.submit(dispatch_message, self.dispatcher, pattern, data or {})
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeout:
            raise ChannelError(f"No reply to '{pattern}' within {self.timeout}s", CHANNEL_TIMEOUT)
        except UnknownPattern:
            raise ChannelError(f"No handler for pattern '{pattern}'", CHANNEL_BAD_STATUS)
        except Exception as e:
            # same outcome as an HTTP 500 from a remote simulation service
            logger.exception("In-process handler for '%s' crashed", pattern)
            raise ChannelError(f"Handler crashed: {e}", CHANNEL_BAD_STATUS)

    def close(self):
        self._pool.shutdown(wait=False)


class SimulationClient:
    """Typed calls over a channel: what the campaign orchestrator talks to."""

    def __init__(self, channel):
        self.channel = channel

    def send_phishing_email(self, request: SendRequest) -> SendResult:
        logger.info("Sending channel request for attempt %s", request.attempt_id)
        try:
            reply = self.channel.request(SEND_PHISHING_EMAIL, request.to_wire())
        except ChannelError as e:
            logger.error("Channel request failed for attempt %s: %s", request.attempt_id, e)
            raise
        result = _parse(SendResult, reply)
        logger.info("Channel reply for attempt %s: success=%s", request.attempt_id, result.success)
        return result

    def health_check(self) -> HealthStatus:
        return _parse(HealthStatus, self.channel.request(HEALTH_CHECK))


def _parse(model, reply: dict):
    try:
        return model.model_validate(reply)
    except PydanticValidationError as e:
        raise ChannelError(f"Unexpected reply shape: {e.error_count()} error(s)", CHANNEL_MALFORMED_RESPONSE)


def client_from_settings() -> SimulationClient:
    return SimulationClient(HttpChannelClient(settings.SIMULATION_URL, timeout=settings.CHANNEL_TIMEOUT))
