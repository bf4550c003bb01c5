"""
Delivery Client Module
Submits outbound messages to the Postmark HTTP API and classifies responses

Every call is one request/response exchange with a single outcome: a
decoded result or one of the typed errors in ``errors``. Nothing is retried
and a batch either succeeds as a whole or fails as a whole. Validation and
configuration problems are raised before the first byte goes on the wire.

The configured timeout bounds the whole exchange, from connect to the last
byte of the body. ``requests`` on its own only bounds each socket operation,
so the exchange runs on a short-lived worker thread and the caller waits on
its future for at most the timeout.
"""

import json
import logging
import math
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import requests
from urllib3.exceptions import ReadTimeoutError

from .attachment import Attachment
from .email_address import EmailAddress
from .errors import (
    AuthenticationError,
    ConfigurationError,
    DeliveryTimeoutError,
    SerializationError,
    ServerResponseError,
    TransportError,
)
from .outbound_message import OutboundMessage
from .request_mapper import WireRequest, map_batch, map_message
from .send_result import SendResult
from ..utils.credentials import ServerToken
from ..utils.sanitization import mask_address, sanitize_for_logging
from ..utils.security_validators import join_endpoint, validate_base_url, warn_if_insecure

DEFAULT_TIMEOUT = 10.0
MAX_BATCH_SIZE = 500

SINGLE_ENDPOINT = "/email"
BATCH_ENDPOINT = "/email/batch"
TOKEN_HEADER = "X-Postmark-Server-Token"


class DeliveryClient:
    """
    Read-only client for the single and batch send endpoints.

    Build it once with ``DeliveryClient.builder()`` and share it freely:
    calls only read the configuration, and connection pooling is left to the
    underlying ``requests.Session``.
    """

    def __init__(
        self,
        session: requests.Session,
        base_url: str,
        sender: EmailAddress,
        server_token: ServerToken,
        timeout: float,
    ):
        self._session = session
        self._base_url = base_url
        self._sender = sender
        self._server_token = server_token
        self._timeout = timeout
        self.logger = logging.getLogger("DeliveryClient")

    @staticmethod
    def builder() -> "DeliveryClientBuilder":
        return DeliveryClientBuilder()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def sender(self) -> EmailAddress:
        return self._sender

    @property
    def timeout(self) -> float:
        return self._timeout

    def __repr__(self) -> str:
        return (
            f"DeliveryClient(base_url={self._base_url!r}, sender={str(self._sender)!r}, "
            f"server_token={self._server_token!r}, timeout={self._timeout:g})"
        )

    def send(self, message: OutboundMessage) -> SendResult:
        """
        Send one message.

        Args:
            message: Message built with ``OutboundMessage.builder``

        Returns:
            SendResult decoded from the provider response

        Raises:
            ConfigurationError: If the endpoint URL cannot be composed
            DeliveryTimeoutError: If the exchange exceeded the configured timeout
            TransportError: For any other transport failure
            AuthenticationError: On HTTP 401
            ServerResponseError: On any other non-2xx status
            SerializationError: If a 2xx body is not a valid result object
        """
        payload = map_message(message, self._sender)
        recipient_domain = _domain_of(message.to)

        self.logger.info(
            f"Sending email to {mask_address(str(message.to))}",
            extra=_log_context(endpoint=SINGLE_ENDPOINT, recipient_domain=recipient_domain),
        )
        data, body = self._post(SINGLE_ENDPOINT, payload)

        try:
            result = SendResult.from_dict(data)
        except SerializationError as e:
            self.logger.error(
                f"Postmark: unexpected result shape: {e}; body={sanitize_for_logging(body)}",
                extra=_log_context(endpoint=SINGLE_ENDPOINT),
            )
            raise SerializationError(str(e), body) from e

        self.logger.info(
            f"Email accepted: message_id={result.message_id}",
            extra=_log_context(
                endpoint=SINGLE_ENDPOINT,
                message_id=result.message_id,
                error_code=result.error_code,
                recipient_domain=recipient_domain,
            ),
        )
        return result

    def send_batch(self, messages: Sequence[OutboundMessage]) -> List[SendResult]:
        """
        Send up to ``MAX_BATCH_SIZE`` messages in one request.

        An empty batch returns ``[]`` without a network call. Results come
        back in the same order as ``messages``, one per message; a response
        with any other count is rejected as a whole.

        Raises:
            ConfigurationError: If the batch is too large or the URL cannot be composed
            SerializationError: If the response is not one valid result per message
            DeliveryError: Any of the errors documented on ``send``
        """
        messages = list(messages)
        if not messages:
            self.logger.debug("Empty batch; nothing to send")
            return []

        if len(messages) > MAX_BATCH_SIZE:
            raise ConfigurationError(
                f"Batch size {len(messages)} exceeds maximum allowed ({MAX_BATCH_SIZE})"
            )

        payload = map_batch(messages, self._sender)

        self.logger.info(
            f"Sending batch of {len(messages)} emails",
            extra=_log_context(endpoint=BATCH_ENDPOINT, batch_size=len(messages)),
        )
        data, body = self._post(BATCH_ENDPOINT, payload)

        try:
            results = SendResult.list_from_json(data)
        except SerializationError as e:
            self.logger.error(
                f"Postmark: unexpected batch result shape: {e}; body={sanitize_for_logging(body)}",
                extra=_log_context(endpoint=BATCH_ENDPOINT, batch_size=len(messages)),
            )
            raise SerializationError(str(e), body) from e

        if len(results) != len(messages):
            error = f"Batch response has {len(results)} results for {len(messages)} messages"
            self.logger.error(
                f"Postmark: {error}",
                extra=_log_context(
                    endpoint=BATCH_ENDPOINT,
                    batch_size=len(messages),
                    result_count=len(results),
                ),
            )
            raise SerializationError(error, body)

        self.logger.info(
            f"Batch accepted: {len(results)} results",
            extra=_log_context(
                endpoint=BATCH_ENDPOINT,
                batch_size=len(messages),
                failed=sum(1 for result in results if not result.succeeded),
            ),
        )
        return results

    def send_email(
        self,
        to: Union[str, EmailAddress],
        subject: str,
        html_body: Optional[str] = None,
        text_body: Optional[str] = None,
        attachments: Optional[Sequence[Attachment]] = None,
    ) -> SendResult:
        """
        Convenience wrapper around ``send`` for the common fields.

        ``to`` may be a raw string, in which case it is parsed first and a
        ParseError propagates before any network call.
        """
        if not isinstance(to, EmailAddress):
            to = EmailAddress.parse(to)

        builder = OutboundMessage.builder(to).subject(subject)
        if html_body is not None:
            builder.html_body(html_body)
        if text_body is not None:
            builder.text_body(text_body)
        if attachments:
            builder.attachments(attachments)

        return self.send(builder.build())

    def close(self) -> None:
        """Release pooled connections held by the session"""
        self._session.close()

    def __enter__(self) -> "DeliveryClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _endpoint(self, path: str) -> str:
        try:
            return join_endpoint(self._base_url, path)
        except ValueError as e:
            raise ConfigurationError(f"Postmark invalid URL: {e}") from e

    def _post(self, path: str, payload: Union[WireRequest, List[WireRequest]]) -> Tuple[Any, str]:
        """
        POST the payload and classify the outcome.

        Returns:
            Tuple of (decoded JSON body, raw body text) for a 2xx response
        """
        url = self._endpoint(path)
        headers = {
            "Accept": "application/json",
            TOKEN_HEADER: self._server_token.expose_secret(),
        }

        started = time.monotonic()
        try:
            status_code, body = self._exchange_within_deadline(url, payload, headers)
        except FutureTimeoutError as e:
            self._log_timeout(url, path, started)
            raise DeliveryTimeoutError(self._timeout) from e
        except requests.exceptions.Timeout as e:
            self._log_timeout(url, path, started)
            raise DeliveryTimeoutError(self._timeout) from e
        except requests.exceptions.ConnectionError as e:
            # A body read that stalls surfaces as ConnectionError(ReadTimeoutError)
            if _is_read_timeout(e):
                self._log_timeout(url, path, started)
                raise DeliveryTimeoutError(self._timeout) from e
            self.logger.error(
                f"Postmark: failed to send request to {url}: {e}",
                extra=_log_context(endpoint=path),
            )
            raise TransportError(f"Failed to reach {url}: {e}") from e
        except requests.exceptions.RequestException as e:
            self.logger.error(
                f"Postmark: failed to send request to {url}: {e}",
                extra=_log_context(endpoint=path),
            )
            raise TransportError(f"Failed to reach {url}: {e}") from e

        context = _log_context(
            endpoint=path,
            status_code=status_code,
            elapsed_ms=round((time.monotonic() - started) * 1000),
        )

        if 200 <= status_code < 300:
            try:
                return json.loads(body), body
            except ValueError as e:
                self.logger.error(
                    f"Postmark: failed to parse response: {e}; body={sanitize_for_logging(body)}",
                    extra=context,
                )
                raise SerializationError(f"Response body is not valid JSON: {e}", body) from e

        if status_code == 401:
            self.logger.error(
                f"Postmark: authentication failed: {sanitize_for_logging(body)}",
                extra=context,
            )
            raise AuthenticationError(body)

        self.logger.error(
            f"Postmark: server responded with HTTP {status_code}: {sanitize_for_logging(body)}",
            extra=context,
        )
        raise ServerResponseError(status_code, body)

    def _exchange(self, url: str, payload: Any, headers: Dict[str, str]) -> Tuple[int, str]:
        """Perform the request and read the whole body; runs on the worker thread"""
        response = self._session.post(
            url,
            json=payload,
            headers=headers,
            timeout=self._timeout,
        )
        try:
            return response.status_code, response.text
        finally:
            response.close()

    def _exchange_within_deadline(
        self, url: str, payload: Any, headers: Dict[str, str]
    ) -> Tuple[int, str]:
        """
        Run ``_exchange`` and wait at most the configured timeout for it.

        Raises:
            concurrent.futures.TimeoutError: If the deadline passed first. The
                abandoned exchange keeps running until the transport's own
                per-read timeout or completion, and its outcome is discarded.
        """
        future: Future = Future()

        def run():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self._exchange(url, payload, headers))
            except Exception as e:
                future.set_exception(e)

        threading.Thread(target=run, name="DeliveryClient-exchange", daemon=True).start()
        return future.result(timeout=self._timeout)

    def _log_timeout(self, url: str, path: str, started: float) -> None:
        self.logger.error(
            f"Postmark: request to {url} timed out after {self._timeout:g}s",
            extra=_log_context(
                endpoint=path,
                elapsed_ms=round((time.monotonic() - started) * 1000),
            ),
        )


def _log_context(**fields) -> Dict[str, Dict[str, Any]]:
    """Wrap fields for ``JSONFormatter``, which merges ``extra_fields`` into the record"""
    return {"extra_fields": fields}


def _domain_of(address: EmailAddress) -> str:
    return str(address).rpartition("@")[2]


def _is_read_timeout(error: requests.exceptions.ConnectionError) -> bool:
    return any(isinstance(arg, ReadTimeoutError) for arg in error.args)


class DeliveryClientBuilder:
    """Staging object for DeliveryClient; required fields are checked in build()"""

    def __init__(self):
        self._base_url: Optional[str] = None
        self._sender: Optional[EmailAddress] = None
        self._server_token: Optional[ServerToken] = None
        self._timeout: Optional[float] = None
        self._session: Optional[requests.Session] = None

    def base_url(self, base_url: str) -> "DeliveryClientBuilder":
        self._base_url = base_url
        return self

    def sender(self, sender: EmailAddress) -> "DeliveryClientBuilder":
        if not isinstance(sender, EmailAddress):
            raise TypeError("sender expects an EmailAddress; use EmailAddress.parse() first")
        self._sender = sender
        return self

    def server_token(self, token: Union[str, ServerToken]) -> "DeliveryClientBuilder":
        self._server_token = token if isinstance(token, ServerToken) else ServerToken(token)
        return self

    def timeout(self, timeout: Union[float, timedelta]) -> "DeliveryClientBuilder":
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        self._timeout = float(timeout)
        return self

    def session(self, session: requests.Session) -> "DeliveryClientBuilder":
        """Use a caller-owned session (custom adapters, proxies, test doubles)"""
        self._session = session
        return self

    def build(self) -> DeliveryClient:
        if not self._base_url:
            raise ConfigurationError("Postmark base URL is required")
        if self._sender is None:
            raise ConfigurationError("Postmark sender email is required")
        if self._server_token is None:
            raise ConfigurationError("Postmark server token is required")

        is_valid, error = validate_base_url(self._base_url)
        if not is_valid:
            raise ConfigurationError(f"Postmark invalid base URL: {error}")
        warn_if_insecure(self._base_url)

        timeout = DEFAULT_TIMEOUT if self._timeout is None else self._timeout
        if not math.isfinite(timeout) or timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive and finite, got {timeout:g}")

        return DeliveryClient(
            session=self._session or requests.Session(),
            base_url=self._base_url,
            sender=self._sender,
            server_token=self._server_token,
            timeout=timeout,
        )
