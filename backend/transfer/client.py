"""Outbound transfer call and classification of its outcome."""

import logging
import math

import httpx
from pydantic import ValidationError

from config import RECEIVE_PATH, SEND_TIMEOUT
from pairing.descriptor import ConnectionDescriptor
from transfer.errors import NetworkError, Result
from transfer.models import TransferRequest, TransferResponse

logger = logging.getLogger(__name__)

_STATUS_ERRORS = {
    401: NetworkError.UNAUTHORIZED,
    409: NetworkError.CONFLICT,
    408: NetworkError.TIMEOUT,
    413: NetworkError.PAYLOAD_TOO_LARGE,
}


def classify_status(status_code: int) -> NetworkError | None:
    """Map an HTTP status to a NetworkError; None means success (2xx)."""
    if 200 <= status_code <= 299:
        return None
    if status_code in _STATUS_ERRORS:
        return _STATUS_ERRORS[status_code]
    if 500 <= status_code <= 599:
        return NetworkError.SERVER_FAULT
    return NetworkError.UNKNOWN


def receive_url(descriptor: ConnectionDescriptor) -> str:
    return f"http://{descriptor.host}:{descriptor.port}{RECEIVE_PATH}"


class TransferClient:
    """Sends one transfer per call. Never retries."""

    def __init__(
        self,
        timeout: float = SEND_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError("timeout must be a finite, positive number of seconds")
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport

    async def send(
        self, descriptor: ConnectionDescriptor, request: TransferRequest
    ) -> Result[TransferResponse]:
        url = receive_url(descriptor)
        logger.info(f"Sending {len(request.payload)} chars to {url}")

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                trust_env=False,
            ) as client:
                response = await client.post(url, json=request.to_wire())
        except httpx.ConnectError as e:
            logger.warning(f"Cannot reach {descriptor}: {e}")
            return Result.failure(NetworkError.NO_CONNECTIVITY)
        except httpx.TimeoutException as e:
            logger.warning(f"Transfer to {descriptor} timed out: {e!r}")
            return Result.failure(NetworkError.TIMEOUT)
        except httpx.HTTPError as e:
            logger.warning(f"Transfer to {descriptor} failed: {e!r}")
            return Result.failure(NetworkError.UNKNOWN)
        except Exception as e:
            logger.error(f"Unexpected error sending to {descriptor}: {e}", exc_info=True)
            return Result.failure(NetworkError.UNKNOWN)

        error = classify_status(response.status_code)
        if error is not None:
            logger.warning(f"Receiver answered HTTP {response.status_code}: {error.value}")
            return Result.failure(error)

        try:
            ack = TransferResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(f"Unreadable reply from {descriptor}: {e.error_count()} error(s)")
            return Result.failure(NetworkError.MALFORMED_PAYLOAD)

        logger.info(f"Receiver acknowledged {ack.received_length} chars: {ack.message}")
        return Result.success(ack)
