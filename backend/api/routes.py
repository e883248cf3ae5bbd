"""REST routes served by a receiving device."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from config import RECEIVE_PATH
from transfer.models import TransferRequest, TransferResponse

logger = logging.getLogger(__name__)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"malformed transfer request: {location}: {first['msg']}"
    return f"malformed transfer request: {first['msg']}"


def create_router(receiver) -> APIRouter:
    """Build the transfer routes bound to one receiver.

    ``receiver`` must provide ``async accept(TransferRequest)``, which stores
    the request and notifies its observer before returning.
    """
    router = APIRouter()

    @router.post(RECEIVE_PATH)
    async def receive(request: Request) -> JSONResponse:
        body = await request.body()
        try:
            transfer = TransferRequest.model_validate_json(body)
        except ValidationError as e:
            reason = _describe(e)
            logger.warning(f"Rejected transfer from {request.client}: {reason}")
            return JSONResponse(
                status_code=400,
                content=TransferResponse.reject(reason).to_wire(),
            )

        await receiver.accept(transfer)

        response = TransferResponse.accept(transfer)
        logger.info(
            f"Accepted transfer of {response.received_length} chars "
            f"from {transfer.sender_info or request.client}"
        )
        return JSONResponse(status_code=200, content=response.to_wire())

    return router
