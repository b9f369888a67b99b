from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from fleet.domain.errors import Conflict, FleetError, NotFound, RemoteOperationFailed

STATUS_CODES = {
    Conflict: 409,
    NotFound: 404,
    RemoteOperationFailed: 502,
}


async def fleet_error_handler(request: Request, exc: FleetError) -> PlainTextResponse:
    status_code = next(
        (code for cls, code in STATUS_CODES.items() if isinstance(exc, cls)),
        500,
    )
    return PlainTextResponse(exc.message, status_code=status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FleetError, fleet_error_handler)
