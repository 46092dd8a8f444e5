"""Global exception handlers that map domain exceptions to HTTP responses."""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.errors import (
    ConcurrencyConflictError,
    ContractNotEditableError,
    DomainValidationError,
    IllegalPaymentTransitionError,
    IllegalStatusTransitionError,
    NotFoundError,
    VehicleUnavailableError,
)
from app.schemas.availability import ConflictingContract
from app.schemas.error import ErrorResponse, VehicleUnavailableResponse


def _error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    """Return a standardized error response with detail and machine-readable code."""
    body = ErrorResponse(detail=detail, code=code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def domain_validation_error_handler(
    _request: Request, exc: DomainValidationError
) -> JSONResponse:
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        str(exc),
        exc.code,
    )


def not_found_error_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(
        status.HTTP_404_NOT_FOUND,
        str(exc),
        exc.code,
    )


def conflict_error_handler(_request: Request, exc) -> JSONResponse:
    """State machine violations, non-editable contracts and lock contention."""
    return _error_response(
        status.HTTP_409_CONFLICT,
        str(exc),
        exc.code,
    )


def vehicle_unavailable_error_handler(
    _request: Request, exc: VehicleUnavailableError
) -> JSONResponse:
    body = VehicleUnavailableResponse(
        detail=str(exc),
        code=exc.code,
        conflicting_contracts=[
            ConflictingContract.model_validate(c) for c in exc.conflicting_contracts
        ],
        vehicle_unavailable=exc.vehicle_unavailable,
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=body.model_dump(mode="json"),
    )


def register_exception_handlers(app):
    """Register domain exception handlers on the FastAPI app."""
    app.add_exception_handler(DomainValidationError, domain_validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(VehicleUnavailableError, vehicle_unavailable_error_handler)
    app.add_exception_handler(IllegalStatusTransitionError, conflict_error_handler)
    app.add_exception_handler(IllegalPaymentTransitionError, conflict_error_handler)
    app.add_exception_handler(ContractNotEditableError, conflict_error_handler)
    app.add_exception_handler(ConcurrencyConflictError, conflict_error_handler)
