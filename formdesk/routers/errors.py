"""Translate domain errors into HTTP responses."""

import logging

from fastapi import HTTPException

from formdesk.core.errors import (
    FormError,
    FormStateError,
    InvalidFieldConfig,
    LimitExceeded,
    NothingToExport,
    SchemaError,
    SubmissionValidationError,
)

logger = logging.getLogger(__name__)


def to_http_exception(exc: FormError) -> HTTPException:
    detail = {"message": exc.message, "code": exc.code, "errors": []}

    if isinstance(exc, SubmissionValidationError):
        logger.debug("Submission rejected: %s (%d errors)", exc.code, len(exc.errors))
        detail["errors"] = [error.to_dict() for error in exc.errors]
        return HTTPException(status_code=400, detail=detail)
    if isinstance(exc, InvalidFieldConfig):
        logger.error("Form field %s has a broken configuration: %s", exc.field_id, exc.message)
        detail["message"] = "Form configuration error"
        return HTTPException(status_code=500, detail=detail)
    if isinstance(exc, (SchemaError, NothingToExport)):
        return HTTPException(status_code=400, detail=detail)
    if isinstance(exc, (LimitExceeded, FormStateError)):
        return HTTPException(status_code=409, detail=detail)
    return HTTPException(status_code=400, detail=detail)
