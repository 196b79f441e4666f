"""Translation of domain errors into HTTP responses.

Installed as DRF's ``EXCEPTION_HANDLER``. Only the code and the user-safe
message of a DomainError leave the process.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from core.errors import DomainError

logger = logging.getLogger(__name__)

STATUS_BY_ERROR_CODE: dict[str, int] = {
    # shared
    "INVALID_WINDOW": status.HTTP_400_BAD_REQUEST,
    "CONCURRENT_UPDATE": status.HTTP_409_CONFLICT,
    # currency
    "INVALID_CURRENCY_CODE": status.HTTP_400_BAD_REQUEST,
    "CURRENCY_MISMATCH": status.HTTP_400_BAD_REQUEST,
    "RATE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_RATE": status.HTTP_400_BAD_REQUEST,
    "INVALID_CONFIGURATION": status.HTTP_400_BAD_REQUEST,
    # promotions
    "INVALID_ID": status.HTTP_400_BAD_REQUEST,
    "PROMOTION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PROMO_CODE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CODE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NOT_YET_ACTIVE": status.HTTP_400_BAD_REQUEST,
    "EXPIRED": status.HTTP_400_BAD_REQUEST,
    "USAGE_LIMIT_REACHED": status.HTTP_400_BAD_REQUEST,
    "USER_USAGE_LIMIT_REACHED": status.HTTP_400_BAD_REQUEST,
    "NOT_APPLICABLE_TO_EVENT": status.HTTP_400_BAD_REQUEST,
    "BELOW_MINIMUM_ORDER_AMOUNT": status.HTTP_400_BAD_REQUEST,
    "DUPLICATE_PROMO_CODE": status.HTTP_409_CONFLICT,
    "INVALID_PROMO_CODE": status.HTTP_400_BAD_REQUEST,
    "INVALID_DISCOUNT": status.HTTP_400_BAD_REQUEST,
    "INVALID_ORDER_AMOUNT": status.HTTP_400_BAD_REQUEST,
}


def status_for(error: DomainError) -> int:
    """Return the HTTP status for a domain error; unknown codes are a 400."""
    return STATUS_BY_ERROR_CODE.get(error.code.value, status.HTTP_400_BAD_REQUEST)


def error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


def exception_handler(exc, context):
    if isinstance(exc, DomainError):
        status_code = status_for(exc)
        logger.info("Domain error %s on %s", exc.code.value, context.get("view").__class__.__name__)
        return Response(error_body(exc.code.value, exc.message), status=status_code)
    return drf_exception_handler(exc, context)
