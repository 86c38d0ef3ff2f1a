# views/utils.py
"""
Shared tooling for drf-spectacular docs and error responses.
Usage in views:
    from .utils import (
        ErrorSerializer, q_int, q_str, q_date, std_errors, error_response, actor_of,
    )
"""
from django.core.exceptions import ObjectDoesNotExist
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, inline_serializer
from rest_framework import serializers, status
from rest_framework.response import Response

from hr_payroll.exceptions import DuplicatePunch, DuplicateRecord, PayrollError, UnknownEmployee

# ---- Reusable error schema
ErrorSerializer = inline_serializer(
    name="PayrollError",
    fields={"detail": serializers.CharField(), "code": serializers.CharField()},
)

# ---- Param helpers

def path_int(name: str, description: str):
    return OpenApiParameter(name, OpenApiTypes.INT, OpenApiParameter.PATH, description=description)

def q_int(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.INT, OpenApiParameter.QUERY, required=required, description=description)

def q_str(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.STR, OpenApiParameter.QUERY, required=required, description=description)

def q_date(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.DATE, OpenApiParameter.QUERY, required=required, description=description)


def std_errors(extra: dict | None = None):
    """Standard error response mapping you can merge into responses=..."""
    errs = {
        400: OpenApiResponse(ErrorSerializer, description="Bad Request"),
        404: OpenApiResponse(ErrorSerializer, description="Not Found"),
    }
    if extra:
        errs.update(extra)
    return errs


CONFLICT = {409: OpenApiResponse(ErrorSerializer, description="Duplicate record or punch")}
UNAVAILABLE = {503: OpenApiResponse(ErrorSerializer, description="External dependency unavailable")}


# ---- Error mapping

def error_response(exc: Exception) -> Response:
    """Map service exceptions to HTTP: 404 unknown, 409 duplicate, 400 invalid, 503 degraded."""
    code = getattr(exc, "code", "invalid")
    if isinstance(exc, UnknownEmployee):
        http = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ObjectDoesNotExist):
        http, code = status.HTTP_404_NOT_FOUND, "not_found"
    elif isinstance(exc, (DuplicateRecord, DuplicatePunch)):
        http = status.HTTP_409_CONFLICT
    elif isinstance(exc, PayrollError) and isinstance(exc, RuntimeError):
        http = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        http = status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc), "code": code}, status=http)


HANDLED_ERRORS = (ValueError, PayrollError, ObjectDoesNotExist)


def actor_of(request):
    user = getattr(request, "user", None)
    return user.id if user is not None and user.is_authenticated else None
