# apps/core/exceptions.py
"""
Error taxonomy for hostel operations.

Services raise these inside their transactions; the REST layer turns them
into ``{"kind": ..., "message": ...}`` responses through
``hostel_exception_handler``.
"""

import logging

from django.core.exceptions import ValidationError, PermissionDenied as DjangoPermissionDenied
from django.db import IntegrityError
from django.http import Http404
from django.utils.translation import gettext_lazy as _
from rest_framework import exceptions as drf_exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class HostelError(ValidationError):
    """
    Base class for every error a hostel operation can report.
    """
    kind = 'HostelError'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = _('The request could not be completed.')

    def __init__(self, message=None, params=None):
        super().__init__(message or self.default_message, code=self.kind, params=params)

    @property
    def message_text(self):
        return self.messages[0]

    def as_dict(self):
        return {'kind': self.kind, 'message': self.message_text}


class NotFound(HostelError):
    kind = 'NotFound'
    status_code = status.HTTP_404_NOT_FOUND
    default_message = _('Not found.')


class AlreadyInTerminalState(HostelError):
    kind = 'AlreadyInTerminalState'
    status_code = status.HTTP_409_CONFLICT
    default_message = _('The record can no longer change state.')


class AlreadyPaid(AlreadyInTerminalState):
    kind = 'AlreadyPaid'
    default_message = _('This fee has already been paid.')


class CapacityExceeded(HostelError):
    kind = 'CapacityExceeded'
    status_code = status.HTTP_409_CONFLICT
    default_message = _('The room is already at full capacity.')


class ConstraintViolation(HostelError):
    kind = 'ConstraintViolation'
    status_code = status.HTTP_409_CONFLICT
    default_message = _('A record with these values already exists.')


class PermissionDenied(HostelError):
    kind = 'PermissionDenied'
    status_code = status.HTTP_403_FORBIDDEN
    default_message = _('You do not have permission to perform this action.')


class InvalidInput(HostelError):
    kind = 'InvalidInput'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = _('Invalid input.')


API_EXCEPTION_KINDS = {
    drf_exceptions.NotAuthenticated: 'NotAuthenticated',
    drf_exceptions.AuthenticationFailed: 'NotAuthenticated',
    drf_exceptions.PermissionDenied: PermissionDenied.kind,
    drf_exceptions.NotFound: NotFound.kind,
    drf_exceptions.ValidationError: InvalidInput.kind,
    drf_exceptions.ParseError: InvalidInput.kind,
    drf_exceptions.MethodNotAllowed: 'MethodNotAllowed',
}


def _contains_code(codes, wanted):
    if isinstance(codes, dict):
        return any(_contains_code(value, wanted) for value in codes.values())
    if isinstance(codes, (list, tuple)):
        return any(_contains_code(value, wanted) for value in codes)
    return codes == wanted


def hostel_exception_handler(exc, context):
    """
    REST framework exception handler producing ``{kind, message}`` bodies.
    """
    if isinstance(exc, HostelError):
        return Response(exc.as_dict(), status=exc.status_code)

    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error in %s: %s", context.get('view').__class__.__name__, exc)
        return Response(ConstraintViolation().as_dict(), status=ConstraintViolation.status_code)

    if isinstance(exc, ValidationError):
        return Response(
            {'kind': InvalidInput.kind, 'message': '; '.join(exc.messages)},
            status=InvalidInput.status_code,
        )

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = drf_exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, drf_exceptions.ValidationError):
        # Unique validators map onto the constraint taxonomy
        if _contains_code(exc.get_codes(), 'unique'):
            response.status_code = ConstraintViolation.status_code
            response.data = {
                'kind': ConstraintViolation.kind,
                'message': str(ConstraintViolation.default_message),
                'errors': exc.detail,
            }
        else:
            response.data = {
                'kind': InvalidInput.kind,
                'message': str(InvalidInput.default_message),
                'errors': exc.detail,
            }
        return response

    kind = 'Error'
    for exc_class, exc_kind in API_EXCEPTION_KINDS.items():
        if isinstance(exc, exc_class):
            kind = exc_kind
            break
    detail = exc.detail if isinstance(exc, drf_exceptions.APIException) else str(exc)
    response.data = {'kind': kind, 'message': str(detail)}
    return response
