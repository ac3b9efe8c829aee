"""
DRF exception handler for the REST surface.

Kept apart from ``notechat.exceptions`` because importing
``rest_framework.views`` resolves the authentication classes, which
themselves import the error taxonomy.
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import NotFound, Unexpected, flatten_detail

logger = logging.getLogger(__name__)


def chat_exception_handler(exc, context):
    """
    Render every error as ``{"error": message}``.

    API exceptions keep their status code. Anything else is logged with its
    traceback and reported as a generic 500 so store errors never leak.
    """
    if isinstance(exc, (Http404, PermissionDenied)):
        exc = NotFound()

    response = exception_handler(exc, context)
    if response is not None:
        data = response.data
        if isinstance(data, dict):
            data = data.get('detail', data)
        response.data = {'error': flatten_detail(data)}
        return response

    view = context.get('view')
    logger.exception(
        'Unhandled error in %s', view.__class__.__name__ if view else 'view', exc_info=exc
    )
    return Response(
        {'error': Unexpected.default_detail},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
