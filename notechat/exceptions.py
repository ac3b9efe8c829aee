"""
Error taxonomy shared by the REST views and the WebSocket gateway.

Every failure that reaches a client is one of the four ``ChatError``
subclasses. REST views let them propagate to ``notechat.handlers``;
the consumer catches them and sends a private ``error`` event instead.
"""

from rest_framework import exceptions, status


class ChatError(exceptions.APIException):
    """Base class for errors that are safe to show to the caller."""

    @property
    def message(self):
        return str(self.detail)


class Unauthenticated(ChatError, exceptions.AuthenticationFailed):
    # An AuthenticationFailed so DRF answers with the WWW-Authenticate header.
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication required'
    default_code = 'unauthenticated'


class InvalidInput(ChatError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'
    default_code = 'invalid_input'


class NotFound(ChatError):
    # Also raised when the entity exists but the caller may not see it.
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class Unexpected(ChatError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'unexpected'


def flatten_detail(detail):
    """Reduce DRF's nested error detail to a single readable message."""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = flatten_detail(value)
            if field == 'non_field_errors':
                return message
            return f'{field}: {message}'
        return ''
    if isinstance(detail, (list, tuple)):
        return flatten_detail(detail[0]) if detail else ''
    return str(detail)
