from unittest import mock

from django.http import Http404
from django.test import SimpleTestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.settings import api_settings
from rest_framework.test import APITestCase

from notechat.exceptions import (
    InvalidInput,
    NotFound,
    Unauthenticated,
    Unexpected,
    flatten_detail,
)
from notechat.handlers import chat_exception_handler
from notechat.authentication import BearerTokenAuthentication
from notechat.jwt_utils import generate_test_token
from users.models import User


class FlattenDetailTest(SimpleTestCase):
    def test_field_error(self):
        self.assertEqual(
            flatten_detail({'content': ['This field is required.']}),
            'content: This field is required.',
        )

    def test_non_field_error(self):
        self.assertEqual(flatten_detail({'non_field_errors': ['Bad']}), 'Bad')

    def test_nested_list(self):
        self.assertEqual(flatten_detail([['first'], 'second']), 'first')

    def test_empty(self):
        self.assertEqual(flatten_detail({}), '')
        self.assertEqual(flatten_detail([]), '')


class ExceptionHandlerTest(SimpleTestCase):
    def test_chat_errors_keep_their_status(self):
        for exc, code in [
            (InvalidInput('Bad input'), 400),
            (NotFound('Conversation not found'), 404),
            (Unexpected(), 500),
        ]:
            response = chat_exception_handler(exc, {})
            self.assertEqual(response.status_code, code)
            self.assertEqual(response.data, {'error': exc.message})

    def test_http404_becomes_not_found(self):
        response = chat_exception_handler(Http404(), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {'error': 'Not found'})

    def test_validation_error_is_flattened(self):
        response = chat_exception_handler(ValidationError({'name': ['Too long']}), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {'error': 'name: Too long'})

    def test_unhandled_error_is_generic_500(self):
        with self.assertLogs('notechat.handlers', level='ERROR'):
            response = chat_exception_handler(RuntimeError('db password leaked'), {})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {'error': 'Internal server error'})


class StoreFailureTest(APITestCase):
    def setUp(self):
        User.objects.create(user_id='alice', name='Alice', email='alice@example.com')
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {generate_test_token("alice")}')

    def test_store_failure_is_reported_as_unexpected(self):
        with mock.patch(
            'conversations.services.ConversationService.list_for_user',
            side_effect=RuntimeError('connection reset'),
        ), self.assertLogs('notechat.handlers', level='ERROR'):
            response = self.client.get(reverse('conversations:conversation-list'))
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'error': 'Internal server error'})


class UnauthenticatedTest(SimpleTestCase):
    def test_renders_as_401(self):
        response = chat_exception_handler(Unauthenticated('Invalid or expired token'), {})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data, {'error': 'Invalid or expired token'})


class RestFrameworkWiringTest(SimpleTestCase):
    def test_settings_resolve_to_project_classes(self):
        self.assertIs(api_settings.EXCEPTION_HANDLER, chat_exception_handler)
        self.assertEqual(api_settings.DEFAULT_AUTHENTICATION_CLASSES, [BearerTokenAuthentication])
