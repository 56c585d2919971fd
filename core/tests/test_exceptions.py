from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import SimpleTestCase
from rest_framework.exceptions import NotFound, ValidationError

from core.exceptions import api_exception_handler


class ExceptionHandlerTests(SimpleTestCase):
    def test_model_validation_becomes_bad_request(self):
        response = api_exception_handler(DjangoValidationError('daily_budget cannot exceed budget'), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {'error': 'daily_budget cannot exceed budget'})

    def test_serializer_errors_are_nested(self):
        response = api_exception_handler(ValidationError({'name': ['This field is required.']}), {})
        self.assertEqual(response.data['error'], 'Invalid data')
        self.assertEqual(response.data['details']['name'][0], 'This field is required.')

    def test_detail_is_flattened(self):
        response = api_exception_handler(NotFound(), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {'error': 'Not found.'})

    def test_unhandled_exceptions_fall_through(self):
        self.assertIsNone(api_exception_handler(RuntimeError('boom'), {}))
