"""
Tests for the API error taxonomy.

Every error body is {"error": <message>, "code": <code>}.
"""
from unittest.mock import Mock

import pytest
from django.http import Http404
from rest_framework import exceptions, status

from apps.core.errors import (
    DeadlineExceeded,
    FailedPrecondition,
    Internal,
    InvalidArgument,
    NotFound,
    PermissionDenied,
    Unauthenticated,
    api_exception_handler,
    error_for_code,
)


def handle(exc):
    return api_exception_handler(exc, {'view': Mock()})


class TestApiErrors:

    @pytest.mark.parametrize('error_class,status_code,code', [
        (Unauthenticated, 401, 'unauthenticated'),
        (InvalidArgument, 400, 'invalid-argument'),
        (PermissionDenied, 403, 'permission-denied'),
        (NotFound, 404, 'not-found'),
        (FailedPrecondition, 412, 'failed-precondition'),
        (DeadlineExceeded, 504, 'deadline-exceeded'),
        (Internal, 500, 'internal'),
    ])
    def test_taxonomy_body(self, error_class, status_code, code):
        response = handle(error_class('Something specific.'))

        assert response.status_code == status_code
        assert response.data == {'error': 'Something specific.', 'code': code}

    def test_default_message(self):
        assert handle(NotFound()).data == {'error': 'Not found.', 'code': 'not-found'}

    def test_error_for_code(self):
        error = error_for_code('failed-precondition', 'Slot taken.')

        assert isinstance(error, FailedPrecondition)
        assert isinstance(error_for_code('no-such-code', 'x'), Internal)


class TestDrfExceptionMapping:

    def test_validation_error_keeps_fields(self):
        response = handle(exceptions.ValidationError({'token': ['This field is required.']}))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid-argument'
        assert response.data['error'] == 'token: This field is required.'
        assert response.data['fields'] == {'token': ['This field is required.']}

    def test_non_field_errors_flattened(self):
        response = handle(exceptions.ValidationError({'non_field_errors': ['start and end are both required.']}))

        assert response.data['error'] == 'start and end are both required.'

    @pytest.mark.parametrize('exc,status_code,code', [
        (exceptions.NotAuthenticated(), 401, 'unauthenticated'),
        (exceptions.PermissionDenied(), 403, 'permission-denied'),
        (exceptions.Throttled(wait=30), 429, 'resource-exhausted'),
        (exceptions.ParseError(), 400, 'invalid-argument'),
        (Http404(), 404, 'not-found'),
    ])
    def test_builtin_exceptions(self, exc, status_code, code):
        response = handle(exc)

        assert response.status_code == status_code
        assert response.data['code'] == code

    def test_unexpected_exception_hides_details(self):
        response = handle(RuntimeError('database password is hunter2'))

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Internal error.', 'code': 'internal'}
