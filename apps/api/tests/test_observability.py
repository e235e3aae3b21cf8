"""
Tests for observability layer.

Validates that metrics, logs, and events are emitted correctly
without logging patient data.
"""
import json
import logging
from unittest.mock import MagicMock, Mock, patch

import pytest
from django.db import DatabaseError

from apps.authz.models import User
from apps.core.observability.correlation import (
    RequestCorrelationMiddleware,
    bind_task_context,
    clear_request_context,
    get_request_id,
)
from apps.core.observability.events import (
    log_booking_approved,
    log_booking_rejected,
    log_domain_event,
)
from apps.core.observability.logging import (
    CorrelationFilter,
    SanitizedJSONFormatter,
    sanitize_dict,
)
from apps.core.observability.metrics import metrics
from apps.core.utils import mask_email


class TestRequestCorrelation:
    """Test request correlation middleware."""

    def test_generates_request_id_if_missing(self):
        middleware = RequestCorrelationMiddleware(lambda r: Mock(status_code=200))
        request = Mock(META={}, path='/public/availability', method='GET')
        request.user = Mock(is_authenticated=False)

        middleware.process_request(request)

        assert request.request_id
        assert get_request_id() == request.request_id
        clear_request_context()

    def test_propagates_existing_request_id(self):
        middleware = RequestCorrelationMiddleware(lambda r: Mock(status_code=200))
        request = Mock(META={'HTTP_X_REQUEST_ID': 'req-123'}, path='/healthz', method='GET')
        request.user = Mock(is_authenticated=False)

        middleware.process_request(request)

        assert request.request_id == 'req-123'
        clear_request_context()

    def test_adds_request_id_to_response_and_clears_context(self):
        middleware = RequestCorrelationMiddleware(lambda r: Mock(status_code=200))
        request = Mock(META={}, path='/healthz', method='GET', request_id='req-456', trace_id=None)
        del request.start_time

        result = middleware.process_response(request, {})

        assert result['X-Request-ID'] == 'req-456'
        assert get_request_id() is None

    def test_task_context_reaches_log_records(self):
        bind_task_context('booking-request-42', user_id='user-7')
        record = logging.LogRecord('test', logging.INFO, __file__, 1, 'msg', None, None)

        CorrelationFilter().filter(record)
        clear_request_context()

        assert record.request_id == 'booking-request-42'
        assert record.user_id == 'user-7'
        assert not hasattr(record, 'user_roles')

    @pytest.mark.django_db
    def test_authenticated_request_binds_user_without_queries(self, django_assert_num_queries):
        middleware = RequestCorrelationMiddleware(lambda r: Mock(status_code=200))
        request = Mock(META={}, path='/api/v1/booking/requests', method='POST')
        request.user = User(id='8d1f6a4e-0000-4000-8000-000000000001', email='staff@example.com')

        with django_assert_num_queries(0):
            middleware.process_request(request)

        assert get_request_id() == request.request_id
        payload = json.loads(SanitizedJSONFormatter().format(self._record()))
        clear_request_context()

        assert payload['user_id'] == '8d1f6a4e-0000-4000-8000-000000000001'
        assert 'user_roles' not in payload

    def _record(self):
        record = logging.LogRecord('test', logging.INFO, __file__, 1, 'msg', None, None)
        CorrelationFilter().filter(record)
        return record


class TestSanitization:
    """Test patient data sanitization."""

    def test_sanitize_dict_redacts_sensitive_fields(self):
        data = {
            'booking_request_id': 'br-1',
            'first_name': 'Eva',
            'email': 'eva@example.com',
            'phone': '+420601123456',
            'dob': '1988-04-12',
            'pre_assessment_url': 'https://book.example.test/#/intake/start?t=secret',
            'status': 'approved',
        }

        sanitized = sanitize_dict(data)

        assert sanitized['booking_request_id'] == 'br-1'
        assert sanitized['status'] == 'approved'
        for key in ('first_name', 'email', 'phone', 'dob', 'pre_assessment_url'):
            assert sanitized[key] == '[REDACTED]'

    def test_sanitize_dict_handles_nested_objects(self):
        data = {
            'booking': {
                'id': 'br-2',
                'patient': {'last_name': 'Svobodova', 'id': 'patient-123'},
            },
            'items': [{'token': 'abc', 'kind': 'new'}],
        }

        sanitized = sanitize_dict(data)

        assert sanitized['booking']['patient'] == {'last_name': '[REDACTED]', 'id': 'patient-123'}
        assert sanitized['items'] == [{'token': '[REDACTED]', 'kind': 'new'}]

    def test_json_formatter_redacts_extra_fields(self):
        record = logging.LogRecord('test', logging.INFO, __file__, 1, 'Booking approved', None, None)
        record.booking_request_id = 'br-3'
        record.email = 'eva@example.com'
        record.details = {'phone': '+420601123456', 'minutes': 45}

        payload = json.loads(SanitizedJSONFormatter().format(record))

        assert payload['message'] == 'Booking approved'
        assert payload['booking_request_id'] == 'br-3'
        assert payload['email'] == '[REDACTED]'
        assert payload['details'] == {'phone': '[REDACTED]', 'minutes': 45}

    @pytest.mark.parametrize('value,expected', [
        ('john.doe@example.com', 'j***e@example.com'),
        ('ab@example.com', 'a***b@example.com'),
        ('a@example.com', '***'),
        ('not-an-email', '***'),
        (None, '***'),
    ])
    def test_mask_email(self, value, expected):
        assert mask_email(value) == expected


class TestMetricsEmission:
    """Test that metrics are defined with bounded labels."""

    @pytest.mark.parametrize('name', [
        'exceptions_total',
        'availability_requests_total',
        'availability_slots_returned',
        'availability_compute_duration_seconds',
        'booking_requests_created_total',
        'booking_resolutions_total',
        'booking_resolution_duration_seconds',
        'booking_side_effect_failures_total',
        'appointment_reservations_total',
        'patient_resolutions_total',
        'notifications_total',
        'intake_invites_total',
        'public_throttled_total',
    ])
    def test_metric_defined(self, name):
        assert hasattr(metrics, name)

    def test_track_duration_observes_even_on_error(self):
        histogram = Mock()

        @metrics.track_duration(histogram)
        def explode():
            raise RuntimeError('boom')

        with pytest.raises(RuntimeError):
            explode()

        histogram.observe.assert_called_once()


class TestDomainEvents:
    """Test domain event logging."""

    @patch('apps.core.observability.events.logger')
    def test_log_domain_event_structure(self, mock_logger):
        log_domain_event(
            'booking.request.created',
            entity_type='BookingRequest',
            entity_id='br-123',
            entity_ids={'clinic_id': 'clinic-1'},
            result='success',
            email='eva@example.com',
            start_utc_ms=1,
        )

        mock_logger.info.assert_called_once()
        extra = mock_logger.info.call_args[1]['extra']
        assert extra['event'] == 'booking.request.created'
        assert extra['entity_id'] == 'br-123'
        assert extra['clinic_id'] == 'clinic-1'
        assert extra['email'] == '[REDACTED]'
        assert extra['start_utc_ms'] == 1

    @patch('apps.core.observability.events.logger')
    def test_rejection_logged_as_warning(self, mock_logger):
        log_booking_rejected(Mock(id='br-1', clinic_id='c-1'), 'Invalid booking time range.')

        mock_logger.warning.assert_called_once()
        extra = mock_logger.warning.call_args[1]['extra']
        assert extra['event'] == 'booking.request.rejected'
        assert extra['reason'] == 'Invalid booking time range.'

    @patch('apps.core.observability.events.logger')
    def test_approval_carries_ids_only(self, mock_logger):
        log_booking_approved(
            Mock(id='br-1', clinic_id='c-1'),
            Mock(id='appt-1', patient_id='p-1'),
            patient_created=True,
        )

        extra = mock_logger.info.call_args[1]['extra']
        assert extra['appointment_id'] == 'appt-1'
        assert extra['patient_id'] == 'p-1'
        assert extra['patient_created'] is True
        assert 'patient_name' not in extra


@pytest.mark.django_db
class TestHealthChecks:
    """Test health check endpoints."""

    def test_healthz_returns_200(self, client):
        response = client.get('/healthz')

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'ok'
        assert 'version' in data
        assert response['X-Request-ID']

    def test_readyz_ready(self, client):
        response = client.get('/readyz')

        assert response.status_code == 200
        assert response.json() == {
            'status': 'ready',
            'checks': {'database': True, 'scheduling_schema': True},
        }

    @patch('apps.core.observability.health.connection')
    def test_readyz_fails_on_db_error(self, mock_connection, client):
        mock_connection.cursor.side_effect = DatabaseError('DB connection failed')

        response = client.get('/readyz')

        assert response.status_code == 503
        data = response.json()
        assert data['status'] == 'not_ready'
        assert data['checks']['database'] is False


class TestTracing:

    @patch('apps.core.observability.tracing.tracer')
    def test_trace_span_sets_attributes(self, mock_tracer):
        from apps.core.observability.tracing import trace_span

        mock_span = MagicMock()
        mock_tracer.start_as_current_span.return_value.__enter__.return_value = mock_span

        with trace_span('resolve_booking_request', attributes={'booking_request_id': 'br-1', 'skip': None}):
            pass

        mock_span.set_attribute.assert_called_once_with('booking_request_id', 'br-1')

    @patch('apps.core.observability.tracing.tracer')
    def test_trace_span_records_errors(self, mock_tracer):
        from apps.core.observability.tracing import trace_span

        mock_span = MagicMock()
        mock_tracer.start_as_current_span.return_value.__enter__.return_value = mock_span

        with pytest.raises(ValueError):
            with trace_span('op'):
                raise ValueError('bad')

        mock_span.set_attribute.assert_called_with('error.type', 'ValueError')
        mock_span.set_status.assert_called_once()
