"""
Тесты сквозных компонентов: CORS, метрики запросов, health checks,
разбор query-параметров.
"""
import re

from corsheaders.middleware import CorsMiddleware
from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings
from django.utils.cache import patch_vary_headers

from catalog_panel.cors import split_cors_origins
from .exceptions import BadRequest
from .utils import parse_bool, parse_uuid, parse_uuid_list, split_csv

ALLOWED = 'https://app.catalog.test'

CORS_ONLY_ALLOWED = {
    'CORS_ALLOW_ALL_ORIGINS': False,
    'CORS_ALLOWED_ORIGINS': [ALLOWED],
    'CORS_ALLOWED_ORIGIN_REGEXES': [],
}


class SplitCorsOriginsTests(SimpleTestCase):

    def test_exact_entries_are_normalized(self):
        allow_all, exact, patterns = split_cors_origins([' https://APP.catalog.test/ ', ''])
        self.assertFalse(allow_all)
        self.assertEqual(exact, [ALLOWED])
        self.assertEqual(patterns, [])

    def test_wildcard_entries_become_regexes(self):
        _, exact, patterns = split_cors_origins(['http://*.catalog.localhost:5173', 'http://localhost:*'])
        self.assertEqual(exact, [])

        def allowed(origin):
            return any(re.match(p, origin) for p in patterns)

        self.assertTrue(allowed('http://oakmont.catalog.localhost:5173'))
        self.assertTrue(allowed('http://localhost:3000'))
        self.assertFalse(allowed('http://oakmont.catalog.localhost:8080'))
        self.assertFalse(allowed('https://localhost.evil.test'))

    def test_empty_list_or_star_allows_all(self):
        self.assertTrue(split_cors_origins([])[0])
        allow_all, exact, patterns = split_cors_origins(['*'])
        self.assertTrue(allow_all)
        self.assertEqual((exact, patterns), ([], []))


@override_settings(ALLOWED_HOSTS=['*'], **CORS_ONLY_ALLOWED)
class CorsTests(TestCase):

    def test_preflight_allowed(self):
        response = self.client.options(
            '/api/customers/', HTTP_ORIGIN=ALLOWED, HTTP_ACCESS_CONTROL_REQUEST_METHOD='PATCH',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Access-Control-Allow-Origin'], ALLOWED)
        self.assertEqual(response['Access-Control-Allow-Credentials'], 'true')
        self.assertIn('x-catalog-organization', response['Access-Control-Allow-Headers'].lower())
        self.assertIn('PATCH', response['Access-Control-Allow-Methods'])

    def test_preflight_blocked(self):
        with self.assertLogs('core.signals', level='WARNING'):
            response = self.client.options(
                '/api/customers/', HTTP_ORIGIN='https://evil.test', HTTP_ACCESS_CONTROL_REQUEST_METHOD='GET',
            )
        self.assertFalse(response.has_header('Access-Control-Allow-Origin'))

    def test_api_response_gets_cors_headers(self):
        response = self.client.get('/api/organizations/current/', HTTP_ORIGIN=ALLOWED)
        self.assertEqual(response['Access-Control-Allow-Origin'], ALLOWED)
        self.assertIn('origin', response['Vary'].lower())

    def test_blocked_origin_gets_no_cors_headers(self):
        with self.assertLogs('core.signals', level='WARNING'):
            response = self.client.get('/api/health/live/', HTTP_ORIGIN='https://evil.test')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.has_header('Access-Control-Allow-Origin'))

    def test_existing_vary_values_are_kept(self):
        def get_response(request):
            response = HttpResponse('{}', content_type='application/json')
            patch_vary_headers(response, ('Accept', 'Cookie'))
            return response

        request = RequestFactory().get('/api/customers/', HTTP_ORIGIN=ALLOWED)
        response = CorsMiddleware(get_response)(request)

        vary = [v.strip().lower() for v in response['Vary'].split(',')]
        self.assertEqual(sorted(vary), ['accept', 'cookie', 'origin'])
        self.assertEqual(response['Access-Control-Allow-Origin'], ALLOWED)


@override_settings(ALLOWED_HOSTS=['*'])
class RequestMetricsMiddlewareTests(TestCase):

    def test_duration_header_and_log_line(self):
        with self.assertLogs('request_metrics', level='INFO') as logs:
            response = self.client.get('/api/health/live/')

        self.assertIn('X-Request-Duration', response)
        self.assertIn('path=/api/health/live/', logs.output[0])
        self.assertIn('status=200', logs.output[0])
        self.assertIn('user=anonymous', logs.output[0])


@override_settings(ALLOWED_HOSTS=['*'])
class HealthCheckTests(TestCase):

    def test_live(self):
        response = self.client.get('/api/health/live/')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['alive'])

    def test_ready(self):
        response = self.client.get('/api/health/ready/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'ready': True})

    @override_settings(CLERK_JWT_PUBLIC_KEY='')
    def test_health_reports_missing_key(self):
        response = self.client.get('/api/health/')
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['checks']['database'], 'ok')
        self.assertEqual(body['checks']['jwt_public_key'], 'missing')

    def test_root(self):
        response = self.client.get('/')
        self.assertEqual(response.json()['status'], 'ok')


class QueryParamParsingTests(SimpleTestCase):

    def test_split_csv(self):
        self.assertEqual(split_csv('a, b,,c '), ['a', 'b', 'c'])
        self.assertEqual(split_csv(None), [])

    def test_parse_uuid(self):
        value = '6f1c5a9e-1d2b-4c3d-9e8f-0a1b2c3d4e5f'
        self.assertEqual(str(parse_uuid(value)), value)
        with self.assertRaisesMessage(BadRequest, 'Invalid locationId'):
            parse_uuid('nope', 'locationId')
        with self.assertRaisesMessage(BadRequest, 'Invalid planIds'):
            parse_uuid_list(f'{value},bad', 'planIds')

    def test_parse_bool(self):
        self.assertIs(parse_bool('TRUE'), True)
        self.assertIs(parse_bool('false'), False)
        self.assertIsNone(parse_bool('yes'))
        self.assertIsNone(parse_bool(None))
