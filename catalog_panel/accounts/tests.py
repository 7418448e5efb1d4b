"""
Тесты проверки bearer-токенов и upsert пользователя.

Запуск:
  python manage.py test accounts -v2
"""
from django.test import RequestFactory, TestCase, override_settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.test import APIClient

from core.testing import PUBLIC_KEY, auth_header, generate_rsa_keypair, make_token
from tenants.models import Organization, OrganizationMembership
from .authentication import BearerTokenAuthentication
from .models import User
from .services import AuthService


class ExtractTokenTests(TestCase):

    def test_missing_header(self):
        with self.assertRaisesMessage(AuthenticationFailed, 'Missing Authorization header'):
            AuthService.extract_token_from_header(None)
        with self.assertRaisesMessage(AuthenticationFailed, 'Missing Authorization header'):
            AuthService.extract_token_from_header('')

    def test_scheme_is_case_insensitive(self):
        self.assertEqual(AuthService.extract_token_from_header('bearer abc'), 'abc')
        self.assertEqual(AuthService.extract_token_from_header('BEARER abc'), 'abc')

    def test_malformed_headers(self):
        for header in ('Token abc', 'Bearer', 'Bearer a b', 'Bearer  abc', 'abc'):
            with self.subTest(header=header):
                with self.assertRaisesMessage(AuthenticationFailed, 'Invalid Authorization header'):
                    AuthService.extract_token_from_header(header)


class VerifyTokenTests(TestCase):

    def setUp(self):
        self.service = AuthService(public_key=PUBLIC_KEY)

    def test_valid_rs256_token(self):
        claims = self.service.verify_token(make_token('user_1', email='a@b.test'))
        self.assertEqual(claims['sub'], 'user_1')
        self.assertEqual(claims['email'], 'a@b.test')

    def test_token_signed_by_other_key_is_rejected(self):
        other_private, _ = generate_rsa_keypair()
        with self.assertRaisesMessage(AuthenticationFailed, 'Invalid token'):
            self.service.verify_token(make_token('user_1', private_key=other_private))

    def test_hs256_token_is_rejected(self):
        # Токен, подписанный публичным ключом как HMAC-секретом, не должен пройти
        token = make_token('user_1', private_key='shared-secret', algorithm='HS256')
        with self.assertRaisesMessage(AuthenticationFailed, 'Invalid token'):
            self.service.verify_token(token)

    def test_garbage_token(self):
        with self.assertRaisesMessage(AuthenticationFailed, 'Invalid token'):
            self.service.verify_token('not-a-jwt')

    def test_expired_token(self):
        with self.assertRaisesMessage(AuthenticationFailed, 'Invalid token'):
            self.service.verify_token(make_token('user_1', exp=1))

    def test_missing_public_key(self):
        service = AuthService(public_key='')
        with self.assertRaisesMessage(AuthenticationFailed, 'Authentication is not configured'):
            service.verify_token(make_token('user_1'))


class UserUpsertTests(TestCase):

    def test_creates_user_with_claims(self):
        user = AuthService.get_or_create_user_from_claims({
            'sub': 'user_1', 'email': 'one@club.test', 'name': 'One Person',
        })
        self.assertEqual(user.external_id, 'user_1')
        self.assertEqual(user.email, 'one@club.test')
        self.assertEqual(user.name, 'One Person')
        self.assertEqual(user.user_type, User.UserType.STAFF)

    def test_same_subject_updates_single_row(self):
        first = AuthService.get_or_create_user_from_claims({'sub': 'user_1', 'email': 'old@club.test'})
        second = AuthService.get_or_create_user_from_claims({'sub': 'user_1', 'email': 'new@club.test'})
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(User.objects.filter(external_id='user_1').count(), 1)
        second.refresh_from_db()
        self.assertEqual(second.email, 'new@club.test')

    def test_email_and_name_fallbacks(self):
        user = AuthService.get_or_create_user_from_claims({
            'sub': 'user_2', 'email_address': 'alt@club.test',
            'first_name': 'Ann', 'last_name': 'Lee',
        })
        self.assertEqual(user.email, 'alt@club.test')
        self.assertEqual(user.name, 'Ann Lee')

        user = AuthService.get_or_create_user_from_claims({'sub': 'user_3'})
        self.assertEqual(user.email, 'user_3@clerk.local')
        self.assertIsNone(user.name)

    def test_long_name_is_truncated_to_column(self):
        user = AuthService.get_or_create_user_from_claims({'sub': 'user_4', 'name': 'N' * 300})
        user.refresh_from_db()
        self.assertEqual(user.name, 'N' * 255)

    def test_missing_subject(self):
        with self.assertRaisesMessage(AuthenticationFailed, 'Token missing subject'):
            AuthService.get_or_create_user_from_claims({'email': 'x@club.test'})


@override_settings(CLERK_JWT_PUBLIC_KEY=PUBLIC_KEY)
class BearerTokenAuthenticationTests(TestCase):

    def setUp(self):
        self.factory = RequestFactory()
        self.auth = BearerTokenAuthentication()

    def test_authenticate_returns_user_and_claims(self):
        request = self.factory.get('/api/auth/me/', HTTP_AUTHORIZATION=auth_header(make_token('user_9')))
        user, claims = self.auth.authenticate(request)
        self.assertEqual(user.external_id, 'user_9')
        self.assertEqual(claims['sub'], 'user_9')

    def test_authenticate_header_is_bearer(self):
        self.assertEqual(self.auth.authenticate_header(self.factory.get('/')), 'Bearer')


@override_settings(CLERK_JWT_PUBLIC_KEY=PUBLIC_KEY, ALLOWED_HOSTS=['*'])
class MeViewTests(TestCase):

    def test_me_without_token_is_401(self):
        response = APIClient().get('/api/auth/me/')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['detail'], 'Missing Authorization header')

    def test_me_with_invalid_token_is_401(self):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION='Bearer broken')
        response = client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['detail'], 'Invalid token')

    def test_me_lists_staff_organizations(self):
        user = User.objects.create_user(external_id='user_me')
        staff_org = Organization.objects.create(slug='oakmont', name='Oakmont')
        customer_org = Organization.objects.create(slug='elm', name='Elm')
        OrganizationMembership.objects.create(organization=staff_org, user=user)
        OrganizationMembership.objects.create(
            organization=customer_org, user=user, role=OrganizationMembership.Role.CUSTOMER,
        )

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=auth_header(make_token('user_me', name='Me')))
        response = client.get('/api/auth/me/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['external_id'], 'user_me')
        self.assertEqual(response.data['name'], 'Me')
        self.assertEqual([o['slug'] for o in response.data['organizations']], ['oakmont'])

