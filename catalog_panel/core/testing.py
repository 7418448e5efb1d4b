"""
Общие помощники для тестов приложений: RSA-ключи, подписанные токены и
базовый TestCase с готовой организацией и сотрудником.
"""
import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import User
from tenants.models import Organization, OrganizationMembership


def generate_rsa_keypair():
    """Новая пара 2048 бит: (private_pem, public_pem)."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


PRIVATE_KEY, PUBLIC_KEY = generate_rsa_keypair()


def make_token(sub='user_test', private_key=PRIVATE_KEY, algorithm='RS256', **claims):
    payload = {'sub': sub, **claims}
    return jwt.encode(payload, private_key, algorithm=algorithm)


def auth_header(token):
    return f'Bearer {token}'


@override_settings(CLERK_JWT_PUBLIC_KEY=PUBLIC_KEY, PLATFORM_DOMAIN='catalog.app', ALLOWED_HOSTS=['*'])
class OrganizationAPITestCase(TestCase):
    """
    Организация 'oakmont' и сотрудник с ролью ORG_ADMIN.
    self.client уже несёт токен и заголовок организации.
    """

    role = OrganizationMembership.Role.ORG_ADMIN
    external_id = 'user_staff'

    @classmethod
    def setUpTestData(cls):
        cls.organization = Organization.objects.create(slug='oakmont', name='Oakmont Club')
        cls.other_organization = Organization.objects.create(slug='riverside', name='Riverside Club')
        cls.user = User.objects.create_user(external_id=cls.external_id, email='staff@oakmont.test')
        cls.membership = OrganizationMembership.objects.create(
            organization=cls.organization, user=cls.user, role=cls.role,
        )

    def setUp(self):
        self.client = self.make_client()

    def make_client(self, sub=None, slug='oakmont'):
        client = APIClient()
        credentials = {'HTTP_AUTHORIZATION': auth_header(make_token(sub or self.external_id))}
        if slug:
            credentials['HTTP_X_CATALOG_ORGANIZATION'] = slug
        client.credentials(**credentials)
        return client
