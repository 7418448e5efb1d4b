"""
Файлы клиентов в S3: presigned PUT для загрузки напрямую из браузера,
затем подтверждение (метаданные пишутся в CustomerFile).
"""
import logging
import re
import time
import uuid

import boto3
from botocore.client import Config
from django.conf import settings

from core.exceptions import BadRequest, ServiceMisconfigured
from .models import CustomerFile

logger = logging.getLogger(__name__)

_s3_client = None


def get_s3_client():
    global _s3_client
    if _s3_client is None:
        _s3_client = boto3.client(
            's3',
            region_name=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            config=Config(signature_version='s3v4'),
        )
    return _s3_client


class FilesService:

    def __init__(self, s3_client=None):
        self._s3_client = s3_client

    @property
    def s3_client(self):
        return self._s3_client or get_s3_client()

    @staticmethod
    def _get_bucket():
        bucket = getattr(settings, 'S3_BUCKET', '')
        if not bucket:
            logger.critical('S3_BUCKET is not configured, file uploads are unavailable')
            raise ServiceMisconfigured('File storage bucket is not configured')
        return bucket

    @staticmethod
    def build_key(organization_id, customer_id, file_name):
        safe_name = re.sub(r'\s+', '-', file_name)
        millis = int(time.time() * 1000)
        return f'customers/{organization_id}/{customer_id}/{millis}-{uuid.uuid4()}-{safe_name}'

    def create_upload_url(self, organization_id, customer_id, file_name, content_type, size_bytes):
        bucket = self._get_bucket()
        key = self.build_key(organization_id, customer_id, file_name)
        upload_url = self.s3_client.generate_presigned_url(
            'put_object',
            Params={
                'Bucket': bucket,
                'Key': key,
                'ContentType': content_type,
                'ContentLength': size_bytes,
            },
            ExpiresIn=settings.S3_UPLOAD_URL_EXPIRES,
        )
        return {'upload_url': upload_url, 'key': key}

    @staticmethod
    def confirm_upload(organization_id, customer_id, uploaded_by_id, key, file_name, category,
                       content_type, size_bytes):
        # Ключ должен лежать в префиксе этого клиента этой организации
        if not key.startswith(f'customers/{organization_id}/{customer_id}/'):
            raise BadRequest('Invalid file key')
        customer_file = CustomerFile.objects.create(
            organization_id=organization_id,
            customer_id=customer_id,
            file_name=file_name,
            category=category,
            s3_key=key,
            content_type=content_type,
            size_bytes=size_bytes,
            uploaded_by_id=uploaded_by_id,
        )
        logger.info(f'File {customer_file.pk} ({category}) stored for customer {customer_id}')
        return customer_file

    @staticmethod
    def list_files(organization_id, customer_id):
        return CustomerFile.objects.for_organization(organization_id).filter(
            customer_id=customer_id,
        ).order_by('-uploaded_at')
