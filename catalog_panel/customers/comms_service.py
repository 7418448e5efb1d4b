"""
Коммуникации с клиентом: email через Django mail backend, SMS пока заглушка.
Каждая отправка фиксируется в журнале взаимодействий.
"""
import logging
from email.utils import make_msgid

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils import timezone
from django.utils.html import strip_tags

from core.exceptions import ServiceMisconfigured
from .models import EmailMessage, Interaction, SmsMessage
from .services import InteractionsService

logger = logging.getLogger(__name__)


class CommsService:
    """Сервис для отправки email и SMS клиентам"""

    def __init__(self):
        self.from_email = getattr(settings, 'DEFAULT_FROM_EMAIL', '')

    def _ensure_from_email(self):
        if not self.from_email:
            logger.error('DEFAULT_FROM_EMAIL is not configured. Cannot send email.')
            raise ServiceMisconfigured('Email sender is not configured')
        return self.from_email

    def send_email(self, organization_id, customer_id, created_by_id, to, subject, body, template_name=None):
        from_email = self._ensure_from_email()

        message_id = make_msgid(domain=from_email.split('@')[-1])
        message = EmailMultiAlternatives(
            subject=subject,
            body=strip_tags(body),
            from_email=from_email,
            to=[to],
            headers={'Message-ID': message_id},
        )
        message.attach_alternative(body, 'text/html')
        # Ошибка SMTP пробрасывается выше: запись о письме не создаём
        message.send(fail_silently=False)
        logger.info(f'Email sent to customer {customer_id} ({to}), subject="{subject}"')

        now = timezone.now()
        email_message = EmailMessage.objects.create(
            organization_id=organization_id,
            customer_id=customer_id,
            template_name=template_name,
            to_email=to,
            subject=subject,
            body=body,
            status=EmailMessage.Status.SENT,
            provider_message_id=message_id,
            created_by_id=created_by_id,
            sent_at=now,
        )

        InteractionsService.log_interaction(
            organization_id,
            customer_id,
            created_by_id=created_by_id,
            interaction_type=Interaction.InteractionType.EMAIL,
            channel=Interaction.Channel.EMAIL,
            title=subject,
            body=body,
            related_email_id=email_message.pk,
        )
        return email_message

    def send_sms(self, organization_id, customer_id, created_by_id, to, body, template_name=None):
        # TODO: подключить SMS-провайдера; пока сообщение только сохраняется со статусом STUB_SENT
        sms_message = SmsMessage.objects.create(
            organization_id=organization_id,
            customer_id=customer_id,
            template_name=template_name,
            to_phone=to,
            body=body,
            status=SmsMessage.Status.STUB_SENT,
            created_by_id=created_by_id,
        )
        logger.info(f'SMS stub stored for customer {customer_id} ({to})')

        InteractionsService.log_interaction(
            organization_id,
            customer_id,
            created_by_id=created_by_id,
            interaction_type=Interaction.InteractionType.SMS,
            channel=Interaction.Channel.SMS,
            title='SMS sent',
            body=body,
            related_sms_id=sms_message.pk,
        )
        return sms_message
