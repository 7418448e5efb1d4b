from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """Менеджер пользователей, где уникальный идентификатор: subject id из JWT."""

    def create_user(self, external_id, email='', password=None, **extra_fields):
        if not external_id:
            raise ValueError(_('external_id обязателен'))
        email = self.normalize_email(email)
        user = self.model(external_id=external_id, email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, external_id, email='', password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('user_type', User.UserType.PLATFORM_ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser должен иметь is_staff=True'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser должен иметь is_superuser=True'))

        return self.create_user(external_id, email, password, **extra_fields)


class User(AbstractUser):
    """
    Локальная копия identity из внешнего провайдера (Clerk).
    Создаётся при первой успешной проверке JWT, обновляется при каждой следующей.
    """

    class UserType(models.TextChoices):
        STAFF = 'STAFF', 'Сотрудник'
        PLATFORM_ADMIN = 'PLATFORM_ADMIN', 'Администратор платформы'

    username = None
    external_id = models.CharField(
        _('subject id'),
        max_length=255,
        unique=True,
        help_text=_('Claim sub из JWT внешнего провайдера'),
    )
    email = models.EmailField(_('email'), blank=True)
    name = models.CharField(_('имя'), max_length=255, null=True, blank=True)
    user_type = models.CharField(
        _('тип пользователя'),
        max_length=20,
        choices=UserType.choices,
        default=UserType.STAFF,
    )
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'external_id'
    REQUIRED_FIELDS = ['email']

    objects = UserManager()

    class Meta:
        verbose_name = _('пользователь')
        verbose_name_plural = _('пользователи')

    def __str__(self):
        return self.name or self.email or self.external_id
