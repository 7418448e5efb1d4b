"""
Генерация сессий из шаблона занятия.

Обход идёт по дням от курсора (max(start_date, from_date)) до end_date
включительно; день подходит, если его ISO номер (пн=1 ... вс=7) есть в
days_of_week. Время начала/окончания берётся из "HH:MM" шаблона и
привязывается к часовому поясу организации.
"""
import logging
from datetime import datetime, time, timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from .models import ClassSession

logger = logging.getLogger(__name__)


def parse_hhmm(value):
    """'07:30' → time(7, 30)"""
    hours, _, minutes = str(value).partition(':')
    return time(int(hours or 0), int(minutes or 0))


def organization_today(organization):
    return timezone.localdate(timezone=organization.tzinfo)


def occurrence_dates(start_date, end_date, days_of_week, from_date=None, today=None, horizon_days=None):
    """
    Даты, на которые приходится занятие.

    Без end_date шаблон бессрочный: обход ограничен horizon_days днями
    после max(курсор, today).
    """
    cursor = max(start_date, from_date) if from_date else start_date
    days = set(days_of_week or [])

    last_day = end_date
    if last_day is None:
        if horizon_days is None:
            horizon_days = settings.CLASS_SESSION_HORIZON_DAYS
        anchor = max(cursor, today) if today else cursor
        last_day = anchor + timedelta(days=horizon_days)

    while cursor <= last_day:
        if cursor.isoweekday() in days:
            yield cursor
        cursor += timedelta(days=1)


def build_sessions(template, from_date=None, today=None, skip_starts=()):
    """Несохранённые ClassSession для шаблона (снимок его полей)."""
    tz = template.organization.tzinfo
    start_clock = parse_hhmm(template.start_time)
    end_clock = parse_hhmm(template.end_time)
    skip_starts = set(skip_starts)

    sessions = []
    for day in occurrence_dates(
        template.start_date, template.end_date, template.days_of_week,
        from_date=from_date, today=today,
    ):
        start = timezone.make_aware(datetime.combine(day, start_clock), tz)
        if start in skip_starts:
            continue
        sessions.append(ClassSession(
            organization_id=template.organization_id,
            template=template,
            start_datetime=start,
            end_datetime=timezone.make_aware(datetime.combine(day, end_clock), tz),
            location_id=template.location_id,
            room=template.room,
            max_participants=template.max_participants,
            instructor_user_id=template.primary_instructor_user_id,
            instructor_display_name=template.instructor_display_name,
            status=ClassSession.Status.SCHEDULED,
            cancel_reason=None,
        ))
    return sessions


def generate_sessions(template, from_date=None, today=None, skip_starts=()):
    """Создать сессии одной вставкой; если ни один день не подошёл, ничего не пишем."""
    if today is None:
        today = organization_today(template.organization)
    sessions = build_sessions(template, from_date=from_date, today=today, skip_starts=skip_starts)
    if not sessions:
        return []
    created = ClassSession.objects.bulk_create(sessions)
    logger.info(f'Generated {len(created)} sessions for class template {template.pk}')
    return created


def regenerate_future_sessions(template, today=None):
    """
    Пересоздать будущие сессии после изменения шаблона.

    Удаляются только сессии с началом не раньше сегодняшнего дня и без
    записей; прошедшие и сессии с участниками остаются как есть, а их даты
    повторно не генерируются.
    """
    tz = template.organization.tzinfo
    if today is None:
        today = organization_today(template.organization)
    day_start = timezone.make_aware(datetime.combine(today, time.min), tz)

    with transaction.atomic():
        future = list(
            ClassSession.objects.for_organization(template.organization_id)
            .filter(template=template, start_datetime__gte=day_start)
            .annotate(roster_count=Count('roster_entries'))
        )
        removable = [session.pk for session in future if session.roster_count == 0]
        preserved = {session.start_datetime for session in future if session.roster_count > 0}

        deleted, _ = ClassSession.objects.filter(pk__in=removable).delete()
        logger.info(
            f'Class template {template.pk}: removed {deleted} future sessions, '
            f'kept {len(preserved)} with roster'
        )
        return generate_sessions(template, from_date=today, today=today, skip_starts=preserved)
