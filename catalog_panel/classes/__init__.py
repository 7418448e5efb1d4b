"""Занятия: шаблоны расписания, сгенерированные сессии и списки участников."""
