"""App configuration for the core Django app."""

from __future__ import annotations

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Parsers, document persistence, services, and management commands."""

    name = "core"
    verbose_name = "Calculator core"
