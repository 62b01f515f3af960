"""Django app configuration for the Definitions layer."""

from __future__ import annotations

from django.apps import AppConfig


class DefinitionsConfig(AppConfig):
    """The wiki-derived spirit catalog; no database tables."""

    name = "definitions"
    verbose_name = "Spirit definitions"
