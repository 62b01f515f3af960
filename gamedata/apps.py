"""Django app configuration for GameData."""

from __future__ import annotations

from django.apps import AppConfig


class GameDataConfig(AppConfig):
    """Battle logs, new-log presets, and legacy conversion."""

    name = "gamedata"
    verbose_name = "Battle logs"
