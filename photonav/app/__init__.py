"""Application package for the photo navigation kiosk backend."""

from .application import Application, RuntimeOverrides, SessionDependencies
from .config import AppConfig, load_config

__all__ = ["Application", "RuntimeOverrides", "SessionDependencies", "AppConfig", "load_config"]
