"""
E-Commerce Reporting Engine
Configuration Module
"""
from .settings import Settings, ReportSettings, get_settings
from .logging import configure_logging, get_logger, report_context

__all__ = ["Settings", "ReportSettings", "get_settings", "configure_logging", "get_logger", "report_context"]
