"""
Configuration loading for the sleep report pipeline.
"""

from sleep_report.config.config_manager import ConfigManager, configure_logging

__all__ = ['ConfigManager', 'configure_logging']
