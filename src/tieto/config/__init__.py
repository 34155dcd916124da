"""
Configuration loading.
"""

from .config_loader import load_config, read_config_file

__all__ = ["load_config", "read_config_file"]
