"""Configuration module for sonarscan."""

from sonarscan.config.loader import load_config, get_config_path, save_config
from sonarscan.config.runtime import resolve_java
from sonarscan.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path", "save_config", "resolve_java"]
