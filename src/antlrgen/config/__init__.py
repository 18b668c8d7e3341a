"""Configuration loading for antlrgen."""

from .project_config import ProjectConfig, load_project_config

__all__ = ["ProjectConfig", "load_project_config"]
