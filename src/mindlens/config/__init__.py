"""
MindLens Configuration Module

Provides centralized configuration management with:
- Environment-based settings loading
- Per-collaborator backend selection and timeouts
- Secure handling of secrets
"""

from mindlens.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
