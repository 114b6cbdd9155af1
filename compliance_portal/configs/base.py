"""
Settings base shared by every config module.

Each concern declares its own ``env_prefix``; this base only fixes how
``.env`` is read so unrelated keys from other modules are ignored.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Reads ``.env`` (UTF-8), case-insensitive, ignoring unknown keys."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
