from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FilterSettings(BaseSettings):
    """Settings for rule extraction and rendering."""

    model_config = SettingsConfigDict(
        env_prefix="FILTER_",
    )

    tag_key: str = Field(
        default="filter",
        min_length=1,
        description="Field metadata key holding the filter annotation",
    )

    strict_operators: bool = Field(
        default=False,
        description="Raise on unknown operators instead of skipping the rule",
    )

    date_range_start_suffix: str = Field(
        default=" 00:00:00",
        description="Appended to the first date of a date_range value",
    )

    date_range_end_suffix: str = Field(
        default=" 23:59:59",
        description="Appended to the second date of a date_range value",
    )


# Global settings instance that can be accessed throughout the application
_settings: FilterSettings | None = None


def get_settings() -> FilterSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = FilterSettings()
    return _settings


def set_settings(settings: FilterSettings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings
