from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trackmerge.analysis.smoothing import check_window_size


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", validation_alias="TRACKMERGE_LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="TRACKMERGE_LOG_FILE")
    log_rotation: str = Field(default="10 MB", validation_alias="TRACKMERGE_LOG_ROTATION")
    log_retention: str = Field(default="7 days", validation_alias="TRACKMERGE_LOG_RETENTION")
    gpx_creator: str = Field(default="Fitness Track Merger", validation_alias="TRACKMERGE_GPX_CREATOR")
    merged_file_name: str = Field(default="merged_activity.gpx", validation_alias="TRACKMERGE_MERGED_FILE_NAME")
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, validation_alias="TRACKMERGE_MAX_UPLOAD_BYTES")  # 20MB
    default_smoothing_window: int = Field(default=1, validation_alias="TRACKMERGE_DEFAULT_SMOOTHING_WINDOW")
    max_compare_seconds: int = Field(default=24 * 60 * 60, validation_alias="TRACKMERGE_MAX_COMPARE_SECONDS")  # 24h

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("default_smoothing_window")
    @classmethod
    def validate_smoothing_window(cls, value: int) -> int:
        check_window_size(value)
        return value

    @field_validator("max_compare_seconds")
    @classmethod
    def validate_max_compare_seconds(cls, value: int) -> int:
        if value < 1:
            raise ValueError("TRACKMERGE_MAX_COMPARE_SECONDS must be >= 1")
        return value


settings = Settings()
