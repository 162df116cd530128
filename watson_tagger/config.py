"""
Configuration management for the Watson Image Tagger service.
"""

import json
from typing import Annotated, List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Watson Configuration
    watson_api_key: str = Field(default="")
    watson_url: str = Field(default="https://gateway.watsonplatform.net/visual-recognition/api")
    watson_version: str = Field(default="2018-03-19")
    classifier_ids: Annotated[List[str], NoDecode] = Field(default=[])  # Empty = Watson's default classifier
    classify_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    # Performance Configuration
    max_retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=1.0, gt=0.0)
    request_timeout: float = Field(default=30.0, gt=0.0)

    # Logging Configuration
    log_level: str = Field(default="INFO")

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, gt=0, lt=65536)
    health_cache_seconds: int = Field(default=300, ge=0)

    @field_validator("watson_url")
    @classmethod
    def validate_watson_url(cls, v):
        """Ensure the Watson URL is properly formatted."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("WATSON_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure the log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("classifier_ids", mode="before")
    @classmethod
    def parse_classifier_ids(cls, v):
        """Parse classifier IDs from a JSON array or a comma-separated string."""
        if isinstance(v, str):
            if not v:
                return []
            if v.startswith('[') and v.endswith(']'):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    raise ValueError("Invalid JSON format for CLASSIFIER_IDS")
            return [cid.strip() for cid in v.split(',') if cid.strip()]
        return v if v else []

    def get_classify_params(self) -> dict:
        """Extra query parameters for the classify endpoint."""
        params = {}
        if self.classifier_ids:
            params["classifier_ids"] = ",".join(self.classifier_ids)
        if self.classify_threshold is not None:
            params["threshold"] = self.classify_threshold
        return params


# Global settings instance
settings = Settings()
