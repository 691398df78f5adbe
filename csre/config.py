"""
CSRE Configuration Module
=========================

Centralized configuration management using Pydantic Settings.

Loads configuration from:
    1. Environment variables (prefixed with ``CSRE_``)
    2. .env file (if present)
    3. Default values

Usage:
    from csre.config import settings
    
    print(settings.artifact_path)
    print(settings.confidence_level)

Author: CSRE Team
Version: 1.0.0
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from csre import __version__


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    All settings can be overridden via environment variables.
    Naming convention: CSRE_UPPER_SNAKE_CASE in env, lower_snake_case in code.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="CSRE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # =========================================================================
    # Application Settings
    # =========================================================================
    
    app_name: str = Field(default="CSRE", description="Application name")
    app_version: str = Field(default=__version__, description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=True, description="Render logs as JSON")
    log_file: Optional[str] = Field(default=None, description="Also write logs to this file")
    
    # =========================================================================
    # API Server
    # =========================================================================
    
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    
    # =========================================================================
    # Model Artifact
    # =========================================================================
    
    artifact_path: str = Field(
        default="model.json",
        description="Path to the fitted-model artifact (JSON)"
    )
    require_complete_coverage: bool = Field(
        default=False,
        description="Refuse to start when some variable subsets have no model"
    )
    covariance_symmetry_tolerance: float = Field(
        default=1e-8,
        ge=0.0,
        description="Absolute tolerance for covariance symmetry checks"
    )
    
    # =========================================================================
    # Inference
    # =========================================================================
    
    confidence_level: float = Field(
        default=0.95,
        gt=0.0,
        lt=1.0,
        description="Default two-sided confidence level for intervals"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.
    
    Uses LRU cache to ensure settings are loaded only once.
    
    Returns:
        Settings instance
    """
    return Settings()


# Convenience alias
settings = get_settings()
