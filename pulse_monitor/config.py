"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Filter tuning constants are the only tunable surface
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()


class FilterConfig(BaseModel):
    """Tuning constants for a single heart-rate stream."""

    initial_estimate: float = Field(default=70.0, description="Seed estimate in beats per minute")
    initial_error_covariance: float = Field(
        default=1.0, ge=0.0, description="Seed uncertainty of the estimate"
    )
    process_noise: float = Field(
        default=0.01, ge=0.0, description="Expected drift of the true value between samples"
    )
    measurement_noise: float = Field(
        default=2.0, gt=0.0, description="Expected noise of an individual sample"
    )
    outlier_threshold: float = Field(
        default=30.0, gt=0.0, description="Jump size (bpm) that forces a filter reset"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    filter: FilterConfig = Field(default_factory=FilterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    # Filter tuning with environment overrides
    filter_config = FilterConfig(
        initial_estimate=float(os.getenv("KALMAN_INITIAL_ESTIMATE", "70.0")),
        initial_error_covariance=float(os.getenv("KALMAN_INITIAL_ERROR_COVARIANCE", "1.0")),
        process_noise=float(os.getenv("KALMAN_PROCESS_NOISE", "0.01")),
        measurement_noise=float(os.getenv("KALMAN_MEASUREMENT_NOISE", "2.0")),
        outlier_threshold=float(os.getenv("OUTLIER_THRESHOLD", "30.0")),
    )

    # Logging config
    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        filter=filter_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")
    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\n💓 FILTER CONFIGURATION")
    print(f"Seed Estimate: {config.filter.initial_estimate} bpm")
    print(f"Seed Error Covariance: {config.filter.initial_error_covariance}")
    print(f"Process Noise: {config.filter.process_noise}")
    print(f"Measurement Noise: {config.filter.measurement_noise}")
    print(f"Outlier Threshold: {config.filter.outlier_threshold} bpm")


if __name__ == "__main__":
    # Test configuration loading
    validate_config()
    print_config_summary()
