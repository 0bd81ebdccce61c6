"""Configuration management for the quote aggregation pipeline."""

import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from src.models.errors import ConfigurationError


DEFAULT_SHOPS = ["BestPrice", "LetsSaveBig", "MyFavoriteShop", "BuyItAll"]


class PipelineConfig(BaseModel):
    """Main pipeline configuration."""

    # Worker pool configuration
    worker_pool_size: int = Field(default=8, description="Shared worker pool size")
    max_queued_tasks: Optional[int] = Field(
        default=None,
        description="Maximum tasks waiting for a worker (None = unbounded)"
    )

    # Timeout configuration
    per_call_timeout: float = Field(default=5.0, description="Seconds to wait for each provider chain")

    # Simulated latency configuration
    provider_min_delay_ms: int = Field(default=500, description="Minimum provider latency in ms")
    provider_max_delay_ms: int = Field(default=1000, description="Maximum provider latency in ms")
    discount_min_delay_ms: int = Field(default=0, description="Minimum discount engine latency in ms")
    discount_max_delay_ms: int = Field(default=100, description="Maximum discount engine latency in ms")
    random_seed: Optional[int] = Field(default=None, description="Seed for reproducible quotes")

    # Query configuration
    query: str = Field(default="myPhone27S", description="Product to price")
    shops: List[str] = Field(default_factory=lambda: list(DEFAULT_SHOPS), description="Shop names to query")

    # Logging configuration
    log_level: str = Field(default="INFO", description="Logging level")

    # Output configuration
    output_directory: str = Field(default="out", description="Output directory for results")
    output_filename: str = Field(default="prices.json", description="Output JSON filename")

    @field_validator('worker_pool_size')
    @classmethod
    def validate_worker_pool(cls, v: int) -> int:
        """Validate worker pool size is positive."""
        if v <= 0:
            raise ValueError(f"worker_pool_size must be positive, got: {v}")
        return v

    @field_validator('max_queued_tasks')
    @classmethod
    def validate_queue_bound(cls, v: Optional[int]) -> Optional[int]:
        """Validate queue bound is positive when set."""
        if v is not None and v <= 0:
            raise ValueError(f"max_queued_tasks must be positive, got: {v}")
        return v

    @field_validator('per_call_timeout')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError(f"per_call_timeout must be positive, got: {v}")
        return v

    @field_validator(
        'provider_min_delay_ms',
        'provider_max_delay_ms',
        'discount_min_delay_ms',
        'discount_max_delay_ms',
    )
    @classmethod
    def validate_delay(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"delays must be non-negative, got: {v}")
        return v

    @field_validator('shops')
    @classmethod
    def validate_shops(cls, v: List[str]) -> List[str]:
        """Validate at least one named shop is configured."""
        if not v:
            raise ValueError("shops must not be empty")
        if any(not name.strip() for name in v):
            raise ValueError("shop names must not be blank")
        return v

    @model_validator(mode='after')
    def validate_delay_ranges(self) -> "PipelineConfig":
        """Validate each latency range is ordered."""
        if self.provider_min_delay_ms > self.provider_max_delay_ms:
            raise ValueError("provider_min_delay_ms must not exceed provider_max_delay_ms")
        if self.discount_min_delay_ms > self.discount_max_delay_ms:
            raise ValueError("discount_min_delay_ms must not exceed discount_max_delay_ms")
        return self

    @property
    def output_path(self) -> Path:
        """Get full output file path."""
        return Path(self.output_directory) / self.output_filename

    # Environment variable overrides
    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Create configuration with environment variable overrides."""
        config = cls()

        # Map environment variables to config fields
        env_mappings = {
            "PIPELINE_WORKER_POOL_SIZE": "worker_pool_size",
            "PIPELINE_MAX_QUEUED_TASKS": "max_queued_tasks",
            "PIPELINE_PER_CALL_TIMEOUT": "per_call_timeout",
            "PIPELINE_PROVIDER_MIN_DELAY_MS": "provider_min_delay_ms",
            "PIPELINE_PROVIDER_MAX_DELAY_MS": "provider_max_delay_ms",
            "PIPELINE_RANDOM_SEED": "random_seed",
            "PIPELINE_QUERY": "query",
            "PIPELINE_SHOPS": "shops",
            "PIPELINE_LOG_LEVEL": "log_level",
        }

        for env_var, field_name in env_mappings.items():
            if env_var in os.environ:
                value = os.environ[env_var]
                # Convert to appropriate type based on field type
                field_info = cls.model_fields[field_name]
                if field_info.annotation in (int, Optional[int]):
                    setattr(config, field_name, int(value))
                elif field_info.annotation == float:
                    setattr(config, field_name, float(value))
                elif field_info.annotation == List[str]:
                    setattr(config, field_name, [s.strip() for s in value.split(",") if s.strip()])
                else:
                    setattr(config, field_name, value)

        return config


class ConfigManager:
    """Manages configuration loading with override precedence."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or Path("config/config.yaml")
        self._config: Optional[PipelineConfig] = None

    def load_config(self, cli_overrides: Optional[Dict] = None) -> PipelineConfig:
        """
        Load configuration with override precedence: CLI > ENV > YAML.

        Args:
            cli_overrides: Optional dictionary of CLI flag overrides

        Returns:
            Fully merged PipelineConfig instance

        Raises:
            ConfigurationError: If the YAML file is not a mapping
            ValueError: If configuration validation fails
        """
        config_dict = {}

        if self.config_file.exists():
            with open(self.config_file, 'r') as f:
                yaml_config = yaml.safe_load(f)
            if yaml_config:
                if not isinstance(yaml_config, dict):
                    raise ConfigurationError(
                        f"{self.config_file} must contain a mapping, got {type(yaml_config).__name__}"
                    )
                config_dict.update(yaml_config)

        base_config = PipelineConfig(**config_dict)

        # Apply environment variable overrides
        env_config = PipelineConfig.from_env()

        merged_dict = base_config.model_dump()
        env_dict = env_config.model_dump()

        # Only override with env values that differ from defaults
        default_dict = PipelineConfig().model_dump()
        for key, value in env_dict.items():
            if value != default_dict[key]:
                merged_dict[key] = value

        # Apply CLI overrides (highest precedence)
        if cli_overrides:
            cli_overrides = {k: v for k, v in cli_overrides.items() if v is not None}
            merged_dict.update(cli_overrides)

        self._config = PipelineConfig(**merged_dict)
        return self._config

    @property
    def config(self) -> PipelineConfig:
        """Get the loaded configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config
