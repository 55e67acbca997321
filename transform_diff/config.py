"""
config.py - Configuration for the transform diff extractor
"""
import os
from typing import Optional
from dataclasses import dataclass


DRIVERS = ("auto", "msi", "duckdb")
OPEN_MODES = ("readonly", "transacted")
OUTPUT_FORMATS = ("text", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class TransformDiffConfig:
    """Configuration for the transform diff extractor"""

    # Driver configuration
    driver: str = "auto"  # auto, msi or duckdb
    transform_open_mode: str = "transacted"  # mode used when a transform is applied

    # Change log configuration
    property_table: str = "Property"
    value_column: str = "Value"
    change_log_table: str = "_TransformView"

    # Report configuration
    include_change_log: bool = False
    output_format: str = "text"  # text or json
    absent_value_label: str = "<absent>"

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> 'TransformDiffConfig':
        """Load configuration from environment variables"""
        config = cls()

        config.driver = os.getenv('TRANSFORM_DIFF_DRIVER', config.driver)
        config.transform_open_mode = os.getenv('TRANSFORM_DIFF_OPEN_MODE', config.transform_open_mode)

        config.property_table = os.getenv('TRANSFORM_DIFF_PROPERTY_TABLE', config.property_table)
        config.value_column = os.getenv('TRANSFORM_DIFF_VALUE_COLUMN', config.value_column)
        config.change_log_table = os.getenv('TRANSFORM_DIFF_CHANGE_LOG_TABLE', config.change_log_table)

        verbose = os.getenv('TRANSFORM_DIFF_VERBOSE')
        if verbose is not None:
            config.include_change_log = verbose.strip().lower() in ('1', 'true', 'yes', 'on')
        config.output_format = os.getenv('TRANSFORM_DIFF_FORMAT', config.output_format)
        config.absent_value_label = os.getenv('TRANSFORM_DIFF_ABSENT_LABEL', config.absent_value_label)

        config.log_level = os.getenv('TRANSFORM_DIFF_LOG_LEVEL', config.log_level).upper()

        return config

    def validate(self) -> None:
        """Validate configuration settings"""
        errors = []

        if self.driver not in DRIVERS:
            errors.append(f"driver must be one of {', '.join(DRIVERS)}")

        if self.transform_open_mode not in OPEN_MODES:
            errors.append(f"transform_open_mode must be one of {', '.join(OPEN_MODES)}")

        if not self.property_table:
            errors.append("property_table must not be empty")

        if not self.value_column:
            errors.append("value_column must not be empty")

        if not self.change_log_table:
            errors.append("change_log_table must not be empty")

        if self.output_format not in OUTPUT_FORMATS:
            errors.append(f"output_format must be one of {', '.join(OUTPUT_FORMATS)}")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        if errors:
            raise ValueError(f"Configuration validation errors: {'; '.join(errors)}")


class ConfigManager:
    """Manager for configuration loading and validation"""

    def __init__(self):
        self.config: Optional[TransformDiffConfig] = None

    def load_config(self, config_source: Optional[str] = None) -> TransformDiffConfig:
        """Load configuration from various sources"""
        if config_source == 'env':
            self.config = TransformDiffConfig.from_env()
        else:
            self.config = TransformDiffConfig()

        self.config.validate()
        return self.config

    def get_config(self) -> TransformDiffConfig:
        """Get the loaded configuration"""
        if self.config is None:
            self.config = self.load_config()
        return self.config


# Global configuration manager
config_manager = ConfigManager()


def get_config() -> TransformDiffConfig:
    """Get the global configuration"""
    return config_manager.get_config()
