"""
Configuration Management Module

Handles loading, validation, and merging of configuration files
for profiling, generation, CSV handling and logging.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field, asdict
from copy import deepcopy
import logging

logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Configuration for data generation parameters"""
    num_rows: int = 100
    seed: Optional[int] = None
    enable_parallel: bool = False
    max_workers: int = 4


@dataclass
class ProfileConfig:
    """Configuration for profile sampling"""
    end_bias: bool = True  # weight the last character by learned end characters


@dataclass
class CsvConfig:
    """Configuration for reading and writing CSV samples"""
    delimiter: str = ","
    quotechar: str = '"'
    doublequote: bool = True
    has_headers: bool = True
    encoding: str = "utf-8"


@dataclass
class LoggingConfig:
    """Configuration for logging output"""
    level: str = "INFO"
    log_file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class combining all sub-configurations"""
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    profile: ProfileConfig = field(default_factory=ProfileConfig)
    csv: CsvConfig = field(default_factory=CsvConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return asdict(self)

    def merge(self, other: 'Config') -> 'Config':
        """Merge another configuration into this one (other takes precedence)"""
        merged = deepcopy(self)

        for key in SECTIONS:
            other_config = getattr(other, key)
            merged_config = getattr(merged, key)

            # Update non-None values
            for field_name, field_value in asdict(other_config).items():
                if field_value is not None:
                    setattr(merged_config, field_name, field_value)

        return merged


SECTIONS = {
    'generation': GenerationConfig,
    'profile': ProfileConfig,
    'csv': CsvConfig,
    'logging': LoggingConfig,
}


class ConfigLoader:
    """Loads and manages configuration from YAML files and dictionaries"""

    def load_from_file(self, filepath: Union[str, Path]) -> Config:
        """
        Load configuration from a YAML file

        Args:
            filepath: Path to the YAML configuration file

        Returns:
            Config object
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(filepath, 'r') as f:
            try:
                config_dict = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Malformed YAML in {filepath}: {e}") from e

        logger.info(f"Loaded configuration: {filepath}")
        return self._dict_to_config(config_dict)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> Config:
        """
        Load configuration from a dictionary

        Args:
            config_dict: Configuration dictionary

        Returns:
            Config object
        """
        return self._dict_to_config(config_dict)

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> Config:
        """Convert dictionary to Config object"""
        if not isinstance(config_dict, dict):
            raise ValueError(f"Configuration must be a mapping, got {type(config_dict).__name__}")

        config = Config()

        for key, config_class in SECTIONS.items():
            if key in config_dict:
                try:
                    setattr(config, key, config_class(**(config_dict[key] or {})))
                except TypeError as e:
                    raise ValueError(f"Invalid '{key}' section: {e}") from e

        unknown = set(config_dict) - set(SECTIONS)
        if unknown:
            logger.warning(f"Ignoring unknown configuration sections: {sorted(unknown)}")

        return config

    def merge_configs(self, base: Config, override: Union[Config, Dict[str, Any]]) -> Config:
        """
        Merge configurations with override taking precedence

        Args:
            base: Base configuration
            override: Override configuration (Config object or dict)

        Returns:
            Merged Config object
        """
        if isinstance(override, dict):
            override = self.load_from_dict(override)

        return base.merge(override)

    def save_config(self, config: Config, filepath: Union[str, Path]):
        """
        Save configuration to a YAML file

        Args:
            config: Configuration to save
            filepath: Path to save the file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to: {filepath}")


class ConfigValidator:
    """Validates configuration parameters"""

    VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    @staticmethod
    def validate(config: Config) -> tuple[bool, List[str]]:
        """
        Validate configuration parameters

        Args:
            config: Configuration to validate

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        # Validate generation config
        if config.generation.num_rows <= 0:
            errors.append("num_rows must be positive")

        if config.generation.max_workers <= 0:
            errors.append("max_workers must be positive")

        if config.generation.seed is not None and config.generation.seed < 0:
            errors.append("seed must be non-negative")

        # Validate CSV config
        if len(config.csv.delimiter) != 1:
            errors.append("csv.delimiter must be a single character")

        if len(config.csv.quotechar) != 1:
            errors.append("csv.quotechar must be a single character")

        if config.csv.delimiter == config.csv.quotechar:
            errors.append("csv.delimiter and csv.quotechar must differ")

        # Validate logging config
        if config.logging.level.upper() not in ConfigValidator.VALID_LEVELS:
            errors.append(f"logging.level must be one of {ConfigValidator.VALID_LEVELS}")

        return len(errors) == 0, errors


def get_default_config() -> Config:
    """Get the default configuration"""
    return Config()
