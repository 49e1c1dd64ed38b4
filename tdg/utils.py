"""
Utility Functions Module

Provides essential utilities:
- CSV file I/O for sample data and generated data
- Logging configuration
- Seed management for reproducibility
"""

import io
import sys
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union
import pandas as pd
import numpy as np
from logging.handlers import RotatingFileHandler

from .config import CsvConfig


class FileHandler:
    """
    Handles CSV input/output operations

    Every value is read as a string and empty fields stay empty strings.
    """

    @staticmethod
    def _reader_options(csv_config: CsvConfig) -> dict:
        return {
            'sep': csv_config.delimiter,
            'quotechar': csv_config.quotechar,
            'doublequote': csv_config.doublequote,
            'header': 0 if csv_config.has_headers else None,
            'dtype': str,
            'keep_default_na': False,
            'na_filter': False,
        }

    @staticmethod
    def _with_column_names(data: pd.DataFrame, csv_config: CsvConfig) -> pd.DataFrame:
        if not csv_config.has_headers:
            data.columns = [f"field_{i}" for i in range(len(data.columns))]
        else:
            data.columns = [str(c) for c in data.columns]
        return data

    @staticmethod
    def read_csv(filepath: Union[str, Path], csv_config: Optional[CsvConfig] = None) -> pd.DataFrame:
        """
        Read a CSV sample file

        Args:
            filepath: Path to file
            csv_config: CSV dialect (defaults to comma, double quotes, header row)

        Returns:
            DataFrame of strings
        """
        csv_config = csv_config or CsvConfig()
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        try:
            data = pd.read_csv(
                filepath,
                encoding=csv_config.encoding,
                **FileHandler._reader_options(csv_config)
            )
        except Exception as e:
            logging.error(f"Failed to read {filepath}: {e}")
            raise

        return FileHandler._with_column_names(data, csv_config)

    @staticmethod
    def read_csv_text(text: str, csv_config: Optional[CsvConfig] = None) -> pd.DataFrame:
        """
        Read CSV formatted text

        Args:
            text: CSV content
            csv_config: CSV dialect

        Returns:
            DataFrame of strings
        """
        csv_config = csv_config or CsvConfig()

        try:
            data = pd.read_csv(io.StringIO(text), **FileHandler._reader_options(csv_config))
        except Exception as e:
            logging.error(f"Failed to parse csv data: {e}")
            raise

        return FileHandler._with_column_names(data, csv_config)

    @staticmethod
    def write_csv(
        rows: Sequence[Sequence[str]],
        headers: List[str],
        filepath: Union[str, Path],
        csv_config: Optional[CsvConfig] = None
    ) -> Path:
        """
        Write generated rows as CSV

        Args:
            rows: Records, one value per header
            headers: Column names
            filepath: Output path
            csv_config: CSV dialect

        Returns:
            Path written
        """
        csv_config = csv_config or CsvConfig()
        filepath = Path(filepath)

        # Create directory if needed
        filepath.parent.mkdir(parents=True, exist_ok=True)

        data = pd.DataFrame(list(rows), columns=headers)

        try:
            data.to_csv(
                filepath,
                index=False,
                header=csv_config.has_headers,
                sep=csv_config.delimiter,
                quotechar=csv_config.quotechar,
                doublequote=csv_config.doublequote,
                encoding=csv_config.encoding,
            )
            logging.info(f"File written successfully: {filepath}")
        except Exception as e:
            logging.error(f"Failed to write {filepath}: {e}")
            raise

        return filepath


class LoggerConfig:
    """
    Logging configuration manager

    Sets up consistent logging across the application
    """

    @staticmethod
    def setup_logger(
        name: str = "tdg",
        level: int = logging.INFO,
        log_file: Optional[Union[str, Path]] = None,
        log_to_console: bool = True,
        log_format: Optional[str] = None
    ) -> logging.Logger:
        """
        Setup and configure logger

        Args:
            name: Logger name
            level: Logging level
            log_file: Optional file path for file logging
            log_to_console: Whether to log to console
            log_format: Custom log format

        Returns:
            Configured logger
        """
        logger = logging.getLogger(name)
        logger.setLevel(level)

        # Remove existing handlers
        logger.handlers.clear()

        # Default format
        if log_format is None:
            log_format = (
                '%(asctime)s - %(name)s - %(levelname)s - '
                '%(filename)s:%(lineno)d - %(message)s'
            )

        formatter = logging.Formatter(log_format)

        # Console handler
        if log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        # File handler
        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        return logger


class SeedManager:
    """
    Manages random number generators for reproducibility

    Generators are handed out explicitly instead of seeding global state.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize seed manager

        Args:
            seed: Random seed (None for random)
        """
        self.seed = seed

    def create_rng(self) -> np.random.Generator:
        """Create a fresh generator from the stored seed"""
        if self.seed is not None:
            logging.debug(f"Random generator seeded with: {self.seed}")
        return np.random.default_rng(self.seed)


# Convenience functions
def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Quick logging setup

    Args:
        level: Logging level or level name
        log_file: Optional log file path
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    return LoggerConfig.setup_logger(level=level, log_file=log_file)


def read_data(filepath: Union[str, Path], csv_config: Optional[CsvConfig] = None) -> pd.DataFrame:
    """Quick CSV reading"""
    return FileHandler.read_csv(filepath, csv_config)
