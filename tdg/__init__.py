"""
Test Data Generation Package

Learns pattern-and-Markov profiles from sample values and generates
realistic synthetic test data without keeping the samples themselves.
"""

__version__ = "1.0.0"
__author__ = "Test Data Generation Team"

from .config import Config, ConfigLoader, ConfigValidator, get_default_config
from .exceptions import TdgError, FormatError, SchemaError, NotReadyError
from .profile import Profile
from .data_sample_parser import DataSampleParser

__all__ = [
    "Config",
    "ConfigLoader",
    "ConfigValidator",
    "get_default_config",
    "TdgError",
    "FormatError",
    "SchemaError",
    "NotReadyError",
    "Profile",
    "DataSampleParser",
]
