"""
Data Sample Parser Module

Reads tabular sample data, analyzes it with one Profile per column, and
generates synthetic records from the learned profiles. Columns are generated
independently of each other.

The parser can be archived and restored without keeping the sample data:

    dsp = DataSampleParser()
    dsp.analyze_csv_file("samples/people.csv")
    dsp.save("samples/people-dsp")

    restored = DataSampleParser.from_file("samples/people-dsp")
    restored.generate_record()
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .config import Config, ConfigLoader, ConfigValidator, get_default_config
from .exceptions import FormatError, SchemaError
from .profile import Profile
from .profile.archive import read_archive, write_archive
from .utils import FileHandler, SeedManager
from .validation import RealismReport, RealismValidator, levenshtein, percent_difference

logger = logging.getLogger(__name__)

Record = List[str]


class DataSampleParser:
    """
    Owns one Profile per column, in source column order

    Profiles share the parser's random generator, so a seeded parser
    produces the same records on every run.
    """

    DEMO_DATES = [
        "01/04/2017", "02/09/2017", "03/13/2017", "04/17/2017", "05/22/2017",
        "07/26/2017", "08/30/2017", "09/07/2017", "10/11/2017", "11/15/2017",
        "12/21/2017", "01/14/2016", "02/19/2016", "03/23/2016", "04/27/2016",
        "05/02/2016", "07/16/2015", "08/20/2015", "09/17/2015", "10/01/2014",
        "11/25/2014", "12/31/2018",
    ]

    DEMO_PERSON_NAMES = [
        "Smith, John", "O'Brien, Henny", "Dale, Danny", "Rickets, Ronnae",
        "Richard, Richie", "Roberts, Blake", "Conways, Sephen",
    ]

    def __init__(self, config: Optional[Config] = None, rng: Optional[np.random.Generator] = None):
        """
        Initialize the parser

        Args:
            config: Configuration object (uses default if None)
            rng: Random generator (seeded from config.generation.seed if None)
        """
        self.config = config or get_default_config()
        self.rng = rng if rng is not None else SeedManager(self.config.generation.seed).create_rng()
        self.profiles: Dict[str, Profile] = {}
        self.issues = False

    @classmethod
    def from_config_file(cls, path: Union[str, Path], rng: Optional[np.random.Generator] = None) -> "DataSampleParser":
        """
        Initialize the parser from a YAML configuration file

        A configuration that cannot be loaded or fails validation is logged
        and flagged through ``running_with_issues``; the default configuration
        is used instead.
        """
        try:
            config = ConfigLoader().load_from_file(path)
        except (OSError, ValueError) as e:
            logger.error(f"Could not load configuration {path}: {e}")
            config = None
        else:
            is_valid, errors = ConfigValidator.validate(config)
            if not is_valid:
                logger.error(f"Invalid configuration {path}: {'; '.join(errors)}")
                config = None

        issues = config is None
        if issues:
            config = get_default_config()

        parser = cls(config, rng=rng)
        parser.issues = issues
        return parser

    def _new_profile(self) -> Profile:
        return Profile(rng=self.rng, end_bias=self.config.profile.end_bias)

    def running_with_issues(self) -> bool:
        return self.issues

    # -------------------------------------------------
    # Column binding
    # -------------------------------------------------

    def extract_headers(self) -> List[str]:
        return list(self.profiles.keys())

    def bind_columns(self, names: Sequence[str]):
        """
        Establish the column names, one Profile per column

        Binding the same names again is a no-op.

        Raises:
            SchemaError: Columns are already bound to different names
        """
        names = [str(n) for n in names]
        if len(set(names)) != len(names):
            raise SchemaError(f"duplicate column names: {names}")

        if self.profiles:
            if list(self.profiles) != names:
                raise SchemaError(
                    f"columns already bound to {list(self.profiles)}, cannot rebind to {names}"
                )
            return

        self.profiles = {name: self._new_profile() for name in names}
        logger.debug(f"Bound columns: {names}")

    def _check_width(self, row: Sequence[str]):
        if len(row) != len(self.profiles):
            raise SchemaError(
                f"record has {len(row)} fields, expected {len(self.profiles)}"
            )

    # -------------------------------------------------
    # Analysis
    # -------------------------------------------------

    def analyze_record(self, row: Sequence[str]):
        """
        Analyze one record, column by column

        The first record establishes the columns when none are bound yet.

        Raises:
            SchemaError: The record width differs from the bound columns
        """
        if not self.profiles:
            self.bind_columns([f"field_{i}" for i in range(len(row))])

        self._check_width(row)

        for idx, (profile, value) in enumerate(zip(self.profiles.values(), row)):
            logger.debug(f"Field Index: {idx}")
            profile.analyze(value)

    def analyze_records(self, rows: Iterable[Sequence[str]]) -> int:
        """
        Analyze many records

        All widths are checked before any profile changes. With
        ``generation.enable_parallel`` each column is analyzed on its own
        worker thread.

        Returns:
            Number of records analyzed
        """
        rows = [list(row) for row in rows]
        if not rows:
            return 0

        if not self.profiles:
            self.bind_columns([f"field_{i}" for i in range(len(rows[0]))])

        for row in rows:
            self._check_width(row)

        columns = [[row[idx] for row in rows] for idx in range(len(self.profiles))]
        profiles = list(self.profiles.values())

        if self.config.generation.enable_parallel and len(profiles) > 1:
            with ThreadPoolExecutor(max_workers=self.config.generation.max_workers) as executor:
                list(executor.map(Profile.analyze_all, profiles, columns))
        else:
            for profile, values in zip(profiles, columns):
                profile.analyze_all(values)

        logger.debug(f"Analyzed {len(rows)} records, {len(profiles)} fields")
        return len(rows)

    def pre_generate(self):
        """Prepare every column profile for data generation"""
        for profile in self.profiles.values():
            profile.pre_generate()

    def _analyze_frame(self, data: pd.DataFrame) -> int:
        self.bind_columns(list(data.columns))
        count = self.analyze_records(data.itertuples(index=False, name=None))
        self.pre_generate()

        logger.info(f"Successfully analyzed {count} records, {len(self.profiles)} fields")
        return count

    def analyze_csv_data(self, data: str) -> int:
        """
        Analyze CSV formatted text and prepare the profiles for generation

        The CSV dialect comes from ``config.csv`` (by default: header row,
        double-quoted text, doubled quote escapes, comma delimiter).

        Returns:
            Number of records analyzed
        """
        logger.debug("Starting to analyze csv data")
        try:
            frame = FileHandler.read_csv_text(data, self.config.csv)
        except Exception:
            self.issues = True
            raise
        return self._analyze_frame(frame)

    def analyze_csv_file(self, path: Union[str, Path]) -> int:
        """
        Analyze a CSV sample file and prepare the profiles for generation

        Returns:
            Number of records analyzed
        """
        logger.info(f"Starting to analyze the csv file {path}")
        try:
            frame = FileHandler.read_csv(path, self.config.csv)
        except Exception:
            self.issues = True
            raise
        return self._analyze_frame(frame)

    # -------------------------------------------------
    # Generation
    # -------------------------------------------------

    def generate_record(self) -> Record:
        """
        Generate one record with a value for every column

        Raises:
            NotReadyError: A column profile has not been prepared
        """
        return [profile.generate(self.rng) for profile in self.profiles.values()]

    def generate_records(self, row_count: int) -> List[Record]:
        return [self.generate_record() for _ in range(row_count)]

    def generate_by_field_name(self, field: str) -> str:
        """
        Generate a value for a single column

        Raises:
            KeyError: No column has that name
        """
        if field not in self.profiles:
            raise KeyError(f"unknown field: {field}")
        return self.profiles[field].generate(self.rng)

    def generate_csv(self, row_count: int, path: Union[str, Path]) -> Path:
        """
        Write a CSV file of generated records, headers first

        Args:
            row_count: Number of records to generate
            path: Output file path
        """
        logger.info(f"generating csv file {path}")
        rows = self.generate_records(row_count)
        return FileHandler.write_csv(rows, self.extract_headers(), path, self.config.csv)

    # -------------------------------------------------
    # Scoring
    # -------------------------------------------------

    def levenshtein_distance(self, control: str, experiment: str) -> int:
        return levenshtein(control, experiment)

    def realistic_test(self, control: str, experiment: str) -> float:
        """
        Percent similarity between a real value and a generated one

        ``realistic_test("kitten", "sitting")`` is about 76.92.
        """
        return percent_difference(control, experiment)

    def realism_report(
        self,
        reference_rows: Iterable[Sequence[str]],
        generated_rows: Iterable[Sequence[str]],
        threshold: float = 0.5
    ) -> RealismReport:
        """Compare generated records with reference records column by column"""
        headers = self.extract_headers()
        reference = pd.DataFrame([list(r) for r in reference_rows], columns=headers)
        generated = pd.DataFrame([list(r) for r in generated_rows], columns=headers)
        return RealismValidator(threshold).validate_frame(reference, generated)

    # -------------------------------------------------
    # Demo profiles
    # -------------------------------------------------

    def _demo(self, samples: List[str]) -> str:
        profile = self._new_profile()
        profile.analyze_all(samples)
        profile.pre_generate()
        return profile.generate(self.rng)

    def demo_date(self) -> str:
        """Generate a date string from a built-in demo profile"""
        return self._demo(self.DEMO_DATES)

    def demo_person_name(self) -> str:
        """Generate a "Last, First" name from a built-in demo profile"""
        return self._demo(self.DEMO_PERSON_NAMES)

    # -------------------------------------------------
    # Persistence
    # -------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issues": self.issues,
            "columns": [
                {"name": name, "profile": profile.to_dict()}
                for name, profile in self.profiles.items()
            ],
        }

    def save(self, path: Union[str, Path]) -> Path:
        """
        Export the parser (all column profiles) to a JSON archive

        Args:
            path: Archive path; ``.json`` is appended when missing

        Raises:
            OSError: The archive could not be written
        """
        return write_archive(self.to_dict(), path)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        config: Optional[Config] = None,
        rng: Optional[np.random.Generator] = None
    ) -> "DataSampleParser":
        """
        Restore a parser from an archive written by ``save``

        Profiles are prepared for generation on load.

        Raises:
            FormatError: The archive is absent, truncated or incompatible
        """
        document = read_archive(path)

        columns = document.get("columns")
        if not isinstance(columns, list):
            raise FormatError("parser archive must contain a 'columns' list")

        parser = cls(config, rng=rng)
        parser.issues = bool(document.get("issues", False))

        for column in columns:
            if not isinstance(column, dict) or not isinstance(column.get("name"), str):
                raise FormatError("every column needs a name and a profile")
            if column["name"] in parser.profiles:
                raise FormatError(f"duplicate column in archive: {column['name']!r}")

            parser.profiles[column["name"]] = Profile.from_dict(
                column.get("profile"),
                rng=parser.rng,
                end_bias=parser.config.profile.end_bias,
            )

        parser.pre_generate()
        logger.info(f"Restored parser with {len(parser.profiles)} columns from {path}")
        return parser
