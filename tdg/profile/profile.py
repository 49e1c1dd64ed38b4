"""
Profile

Generative model for a single logical field. A profile learns from sample
strings and generates new strings with the same structure:

    profile = Profile(rng=np.random.default_rng(42))
    for value in ["Smith, John", "Doe, John", "Dale, Danny"]:
        profile.analyze(value)
    profile.pre_generate()
    profile.generate()

Generation is a first-order Markov chain over characters, conditioned on the
pattern and the absolute position within it.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..exceptions import NotReadyError
from ..validation.distance import realism_score
from .archive import model_from_dict, model_to_dict, read_archive, write_archive
from .frequency import FrequencyModel, PatternEntry
from .pattern import extract
from .sampling import ProfileSampler, Source

logger = logging.getLogger(__name__)


class Profile:
    """
    Pattern-and-Markov model of one field

    A profile has a single writer: concurrent ``analyze`` calls on the same
    instance need external locking. Separate profiles share no state.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, end_bias: bool = True):
        """
        Args:
            rng: Random source used by ``generate`` when none is passed
            end_bias: Weight the final character by the learned end characters
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.end_bias = end_bias
        self.model = FrequencyModel()
        self._sampler: Optional[ProfileSampler] = None

    def __repr__(self) -> str:
        return (
            f"Profile(patterns={len(self.model)}, observations={self.total_observations}, "
            f"ready={self.is_ready})"
        )

    @property
    def patterns(self) -> Sequence[PatternEntry]:
        return tuple(self.model.entries)

    @property
    def total_observations(self) -> int:
        return self.model.total_observations

    @property
    def is_ready(self) -> bool:
        return self._sampler is not None

    # -------------------------------------------------
    # Learning
    # -------------------------------------------------

    def analyze(self, sample: str) -> int:
        """
        Fold one sample into the model

        Analyzing the same value twice doubles its weight. Any compiled
        sampler is discarded, so ``pre_generate`` must run again.

        Returns:
            Handle of the pattern entry the sample was counted under
        """
        self._sampler = None
        return self.model.add(extract(sample))

    def analyze_all(self, samples: Iterable[str]) -> int:
        count = 0
        for sample in samples:
            self.analyze(sample)
            count += 1
        return count

    def pre_generate(self):
        """Compile the weighted sampling tables from the current counts"""
        self._sampler = ProfileSampler(self.model, end_bias=self.end_bias)
        logger.debug(
            f"Compiled profile with {len(self.model)} patterns "
            f"from {self.total_observations} observations"
        )

    def reset(self):
        self.model.reset()
        self._sampler = None

    # -------------------------------------------------
    # Generation
    # -------------------------------------------------

    def _ready_sampler(self) -> ProfileSampler:
        if self._sampler is None:
            raise NotReadyError("pre_generate() must be called after the last analyze() and before generate()")
        if not self._sampler:
            raise NotReadyError("profile has no observations to generate from")
        return self._sampler

    def generate(self, rng: Optional[np.random.Generator] = None) -> str:
        """
        Generate one synthetic value

        Args:
            rng: Random source for this call (defaults to the profile's own)

        Returns:
            A string whose length equals the length of the sampled pattern
        """
        value, _ = self.generate_with_sources(rng)
        return value

    def generate_with_sources(self, rng: Optional[np.random.Generator] = None) -> Tuple[str, List[Source]]:
        """Generate one value along with the distribution used for each character"""
        sampler = self._ready_sampler()
        return sampler.generate(rng if rng is not None else self.rng)

    def realistic_test(self, candidate: str, reference_samples: Iterable[str]) -> float:
        """
        Normalized edit-distance similarity to the closest reference

        Returns a score in [0, 1]; 1 means identical to some reference.
        """
        return realism_score(candidate, reference_samples)

    # -------------------------------------------------
    # Persistence
    # -------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return model_to_dict(self.model)

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        rng: Optional[np.random.Generator] = None,
        end_bias: bool = True
    ) -> "Profile":
        profile = cls(rng=rng, end_bias=end_bias)
        profile.model = model_from_dict(data)
        return profile

    def save(self, path: Union[str, Path]) -> Path:
        """
        Export the profile statistics to a JSON archive

        Args:
            path: Archive path; ``.json`` is appended when missing

        Raises:
            OSError: The path is not writable
        """
        return write_archive(self.to_dict(), path)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        rng: Optional[np.random.Generator] = None,
        end_bias: bool = True
    ) -> "Profile":
        """
        Restore a profile from an archive written by ``save``

        The restored profile must be compiled with ``pre_generate``.

        Raises:
            FormatError: The archive is absent, truncated or incompatible
        """
        return cls.from_dict(read_archive(path), rng=rng, end_bias=end_bias)
