"""
Tests for the profiling engine:
- Frequency accounting
- Compiled sampling and the fallback chain
- Generation invariants and determinism
- Archive round-trips and failures
"""

import json

import numpy as np
import pytest

from tdg.exceptions import FormatError, NotReadyError
from tdg.profile import (
    ARCHIVE_VERSION,
    FallbackChain,
    Profile,
    Source,
    WeightedChoice,
    archive_path,
    pattern_of,
)

NAMES = ["Smith, John", "Doe, John", "Dale, Danny", "Rickets, Ronney"]


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def name_profile(rng):
    profile = Profile(rng=rng)
    profile.analyze_all(NAMES)
    profile.pre_generate()
    return profile


def sparse_archive(ends=None, transitions=None):
    """A two-character pattern built by hand"""
    return {
        "version": ARCHIVE_VERSION,
        "patterns": [{
            "pattern": "cc",
            "count": 2,
            "starts": {"a": 2},
            "ends": ends if ends is not None else {"b": 2},
            "positions": [
                {"observed": {"a": 2}, "transitions": {}},
                {"observed": {"b": 2}, "transitions": transitions if transitions is not None else {}},
            ],
        }],
    }


class TestFrequencyModel:
    """Counting behaviour of analyze"""

    def test_names_scenario(self, name_profile):
        assert len(name_profile.patterns) == 4
        assert sum(entry.count for entry in name_profile.patterns) == 4

    def test_count_invariant(self, rng):
        profile = Profile(rng=rng)
        samples = ["a", "bb", "a", "", "Cc", "12", "bb", "a"]
        for sample in samples:
            profile.analyze(sample)

        assert profile.total_observations == len(samples)
        assert sum(entry.count for entry in profile.patterns) == len(samples)

    def test_duplicates_reinforce(self, rng):
        profile = Profile(rng=rng)
        profile.analyze("OK")
        profile.analyze("OK")

        entry = profile.patterns[0]
        assert entry.count == 2
        assert entry.starts == {"O": 2}
        assert entry.ends == {"K": 2}
        assert entry.positions[0].observed == {"O": 2}
        assert entry.positions[1].transitions == {"O": {"K": 2}}

    def test_shared_pattern_merges(self, rng):
        profile = Profile(rng=rng)
        profile.analyze("Dale")
        profile.analyze("Pine")

        assert len(profile.patterns) == 1
        entry = profile.patterns[0]
        assert entry.count == 2
        assert entry.positions[0].observed == {"D": 1, "P": 1}
        assert entry.positions[3].transitions == {"l": {"e": 1}, "n": {"e": 1}}

    def test_empty_string_is_accepted(self, rng):
        profile = Profile(rng=rng)
        profile.analyze("")

        assert len(profile.patterns) == 1
        assert profile.patterns[0].pattern == ""
        assert profile.patterns[0].starts == {}

        profile.pre_generate()
        assert profile.generate() == ""

    def test_handles_are_stable(self, rng):
        profile = Profile(rng=rng)
        first = profile.analyze("abc")
        profile.analyze("12")
        assert profile.analyze("ebd") == first

    def test_reset(self, name_profile):
        name_profile.reset()
        assert name_profile.patterns == ()
        assert not name_profile.is_ready


class TestWeightedChoice:
    """Cumulative weight tables"""

    def test_zero_weights_never_chosen(self, rng):
        choice = WeightedChoice({"a": 0, "b": 3, "c": 0})
        assert {choice.choose(rng) for _ in range(50)} == {"b"}

    def test_probabilities(self):
        choice = WeightedChoice({"a": 1, "b": 3})
        assert choice.probabilities() == pytest.approx({"a": 0.25, "b": 0.75})

    def test_empty_choice(self, rng):
        choice = WeightedChoice({})
        assert not choice
        with pytest.raises(ValueError):
            choice.choose(rng)

    def test_frequencies_follow_weights(self):
        rng = np.random.default_rng(0)
        choice = WeightedChoice({"a": 1, "b": 9})
        draws = [choice.choose(rng) for _ in range(2000)]
        assert 0.85 < draws.count("b") / len(draws) < 0.95


class TestFallbackChain:
    """Tagged fallback order"""

    def test_first_non_empty_wins(self, rng):
        chain = FallbackChain([
            (Source.TRANSITION, WeightedChoice({})),
            (Source.POSITIONAL, WeightedChoice({"x": 1})),
            (Source.PATTERN, WeightedChoice({"y": 1})),
        ])
        assert chain.choose(rng) == (Source.POSITIONAL, "x")

    def test_all_empty(self, rng):
        chain = FallbackChain([(Source.TRANSITION, WeightedChoice({}))])
        with pytest.raises(LookupError):
            chain.choose(rng)


class TestGeneration:
    """Generation from compiled profiles"""

    def test_generated_pattern_was_observed(self, name_profile):
        observed = {pattern_of(name) for name in NAMES}
        for _ in range(25):
            value = name_profile.generate()
            assert value
            assert pattern_of(value) in observed

    def test_single_sample_reproduced(self, rng):
        profile = Profile(rng=rng)
        profile.analyze("OK")
        profile.pre_generate()
        assert all(profile.generate() == "OK" for _ in range(10))

    def test_generate_requires_pre_generate(self, rng):
        profile = Profile(rng=rng)
        profile.analyze("OK")
        with pytest.raises(NotReadyError):
            profile.generate()

    def test_analyze_invalidates_sampler(self, name_profile):
        name_profile.analyze("Jones, Mary")
        assert not name_profile.is_ready
        with pytest.raises(NotReadyError):
            name_profile.generate()

        name_profile.pre_generate()
        assert name_profile.generate()

    def test_empty_profile_cannot_generate(self, rng):
        profile = Profile(rng=rng)
        profile.pre_generate()
        with pytest.raises(NotReadyError):
            profile.generate()

    def test_sources_with_end_bias(self, rng):
        profile = Profile(rng=rng)
        profile.analyze("abc")
        profile.pre_generate()

        value, sources = profile.generate_with_sources()
        assert value == "abc"
        assert sources == [Source.START, Source.TRANSITION, Source.TERMINAL]

    def test_sources_without_end_bias(self, rng):
        profile = Profile(rng=rng, end_bias=False)
        profile.analyze("abc")
        profile.pre_generate()

        _, sources = profile.generate_with_sources()
        assert sources == [Source.START, Source.TRANSITION, Source.TRANSITION]

    def test_sparse_transitions_fall_back(self, rng):
        profile = Profile.from_dict(sparse_archive(), rng=rng)
        profile.pre_generate()

        value, sources = profile.generate_with_sources()
        assert value == "ab"
        assert sources == [Source.START, Source.POSITIONAL]

    def test_end_characters_bias_final_position(self):
        archive = sparse_archive(ends={"y": 2}, transitions={"a": {"x": 1, "y": 1}})

        biased = Profile.from_dict(archive, rng=np.random.default_rng(1))
        biased.pre_generate()
        assert {biased.generate() for _ in range(50)} == {"ay"}

        unbiased = Profile.from_dict(archive, rng=np.random.default_rng(1), end_bias=False)
        unbiased.pre_generate()
        assert {unbiased.generate() for _ in range(50)} == {"ax", "ay"}

    def test_rng_per_call(self, name_profile):
        first = [name_profile.generate(np.random.default_rng(5)) for _ in range(3)]
        second = [name_profile.generate(np.random.default_rng(5)) for _ in range(3)]
        assert first == second

    def test_realistic_test(self, name_profile):
        close = name_profile.realistic_test("John", ["John", "Jon"])
        far = name_profile.realistic_test("Xyzzy12", ["John", "Jon"])
        assert close == 1.0
        assert 0.0 <= far < close


class TestArchive:
    """Saving and loading profiles"""

    def test_archive_path_suffix(self, tmp_path):
        assert archive_path(tmp_path / "names") == tmp_path / "names.json"
        assert archive_path(tmp_path / "names.json") == tmp_path / "names.json"

    def test_round_trip_preserves_statistics(self, name_profile, tmp_path):
        path = name_profile.save(tmp_path / "names")
        assert path.exists()

        restored = Profile.from_file(tmp_path / "names")
        assert restored.to_dict() == name_profile.to_dict()
        assert [e.pattern for e in restored.patterns] == [e.pattern for e in name_profile.patterns]
        assert not restored.is_ready

    def test_round_trip_is_deterministic(self, name_profile, tmp_path):
        name_profile.save(tmp_path / "names")

        outputs = []
        for _ in range(2):
            restored = Profile.from_file(tmp_path / "names", rng=np.random.default_rng(7))
            restored.pre_generate()
            outputs.append([restored.generate() for _ in range(20)])

        assert outputs[0] == outputs[1]

    def test_round_trip_matches_in_memory_generation(self, name_profile, tmp_path):
        name_profile.save(tmp_path / "names")
        restored = Profile.from_file(tmp_path / "names")
        restored.pre_generate()

        in_memory = [name_profile.generate(np.random.default_rng(11)) for _ in range(5)]
        loaded = [restored.generate(np.random.default_rng(11)) for _ in range(5)]
        assert in_memory == loaded

    def test_archive_is_versioned_json(self, name_profile, tmp_path):
        path = name_profile.save(tmp_path / "names")
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["version"] == ARCHIVE_VERSION
        assert len(document["patterns"]) == 4

    def test_missing_archive(self, tmp_path):
        with pytest.raises(FormatError):
            Profile.from_file(tmp_path / "missing")

    def test_truncated_archive(self, name_profile, tmp_path):
        path = name_profile.save(tmp_path / "names")
        text = path.read_text(encoding="utf-8")
        path.write_text(text[: len(text) // 2], encoding="utf-8")

        with pytest.raises(FormatError):
            Profile.from_file(path)

    def test_incompatible_version(self, tmp_path):
        path = tmp_path / "old.json"
        path.write_text(json.dumps({"version": 99, "patterns": []}), encoding="utf-8")

        with pytest.raises(FormatError):
            Profile.from_file(path)

    def test_corrupt_structure(self, tmp_path):
        archive = sparse_archive()
        archive["patterns"][0]["positions"].pop()
        path = tmp_path / "corrupt.json"
        path.write_text(json.dumps(archive), encoding="utf-8")

        with pytest.raises(FormatError):
            Profile.from_file(path)

    def test_negative_counts_rejected(self):
        archive = sparse_archive(ends={"b": -1})
        with pytest.raises(FormatError):
            Profile.from_dict(archive)

    def test_unwritable_path(self, name_profile, tmp_path):
        with pytest.raises(OSError):
            name_profile.save(tmp_path / "no-such-dir" / "names")

    def test_counts_without_observations_rejected(self, tmp_path):
        archive = sparse_archive()
        entry = archive["patterns"][0]
        entry["starts"] = {}
        entry["ends"] = {}
        entry["positions"] = [{"observed": {}}, {"observed": {}}]
        path = tmp_path / "hollow.json"
        path.write_text(json.dumps(archive), encoding="utf-8")

        with pytest.raises(FormatError):
            Profile.from_file(path)

    @pytest.mark.parametrize("field, counts", [
        ("starts", {"a": 1}),
        ("ends", {"b": 3}),
    ])
    def test_inconsistent_totals_rejected(self, field, counts):
        archive = sparse_archive()
        archive["patterns"][0][field] = counts

        with pytest.raises(FormatError):
            Profile.from_dict(archive)

    def test_position_total_must_match_count(self):
        archive = sparse_archive()
        archive["patterns"][0]["positions"][1]["observed"] = {"b": 1}

        with pytest.raises(FormatError):
            Profile.from_dict(archive)

    @pytest.mark.parametrize("version", [True, 1.0, "1", None])
    def test_version_must_be_integer(self, version, tmp_path):
        path = tmp_path / "versioned.json"
        path.write_text(json.dumps({"version": version, "patterns": []}), encoding="utf-8")

        with pytest.raises(FormatError):
            Profile.from_file(path)
