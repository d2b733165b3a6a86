"""Tests for update selection: strategies, ignore rules and pre-releases."""

import pytest

from helm_updater.core.update_strategy import is_dependency_ignored, rules_for, select_update
from helm_updater.models import UpdateStrategy, UpdateType
from helm_updater.models.repo import ChartVersionInfo
from helm_updater.models.update import IgnoreRule

AVAILABLE = ["15.9.0", "15.9.1", "15.10.0", "16.0.0"]


def rule(name="nginx", types=(), versions=()):
    return IgnoreRule(dependency_name=name, update_types=frozenset(types), versions=tuple(versions))


class TestStrategies:
    @pytest.mark.parametrize(
        "strategy, expected",
        [
            (UpdateStrategy.PATCH, "15.9.1"),
            (UpdateStrategy.MINOR, "15.10.0"),
            (UpdateStrategy.MAJOR, "16.0.0"),
            (UpdateStrategy.ALL, "16.0.0"),
        ],
    )
    def test_highest_allowed_version(self, strategy, expected):
        assert select_update("15.9.0", AVAILABLE, strategy, dependency_name="nginx") == expected

    def test_accepts_version_records(self):
        records = [ChartVersionInfo(version=v) for v in AVAILABLE]
        assert select_update("15.9.0", records, UpdateStrategy.MINOR) == "15.10.0"

    def test_strategy_results_are_nested(self):
        # Anything patch allows, minor allows too; anything minor allows, all allows.
        versions = ["1.2.4", "1.3.0", "1.3.5", "2.0.0", "2.1.0"]
        patch = select_update("1.2.3", versions, UpdateStrategy.PATCH)
        minor = select_update("1.2.3", versions, UpdateStrategy.MINOR)
        every = select_update("1.2.3", versions, UpdateStrategy.ALL)
        assert patch == "1.2.4"
        assert minor == "1.3.5"
        assert every == "2.1.0"

    @pytest.mark.parametrize("strategy", list(UpdateStrategy))
    def test_no_update_at_latest(self, strategy):
        assert select_update("16.0.0", AVAILABLE, strategy) is None

    @pytest.mark.parametrize("strategy", list(UpdateStrategy))
    def test_never_downgrades(self, strategy):
        assert select_update("17.0.0", AVAILABLE, strategy) is None

    def test_patch_strategy_without_patch_candidates(self):
        assert select_update("15.10.0", ["16.0.0", "15.11.0"], UpdateStrategy.PATCH) is None

    def test_empty_list(self):
        assert select_update("1.0.0", []) is None


class TestInvalidVersions:
    def test_invalid_current_version(self):
        assert select_update("latest", AVAILABLE) is None
        assert select_update("invalid-version", AVAILABLE) is None

    def test_invalid_candidates_are_skipped(self):
        assert select_update("1.0.0", ["latest", "1.1.0", "not-semver", "main"]) == "1.1.0"

    def test_only_invalid_candidates(self):
        assert select_update("1.0.0", ["latest", "stable"]) is None


class TestPrereleases:
    def test_prereleases_excluded_by_default(self):
        assert select_update("15.9.0", ["15.9.1", "16.0.0-rc.1"]) == "15.9.1"

    def test_allow_prereleases(self):
        assert select_update("15.9.0", ["15.9.1", "16.0.0-rc.1"], allow_prereleases=True) == "16.0.0-rc.1"

    def test_prerelease_current_updates_to_release(self):
        assert select_update("2.0.0-beta.1", ["2.0.0-beta.2", "2.0.0"]) == "2.0.0"

    def test_release_beats_its_prerelease(self):
        assert select_update("1.0.0", ["2.0.0-rc.1", "2.0.0"], allow_prereleases=True) == "2.0.0"

    @pytest.mark.parametrize("current", ["1.0.0-SNAPSHOT", "1.0.0-1"])
    def test_any_semver_prerelease_current_can_update(self, current):
        assert select_update(current, ["1.0.0", "1.1.0"]) == "1.1.0"

    @pytest.mark.parametrize(
        "available, expected",
        [
            (["2.0.0-alpha.1", "2.0.0-dev.1"], "2.0.0-dev.1"),
            (["2.0.0-preview.1", "2.0.0-rc.1"], "2.0.0-rc.1"),
            (["2.0.0-rc.1", "2.0.0-preview.1"], "2.0.0-rc.1"),
            (["2.0.0-beta.11", "2.0.0-beta.2"], "2.0.0-beta.11"),
        ],
    )
    def test_prerelease_labels_compare_lexically(self, available, expected):
        assert select_update("1.0.0", available, allow_prereleases=True) == expected


class TestBuildMetadata:
    def test_returned_verbatim(self):
        assert select_update("1.0.0", ["1.1.0+build.7"]) == "1.1.0+build.7"

    def test_metadata_only_difference_is_not_an_update(self):
        assert select_update("1.0.0+build.1", ["1.0.0+build.2"]) is None

    def test_ties_keep_input_order(self):
        assert select_update("1.0.0", ["1.1.0+b", "1.1.0+a"]) == "1.1.0+b"

    def test_deterministic(self):
        results = {select_update("15.9.0", list(reversed(AVAILABLE)), UpdateStrategy.MINOR) for _ in range(5)}
        assert results == {"15.10.0"}


class TestIgnoreRules:
    def test_rule_without_types_ignores_dependency(self):
        rules = [rule()]
        assert is_dependency_ignored("nginx", rules)
        assert select_update("15.9.0", AVAILABLE, ignore_rules=rules, dependency_name="nginx") is None

    def test_rules_apply_only_to_named_dependency(self):
        rules = [rule(name="redis")]
        assert not is_dependency_ignored("nginx", rules)
        assert select_update("15.9.0", AVAILABLE, ignore_rules=rules, dependency_name="nginx") == "16.0.0"

    def test_ignore_major_falls_back_to_minor(self):
        rules = [rule(types=[UpdateType.MAJOR])]
        assert select_update("15.9.0", AVAILABLE, ignore_rules=rules, dependency_name="nginx") == "15.10.0"

    def test_ignore_minor(self):
        rules = [rule(types=[UpdateType.MINOR])]
        result = select_update("15.9.0", AVAILABLE, UpdateStrategy.MINOR, rules, "nginx")
        assert result == "15.9.1"

    def test_ignore_patch(self):
        rules = [rule(types=[UpdateType.PATCH])]
        assert select_update("15.9.0", AVAILABLE, UpdateStrategy.PATCH, rules, "nginx") is None

    def test_ignore_several_types(self):
        rules = [rule(types=[UpdateType.MAJOR, UpdateType.MINOR])]
        assert select_update("15.9.0", AVAILABLE, ignore_rules=rules, dependency_name="nginx") == "15.9.1"

    def test_ignore_version_pattern(self):
        rules = [rule(versions=["16.x"])]
        assert select_update("15.9.0", AVAILABLE, ignore_rules=rules, dependency_name="nginx") == "15.10.0"

    def test_ignore_exact_version(self):
        rules = [rule(versions=["15.10.0"])]
        assert select_update("15.9.0", AVAILABLE, UpdateStrategy.MINOR, rules, "nginx") == "15.9.1"

    def test_types_and_versions_combine(self):
        rules = [rule(types=[UpdateType.MAJOR]), rule(versions=[">=15.10.0 <16.0.0"])]
        assert select_update("15.9.0", AVAILABLE, ignore_rules=rules, dependency_name="nginx") == "15.9.1"

    def test_unparseable_version_pattern_ignores_nothing(self):
        rules = [rule(versions=["invalid-pattern"])]
        assert select_update("15.9.0", AVAILABLE, ignore_rules=rules, dependency_name="nginx") == "16.0.0"

    def test_rules_for(self):
        rules = [rule(name="a"), rule(name="b"), rule(name="a", types=[UpdateType.PATCH])]
        assert len(rules_for("a", rules)) == 2
        assert rules_for("c", rules) == []
