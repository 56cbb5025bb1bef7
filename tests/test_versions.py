"""
Tests for version ordering, validation and upgrade checks.
"""

import pytest

from cdnsync.config import FrontendConfig
from cdnsync.exceptions import TransportError, VersionNotFoundError
from cdnsync.providers.base import VersionSet
from cdnsync.versions import find_upgrades, latest_stable, sort_descending, validate_version


class TestSortDescending:
    """Tests for sort_descending()."""

    def test_drops_bogus_and_orders_prerelease_last(self):
        assert sort_descending(["1.0.0", "2.0.0", "1.0.0-beta", "bogus"]) == ["2.0.0", "1.0.0", "1.0.0-beta"]

    def test_basic_semantic_versions(self):
        assert sort_descending(["1.0.0", "2.0.0", "1.5.0", "1.0.1"]) == ["2.0.0", "1.5.0", "1.0.1", "1.0.0"]

    def test_prereleases_of_same_base(self):
        result = sort_descending(["1.0.0", "1.0.0-alpha", "1.0.0-beta", "2.0.0"])
        assert result == ["2.0.0", "1.0.0", "1.0.0-beta", "1.0.0-alpha"]

    def test_numeric_not_lexical(self):
        assert sort_descending(["3.0.0", "2.5.1", "3.0.1", "2.10.0"]) == ["3.0.1", "3.0.0", "2.10.0", "2.5.1"]

    def test_invalid_versions_never_raise(self):
        result = sort_descending(["1.0.0", "invalid", "2.0.0", "not-a-version", "", "1.5.0"])
        assert result == ["2.0.0", "1.5.0", "1.0.0"]

    def test_empty_input(self):
        assert sort_descending([]) == []

    def test_accepts_set(self):
        assert sort_descending({"0.1.0", "0.2.0"}) == ["0.2.0", "0.1.0"]

    def test_idempotent(self):
        data = ["1.2.3", "1.2.3-rc.1", "0.9.0", "10.0.0", "junk", "1.2", "1.2.0", "2.0.0-alpha"]
        once = sort_descending(data)
        assert sort_descending(once) == once

    def test_strictly_descending_for_distinct_versions(self):
        result = sort_descending(["4.1.0", "0.0.1", "4.0.0-rc.2", "4.0.0-rc.10", "4.0.0"])
        assert result == ["4.1.0", "4.0.0", "4.0.0-rc.10", "4.0.0-rc.2", "0.0.1"]

    def test_equal_versions_ordered_deterministically(self):
        assert sort_descending(["1.2.0", "1.2"]) == sort_descending(["1.2", "1.2.0"])

    def test_semver_precedence_for_npm_prerelease_tags(self):
        result = sort_descending(["1.0.0", "1.0.0-1", "2.0.0-next.1", "1.0.0-alpha.beta", "3.0.0-canary.5"])
        assert result == ["3.0.0-canary.5", "2.0.0-next.1", "1.0.0", "1.0.0-alpha.beta", "1.0.0-1"]

    def test_numeric_prerelease_below_release(self):
        assert sort_descending(["1.0.0-1", "1.0.0"]) == ["1.0.0", "1.0.0-1"]

    def test_numeric_prerelease_identifiers_compare_numerically(self):
        assert sort_descending(["1.0.0-2", "1.0.0-10", "1.0.0-1"]) == ["1.0.0-10", "1.0.0-2", "1.0.0-1"]

    def test_semver_spec_prerelease_chain(self):
        chain = [
            "1.0.0-alpha", "1.0.0-alpha.1", "1.0.0-alpha.beta", "1.0.0-beta",
            "1.0.0-beta.2", "1.0.0-beta.11", "1.0.0-rc.1", "1.0.0",
        ]
        assert sort_descending(reversed(chain)) == list(reversed(chain))
        assert sort_descending(chain) == list(reversed(chain))

    def test_leading_v_tolerated(self):
        assert sort_descending(["v1.0.0", "0.9.0"]) == ["v1.0.0", "0.9.0"]

    def test_four_part_versions_dropped(self):
        assert sort_descending(["1.2.3.4", "1.2.3"]) == ["1.2.3"]


class TestLatestStable:
    def test_prefers_release_over_newer_prerelease(self):
        assert latest_stable(["4.0.0", "4.17.21", "5.0.0-next.1"]) == "4.17.21"

    def test_numeric_prerelease_is_not_stable(self):
        assert latest_stable(["1.0.0-1", "0.9.0"]) == "0.9.0"

    def test_only_prereleases(self):
        assert latest_stable(["2.0.0-beta", "2.0.0-canary.3"]) == "2.0.0-canary.3"

    def test_empty(self):
        assert latest_stable(["junk"]) is None


class StubAdapter:
    name = "stub"

    def __init__(self, versions=None, latest=None, error=None, by_library=None):
        self.version_set = VersionSet(set(versions or []), {"latest": latest} if latest else {})
        self.error = error
        self.by_library = by_library or {}

    def fetch_version_list(self, library):
        if self.error:
            raise self.error
        return self.by_library.get(library, self.version_set)


class TestValidateVersion:
    def test_present_version_passes(self):
        validate_version(StubAdapter(["1.0.0", "2.0.0"]), "lib", "2.0.0")

    def test_absent_version_raises_domain_error(self):
        with pytest.raises(VersionNotFoundError) as exc:
            validate_version(StubAdapter(["1.0.0"]), "lib", "9.9.9")
        assert exc.value.library == "lib"
        assert exc.value.version == "9.9.9"
        assert exc.value.provider == "stub"


class TestFindUpgrades:
    def _config(self, **libs):
        return FrontendConfig.from_dict({
            "destination": "./libs/{library_name}",
            "cdn": "unpkg",
            "libraries": {name: {"version": v} for name, v in libs.items()},
        })

    def test_reports_upgrade_and_up_to_date(self):
        config = self._config(jquery="3.5.1", vue="3.4.0")
        adapters = {"unpkg": StubAdapter(by_library={
            "jquery": VersionSet({"3.5.1", "3.7.1"}, {"latest": "3.7.1"}),
            "vue": VersionSet({"3.4.0"}, {"latest": "3.4.0"}),
        })}

        report = find_upgrades(config, adapters)
        assert [(u.library, u.current, u.latest) for u in report.upgrades] == [("jquery", "3.5.1", "3.7.1")]
        assert report.up_to_date == ["vue@3.4.0"]
        assert report.errors == []

    def test_falls_back_to_highest_version_without_latest_tag(self):
        config = self._config(lodash="4.0.0")
        report = find_upgrades(config, {"unpkg": StubAdapter(["4.0.0", "4.17.21", "5.0.0-beta"])})
        assert report.upgrades[0].latest == "4.17.21"

    def test_errors_are_collected_not_raised(self):
        config = self._config(missing="1.0.0")
        adapter = StubAdapter(error=TransportError("https://registry.npmjs.org/missing", 404))
        report = find_upgrades(config, {"unpkg": adapter})
        assert report.upgrades == []
        assert len(report.errors) == 1
        assert report.errors[0].startswith("missing:")
