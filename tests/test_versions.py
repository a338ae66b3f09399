"""Тесты для semver-утилит."""

import pytest
import semver

from kdmq.errors import InvalidVersionError
from kdmq.services.versions import (
    compare_loose,
    k8s_version_key,
    major_minor_tag,
    parse_loose,
    parse_range,
    parse_semver,
    strip_v,
    version_in_range,
)


class TestParseSemver:

    def test_with_v_prefix(self):
        v = parse_semver("v2.7.1")
        assert (v.major, v.minor, v.patch) == (2, 7, 1)

    def test_rancher_k8s_version(self):
        v = parse_semver("v1.24.10-rancher1-1")
        assert v.patch == 10
        assert v.prerelease == "rancher1-1"

    def test_build_metadata(self):
        v = parse_semver("v1.24.10+rke2r1")
        assert v.build == "rke2r1"

    def test_major_minor_only_is_invalid(self):
        with pytest.raises(InvalidVersionError, match=r"\[v2.7\]"):
            parse_semver("v2.7")

    def test_garbage_is_invalid(self):
        with pytest.raises(InvalidVersionError):
            parse_semver("latest")


class TestLooseVersions:

    def test_missing_patch_padded(self):
        assert parse_loose("2.6") == semver.Version(2, 6, 0)

    def test_compare(self):
        assert compare_loose("v2.7.1", "2.7.0") == 1
        assert compare_loose("2.7.0", "v2.7.0") == 0
        assert compare_loose("2.6.9", "2.7") == -1

    def test_prerelease_before_release(self):
        assert compare_loose("2.7.2-rc1", "2.7.2") == -1

    def test_invalid(self):
        with pytest.raises(InvalidVersionError):
            compare_loose("head", "2.7.0")


class TestHelpers:

    def test_strip_v(self):
        assert strip_v("v1.2.3") == "1.2.3"
        assert strip_v("1.2.3") == "1.2.3"

    def test_major_minor_tag(self):
        assert major_minor_tag("v1.24.10-rancher1-1") == "v1.24"
        assert major_minor_tag("v1") == ""


class TestK8sVersionKey:
    """Числа внутри pre-release сравниваются как числа."""

    def test_numbered_revision(self):
        assert k8s_version_key("v1.24.10-rancher1-10") > k8s_version_key("v1.24.10-rancher1-2")

    def test_numbered_rancher_tag(self):
        assert k8s_version_key("v1.24.10-rancher10-1") > k8s_version_key("v1.24.10-rancher2-1")

    def test_patch_before_prerelease(self):
        assert k8s_version_key("v1.24.10-rancher1-1") > k8s_version_key("v1.24.9-rancher4-1")

    def test_release_after_prerelease(self):
        assert k8s_version_key("v1.24.10") > k8s_version_key("v1.24.10-rancher1-1")

    def test_invalid(self):
        with pytest.raises(InvalidVersionError):
            k8s_version_key("v1.24")


class TestParseRange:

    def test_and_range(self):
        matches = parse_range(">=1.21.0 <1.24.0")
        assert matches(semver.Version.parse("1.23.16-rancher2-1"))
        assert not matches(semver.Version.parse("1.24.0"))

    def test_or_range(self):
        matches = parse_range("<1.16.0 || >=1.20.0")
        assert matches(semver.Version.parse("1.15.0"))
        assert matches(semver.Version.parse("1.25.0"))
        assert not matches(semver.Version.parse("1.18.0"))

    def test_prerelease_bounds(self):
        assert version_in_range("v1.24.10-rancher4-1", ">=1.24.0-rancher0")
        assert not version_in_range("v1.24.10-rancher4-1", ">=1.8.0-rancher0 <1.24.0-rancher0")

    def test_detached_operator(self):
        assert version_in_range("v1.22.0", ">= 1.21.0 < 1.23.0")

    def test_bare_version_means_equal(self):
        assert version_in_range("1.2.3", "1.2.3")
        assert not version_in_range("1.2.4", "1.2.3")

    @pytest.mark.parametrize("op, expected", [("=", True), ("==", True), ("!=", False), ("!", False)])
    def test_equality_operators(self, op, expected):
        assert version_in_range("1.2.3", f"{op}1.2.3") is expected

    def test_invalid_range(self):
        with pytest.raises(InvalidVersionError, match="not semver"):
            parse_range(">=1.21 <1.24.0")

    def test_empty_range(self):
        with pytest.raises(InvalidVersionError):
            parse_range("  ")
