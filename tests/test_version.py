"""Tests for the package version metadata."""

from packaging.version import Version

import wuxing_tea
from wuxing_tea import _version as version_module


def test_version_is_semver_patch():
    version = Version(wuxing_tea.__version__)

    assert len(version.release) == 3, (
        "wuxing_tea.__version__ must contain exactly three release components"
    )


def test_version_matches_module():
    assert wuxing_tea.__version__ == version_module.__version__
