"""Unit tests for the update checker."""

from conftest import make_fact
from cuda_doctor.core.updates import check_updates
from cuda_doctor.models.compat import Tier
from cuda_doctor.models.facts import Category
from cuda_doctor.models.snapshot import EnvironmentSnapshot


class TestCheckUpdates:
    """Tests for check_updates."""

    def test_outdated_components(self, sample_snapshot):
        """Test components older than the latest known release."""
        report = check_updates(sample_snapshot)
        advice = {a.key: a for a in report.advice}

        driver = advice["driver"]
        assert driver.current == "535.104.05"
        assert driver.latest == "545.23"
        assert driver.tier == Tier.SUPPORTED
        assert driver.update_available is True
        assert driver.source is not None

        assert "driver" in [a.key for a in report.outdated]

    def test_gpus_not_checked(self, sample_snapshot):
        """Test that devices are not part of the update check."""
        report = check_updates(sample_snapshot)
        assert all(not a.key.startswith("gpu") for a in report.advice)

    def test_not_installed(self, sample_snapshot):
        """Test a tracked component that is absent."""
        advice = {a.key: a for a in check_updates(sample_snapshot).advice}
        tensorflow = advice["framework:tensorflow"]
        assert tensorflow.current is None
        assert tensorflow.update_available is None
        assert tensorflow.latest == "2.15.0"

    def test_up_to_date(self):
        """Test a version at the latest release."""
        snapshot = EnvironmentSnapshot(facts=[make_fact(Category.CUDA_TOOLKIT, "12.3.2")])
        advice = {a.key: a for a in check_updates(snapshot).advice}
        assert advice["cuda_toolkit"].tier == Tier.RECOMMENDED
        assert advice["cuda_toolkit"].update_available is False

    def test_latest_override(self, sample_snapshot):
        """Test overriding the latest known version."""
        report = check_updates(sample_snapshot, latest={"cudnn": "8.9.2"})
        advice = {a.key: a for a in report.advice}
        assert advice["cudnn"].update_available is False
        assert advice["cudnn"].latest == "8.9.2"

    def test_untracked_keys_listed(self):
        """Test that tracked components missing from the snapshot are still listed."""
        report = check_updates(EnvironmentSnapshot())
        keys = [a.key for a in report.advice]
        assert "driver" in keys
        assert "framework:pytorch" in keys
        assert report.outdated == []

    def test_unversioned_component(self):
        """Test a component found without a version."""
        snapshot = EnvironmentSnapshot(facts=[make_fact(Category.DRIVER, None)])
        advice = {a.key: a for a in check_updates(snapshot).advice}
        assert advice["driver"].tier == Tier.UNKNOWN
        assert advice["driver"].update_available is None
