"""Unit tests for snapshot capture and comparison."""

import pytest
from pydantic import ValidationError

from conftest import FIXED_TIME, make_fact
from cuda_doctor.core.compare import compare_snapshots
from cuda_doctor.core.snapshot import SnapshotCollector
from cuda_doctor.extractors import ExtractorRegistry, register_default_extractors
from cuda_doctor.extractors.strategies import LinuxStrategy
from cuda_doctor.models.diff import DiffScope, DiffStatus
from cuda_doctor.models.facts import Category, ComponentFact
from cuda_doctor.models.snapshot import EnvironmentSnapshot


def make_collector(runner, system_info, clock, **kwargs) -> SnapshotCollector:
    return SnapshotCollector(
        runner=runner,
        strategy=LinuxStrategy(env={}),
        system_info=system_info,
        clock=clock,
        **kwargs,
    )


class TestSnapshotCollector:
    """Tests for SnapshotCollector."""

    def test_capture_full_stack(self, fake_runner, fake_system_info, fixed_clock):
        """Test capturing a machine with everything installed."""
        snapshot = make_collector(fake_runner, fake_system_info, fixed_clock).capture()

        assert snapshot.captured_at == FIXED_TIME
        assert snapshot.os_name == "Linux"
        assert snapshot.hostname == "gpu-box"
        assert snapshot.system.cpu_cores_logical == 16

        assert str(snapshot.fact("gpu:0").version) == "8.6"
        assert str(snapshot.fact("driver").version) == "535.104.05"
        assert str(snapshot.fact("cuda_toolkit").version) == "12.2"
        assert snapshot.fact("cuda_toolkit").method == "nvcc"
        assert str(snapshot.fact("cudnn").version) == "8.9.2"
        assert str(snapshot.fact("framework:pytorch").version) == "2.1.0+cu121"
        assert not snapshot.fact("framework:tensorflow").presence

    def test_fact_order_follows_registry(self, fake_runner, fake_system_info, fixed_clock):
        """Test that facts come out in extractor order regardless of threads."""
        snapshot = make_collector(fake_runner, fake_system_info, fixed_clock, max_workers=4).capture()
        assert snapshot.keys == [
            "gpu:0",
            "driver",
            "cuda_toolkit",
            "cudnn",
            "framework:pytorch",
            "framework:tensorflow",
        ]

    def test_empty_machine(self, empty_runner, fake_system_info, fixed_clock):
        """Test that nothing installed yields absent facts and errors."""
        snapshot, results = make_collector(empty_runner, fake_system_info, fixed_clock).capture_detailed()

        assert snapshot.present_facts == []
        assert snapshot.keys[0] == "gpu"
        assert all(not r.success for r in results)
        assert all(r.errors[-1].code == "DETECTION_FAILED" for r in results)

    def test_custom_registry(self, fake_runner, fake_system_info, fixed_clock):
        """Test capturing only the configured frameworks."""
        registry = register_default_extractors(ExtractorRegistry(), frameworks=["pytorch"])
        snapshot = make_collector(fake_runner, fake_system_info, fixed_clock, registry=registry).capture()
        assert "framework:tensorflow" not in snapshot.keys

    def test_fallback_probes_stop_at_first_match(self, fake_runner, fake_system_info, fixed_clock):
        """Test that later driver probes are never run."""
        make_collector(fake_runner, fake_system_info, fixed_clock).capture()
        assert "/proc/driver/nvidia/version" not in fake_runner.calls
        assert "nvidia-smi" not in fake_runner.calls


class TestEnvironmentSnapshot:
    """Tests for the snapshot model."""

    def test_duplicate_keys_rejected(self):
        """Test that two facts with one key are refused."""
        with pytest.raises(ValidationError):
            EnvironmentSnapshot(facts=[make_fact(Category.DRIVER, "535.86"), make_fact(Category.DRIVER, "520.61")])

    def test_absent_fact_has_no_version(self):
        """Test that an absent fact cannot carry a version."""
        with pytest.raises(ValidationError):
            ComponentFact(category=Category.CUDNN, presence=False, version="8.9")

    def test_presence_defaults_from_version(self):
        """Test documents that omit presence."""
        assert ComponentFact(category=Category.CUDNN, version="8.9").presence
        assert not ComponentFact(category=Category.CUDNN).presence

    def test_gpus(self, sample_snapshot):
        """Test the present-GPU accessor."""
        assert [g.key for g in sample_snapshot.gpus] == ["gpu:0"]


class TestCompareSnapshots:
    """Tests for compare_snapshots."""

    def test_self_comparison_matches(self, sample_snapshot):
        """Test that a snapshot matches itself everywhere."""
        result = compare_snapshots(sample_snapshot, sample_snapshot)
        assert result.is_identical
        assert [e.name for e in result.system_entries] == ["os", "arch"]

    def test_statuses(self, sample_snapshot, other_snapshot):
        """Test each status against a different machine."""
        result = compare_snapshots(sample_snapshot, other_snapshot)

        assert result.entry("gpu:0").status == DiffStatus.MATCH
        assert result.entry("driver").status == DiffStatus.DIFFER
        assert result.entry("driver").current == "535.104.05"
        assert result.entry("driver").other == "520.61.05"
        assert result.entry("cudnn").status == DiffStatus.MISSING_IN_OTHER
        assert result.entry("framework:pytorch").status == DiffStatus.MISSING_IN_OTHER
        assert result.entry("framework:tensorflow").status == DiffStatus.MISSING_IN_CURRENT
        assert result.entry("framework:tensorflow").current is None
        assert not result.has_system_mismatch

    def test_swap_symmetry(self, sample_snapshot, other_snapshot):
        """Test that swapping operands swaps values and missing statuses."""
        forward = {e.name: e for e in compare_snapshots(sample_snapshot, other_snapshot).entries}
        backward = {e.name: e for e in compare_snapshots(other_snapshot, sample_snapshot).entries}
        swapped = {
            DiffStatus.MATCH: DiffStatus.MATCH,
            DiffStatus.DIFFER: DiffStatus.DIFFER,
            DiffStatus.MISSING_IN_CURRENT: DiffStatus.MISSING_IN_OTHER,
            DiffStatus.MISSING_IN_OTHER: DiffStatus.MISSING_IN_CURRENT,
        }

        assert forward.keys() == backward.keys()
        for name, entry in forward.items():
            assert backward[name].status == swapped[entry.status]
            assert (backward[name].current, backward[name].other) == (entry.other, entry.current)

    def test_entry_order(self):
        """Test system entries first, then current keys, then keys only the other has."""
        current = EnvironmentSnapshot(facts=[make_fact(Category.DRIVER, "535.86")])
        other = EnvironmentSnapshot(facts=[make_fact(Category.CUDNN, "8.9"), make_fact(Category.DRIVER, "535.86")])
        names = [e.name for e in compare_snapshots(current, other).entries]
        assert names == ["os", "arch", "driver", "cudnn"]

    def test_qualifier_difference(self):
        """Test that builds of one version differ."""
        current = EnvironmentSnapshot(facts=[make_fact(Category.FRAMEWORK, "2.1.0+cu118", name="pytorch")])
        other = EnvironmentSnapshot(facts=[make_fact(Category.FRAMEWORK, "2.1.0+cu121", name="pytorch")])
        assert compare_snapshots(current, other).entry("framework:pytorch").status == DiffStatus.DIFFER

    def test_present_without_version(self):
        """Test a fact detected without version."""
        current = EnvironmentSnapshot(facts=[make_fact(Category.GPU, None, index=0)])
        result = compare_snapshots(current, EnvironmentSnapshot())
        entry = result.entry("gpu:0")
        assert entry.current == "present"
        assert entry.scope == DiffScope.COMPONENT

    def test_both_absent_is_match(self):
        """Test that a component missing on both sides matches."""
        current = EnvironmentSnapshot(facts=[ComponentFact.absent(Category.CUDNN)])
        other = EnvironmentSnapshot(facts=[ComponentFact.absent(Category.CUDNN)])
        assert compare_snapshots(current, other).entry("cudnn").status == DiffStatus.MATCH

    def test_system_mismatch(self):
        """Test different operating systems."""
        result = compare_snapshots(
            EnvironmentSnapshot(os_name="Linux", arch="x86_64"),
            EnvironmentSnapshot(os_name="Windows", arch="x86_64"),
        )
        assert result.entry("os").status == DiffStatus.DIFFER
        assert result.entry("arch").status == DiffStatus.MATCH
        assert result.has_system_mismatch
