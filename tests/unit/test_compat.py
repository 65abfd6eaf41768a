"""Unit tests for the compatibility engine and rule table."""

import pytest

from conftest import make_fact
from cuda_doctor.core.compat import CompatibilityEngine, rule_order, validate_rule_table
from cuda_doctor.knowledge.compat_matrix import get_compat_matrix, get_rule_table, latest_version_rules
from cuda_doctor.models.compat import CompatibilityRule, Tier
from cuda_doctor.models.facts import Category, ComponentFact
from cuda_doctor.utils.errors import RuleTableInconsistency


def cuda_rule(low: str, high: str | None, driver: str, tier: Tier) -> CompatibilityRule:
    return CompatibilityRule(
        subject=Category.CUDA_TOOLKIT,
        subject_min=low,
        subject_max=high,
        dependency=Category.DRIVER,
        required_min=driver,
        tier=tier,
    )


class TestRuleSelection:
    """Tests for choosing between overlapping rules."""

    def test_narrowest_range_wins(self):
        """Test that an exact release beats a major-version range."""
        engine = CompatibilityEngine(
            [
                cuda_rule("12.0", "12", "525.60", Tier.SUPPORTED),
                cuda_rule("12.2", "12.2", "535.86", Tier.RECOMMENDED),
            ]
        )
        report = engine.evaluate([make_fact(Category.CUDA_TOOLKIT, "12.2.140")])
        assert report.finding_for("cuda_toolkit").tier == Tier.RECOMMENDED

    def test_wider_range_still_applies_elsewhere(self):
        """Test that the wide rule classifies versions the narrow one misses."""
        engine = CompatibilityEngine(
            [
                cuda_rule("12.0", "12", "525.60", Tier.SUPPORTED),
                cuda_rule("12.2", "12.2", "535.86", Tier.RECOMMENDED),
            ]
        )
        report = engine.evaluate([make_fact(Category.CUDA_TOOLKIT, "12.1")])
        assert report.finding_for("cuda_toolkit").tier == Tier.SUPPORTED

    def test_equal_width_most_severe_wins(self):
        """Test the tie-break between equally wide rules."""
        supported = cuda_rule("12.0", "12.2", "525.60", Tier.SUPPORTED)
        deprecated = cuda_rule("12.0", "12.2", "525.60", Tier.DEPRECATED)
        assert sorted([supported, deprecated], key=rule_order)[0] is deprecated

    def test_catch_all_loses(self):
        """Test that a zero-minimum fallback never beats a real range."""
        engine = CompatibilityEngine(
            [
                CompatibilityRule(subject=Category.CUDA_TOOLKIT, subject_min="0", tier=Tier.INCOMPATIBLE),
                cuda_rule("11.8", "11.8", "520.61", Tier.RECOMMENDED),
            ]
        )
        matches = engine.matching_rules(make_fact(Category.CUDA_TOOLKIT, "11.8.89"))
        assert [r.tier for r in matches] == [Tier.RECOMMENDED, Tier.INCOMPATIBLE]

    def test_framework_rules_match_by_name(self):
        """Test that framework rules only apply to the named framework."""
        rule = CompatibilityRule(
            subject=Category.FRAMEWORK,
            subject_name="pytorch",
            subject_min="2.0",
            tier=Tier.SUPPORTED,
        )
        engine = CompatibilityEngine([rule])
        assert engine.matching_rules(make_fact(Category.FRAMEWORK, "2.1.0", name="pytorch")) == [rule]
        assert engine.matching_rules(make_fact(Category.FRAMEWORK, "2.13.0", name="tensorflow")) == []


class TestEvaluate:
    """Tests for CompatibilityEngine.evaluate with the built-in table."""

    def test_recommended_stack(self):
        """Test driver 535.86 with CUDA 12.2."""
        engine = CompatibilityEngine()
        report = engine.evaluate(
            [
                make_fact(Category.DRIVER, "535.86"),
                make_fact(Category.CUDA_TOOLKIT, "12.2"),
            ]
        )

        assert report.finding_for("cuda_toolkit").tier == Tier.RECOMMENDED
        [check] = report.checks_named("driver-sufficiency")
        assert check.satisfied is True
        assert check.tier == Tier.RECOMMENDED
        assert check.required == ">= 535.86"
        assert check.actual == "535.86"

    def test_missing_driver_is_unknown(self):
        """Test CUDA 11.8 when no driver was detected."""
        engine = CompatibilityEngine()
        report = engine.evaluate(
            [
                ComponentFact.absent(Category.DRIVER),
                make_fact(Category.CUDA_TOOLKIT, "11.8"),
            ]
        )

        assert report.finding_for("cuda_toolkit").tier == Tier.RECOMMENDED
        assert report.finding_for("driver") is None
        [check] = report.checks_named("driver-sufficiency")
        assert check.tier == Tier.UNKNOWN
        assert check.satisfied is None
        assert check.dependency_key == "driver"
        assert "not detected" in check.message
        assert report.compatible

    def test_driver_too_old(self):
        """Test a driver below the toolkit's minimum."""
        engine = CompatibilityEngine()
        report = engine.evaluate(
            [
                make_fact(Category.DRIVER, "530.30.02"),
                make_fact(Category.CUDA_TOOLKIT, "12.2"),
            ]
        )

        [check] = report.checks_named("driver-sufficiency")
        assert check.satisfied is False
        assert check.tier == Tier.INCOMPATIBLE
        assert "530.30.02 is installed" in check.message
        assert report.failed_checks == [check]
        assert not report.compatible

    def test_one_compute_check_per_gpu(self):
        """Test that every GPU is checked against the toolkit."""
        engine = CompatibilityEngine()
        report = engine.evaluate(
            [
                make_fact(Category.GPU, "8.6", name="NVIDIA GeForce RTX 3090", index=0),
                make_fact(Category.GPU, "3.0", name="NVIDIA GeForce GT 750M", index=1),
                make_fact(Category.CUDA_TOOLKIT, "12.2"),
            ]
        )

        checks = [c for c in report.checks_named("compute-capability") if c.subject_key == "cuda_toolkit"]
        assert [(c.dependency_key, c.satisfied) for c in checks] == [("gpu:0", True), ("gpu:1", False)]
        assert report.finding_for("gpu:1").tier == Tier.INCOMPATIBLE

    def test_no_gpu_single_unknown_check(self):
        """Test that without GPUs the compute check is reported once as unknown."""
        engine = CompatibilityEngine()
        report = engine.evaluate([make_fact(Category.CUDA_TOOLKIT, "12.2")])

        [check] = report.checks_named("compute-capability")
        assert check.dependency_key == "gpu"
        assert check.satisfied is None

    def test_unversioned_fact(self):
        """Test that a fact without version is unknown."""
        engine = CompatibilityEngine()
        fact = make_fact(Category.GPU, None, name="NVIDIA Corporation GA102 [GeForce RTX 3090]", index=0)
        report = engine.evaluate([fact])

        finding = report.finding_for("gpu:0")
        assert finding.tier == Tier.UNKNOWN
        assert "version unknown" in finding.message
        assert report.cross_checks == []

    def test_no_rule_is_unknown(self):
        """Test a version the table has nothing to say about."""
        report = CompatibilityEngine().evaluate([make_fact(Category.FRAMEWORK, "0.4.20", name="jax")])
        finding = report.finding_for("framework:jax")
        assert finding.tier == Tier.UNKNOWN
        assert "no compatibility rule" in finding.message

    def test_old_toolkit_incompatible(self):
        """Test the catch-all for toolkits before 11.0."""
        report = CompatibilityEngine().evaluate([make_fact(Category.CUDA_TOOLKIT, "10.2")])
        assert report.finding_for("cuda_toolkit").tier == Tier.INCOMPATIBLE
        assert not report.compatible

    def test_framework_cross_check(self):
        """Test a framework requiring a toolkit range."""
        report = CompatibilityEngine().evaluate(
            [
                make_fact(Category.CUDA_TOOLKIT, "11.2"),
                make_fact(Category.FRAMEWORK, "2.1.0+cu121", name="pytorch"),
            ]
        )
        [check] = [c for c in report.checks_named("cuda-toolkit-compatibility") if c.subject_key == "framework:pytorch"]
        assert check.satisfied is False
        assert check.required == "11.8 - 12"

    def test_absent_facts_have_no_findings(self):
        """Test that absent facts only appear as missing dependencies."""
        report = CompatibilityEngine().evaluate([ComponentFact.absent(Category.CUDNN)])
        assert report.findings == []
        assert report.cross_checks == []
        assert report.worst_tier == Tier.UNKNOWN

    def test_subset(self):
        """Test that a subset keeps only cross-checks inside its categories."""
        engine = CompatibilityEngine().subset([Category.DRIVER, Category.CUDA_TOOLKIT])
        assert all(r.subject in (Category.DRIVER, Category.CUDA_TOOLKIT) for r in engine.rules)

        report = engine.evaluate([make_fact(Category.CUDA_TOOLKIT, "12.2")])
        assert report.checks_named("compute-capability") == []
        assert len(report.checks_named("driver-sufficiency")) == 1

    def test_subset_keeps_rules_with_outside_dependencies(self):
        """Test that driver tiers survive when the GPU is out of scope."""
        engine = CompatibilityEngine().subset([Category.DRIVER])
        report = engine.evaluate([make_fact(Category.DRIVER, "535.104.05"), make_fact(Category.DRIVER, "550.54.14")])

        assert report.findings[0].tier == Tier.SUPPORTED
        assert report.findings[1].tier == Tier.RECOMMENDED
        assert report.cross_checks == []
        assert report.compatible

    def test_cudnn_tiers(self):
        """Test cuDNN classification and its toolkit requirement."""
        report = CompatibilityEngine().evaluate(
            [make_fact(Category.CUDNN, "8.9.2"), make_fact(Category.CUDA_TOOLKIT, "12.2")]
        )
        assert report.finding_for("cudnn").tier == Tier.RECOMMENDED
        [check] = [c for c in report.checks_named("cuda-toolkit-compatibility") if c.subject_key == "cudnn"]
        assert check.satisfied is True
        assert check.required == "11.0 - 12"

        old = CompatibilityEngine().evaluate([make_fact(Category.CUDNN, "7.6.5")])
        assert old.finding_for("cudnn").tier == Tier.INCOMPATIBLE


class TestRuleTable:
    """Tests for rule table validation."""

    def test_builtin_table_is_consistent(self):
        """Test that the shipped matrix validates."""
        rules = get_rule_table()
        assert len(rules) == len(get_compat_matrix())
        validate_rule_table(rules)

    def test_overlap_rejected(self):
        """Test two overlapping rules at the same tier."""
        rules = [
            cuda_rule("12.0", "12.2", "525.60", Tier.SUPPORTED),
            cuda_rule("12.1", "12.3", "530.30", Tier.SUPPORTED),
        ]
        with pytest.raises(RuleTableInconsistency) as exc_info:
            validate_rule_table(rules)
        assert exc_info.value.code == "RULE_TABLE_INCONSISTENT"
        assert len(exc_info.value.details["rules"]) == 2

    def test_custom_table_validated_by_engine(self):
        """Test that the engine refuses an inconsistent custom table."""
        with pytest.raises(RuleTableInconsistency):
            CompatibilityEngine(
                [
                    cuda_rule("11.0", None, "450.80", Tier.SUPPORTED),
                    cuda_rule("12.0", "12.0", "525.60", Tier.SUPPORTED),
                ]
            )

    def test_adjacent_ranges_allowed(self):
        """Test that touching but disjoint ranges are fine."""
        validate_rule_table(
            [
                cuda_rule("12.0", "12.0", "525.60", Tier.SUPPORTED),
                cuda_rule("12.1", "12.1", "530.30", Tier.SUPPORTED),
            ]
        )

    def test_incompatible_catch_all_exempt(self):
        """Test that an incompatible fallback never conflicts."""
        validate_rule_table(
            [
                CompatibilityRule(subject=Category.CUDA_TOOLKIT, subject_min="0", tier=Tier.INCOMPATIBLE),
                CompatibilityRule(subject=Category.CUDA_TOOLKIT, subject_min="10.0", tier=Tier.INCOMPATIBLE),
            ]
        )

    def test_other_catch_alls_checked(self):
        """Test that a catch-all at another tier is checked for overlap."""
        with pytest.raises(RuleTableInconsistency):
            validate_rule_table(
                [
                    CompatibilityRule(subject=Category.CUDA_TOOLKIT, subject_min="0", tier=Tier.SUPPORTED),
                    CompatibilityRule(subject=Category.CUDA_TOOLKIT, subject_min="12.0", tier=Tier.SUPPORTED),
                ]
            )

    def test_latest_version_rules_consistent(self):
        """Test that update rules only pair a catch-all with a newer tier."""
        validate_rule_table(latest_version_rules())
