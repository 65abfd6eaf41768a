"""CompatibilityEngine for version compatibility analysis."""

from __future__ import annotations

from collections import defaultdict
from itertools import combinations
from typing import Iterable

from cuda_doctor.core.version import covers, span
from cuda_doctor.models.compat import (
    CROSS_CHECK_NAMES,
    CompatibilityFinding,
    CompatibilityReport,
    CompatibilityRule,
    CrossCheck,
    Tier,
)
from cuda_doctor.models.facts import Category, ComponentFact, fact_key
from cuda_doctor.utils.errors import RuleTableInconsistency
from cuda_doctor.utils.logging import get_logger

logger = get_logger("compat")


def rule_order(rule: CompatibilityRule) -> tuple:
    """Sort key choosing between rules that cover the same version.

    The narrowest subject range comes first; at equal width the most
    severe tier does.
    """
    return (span(rule.subject_min, rule.subject_max), -rule.tier.severity)


def rule_covers(rule: CompatibilityRule, fact: ComponentFact) -> bool:
    """Check whether a rule's subject side applies to a fact."""
    if rule.subject != fact.category or fact.version is None:
        return False
    if rule.subject_name is not None and rule.subject_name != fact.name:
        return False
    return covers(rule.subject_min, rule.subject_max, fact.version)


def validate_rule_table(rules: Iterable[CompatibilityRule]) -> None:
    """Check that no two rules of one pair overlap at the same tier.

    Catch-all incompatible fallbacks (subject minimum 0, no maximum) are
    exempt.

    Raises:
        RuleTableInconsistency: On the first overlapping pair found
    """
    groups: dict[tuple, list[CompatibilityRule]] = defaultdict(list)
    for rule in rules:
        if rule.is_catch_all and rule.tier == Tier.INCOMPATIBLE:
            continue
        groups[(rule.subject_key, rule.dependency_key, rule.tier)].append(rule)

    for group in groups.values():
        for a, b in combinations(group, 2):
            if covers(a.subject_min, a.subject_max, b.subject_min) or covers(
                b.subject_min, b.subject_max, a.subject_min
            ):
                raise RuleTableInconsistency(
                    f"Overlapping {a.tier.value} rules: {a.describe()} and {b.describe()}",
                    rules=[a.describe(), b.describe()],
                )


class CompatibilityEngine:
    """Engine classifying detected facts against a rule table.

    Every present fact with a version gets one finding: the tier of the
    most specific rule covering it, or ``unknown`` when no rule does.
    Each dependency named by the covering rules yields a cross-check
    comparing the dependency's detected version with the required range.

    Example:
        engine = CompatibilityEngine()
        report = engine.evaluate(snapshot.facts)

        for finding in report.findings:
            print(f"{finding.key}: {finding.tier.value}")
        for check in report.failed_checks:
            print(check.message)
    """

    def __init__(
        self,
        rules: Iterable[CompatibilityRule] | None = None,
        dependencies: Iterable[Category] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            rules: Rule table to use. Defaults to the built-in matrix.
                Custom tables are validated here.
            dependencies: Categories cross-checks may target. Defaults
                to all of them.
        """
        self._dependencies = None if dependencies is None else frozenset(dependencies)
        if rules is None:
            # Import knowledge base lazily
            from cuda_doctor.knowledge.compat_matrix import get_rule_table

            self._rules = tuple(get_rule_table())
        else:
            self._rules = tuple(rules)
            validate_rule_table(self._rules)

    @property
    def rules(self) -> tuple[CompatibilityRule, ...]:
        return self._rules

    def subset(self, categories: Iterable[Category]) -> "CompatibilityEngine":
        """Engine over the rules whose subject is in categories.

        Rules keep classifying their subject; cross-checks are only made
        against dependencies inside categories.
        """
        wanted = set(categories)
        return CompatibilityEngine((r for r in self._rules if r.subject in wanted), dependencies=wanted)

    def matching_rules(self, fact: ComponentFact) -> list[CompatibilityRule]:
        """Rules covering a fact, most specific first."""
        return sorted((r for r in self._rules if rule_covers(r, fact)), key=rule_order)

    def evaluate(self, facts: Iterable[ComponentFact]) -> CompatibilityReport:
        """Evaluate facts against the rule table.

        Args:
            facts: Facts to classify; absent facts are only used as the
                missing side of cross-checks

        Returns:
            CompatibilityReport with findings and cross-checks
        """
        facts = list(facts)
        by_key = {fact.key: fact for fact in facts}
        gpus = [f for f in facts if f.category == Category.GPU and f.presence]

        findings: list[CompatibilityFinding] = []
        cross_checks: list[CrossCheck] = []
        for fact in facts:
            if not fact.presence:
                continue

            matches = self.matching_rules(fact)
            findings.append(self._finding(fact, matches[0] if matches else None))

            # Narrowest rule per dependency; matches are already sorted.
            by_dependency: dict[str, CompatibilityRule] = {}
            for rule in matches:
                if rule.dependency is None or rule.dependency_key in by_dependency:
                    continue
                if self._dependencies is None or rule.dependency in self._dependencies:
                    by_dependency[rule.dependency_key] = rule

            for dependency_key, rule in by_dependency.items():
                if rule.dependency == Category.GPU:
                    targets = [(g.key, g) for g in gpus] or [(fact_key(Category.GPU), None)]
                else:
                    targets = [(dependency_key, by_key.get(dependency_key))]
                for target_key, target in targets:
                    cross_checks.append(self._cross_check(fact, rule, target_key, target))

        logger.debug(f"Evaluated {len(findings)} fact(s), {len(cross_checks)} cross-check(s)")
        return CompatibilityReport(findings=findings, cross_checks=cross_checks)

    def _finding(self, fact: ComponentFact, rule: CompatibilityRule | None) -> CompatibilityFinding:
        version = fact.version_text
        if rule is None:
            reason = "version unknown" if version is None else "no compatibility rule covers this version"
            return CompatibilityFinding(
                key=fact.key,
                version=version,
                tier=Tier.UNKNOWN,
                message=f"{fact.display_name} {version or ''}".strip() + f": {reason}",
            )
        return CompatibilityFinding(
            key=fact.key,
            version=version,
            tier=rule.tier,
            rule=rule,
            message=f"{fact.display_name} {version}: {rule.tier.value} ({rule.note or rule.describe()})",
        )

    def _cross_check(
        self,
        fact: ComponentFact,
        rule: CompatibilityRule,
        target_key: str,
        target: ComponentFact | None,
    ) -> CrossCheck:
        assert rule.dependency is not None and rule.required_min is not None
        name = CROSS_CHECK_NAMES[rule.dependency]
        required = rule.required_range or ""
        subject = f"{fact.display_name} {fact.version_text}"
        dependency = rule.dependency_name or rule.dependency.label
        if rule.dependency == Category.GPU:
            dependency = "compute capability"
            if target is not None:
                subject += f" on {target.display_name}"

        if target is None or not target.presence or target.version is None:
            return CrossCheck(
                name=name,
                subject_key=fact.key,
                dependency_key=target_key,
                rule=rule,
                tier=Tier.UNKNOWN,
                satisfied=None,
                required=required,
                message=f"{subject} requires {dependency} {required}, which was not detected",
            )

        satisfied = covers(rule.required_min, rule.required_max, target.version)
        actual = target.version_text
        if satisfied:
            message = f"{subject} requires {dependency} {required}: found {actual}"
        else:
            message = f"{subject} requires {dependency} {required}, but {actual} is installed"
        return CrossCheck(
            name=name,
            subject_key=fact.key,
            dependency_key=target_key,
            rule=rule,
            tier=rule.tier if satisfied else Tier.INCOMPATIBLE,
            satisfied=satisfied,
            required=required,
            actual=actual,
            message=message,
        )
