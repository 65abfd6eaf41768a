"""Update checker."""

from __future__ import annotations

from cuda_doctor.core.compat import CompatibilityEngine
from cuda_doctor.knowledge.compat_matrix import LATEST_KNOWN, UPDATE_SOURCES, latest_version_rules
from cuda_doctor.models.compat import Tier
from cuda_doctor.models.facts import Category
from cuda_doctor.models.report import UpdateAdvice, UpdateReport
from cuda_doctor.models.snapshot import EnvironmentSnapshot
from cuda_doctor.utils.logging import get_logger

logger = get_logger("updates")


def check_updates(snapshot: EnvironmentSnapshot, latest: dict[str, str] | None = None) -> UpdateReport:
    """Compare installed versions with the newest known releases.

    The snapshot is evaluated against synthetic rules: a version at or above
    the latest release is recommended, anything older is supported with an
    update available. GPUs are not part of the check.

    Args:
        snapshot: Captured environment
        latest: Fact key -> version overrides for the latest known releases

    Returns:
        UpdateReport with one entry per tracked component
    """
    versions = {**LATEST_KNOWN, **(latest or {})}
    engine = CompatibilityEngine(latest_version_rules(latest))
    facts = [f for f in snapshot.facts if f.category != Category.GPU]
    report = engine.evaluate(facts)

    keys = [f.key for f in facts] + [k for k in versions if snapshot.fact(k) is None]
    advice = []
    for key in keys:
        fact = snapshot.fact(key)
        finding = report.finding_for(key)
        if fact is None or not fact.presence:
            advice.append(
                UpdateAdvice(
                    key=key,
                    component=fact.display_name if fact is not None else key,
                    latest=versions.get(key),
                    source=UPDATE_SOURCES.get(key),
                )
            )
            continue

        tier = finding.tier if finding is not None else Tier.UNKNOWN
        update_available = None if tier == Tier.UNKNOWN else tier != Tier.RECOMMENDED
        advice.append(
            UpdateAdvice(
                key=key,
                component=fact.display_name,
                current=fact.version_text,
                latest=versions.get(key),
                tier=tier,
                update_available=update_available,
                source=UPDATE_SOURCES.get(key),
            )
        )

    logger.debug(f"{sum(1 for a in advice if a.update_available)} component(s) have updates")
    return UpdateReport(advice=advice)
