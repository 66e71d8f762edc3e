"""Health score and architectural style summaries."""

from __future__ import annotations

from codewiki.analysis.schemas import ArchitecturalPattern, CodebaseMetrics
from codewiki.constants import PatternType


def calculate_health_score(metrics: CodebaseMetrics) -> int:
    """100 minus complexity, hotspot and cycle penalties, floored at 0."""
    score = 100
    if metrics.average_complexity > 15:
        score -= 20
    elif metrics.average_complexity > 10:
        score -= 10
    score -= min(20, len(metrics.hotspots) * 2)
    score -= min(20, len(metrics.circular_dependencies) * 5)
    return max(0, score)


def infer_architectural_style(patterns: list[ArchitecturalPattern]) -> str:
    found = {p.pattern_type for p in patterns}
    if PatternType.LAYERED in found:
        return "Layered Architecture"
    if PatternType.PROVIDER in found or PatternType.HOOK in found:
        return "Component-Based (React)"
    if PatternType.SERVICE_LAYER in found and PatternType.REPOSITORY in found:
        return "Clean Architecture"
    return "Modular Architecture"
