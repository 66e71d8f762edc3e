"""Tests for the health score and style inference."""

from __future__ import annotations

from codewiki.analysis.schemas import (
    ArchitecturalPattern,
    CodebaseMetrics,
    Hotspot,
)
from codewiki.constants import HotspotType, PatternType
from codewiki.wiki.health import (
    calculate_health_score,
    infer_architectural_style,
)


def _hotspots(n: int) -> list[Hotspot]:
    return [
        Hotspot(
            file=f"f{i}.ts",
            hotspot_type=HotspotType.HUB,
            score=11,
            details="Imported by 11 chunks",
        )
        for i in range(n)
    ]


def _pattern(pattern_type: PatternType) -> ArchitecturalPattern:
    return ArchitecturalPattern(
        pattern_type=pattern_type,
        name=str(pattern_type),
        description="",
        confidence=0.5,
    )


class TestHealthScore:
    def test_clean_codebase(self) -> None:
        assert calculate_health_score(CodebaseMetrics()) == 100

    def test_complexity_penalties(self) -> None:
        assert (
            calculate_health_score(CodebaseMetrics(average_complexity=12))
            == 90
        )
        assert (
            calculate_health_score(CodebaseMetrics(average_complexity=16))
            == 80
        )

    def test_penalties_are_capped(self) -> None:
        metrics = CodebaseMetrics(
            average_complexity=40,
            hotspots=_hotspots(30),
            circular_dependencies=[["a", "b", "a"]] * 10,
        )
        assert calculate_health_score(metrics) == 40

    def test_more_hotspots_never_raise_the_score(self) -> None:
        scores = [
            calculate_health_score(CodebaseMetrics(hotspots=_hotspots(n)))
            for n in range(15)
        ]
        assert scores == sorted(scores, reverse=True)
        assert all(0 <= s <= 100 for s in scores)


class TestArchitecturalStyle:
    def test_layered_wins(self) -> None:
        patterns = [_pattern(PatternType.HOOK), _pattern(PatternType.LAYERED)]
        assert infer_architectural_style(patterns) == "Layered Architecture"

    def test_react(self) -> None:
        assert (
            infer_architectural_style([_pattern(PatternType.PROVIDER)])
            == "Component-Based (React)"
        )

    def test_clean_needs_both(self) -> None:
        service = _pattern(PatternType.SERVICE_LAYER)
        repository = _pattern(PatternType.REPOSITORY)
        assert (
            infer_architectural_style([service, repository])
            == "Clean Architecture"
        )
        assert infer_architectural_style([service]) == "Modular Architecture"

    def test_default(self) -> None:
        assert infer_architectural_style([]) == "Modular Architecture"
