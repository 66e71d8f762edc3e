"""Tests for architectural pattern detection."""

from __future__ import annotations

import pytest

from codewiki.analysis.patterns import (
    PATTERN_DETECTORS,
    classify_layer,
    detect_factory,
    detect_hooks,
    detect_layered_architecture,
    detect_middleware,
    detect_observer,
    detect_patterns,
    detect_repository,
    detect_service_layer,
    detect_singleton,
    is_singleton,
)
from codewiki.analysis.schemas import ArchitecturalPattern
from codewiki.constants import PatternType
from codewiki.ingestion.chunker import analyze_source
from codewiki.ingestion.schemas import FileAnalysis


def _ts(source: str, path: str = "src/sample.ts") -> FileAnalysis:
    return analyze_source(source, path, path, "typescript")


PRIVATE_CTOR = """
export class Config {
  private static instance: Config;
  private constructor() {}
  static getInstance(): Config {
    return Config.instance;
  }
}
"""

STATIC_ACCESSOR = """
export class Registry {
  static instance: Registry;
  static getInstance(): Registry {
    if (!Registry.instance) {
      Registry.instance = new Registry();
    }
    return Registry.instance;
  }
}
"""

PLAIN = """
export class Plain {
  constructor() {}
  run(): void {}
}
"""


class TestSingleton:
    def test_private_constructor(self) -> None:
        analysis = _ts(PRIVATE_CTOR)
        cls = analysis.chunk("sample:class:Config")
        assert cls is not None
        assert is_singleton(analysis, cls) is True

    def test_static_instance_with_accessor(self) -> None:
        analysis = _ts(STATIC_ACCESSOR)
        cls = analysis.chunk("sample:class:Registry")
        assert cls is not None
        assert is_singleton(analysis, cls) is True

    def test_plain_class_is_not_singleton(self) -> None:
        analysis = _ts(PLAIN)
        cls = analysis.chunk("sample:class:Plain")
        assert cls is not None
        assert is_singleton(analysis, cls) is False

    def test_methods_are_never_singletons(self) -> None:
        analysis = _ts(PRIVATE_CTOR)
        method = analysis.chunk("sample:method:Config.getInstance")
        assert method is not None
        assert is_singleton(analysis, method) is False

    def test_detector_locations(self) -> None:
        pattern = detect_singleton([_ts(PRIVATE_CTOR), _ts(PLAIN, "src/plain.ts")])
        assert pattern is not None
        assert [loc.chunks for loc in pattern.locations] == [["sample:class:Config"]]
        assert pattern.confidence == pytest.approx(0.65)


class TestRepositoryAndService:
    def test_repository_detected(self, sample_files: list[FileAnalysis]) -> None:
        pattern = detect_repository(sample_files)
        assert pattern is not None
        (location,) = pattern.locations
        assert location.file == "src/repositories/user-repository.ts"
        assert location.chunks == [
            "user-repository:interface:User",
            "user-repository:class:UserRepository",
        ]
        assert location.role == "repository"

    def test_service_layer_detected(self, sample_files: list[FileAnalysis]) -> None:
        pattern = detect_service_layer(sample_files)
        assert pattern is not None
        (location,) = pattern.locations
        assert location.file == "src/services/user-service.ts"
        assert location.chunks == ["user-service:class:UserService"]

    def test_service_layer_skips_mocks(self) -> None:
        mock = _ts("export class UserService {}\n", "src/services/user-service.mock.ts")
        assert detect_service_layer([mock]) is None

    def test_no_files_no_patterns(self) -> None:
        assert detect_patterns([]) == []


class TestOtherDetectors:
    def test_factory(self) -> None:
        analysis = _ts("export function createWidget(): object {\n  return {};\n}\n")
        pattern = detect_factory([analysis])
        assert pattern is not None
        assert pattern.pattern_type == PatternType.FACTORY

    def test_observer(self) -> None:
        analysis = _ts(
            "export class Bus {\n  subscribe(): void {}\n  publish(): void {}\n}\n"
        )
        pattern = detect_observer([analysis])
        assert pattern is not None
        assert "sample:method:Bus.subscribe" in pattern.locations[0].chunks

    def test_hooks_require_export(self) -> None:
        exported = _ts("export function useToggle() {\n  return true;\n}\n")
        local = _ts("function useToggle() {\n  return true;\n}\n")
        assert detect_hooks([exported]) is not None
        assert detect_hooks([local]) is None

    def test_middleware_signature(self) -> None:
        analysis = _ts(
            "export function auth(req: Request, res: Response, next: Function) {\n"
            "  next();\n"
            "}\n"
        )
        assert detect_middleware([analysis]) is not None

    def test_layered_needs_two_layers(self) -> None:
        one = _ts("export const a = 1;\n", "src/components/a.ts")
        two = _ts("export const b = 1;\n", "src/services/b.ts")
        assert detect_layered_architecture([one]) is None
        pattern = detect_layered_architecture([one, two])
        assert pattern is not None
        assert [loc.role for loc in pattern.locations] == [
            "presentation",
            "application",
        ]

    def test_classify_layer(self) -> None:
        assert classify_layer("src/repositories/x.ts") == "infrastructure"
        assert classify_layer("src/lib/x.ts") == "shared"
        assert classify_layer("src/x.ts") is None


class TestDetectPatterns:
    def test_sorted_by_confidence(self, sample_files: list[FileAnalysis]) -> None:
        patterns = detect_patterns(sample_files)
        confidences = [p.confidence for p in patterns]
        assert confidences == sorted(confidences, reverse=True)
        assert all(0.0 <= c <= 1.0 for c in confidences)
        found = {p.pattern_type for p in patterns}
        assert PatternType.REPOSITORY in found
        assert PatternType.SERVICE_LAYER in found

    def test_failing_detector_is_skipped(
        self, sample_files: list[FileAnalysis]
    ) -> None:
        def broken(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
            raise RuntimeError("boom")

        patterns = detect_patterns(sample_files, (broken, *PATTERN_DETECTORS))
        assert patterns == detect_patterns(sample_files)
