"""テスト共通フィクスチャ。"""

from collections.abc import Callable
from pathlib import Path

import pytest

from plumb.catalog import RuleCatalog
from plumb.config import CheckerConfig
from plumb.models.facts import FactModel

PACKAGE_DIR = "src/main/kotlin/com/acme/shop"

LAYOUT_DIRS = [
    "domain/model",
    "domain/port",
    "domain/service",
    "application",
    "adapter/inbound",
    "adapter/outbound",
    "config",
]

README_TEXT = """# Shop Service

## Overview
Order management service.

## Stack
Kotlin, Spring Boot, AWS.

## Architecture
Hexagonal.

## Setup
./gradlew bootRun

## API
See OpenAPI document.

## Testing Strategy
./gradlew test

## Deployment
ECS.
"""

JACOCO_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<report name="shop">
  <package name="com/acme/shop">
    <counter type="LINE" missed="40" covered="60"/>
  </package>
  <counter type="INSTRUCTION" missed="10" covered="990"/>
  <counter type="LINE" missed="{missed}" covered="{covered}"/>
</report>
"""


def _build_project(root: Path, *, skip: tuple[str, ...] = (), covered: int = 97, missed: int = 3) -> Path:
    """規約に適合したKotlinプロジェクトのツリーを root に作成する。

    skip に含まれるパス（ファイルまたはレイアウトディレクトリ）は作成しない。
    """
    for layout_dir in LAYOUT_DIRS:
        if layout_dir in skip:
            continue
        (root / PACKAGE_DIR / layout_dir).mkdir(parents=True, exist_ok=True)

    source = root / PACKAGE_DIR / "domain/model/Order.kt"
    if source.parent.exists():
        source.write_text(
            "package com.acme.shop.domain.model\n\nimport java.util.UUID\n\ndata class Order(val id: UUID)\n",
            encoding="utf-8",
        )

    test_dir = root / "src/test/kotlin/com/acme/shop"
    test_dir.mkdir(parents=True, exist_ok=True)
    (test_dir / "OrderTest.kt").write_text("class OrderTest\n", encoding="utf-8")

    if "build.gradle.kts" not in skip:
        (root / "build.gradle.kts").write_text('plugins { kotlin("jvm") }\n', encoding="utf-8")
    if "README.md" not in skip:
        (root / "README.md").write_text(README_TEXT, encoding="utf-8")
    if "coverage" not in skip:
        report = root / "build/reports/jacoco/test/jacocoTestReport.xml"
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(JACOCO_XML.format(missed=missed, covered=covered), encoding="utf-8")
    return root


def _conforming_facts(**overrides: object) -> FactModel:
    """全ルールを満たすファクトモデル。"""
    directories = {"src", "src/test", "src/test/kotlin"}
    for layout_dir in LAYOUT_DIRS:
        parts = f"{PACKAGE_DIR}/{layout_dir}".split("/")
        directories.update("/".join(parts[:i]) for i in range(1, len(parts) + 1))
    values: dict[str, object] = {
        "files": frozenset({"README.md", "build.gradle.kts", f"{PACKAGE_DIR}/domain/model/Order.kt"}),
        "directories": frozenset(directories),
        "coverage": 97.0,
        "headings": frozenset(
            ("README.md", section)
            for section in ("Overview", "Stack", "Architecture", "Setup", "API", "Testing", "Deployment")
        ),
        "imports": frozenset({(f"{PACKAGE_DIR}/domain/model/Order.kt", "java.util.UUID")}),
    }
    values.update(overrides)
    return FactModel(**values)  # type: ignore[arg-type]


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch) -> CheckerConfig:
    """環境変数の影響を受けないテスト用CheckerConfig。"""
    for name in ("PLUMB_COVERAGE_THRESHOLD", "PLUMB_RULES_DIR", "PLUMB_SCAN_TIMEOUT", "PLUMB_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return CheckerConfig()


@pytest.fixture
def catalog(config: CheckerConfig) -> RuleCatalog:
    """組み込みルールのみのカタログ。"""
    return RuleCatalog.from_config(config)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """規約に適合したプロジェクトツリー。"""
    return _build_project(tmp_path / "shop")


@pytest.fixture
def make_project() -> Callable[..., Path]:
    """プロジェクトツリーを作成するファクトリ。"""
    return _build_project


@pytest.fixture
def make_facts() -> Callable[..., FactModel]:
    """適合ファクトモデルを一部上書きして作成するファクトリ。"""
    return _conforming_facts
