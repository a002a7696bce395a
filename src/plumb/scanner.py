"""プロジェクトツリーを走査してファクトモデルを構築する。"""

import math
import re
import time
import xml.etree.ElementTree as ET
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from plumb.models.errors import ScanError, ScanErrorReason
from plumb.models.facts import FactModel

# 優先順に並べたカバレッジレポートの位置
JACOCO_REPORT = "build/reports/jacoco/test/jacocoTestReport.xml"
COBERTURA_REPORT = "coverage.xml"

_SOURCE_SUFFIXES: set[str] = {".kt", ".kts", ".java"}

_IMPORT_RE = re.compile(r"^\s*import\s+(?:static\s+)?([\w.]+)", re.MULTILINE)
_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s+(.+?)\s*#*\s*$")
_SETEXT_RE = re.compile(r"^\s{0,3}(=+|-+)\s*$")
_FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")


def scan(root: Path, timeout: float | None = None) -> FactModel:
    """root配下を読み取り専用で走査し、ファクトモデルを返す。

    シンボリックリンクはたどらない。ファイルへのリンクはファイルとして記録し、
    ディレクトリへのリンクは記録も走査もしない。隠しディレクトリはそのまま含める。

    Args:
        root: スキャン対象のプロジェクトルート。
        timeout: 走査の制限時間（秒）。Noneの場合は無制限。

    Returns:
        構築されたファクトモデル。

    Raises:
        ScanError: ルートが存在しない、読み取れない、または制限時間を超えた場合。
    """
    root = Path(root)
    if not root.exists() or not root.is_dir():
        raise ScanError(ScanErrorReason.NOT_FOUND, root)

    deadline = time.monotonic() + timeout if timeout is not None else None
    files, directories = _walk(root, deadline)

    imports: set[tuple[str, str]] = set()
    headings: set[tuple[str, str]] = set()
    for rel in sorted(files):
        suffix = Path(rel).suffix
        if suffix in _SOURCE_SUFFIXES:
            _check_deadline(root, deadline)
            imports.update((rel, name) for name in _extract_imports(_read_text(root, rel)))
        elif suffix.lower() == ".md":
            _check_deadline(root, deadline)
            headings.update((rel, heading) for heading in _extract_headings(_read_text(root, rel)))

    facts = FactModel(
        files=frozenset(files),
        directories=frozenset(directories),
        coverage=_read_coverage(root, files),
        headings=frozenset(headings),
        imports=frozenset(imports),
    )
    logger.info(
        "Scanned {}: {} files, {} directories",
        root,
        len(facts.files),
        len(facts.directories),
    )
    return facts


def _walk(root: Path, deadline: float | None) -> tuple[set[str], set[str]]:
    files: set[str] = set()
    directories: set[str] = set()
    pending = [root]
    while pending:
        _check_deadline(root, deadline)
        current = pending.pop()
        try:
            entries = list(current.iterdir())
        except PermissionError as e:
            raise ScanError(ScanErrorReason.PERMISSION_DENIED, current) from e
        except FileNotFoundError as e:
            raise ScanError(ScanErrorReason.NOT_FOUND, current) from e

        for entry in entries:
            rel = entry.relative_to(root).as_posix()
            if entry.is_symlink():
                if entry.is_file():
                    files.add(rel)
                else:
                    logger.debug("Skipping symlink {}", rel)
                continue
            if entry.is_dir():
                directories.add(rel)
                pending.append(entry)
            elif entry.is_file():
                files.add(rel)
    return files, directories


def _check_deadline(root: Path, deadline: float | None) -> None:
    if deadline is not None and time.monotonic() > deadline:
        raise ScanError(ScanErrorReason.TIMEOUT, root)


def _read_text(root: Path, rel: str) -> str:
    try:
        return (root / rel).read_text(encoding="utf-8", errors="replace")
    except PermissionError as e:
        raise ScanError(ScanErrorReason.PERMISSION_DENIED, root / rel) from e
    except FileNotFoundError as e:
        raise ScanError(ScanErrorReason.NOT_FOUND, root / rel) from e


def _extract_imports(text: str) -> frozenset[str]:
    return frozenset(_IMPORT_RE.findall(text))


def _extract_headings(text: str) -> frozenset[str]:
    """Markdownの見出し（ATX・setext）を抽出する。コードフェンス内は無視する。"""
    headings: set[str] = set()
    fence: str | None = None
    previous = ""
    for line in text.splitlines():
        stripped = line.strip()
        if fence is not None:
            # 開始と同じ文字で同じ長さ以上のフェンスだけが閉じる
            if stripped and set(stripped) == {fence[0]} and len(stripped) >= len(fence):
                fence = None
            continue
        m = _FENCE_RE.match(line)
        if m:
            fence = m.group(1)
            previous = ""
            continue
        m = _HEADING_RE.match(line)
        if m:
            headings.add(m.group(1).strip())
            previous = ""
            continue
        if previous and _SETEXT_RE.match(line):
            headings.add(previous)
            previous = ""
            continue
        previous = stripped
    return frozenset(headings)


def _read_coverage(root: Path, files: set[str]) -> float | None:
    """カバレッジレポートから行カバレッジ（%）を読み取る。"""
    if JACOCO_REPORT in files:
        return _parse_report(root / JACOCO_REPORT, _jacoco_line_coverage)
    if COBERTURA_REPORT in files:
        return _parse_report(root / COBERTURA_REPORT, _cobertura_line_coverage)
    return None


def _parse_report(path: Path, extract: Callable[[ET.Element], float | None]) -> float | None:
    try:
        tree = ET.parse(path)
    except PermissionError as e:
        raise ScanError(ScanErrorReason.PERMISSION_DENIED, path) from e
    except ET.ParseError as e:
        logger.warning("Could not parse coverage report {}: {}", path, e)
        return None
    coverage = extract(tree.getroot())
    if coverage is None:
        logger.warning("Coverage report {} has no valid line coverage figure", path)
    return coverage


def _jacoco_line_coverage(report: ET.Element) -> float | None:
    # レポート直下のcounterが全体の集計値
    for counter in report.findall("counter"):
        if counter.get("type") != "LINE":
            continue
        try:
            missed = int(counter.get("missed", ""))
            covered = int(counter.get("covered", ""))
        except ValueError:
            return None
        total = missed + covered
        if missed < 0 or covered < 0 or total == 0:
            return None
        return round(covered * 100 / total, 2)
    return None


def _cobertura_line_coverage(report: ET.Element) -> float | None:
    try:
        rate = float(report.get("line-rate", ""))
    except ValueError:
        return None
    # NaN・無限大・範囲外の値は報告なしとして扱う
    if not math.isfinite(rate) or not 0 <= rate <= 1:
        return None
    return round(rate * 100, 2)
