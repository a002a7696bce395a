"""ルールカタログ。YAMLのルールテーブルを読み込み、不変のルール一覧を提供する。"""

from collections.abc import Iterable
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from plumb.config import CheckerConfig
from plumb.models.errors import RuleDefinitionError
from plumb.models.rule import CoverageMinimumCheck, Rule


class RuleCatalog:
    """構造ルールの不変なレジストリ。"""

    def __init__(self, rules: Iterable[Rule]) -> None:
        ordered: list[Rule] = []
        seen: set[str] = set()
        for rule in rules:
            if rule.id in seen:
                raise RuleDefinitionError(rule.id, "duplicate rule id")
            seen.add(rule.id)
            ordered.append(rule)
        ordered.sort(key=lambda r: (r.category.order, r.id))
        self._rules: tuple[Rule, ...] = tuple(ordered)
        self._by_id = {r.id: r for r in ordered}

    @classmethod
    def load(
        cls,
        builtin_dir: Path,
        extra_dir: Path | None = None,
        coverage_threshold: float | None = None,
    ) -> "RuleCatalog":
        """ルールテーブルのディレクトリからカタログを構築する。

        Args:
            builtin_dir: 組み込みルールテーブルのディレクトリ。
            extra_dir: 追加ルールテーブルのディレクトリ。Noneの場合は読み込まない。
            coverage_threshold: 指定された場合、カバレッジルールの閾値を上書きする。

        Raises:
            RuleDefinitionError: ルールテーブルが不正な場合。
        """
        rules = _load_rule_tables(builtin_dir)
        if extra_dir is not None:
            if not extra_dir.is_dir():
                raise RuleDefinitionError(str(extra_dir), "rules directory does not exist")
            rules.extend(_load_rule_tables(extra_dir))

        if coverage_threshold is not None:
            rules = [_with_coverage_threshold(r, coverage_threshold) for r in rules]

        catalog = cls(rules)
        logger.debug("Loaded {} rules", len(catalog))
        return catalog

    @classmethod
    def from_config(cls, config: CheckerConfig) -> "RuleCatalog":
        return cls.load(
            config.builtin_rules_dir,
            extra_dir=config.rules_dir,
            coverage_threshold=config.coverage_threshold,
        )

    def list_rules(self) -> list[Rule]:
        """カテゴリ順、ルールID順に並んだルール一覧を返す。"""
        return list(self._rules)

    def get_rule(self, rule_id: str) -> Rule | None:
        return self._by_id.get(rule_id)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    def __len__(self) -> int:
        return len(self._rules)


def _load_rule_tables(rules_dir: Path) -> list[Rule]:
    """ディレクトリ内の *.yaml を名前順に読み込む。"""
    rules: list[Rule] = []
    for rule_file in sorted(rules_dir.glob("*.yaml")):
        with open(rule_file, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise RuleDefinitionError(str(rule_file), str(e)) from e
        if not data:
            continue
        if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
            raise RuleDefinitionError(str(rule_file), "expected a mapping with a 'rules' list")
        for rule_data in data["rules"]:
            try:
                rules.append(Rule.model_validate(rule_data))
            except ValidationError as e:
                raise RuleDefinitionError(str(rule_file), str(e)) from e
        logger.debug("Read rule table {}", rule_file)
    return rules


def _with_coverage_threshold(rule: Rule, threshold: float) -> Rule:
    if not isinstance(rule.check, CoverageMinimumCheck):
        return rule
    check = CoverageMinimumCheck(threshold=threshold)
    return rule.model_copy(update={"check": check})
