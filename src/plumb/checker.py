"""ルールカタログとファクトモデルを突き合わせてレポートを生成する。"""

from loguru import logger

from plumb.catalog import RuleCatalog
from plumb.models.facts import FactModel
from plumb.models.report import Report, Violation


def check(catalog: RuleCatalog, facts: FactModel) -> Report:
    """カタログの全ルールをファクトモデルに対して評価する。

    各ルールは独立に評価し、最初の違反で打ち切らずに全違反を列挙する。
    違反はカテゴリ順、ルールID順、対象順に並べる。

    Args:
        catalog: 評価するルールカタログ。
        facts: スキャン結果のファクトモデル。

    Returns:
        全違反を含むレポート。
    """
    violations: list[Violation] = []
    for rule in catalog.list_rules():
        failures = rule.failures(facts)
        if failures:
            logger.debug("Rule {} failed for {} subject(s)", rule.id, len(failures))
        for subject in failures:
            violations.append(
                Violation(
                    rule_id=rule.id,
                    category=rule.category,
                    severity=rule.severity,
                    subject=subject,
                    description=rule.description,
                )
            )

    violations.sort(key=lambda v: (v.category.order, v.rule_id, v.subject))
    report = Report(violations=tuple(violations))
    logger.info(
        "Checked {} rules: {} violation(s), passed={}",
        len(catalog),
        len(report.violations),
        report.passed,
    )
    return report
