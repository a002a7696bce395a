"""レポートとルール一覧の出力整形。"""

from plumb.models.report import Report
from plumb.models.rule import Rule


def _clean(value: str) -> str:
    # 1行1レコードのTSVを崩さない
    return " ".join(value.split())


def render_text(report: Report) -> str:
    """違反1件につき1行のタブ区切りテキストを返す。"""
    return "\n".join(
        "\t".join(
            [v.severity.value, v.rule_id, _clean(v.subject), _clean(v.description)]
        )
        for v in report.violations
    )


def render_json(report: Report) -> str:
    return report.model_dump_json(indent=2)


def render_rules(rules: list[Rule]) -> str:
    return "\n".join(
        "\t".join([r.category.value, r.severity.value, r.id, _clean(r.description)])
        for r in rules
    )
