"""チェック結果（違反・レポート）のデータモデル。"""

from pydantic import BaseModel, Field, computed_field

from plumb.models.rule import RuleCategory, Severity


class Violation(BaseModel):
    """ルールとファクトモデルの不一致の記録。"""

    model_config = {"frozen": True}

    rule_id: str
    category: RuleCategory
    severity: Severity
    subject: str
    description: str


class Report(BaseModel):
    """1回のチェックの集計結果。"""

    model_config = {"frozen": True}

    violations: tuple[Violation, ...] = Field(default_factory=tuple)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        """error重大度の違反が1件も無ければTrue。"""
        return not any(v.severity == Severity.ERROR for v in self.violations)

    def count(self, severity: Severity) -> int:
        return sum(1 for v in self.violations if v.severity == severity)
