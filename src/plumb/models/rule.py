"""ルール定義のデータモデル。

ルールはカテゴリごとのタグ付きデータ（``kind``）として表現し、
YAMLのルールテーブルからそのまま読み込めるようにする。
"""

import math
import re
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator

from plumb.models.facts import FactModel


class Severity(str, Enum):
    """違反の重大度。"""

    ERROR = "error"
    WARNING = "warning"


class RuleCategory(str, Enum):
    """ルールカテゴリ。宣言順がレポートの並び順になる。"""

    LAYOUT = "layout"
    NAMING = "naming"
    TESTING = "testing"
    DOCUMENTATION = "documentation"

    @property
    def order(self) -> int:
        return list(RuleCategory).index(self)


class RequiredDirectoryCheck(BaseModel):
    """末尾が path と一致するディレクトリの存在を要求する。"""

    model_config = {"frozen": True}

    kind: Literal["required_directory"] = "required_directory"
    path: str

    def failures(self, facts: FactModel) -> list[str]:
        if facts.has_directory_suffix(self.path):
            return []
        return [self.path.strip("/")]


class RequiredFileCheck(BaseModel):
    """ルート相対パスのファイルの存在を要求する。"""

    model_config = {"frozen": True}

    kind: Literal["required_file"] = "required_file"
    path: str

    def failures(self, facts: FactModel) -> list[str]:
        if self.path.strip("/") in facts.files:
            return []
        return [self.path.strip("/")]


class ForbiddenImportCheck(BaseModel):
    """source配下のファイルが target を含むパッケージをimportしないことを要求する。"""

    model_config = {"frozen": True}

    kind: Literal["forbidden_import"] = "forbidden_import"
    source: str
    target: str

    def failures(self, facts: FactModel) -> list[str]:
        results: list[str] = []
        for path, names in facts.imports_by_file().items():
            # ファイル名を除いたディレクトリセグメントで判定
            if self.source not in path.split("/")[:-1]:
                continue
            for name in names:
                if self.target in name.split("."):
                    results.append(f"{path} -> {name}")
        return results


class FileNamingCheck(BaseModel):
    """scope配下の拡張子 extension のファイル名が pattern に一致することを要求する。"""

    model_config = {"frozen": True}

    kind: Literal["file_naming"] = "file_naming"
    scope: str
    extension: str
    pattern: str

    @field_validator("pattern")
    @classmethod
    def _compile_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid pattern {value!r}: {e}") from e
        return value

    def failures(self, facts: FactModel) -> list[str]:
        compiled = re.compile(self.pattern)
        return [
            path
            for path in facts.files_under(self.scope)
            if path.endswith(self.extension) and not compiled.fullmatch(path.rsplit("/", 1)[-1])
        ]


class CoverageMinimumCheck(BaseModel):
    """報告されたテストカバレッジが threshold 以上であることを要求する。"""

    model_config = {"frozen": True}

    kind: Literal["coverage_minimum"] = "coverage_minimum"
    threshold: float = Field(ge=0, le=100)

    def failures(self, facts: FactModel) -> list[str]:
        if facts.coverage is None:
            return ["coverage: not reported"]
        if not math.isfinite(facts.coverage) or not 0 <= facts.coverage <= 100:
            return [f"coverage: invalid value {facts.coverage}"]
        if facts.coverage < self.threshold:
            return [f"coverage: {facts.coverage:g}% < {self.threshold:g}%"]
        return []


class ReadmeSectionsCheck(BaseModel):
    """Markdownファイル（既定はREADME）に必要なセクション見出しが揃っていることを要求する。"""

    model_config = {"frozen": True}

    kind: Literal["readme_sections"] = "readme_sections"
    file: str = "README.md"
    sections: tuple[str, ...]

    def failures(self, facts: FactModel) -> list[str]:
        found = facts.headings_of(self.file)
        if found is None:
            return [self.file]
        headings = {h.strip().lower() for h in found}
        return [
            f"{self.file}#{section}"
            for section in self.sections
            if not _has_heading(headings, section.strip().lower())
        ]


def _has_heading(headings: set[str], section: str) -> bool:
    # "Testing Strategy" のような見出しも "Testing" セクションとみなす
    return any(h == section or h.startswith(section + " ") for h in headings)


RuleCheck = Annotated[
    RequiredDirectoryCheck
    | RequiredFileCheck
    | ForbiddenImportCheck
    | FileNamingCheck
    | CoverageMinimumCheck
    | ReadmeSectionsCheck,
    Field(discriminator="kind"),
]


class Rule(BaseModel):
    """構造ルール。読み込み後は変更されない。"""

    model_config = {"frozen": True}

    id: str = Field(min_length=1)
    category: RuleCategory
    severity: Severity
    description: str
    check: RuleCheck

    def failures(self, facts: FactModel) -> list[str]:
        """違反した対象（パスまたはファクト）の一覧を返す。"""
        return self.check.failures(facts)

    def predicate(self, facts: FactModel) -> bool:
        """ファクトモデルがこのルールを満たすか。"""
        return not self.failures(facts)
