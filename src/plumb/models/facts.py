"""スキャン結果（ファクトモデル）のデータモデル。"""

from pydantic import BaseModel

README_FILE = "README.md"


class FactModel(BaseModel):
    """スキャン対象プロジェクトの構造的な状態。

    パスはすべてルートからの相対パス（POSIX区切り）。
    スキャン1回につき1度だけ構築され、以後は変更されない。
    見出しとimportは (ファイル, 値) の組の集合として保持する。
    """

    model_config = {"frozen": True}

    files: frozenset[str] = frozenset()
    directories: frozenset[str] = frozenset()
    coverage: float | None = None
    headings: frozenset[tuple[str, str]] = frozenset()
    imports: frozenset[tuple[str, str]] = frozenset()

    @property
    def readme_sections(self) -> frozenset[str] | None:
        """ルートのREADMEの見出し。READMEが無い場合はNone。"""
        return self.headings_of(README_FILE)

    def headings_of(self, path: str) -> frozenset[str] | None:
        """Markdownファイルの見出しを返す。ファイルが無い場合はNone。"""
        path = path.strip("/")
        if path not in self.files:
            return None
        return frozenset(heading for file, heading in self.headings if file == path)

    def imports_by_file(self) -> dict[str, list[str]]:
        """ファイルごとのimport名をソート済みで返す。"""
        result: dict[str, list[str]] = {}
        for file, name in sorted(self.imports):
            result.setdefault(file, []).append(name)
        return result

    def has_directory_suffix(self, suffix: str) -> bool:
        """末尾のパスセグメントが suffix と一致するディレクトリが存在するか。"""
        wanted = tuple(part for part in suffix.strip("/").split("/") if part)
        if not wanted:
            return False
        return any(tuple(d.split("/"))[-len(wanted) :] == wanted for d in self.directories)

    def files_under(self, scope: str) -> list[str]:
        """scope配下のファイルをソート済みで返す。空のscopeは全ファイル。"""
        prefix = scope.strip("/")
        if not prefix:
            return sorted(self.files)
        return sorted(f for f in self.files if f.startswith(prefix + "/"))
