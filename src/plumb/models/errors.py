"""plumbのカスタム例外クラス。"""

from enum import Enum
from pathlib import Path


class PlumbError(Exception):
    """plumbの基底例外クラス。"""


class ScanErrorReason(str, Enum):
    """スキャン失敗の理由。"""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"


class ScanError(PlumbError):
    """プロジェクトのスキャンに失敗した場合の例外。"""

    def __init__(self, reason: ScanErrorReason, path: Path, detail: str = "") -> None:
        message = f"Scan failed ({reason.value}): {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.reason = reason
        self.path = path


class RuleDefinitionError(PlumbError):
    """ルール定義ファイルが不正な場合の例外。"""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"Invalid rule definition in {source}: {detail}")
        self.source = source
