"""plumbの設定管理。"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

_PACKAGE_ROOT = Path(__file__).parent


class CheckerConfig(BaseSettings):
    """チェッカー設定。環境変数から読み込み可能。"""

    model_config = {"env_prefix": "PLUMB_"}

    # 組み込みルールテーブル
    builtin_rules_dir: Path = _PACKAGE_ROOT / "rules"
    # 追加のルールテーブル（任意）
    rules_dir: Path | None = None

    coverage_threshold: float | None = Field(default=None, ge=0, le=100)
    scan_timeout: float | None = Field(default=None, gt=0)
    log_level: str = "WARNING"
