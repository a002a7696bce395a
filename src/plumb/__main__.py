"""plumbのコマンドラインエントリポイント。"""

import argparse
import sys
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from plumb.catalog import RuleCatalog
from plumb.checker import check
from plumb.config import CheckerConfig
from plumb.models.errors import PlumbError
from plumb.output import render_json, render_rules, render_text
from plumb.scanner import scan

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plumb",
        description="Check a project tree against structural conventions",
    )
    parser.add_argument("root", nargs="?", type=Path, help="Project root to check")
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format (default: text)",
    )
    parser.add_argument(
        "--list-rules",
        action="store_true",
        help="Print the rule catalog and exit",
    )
    parser.add_argument("--rules-dir", type=Path, default=None, help="Directory of extra rule tables")
    parser.add_argument(
        "--coverage-threshold",
        type=float,
        default=None,
        help="Override the minimum coverage percentage",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Scan deadline in seconds")
    parser.add_argument("--log-level", default=None, help="Log level for stderr output")
    return parser


def _load_config(args: argparse.Namespace) -> CheckerConfig:
    # 明示されたフラグだけを環境変数より優先する
    overrides = {
        "rules_dir": args.rules_dir,
        "coverage_threshold": args.coverage_threshold,
        "scan_timeout": args.timeout,
        "log_level": args.log_level,
    }
    return CheckerConfig(**{k: v for k, v in overrides.items() if v is not None})


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="{time:HH:mm:ss} | {level} | {message}")


def main(argv: list[str] | None = None) -> int:
    """コマンドラインから実行する。

    Returns:
        終了コード。0: 適合、1: error重大度の違反あり、2: スキャン失敗または設定エラー。
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args)
    except ValidationError as e:
        print(f"plumb: invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        _configure_logging(config.log_level)
    except ValueError as e:
        print(f"plumb: invalid log level: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        catalog = RuleCatalog.from_config(config)
        if args.list_rules:
            print(render_rules(catalog.list_rules()))
            return EXIT_PASSED
        if args.root is None:
            parser.print_usage(sys.stderr)
            print("plumb: error: the following arguments are required: root", file=sys.stderr)
            return EXIT_ERROR

        facts = scan(args.root, timeout=config.scan_timeout)
    except PlumbError as e:
        print(f"plumb: {e}", file=sys.stderr)
        return EXIT_ERROR

    report = check(catalog, facts)
    rendered = render_json(report) if args.format == "json" else render_text(report)
    if rendered:
        print(rendered)
    return EXIT_PASSED if report.passed else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
