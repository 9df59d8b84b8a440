import argparse
import logging
import os
import sys

from .engine import scan_path
from .reporting import ctrf as ctrf_report, json as json_report, text as text_report
from .utils.config import ScanPolicy, load_policy
from .utils.errors import ConfigError, InvalidTargetError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="sharproast - static security scanner for C# source trees")
    ap.add_argument("--path", default=os.getcwd(), help="File or directory to scan (default: current directory)")
    ap.add_argument("--verbose", action="store_true", help="Show every finding with its code snippet")
    ap.add_argument("--report", metavar="FILE", help="Write the general JSON analysis report")
    ap.add_argument("--ctrf", metavar="FILE", help="Write a CTRF JSON report")
    ap.add_argument("--config", metavar="FILE", help="YAML scan policy")
    ap.add_argument("--include-tests", action="store_true", help="Also scan test directories")
    ap.add_argument("--workers", type=int, default=1, help="Scan files in parallel (default 1)")
    ap.add_argument("--log-level", default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    return ap


def _load_policy(args) -> ScanPolicy:
    policy = load_policy(args.config) if args.config else ScanPolicy()
    if args.include_tests:
        policy = policy.model_copy(update={"hardened": False})
    return policy


def _export(module, result, path: str, label: str) -> None:
    if module.write_report(result, path):
        print(f"📄 {label} report generated: {path}")
    else:
        print(f"❌ Failed to generate {label} report: could not write {path}", file=sys.stderr)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, stream=sys.stderr,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        policy = _load_policy(args)
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    print(f"🔒 Starting security scan on: {args.path}")
    print()
    try:
        result = scan_path(args.path, policy, workers=max(1, args.workers))
    except InvalidTargetError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    print(text_report.emit(result, verbose=args.verbose, relative_to=os.getcwd()))

    if args.report:
        _export(json_report, result, args.report, "Analysis")
    if args.ctrf:
        _export(ctrf_report, result, args.ctrf, "CTRF")

    return text_report.exit_status(result)


if __name__ == "__main__":
    raise SystemExit(main())
