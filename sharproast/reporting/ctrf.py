"""Common Test Report Format export: each finding becomes one failed test."""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .shared import TOOL_NAME, TOOL_VERSION, write_json
from .taxonomy import cwe_mapping, owasp_mapping, reference_urls


def _epoch_ms(ts: Optional[datetime]) -> int:
    return int(ts.timestamp() * 1000) if ts else 0


def _test(f) -> dict:
    return {
        "name": f"{f.category}: {f.description}",
        "status": "failed",
        "duration": 0,
        "message": f"Security issue found in {Path(f.file_path).name}:{f.line_number}",
        "trace": f.code_snippet,
        "rawStatus": f.severity,
        "extra": {
            "severity": f.severity,
            "category": f.category,
            "filePath": f.file_path,
            "lineNumber": f.line_number,
            "owaspMapping": owasp_mapping(f.description),
            "cweMapping": cwe_mapping(f.description),
            "referenceUrls": reference_urls(f.description),
        },
    }


def build_report(result) -> dict:
    tests = [_test(f) for f in result.findings.snapshot()]
    start = _epoch_ms(result.started)
    return {
        "results": {
            "tool": {"name": TOOL_NAME, "version": TOOL_VERSION},
            "summary": {
                "tests": len(tests),
                "passed": 0,
                "failed": len(tests),
                "pending": 0,
                "skipped": 0,
                "other": 0,
                "start": start,
                "stop": _epoch_ms(result.finished) or start,
            },
            "tests": tests,
        }
    }


def emit(result) -> str:
    return json.dumps(build_report(result), indent=2, ensure_ascii=False)


def write_report(result, path: Union[str, Path]) -> bool:
    return write_json(build_report(result), path, "CTRF")
