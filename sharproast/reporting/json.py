import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from .shared import TOOL_NAME, TOOL_VERSION, write_json
from .taxonomy import cwe_mapping, owasp_mapping, reference_urls


def _iso(ts) -> str:
    return ts.isoformat() if ts else ""


def build_report(result) -> dict:
    findings = result.findings.snapshot()
    total = len(findings)
    return {
        "tool": {"name": TOOL_NAME, "version": TOOL_VERSION},
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "scan": {
            "target": result.target,
            "started": _iso(result.started),
            "finished": _iso(result.finished),
            "duration_seconds": round(result.duration, 3),
            "files_scanned": result.files_scanned,
            "files_failed": len(result.errors),
            "errors": list(result.errors),
        },
        "summary": {
            "total": total,
            "passed": 0,
            "failed": total,
            "by_severity": result.findings.count_by_severity(),
            "by_category": result.findings.group_by_category(),
            "status": "failed" if result.findings.has_blocking() else "passed",
        },
        "findings": [
            {
                "id": f.id,
                "severity": f.severity,
                "category": f.category,
                "description": f.description,
                "file": f.file_path,
                "line": f.line_number,
                "code_snippet": f.code_snippet,
                "owasp": owasp_mapping(f.description),
                "cwe": cwe_mapping(f.description),
                "references": reference_urls(f.description),
            }
            for f in findings
        ],
    }


def emit(result) -> str:
    return json.dumps(build_report(result), indent=2, ensure_ascii=False)


def write_report(result, path: Union[str, Path]) -> bool:
    return write_json(build_report(result), path, "analysis")
