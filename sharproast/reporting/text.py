import os
from typing import List, Optional

from ..recommendations import BEST_PRACTICES, classify

ICONS = {"critical": "🔴", "high": "🟠", "medium": "🟡", "low": "🔵"}
RULE = "=" * 41


def _display_path(path: str, relative_to: Optional[str]) -> str:
    if not relative_to:
        return path
    try:
        return os.path.relpath(path, relative_to)
    except ValueError:
        # different drive on Windows
        return path


def emit(result, verbose: bool = False, relative_to: Optional[str] = None) -> str:
    findings = result.findings
    counts = findings.count_by_severity()
    lines: List[str] = [
        "🔒 Security Scan Summary",
        RULE,
        f"Files scanned: {result.files_scanned}",
        f"Critical: {counts['critical']}",
        f"High:     {counts['high']}",
        f"Medium:   {counts['medium']}",
        f"Low:      {counts['low']}",
        f"Total:    {len(findings)}",
        "",
    ]

    if result.errors:
        lines.append(f"⚠️  Files that could not be scanned: {len(result.errors)}")
        for err in result.errors:
            lines.append(f"  {_display_path(err['file'], relative_to)}: {err['error']}")
        lines.append("")

    if not len(findings):
        lines.append("✅ No security issues found!")
        lines.append("")
        lines.append("🛡️  Security Best Practices to Maintain:")
        lines.extend(f"  • {p}" for p in BEST_PRACTICES)
        return "\n".join(lines)

    lines.append("📋 Issues by category:")
    for category, count in findings.group_by_category().items():
        lines.append(f"  {category}: {count}")
    lines.append("")

    if verbose or findings.has_blocking():
        lines.append("🚨 Security Findings:")
        for f in findings.sorted_by_severity():
            lines.append(f"{ICONS[f.severity]} {f.severity.capitalize()} - "
                         f"{_display_path(f.file_path, relative_to)}:{f.line_number}")
            lines.append(f"   {f.description}")
            if verbose:
                lines.append(f"   Code: {f.code_snippet}")
            lines.append("")

    lines.append("🛡️  Security Recommendations by Severity")
    lines.append(RULE)
    for tier in classify(findings):
        lines.append(f"{ICONS[tier.severity]} {tier.heading}:")
        for advice in tier.categories:
            lines.append(f"  📂 {advice.category} ({advice.count} issues):")
            lines.extend(f"    • {r}" for r in advice.recommendations)
        lines.append("")
    return "\n".join(lines).rstrip("\n")


def exit_status(result) -> int:
    return 1 if result.findings.has_blocking() else 0
