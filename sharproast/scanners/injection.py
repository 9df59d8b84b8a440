import re
from typing import List

from .shared import (STRING_LITERALS, FileContext, ancestors, argument_nodes, callee_text,
                     chained_calls, enclosing_method, has_attribute, innermost, iter_nodes, make_finding,
                     node_text, snippet)
from ..utils.findings import Finding

SQL_KEYWORDS = re.compile(r"\b(select|insert|update|delete)\b", re.I)
REQUEST_SOURCES = ("Request.QueryString", "Request.Form", "Request.Headers")
VALIDATION_ATTRIBUTES = ("Required", "Range", "StringLength", "RegularExpression")
VALIDATED_TYPES = ("string", "int", "decimal")


def _is_concatenation(node) -> bool:
    if node.type != "binary_expression":
        return False
    op = node.child_by_field_name("operator")
    if op is not None:
        return op.type == "+"
    return any(not c.is_named and c.type == "+" for c in node.children)


def scan_sql_injection(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for literal in iter_nodes(ctx.root, *STRING_LITERALS):
        if not SQL_KEYWORDS.search(node_text(literal)):
            continue
        concat = next((a for a in ancestors(literal) if _is_concatenation(a)), None)
        if concat is not None:
            findings.append(make_finding(
                ctx, literal, "SQLI-CONCAT", "critical", "SQL Injection",
                "Potential SQL injection via string concatenation (OWASP A03, CWE-89)",
                snippet(concat),
            ))

    for interp in iter_nodes(ctx.root, "interpolated_string_expression"):
        if not SQL_KEYWORDS.search(node_text(interp)):
            continue
        if any(True for _ in iter_nodes(interp, "interpolation")):
            findings.append(make_finding(
                ctx, interp, "SQLI-INTERP", "critical", "SQL Injection",
                "Potential SQL injection via string interpolation (OWASP A03, CWE-89)",
            ))
    return findings


def scan_command_injection(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for creation in iter_nodes(ctx.root, "object_creation_expression"):
        if "ProcessStartInfo" not in node_text(creation.child_by_field_name("type")):
            continue
        method = enclosing_method(creation)
        if method is None:
            continue
        body = node_text(method)
        if "Arguments" in body and "+" in body:
            findings.append(make_finding(
                ctx, creation, "CMDI-STARTINFO", "high", "Command Injection",
                "Command arguments constructed via concatenation (OWASP A03, CWE-77)",
            ))

    for inv in chained_calls(ctx.root, lambda n: "Process.Start" in callee_text(n)):
        args = " ".join(node_text(a) for a in argument_nodes(inv))
        if "+" in args or '$"' in args or "string.Format" in args:
            findings.append(make_finding(
                ctx, inv, "CMDI-PROCESS", "high", "Command Injection",
                "Process execution with dynamic parameters (OWASP A03, CWE-77)",
            ))
    return findings


def scan_input_validation(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for m in iter_nodes(ctx.root, "method_declaration"):
        if not has_attribute(m, "Http"):
            continue
        params = m.child_by_field_name("parameters")
        for p in (params.named_children if params is not None else []):
            if p.type != "parameter" or has_attribute(p, *VALIDATION_ATTRIBUTES):
                continue
            ptype = node_text(p.child_by_field_name("type"))
            if any(t in ptype for t in VALIDATED_TYPES):
                name = node_text(p.child_by_field_name("name"))
                findings.append(make_finding(
                    ctx, p, "INPUT-PARAM", "medium", "Input Validation",
                    f"Parameter '{name}' lacks input validation attributes (CWE-20)",
                ))

    def reads_request(node) -> bool:
        return any(s in node_text(node) for s in REQUEST_SOURCES)

    for access in innermost(ctx.root, "member_access_expression", reads_request):
        findings.append(make_finding(
            ctx, access, "INPUT-REQUEST", "medium", "Input Validation",
            "Direct access to request data without validation (CWE-20)",
        ))

    def request_to_filesystem(node) -> bool:
        text = node_text(node)
        return ("File." in text or "Directory." in text) and "Request." in text

    for inv in innermost(ctx.root, "invocation_expression", request_to_filesystem):
        findings.append(make_finding(
            ctx, inv, "INPUT-FILEOP", "high", "Input Validation",
            "User input used in file/directory operations without validation (CWE-20)",
        ))
    return findings
