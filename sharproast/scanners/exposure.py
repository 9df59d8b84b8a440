from typing import List

from .shared import (FileContext, argument_nodes, callee_text, chained_calls, identifier, innermost,
                     iter_nodes, make_finding, node_text)
from ..utils.findings import Finding

EXCEPTION_DETAILS = ("exception", "stacktrace", "innerexception")
USER_SECRETS = ("password", "passwordhash", "salt")
PASSWORD_PROTECTION = ("hash", "encrypt", "bcrypt", "pbkdf2")
DEV_EXCEPTION_PAGE = ("adddeveloperexceptionpage", "usedeveloperexceptionpage")
PERMISSIVE_CORS = ("allowanyorigin", "allowanyheader")


def _mentions(text: str, words) -> bool:
    lowered = text.lower()
    return any(w in lowered for w in words)


def scan_logging(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    keywords = ctx.policy.sensitive_keywords
    for inv in chained_calls(ctx.root, lambda n: "Log" in callee_text(n)):
        for arg in argument_nodes(inv):
            if _mentions(node_text(arg), keywords):
                findings.append(make_finding(
                    ctx, inv, "LOG-SENSITIVE", "high", "Logging Security",
                    "Potential sensitive data in logging statement (OWASP A09, CWE-532)",
                ))
    return findings


def scan_error_handling(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for clause in iter_nodes(ctx.root, "catch_clause"):
        body = clause.child_by_field_name("body")
        if body is None:
            continue
        for ret in iter_nodes(body, "return_statement"):
            if _mentions(node_text(ret), EXCEPTION_DETAILS):
                findings.append(make_finding(
                    ctx, ret, "ERR-DISCLOSURE", "medium", "Error Handling",
                    "Potential information disclosure in error handling (CWE-209)",
                ))
    return findings


def scan_information_exposure(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for m in iter_nodes(ctx.root, "method_declaration"):
        if identifier(m) == "ToString" and _mentions(node_text(m), ctx.policy.sensitive_keywords):
            findings.append(make_finding(
                ctx, m, "EXPOSE-TOSTRING", "high", "Information Exposure",
                "Sensitive information exposed in ToString method (CWE-200)", "ToString",
            ))

    for ret in iter_nodes(ctx.root, "return_statement"):
        text = node_text(ret)
        if _mentions(text, ("user",)) and _mentions(text, USER_SECRETS):
            findings.append(make_finding(
                ctx, ret, "EXPOSE-USERDATA", "critical", "Data Exposure",
                "Sensitive user data exposed in API response (OWASP A01, CWE-200)",
            ))
    return findings


def scan_misconfiguration(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for inv in innermost(ctx.root, "invocation_expression",
                         lambda n: _mentions(node_text(n), DEV_EXCEPTION_PAGE)):
        findings.append(make_finding(
            ctx, inv, "MISCONF-DEVPAGE", "medium", "Security Misconfiguration",
            "Developer exception page enabled - potential information disclosure (OWASP A05, CWE-209)",
        ))
    for inv in innermost(ctx.root, "invocation_expression",
                         lambda n: _mentions(node_text(n), PERMISSIVE_CORS)):
        findings.append(make_finding(
            ctx, inv, "MISCONF-CORS", "high", "Security Misconfiguration",
            "Overly permissive CORS configuration detected (OWASP A05, CWE-942)",
        ))
    return findings


def scan_credential_protection(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for assignment in iter_nodes(ctx.root, "assignment_expression"):
        text = node_text(assignment)
        if _mentions(text, ("password", "credential")) and not _mentions(text, PASSWORD_PROTECTION):
            findings.append(make_finding(
                ctx, assignment, "CRED-PLAINTEXT", "high", "Credential Protection",
                "Credentials stored without proper protection (OWASP A02, CWE-522)",
            ))

    def sends_password(node) -> bool:
        text = node_text(node).lower()
        return (any(v in text for v in ("send", "post", "put"))
                and "password" in text and "https" not in text)

    for inv in innermost(ctx.root, "invocation_expression", sends_password):
        findings.append(make_finding(
            ctx, inv, "CRED-TRANSMIT", "high", "Credential Protection",
            "Password transmission without encryption protection (OWASP A02, CWE-522)",
        ))
    return findings
