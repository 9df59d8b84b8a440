import re
from typing import List

from .shared import (FileContext, argument_nodes, callee_text, chained_calls, enclosing_class,
                     enclosing_method, has_attribute, identifier, innermost, iter_nodes, make_finding,
                     node_text)
from ..utils.findings import Finding

AUTHORIZATION = "Authorization"
ALLOW_MARKERS = ("Authorize", "AllowAnonymous")
CSRF_MARKERS = ("ValidateAntiForgeryToken", "AutoValidateAntiforgeryToken")
IMPERSONATION_CALLS = re.compile(r"\b(?:WindowsIdentity\.Impersonate|RunAs|SetThreadToken|ImpersonateLoggedOnUser)\b")
PRINCIPAL_TYPES = ("WindowsPrincipal", "ClaimsPrincipal")


def _action_methods(ctx: FileContext):
    for m in iter_nodes(ctx.root, "method_declaration"):
        if has_attribute(m, "Http"):
            yield m


def scan_controller_authorization(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    severity = ctx.policy.authorization_severity
    for cls in iter_nodes(ctx.root, "class_declaration"):
        name = identifier(cls)
        if name.endswith(ctx.policy.controller_suffix) and not has_attribute(cls, "Authorize"):
            findings.append(make_finding(
                ctx, cls, "AUTH-CONTROLLER", severity, AUTHORIZATION,
                f"Controller '{name}' lacks authorization attributes (OWASP A01, CWE-862)", name,
            ))

    for m in _action_methods(ctx):
        if not has_attribute(m, *ALLOW_MARKERS):
            name = identifier(m)
            findings.append(make_finding(
                ctx, m, "AUTH-ACTION", severity, AUTHORIZATION,
                f"Action method '{name}' lacks authorization attributes (OWASP A01, CWE-862)", name,
            ))
    return findings


def scan_csrf(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for m in iter_nodes(ctx.root, "method_declaration"):
        if has_attribute(m, "HttpPost") and not has_attribute(m, *CSRF_MARKERS):
            name = identifier(m)
            findings.append(make_finding(
                ctx, m, "AUTH-CSRF", "high", "CSRF Protection",
                f"POST method '{name}' lacks CSRF protection (CWE-352)", name,
            ))
    return findings


def scan_critical_functions(ctx: FileContext) -> List[Finding]:
    """Destructive or administrative controller actions reachable without [Authorize]."""
    policy = ctx.policy
    if policy.is_test_path(ctx.rel_path) or policy.is_infrastructure_path(ctx.rel_path):
        return []

    findings: List[Finding] = []
    for m in iter_nodes(ctx.root, "method_declaration"):
        name = identifier(m)
        lowered = name.lower()
        if "should" in lowered or policy.is_test_name(name):
            continue
        if not any(v in lowered for v in policy.critical_verbs):
            continue
        cls = enclosing_class(m)
        if cls is None or not identifier(cls).endswith(policy.controller_suffix):
            continue
        if has_attribute(m, "Authorize") or has_attribute(cls, "Authorize"):
            continue
        findings.append(make_finding(
            ctx, m, "AUTH-CRITICAL", "high", "Missing Authentication",
            f"Critical function '{name}' lacks authentication (OWASP A07, CWE-306)", name,
        ))
    return findings


def scan_authentication(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []

    def insecure_cookie(inv) -> bool:
        return ("SetAuthCookie" in callee_text(inv)
                and any(node_text(a) == "false" for a in argument_nodes(inv)))

    for inv in chained_calls(ctx.root, insecure_cookie):
        findings.append(make_finding(
            ctx, inv, "AUTH-COOKIE", "high", "Authentication",
            "Authentication cookie created without secure settings (CWE-287)",
        ))

    for inv in chained_calls(ctx.root, lambda n: "cookieauthentication" in callee_text(n).lower()):
        method = enclosing_method(inv)
        if method is None:
            continue
        body = node_text(method).lower().replace(" ", "")
        if "requirehttps" not in body or "requirehttps=false" in body:
            findings.append(make_finding(
                ctx, inv, "AUTH-COOKIE-HTTPS", "medium", "Authentication",
                "Authentication configuration without HTTPS requirement (CWE-287)",
            ))

    def creates_account(inv) -> bool:
        callee = callee_text(inv).lower()
        return "createuser" in callee or "register" in callee

    for inv in chained_calls(ctx.root, creates_account):
        method = enclosing_method(inv)
        if method is None:
            continue
        body = node_text(method).lower()
        if "password" not in body or ("length" not in body and "complexity" not in body):
            findings.append(make_finding(
                ctx, inv, "AUTH-WEAK-PASSWORD", "medium", "Authentication Failures",
                "Weak password validation detected (OWASP A07, CWE-521)",
            ))
    return findings


def scan_privilege_management(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for inv in chained_calls(ctx.root, lambda n: IMPERSONATION_CALLS.search(callee_text(n)) is not None):
        findings.append(make_finding(
            ctx, inv, "PRIV-IMPERSONATE", "high", "Privilege Management",
            "Privilege escalation operation detected (CWE-269)",
        ))

    def uses_principal(node) -> bool:
        text = node_text(node)
        return any(p in text for p in PRINCIPAL_TYPES)

    for access in innermost(ctx.root, "member_access_expression", uses_principal):
        method = enclosing_method(access)
        if method is None:
            continue
        body = node_text(method)
        if "IsInRole" not in body and "HasClaim" not in body:
            findings.append(make_finding(
                ctx, access, "PRIV-PRINCIPAL", "medium", "Privilege Management",
                "Principal usage without proper role/claim validation (CWE-269)",
            ))
    return findings
