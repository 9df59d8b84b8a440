from typing import List

from .shared import (STRING_LITERALS, FileContext, ancestors, arguments_in, callee_text, chained_calls,
                     enclosing_method, innermost, iter_nodes, make_finding, node_text)
from ..utils.findings import Finding

UPLOAD_CALLS = ("SaveAs", "CopyTo")
CREATE_CALLS = ("File.Create", "Directory.CreateDirectory")
PERMISSION_WORDS = ("FileMode", "FilePermissions", "UnixFileMode")
BROAD_PERMISSIONS = ("FilePermissions.All", "UnixFileMode.ReadWriteExecute")
BOUNDS_GUARDS = (".Length", ".Count", "bounds")
NULL_SENSITIVE_CALLS = ("ToString", "GetHashCode", "Equals")
NULL_GUARDS = ("!= null", "is not null")
KEY_TYPES = STRING_LITERALS + ("interpolated_string_expression",)


def _method_lacks(node, *words, lower=False) -> bool:
    method = enclosing_method(node)
    if method is None:
        return False
    body = node_text(method)
    if lower:
        body = body.lower()
    return not any(w in body for w in words)


def scan_resource_management(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for creation in iter_nodes(ctx.root, "object_creation_expression"):
        ctype = node_text(creation.child_by_field_name("type"))
        if ctype == "HttpClient" or ctype.endswith(".HttpClient"):
            findings.append(make_finding(
                ctx, creation, "RES-HTTPCLIENT", "low", "Resource Management",
                "HttpClient should be created using IHttpClientFactory to avoid socket exhaustion (OWASP A06)",
            ))

    for access in iter_nodes(ctx.root, "member_access_expression"):
        if node_text(access) == "DateTime.Now":
            findings.append(make_finding(
                ctx, access, "BP-DATETIME-NOW", "low", "Best Practices",
                "Use DateTime.UtcNow instead of DateTime.Now for consistency",
            ))
    return findings


def scan_file_operations(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for inv in chained_calls(ctx.root, lambda n: any(c in callee_text(n) for c in UPLOAD_CALLS)):
        if _method_lacks(inv, "contenttype", "extension", lower=True):
            findings.append(make_finding(
                ctx, inv, "FILE-UPLOAD", "high", "File Upload Security",
                "File upload without proper validation (CWE-434)",
            ))

    for inv in chained_calls(ctx.root, lambda n: any(c in callee_text(n) for c in CREATE_CALLS)):
        if _method_lacks(inv, *PERMISSION_WORDS):
            findings.append(make_finding(
                ctx, inv, "FILE-DEFAULT-PERMS", "medium", "File Permissions",
                "File/directory creation without explicit permission settings (CWE-276)",
            ))

    for access in innermost(ctx.root, "member_access_expression",
                            lambda n: any(p in node_text(n) for p in BROAD_PERMISSIONS)):
        findings.append(make_finding(
            ctx, access, "FILE-BROAD-PERMS", "medium", "Permission Assignment",
            "Overly permissive file permissions assigned (CWE-732)",
        ))
    return findings


def _is_keyed_lookup(access) -> bool:
    subscript = access.child_by_field_name("subscript") or access.named_children[-1]
    keys = arguments_in(subscript)
    return bool(keys) and all(k.type in KEY_TYPES for k in keys)


def scan_bounds_checking(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for inv in chained_calls(ctx.root, lambda n: "Substring" in callee_text(n)):
        if _method_lacks(inv, ".Length", "bounds"):
            findings.append(make_finding(
                ctx, inv, "BOUNDS-SUBSTRING", "medium", "Bounds Checking",
                "String substring operation without length validation (CWE-125)",
            ))

    # dictionary-style lookups by string key are not index reads
    for access in iter_nodes(ctx.root, "element_access_expression"):
        if _is_keyed_lookup(access) or "Length" in node_text(access):
            continue
        if _method_lacks(access, *BOUNDS_GUARDS):
            findings.append(make_finding(
                ctx, access, "BOUNDS-INDEX", "medium", "Bounds Checking",
                "Array/collection access without bounds checking (CWE-125)",
            ))
    return findings


def _null_guarded(inv) -> bool:
    statement = next((a for a in ancestors(inv) if a.type.endswith("_statement")), None)
    if statement is None:
        return True
    if any(g in node_text(statement) for g in NULL_GUARDS):
        return True
    for a in ancestors(statement):
        if a.type == "if_statement" and any(g in node_text(a.child_by_field_name("condition")) for g in NULL_GUARDS):
            return True
    return False


def scan_null_reference(ctx: FileContext) -> List[Finding]:
    """Object-level calls on a variable or member that nothing checked for null."""

    def dereferences(inv) -> bool:
        callee = inv.child_by_field_name("function")
        if callee is None or callee.type != "member_access_expression" or "?" in node_text(callee):
            return False
        if node_text(callee.child_by_field_name("name")) not in NULL_SENSITIVE_CALLS:
            return False
        receiver = callee.child_by_field_name("expression")
        return receiver is not None and receiver.type in ("identifier", "member_access_expression")

    findings: List[Finding] = []
    for inv in chained_calls(ctx.root, dereferences):
        if not _null_guarded(inv):
            findings.append(make_finding(
                ctx, inv, "NULL-DEREF", "medium", "Null Reference",
                "Potential null reference access without null check (CWE-476)",
            ))
    return findings
