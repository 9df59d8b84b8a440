from typing import List

from .shared import (STRING_LITERALS, FileContext, argument_nodes, callee_text, chained_calls,
                     enclosing_method, innermost, iter_nodes, make_finding, node_text)
from ..utils.findings import Finding

WEAK_CRYPTO = "Weak Cryptography"
DESERIALIZATION = "Deserialization"
UNSAFE_FORMATTERS = ("BinaryFormatter", "SoapFormatter")
UNTRUSTED_SOURCES = ("Request.", "HttpContext", "Stream", "byte[]")
XML_PARSERS = ("XmlDocument", "XmlTextReader", "XslCompiledTransform")
XXE_GUARDS = ("DtdProcessing.Prohibit", "XmlResolver = null", "ProhibitDtd = true")


def _created_type(creation) -> str:
    return node_text(creation.child_by_field_name("type"))


def scan_weak_cryptography(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []

    def weak_hash(node) -> bool:
        text = node_text(node)
        return "MD5" in text or "SHA1.Create" in text

    for access in innermost(ctx.root, "member_access_expression", weak_hash):
        text = node_text(access)
        findings.append(make_finding(
            ctx, access, "CRYPTO-WEAKHASH", "high", WEAK_CRYPTO,
            f"Weak cryptographic algorithm detected: {text} (OWASP A02, CWE-327)", text,
        ))

    def en_or_decrypts(node) -> bool:
        callee = callee_text(node)
        return "Encrypt" in callee or "Decrypt" in callee

    for inv in chained_calls(ctx.root, en_or_decrypts):
        for arg in argument_nodes(inv):
            if arg.type in STRING_LITERALS:
                findings.append(make_finding(
                    ctx, inv, "CRYPTO-HARDCODED-KEY", "critical", "Hardcoded Secrets",
                    "Hardcoded encryption key detected (OWASP A02, CWE-321)",
                ))

    for creation in iter_nodes(ctx.root, "object_creation_expression"):
        if _created_type(creation) == "Random" and not argument_nodes(creation):
            findings.append(make_finding(
                ctx, creation, "CRYPTO-WEAKRNG", "medium", WEAK_CRYPTO,
                "Weak random number generation (CWE-338)",
            ))
    return findings


def scan_deserialization(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []

    def deserializes(node) -> bool:
        callee = callee_text(node)
        return (
            "JsonConvert.DeserializeObject" in callee
            or ("Deserialize" in callee and any(t in callee for t in UNSAFE_FORMATTERS + ("XmlSerializer",)))
        )

    for inv in chained_calls(ctx.root, deserializes):
        method = enclosing_method(inv)
        if method is not None and any(s in node_text(method) for s in UNTRUSTED_SOURCES):
            findings.append(make_finding(
                ctx, inv, "DESER-UNTRUSTED", "high", DESERIALIZATION,
                "Deserialization of potentially untrusted data (OWASP A08, CWE-502)",
            ))

    for creation in iter_nodes(ctx.root, "object_creation_expression"):
        if any(f in _created_type(creation) for f in UNSAFE_FORMATTERS):
            findings.append(make_finding(
                ctx, creation, "DESER-FORMATTER", "critical", DESERIALIZATION,
                "Use of unsafe deserialization formatter (OWASP A08, CWE-502)",
            ))
    return findings


def scan_xml_external_entities(ctx: FileContext) -> List[Finding]:
    findings: List[Finding] = []
    for creation in iter_nodes(ctx.root, "object_creation_expression"):
        if not any(t in _created_type(creation) for t in XML_PARSERS):
            continue
        method = enclosing_method(creation)
        if method is not None and not any(g in node_text(method) for g in XXE_GUARDS):
            findings.append(make_finding(
                ctx, creation, "XXE-PARSER", "high", "XML Security",
                "XML processing without XXE protection (OWASP A05, CWE-611)",
            ))

    for assignment in iter_nodes(ctx.root, "assignment_expression"):
        if "DtdProcessing.Parse" in node_text(assignment):
            findings.append(make_finding(
                ctx, assignment, "XXE-DTD", "high", "XML Security",
                "DTD processing enabled - XXE vulnerability risk (OWASP A05, CWE-611)",
            ))
    return findings
