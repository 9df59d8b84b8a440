"""Severity-tiered remediation guidance.

``RECOMMENDATIONS`` maps a lower-cased category to templates per severity, with
``"*"`` as the per-category default. Templates take ``{count}``. A category
missing from the table gets ``FALLBACK``. Adding guidance for a new rule is a
table edit only.
"""

from typing import Dict, List, NamedTuple, Tuple

from .utils.findings import SEVERITIES_DESC, FindingCollector

MAX_PER_CATEGORY = 3

FALLBACK = "Address {count} {category} security issues based on severity level"

TIER_HEADINGS = {
    "critical": "CRITICAL Security Issues (IMMEDIATE ACTION REQUIRED)",
    "high": "HIGH Risk Security Issues (Address Within 24-48 Hours)",
    "medium": "MEDIUM Risk Security Issues (Address This Sprint)",
    "low": "LOW Risk Security Issues (Security Hardening)",
}

BEST_PRACTICES = (
    "Continue using parameterized queries",
    "Keep authorization attributes on all endpoints",
    "Maintain proper input validation",
    "Regular security scanning and code reviews",
    "Keep dependencies updated",
    "Follow OWASP Top 10 guidelines",
)

RECOMMENDATIONS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "hardcoded secrets": {
        "critical": (
            "URGENT: Remove {count} hardcoded secrets immediately - these are security vulnerabilities",
            "Move all secrets to environment variables or a secret vault",
            "Rotate all exposed secrets/keys immediately",
            "Implement secret scanning in CI/CD pipeline",
        ),
        "high": (
            "HIGH PRIORITY: Secure {count} hardcoded sensitive values",
            "Use IConfiguration or IOptions pattern for configuration",
            "Implement proper secret management strategy",
        ),
        "*": (
            "Move {count} configuration values to appsettings or environment variables",
            "Follow 12-factor app principles for configuration",
        ),
    },
    "sql injection": {
        "critical": (
            "CRITICAL: Fix {count} SQL injection vulnerabilities NOW - these allow data breaches",
            "Use parameterized queries or Entity Framework exclusively",
            "Never concatenate user input into SQL strings",
            "Conduct immediate security audit of all database access code",
        ),
        "high": (
            "HIGH RISK: Secure {count} potential SQL injection points",
            "Replace string concatenation with parameterized queries",
            "Use Entity Framework or Dapper with proper parameterization",
        ),
        "*": (
            "Review {count} database access patterns for security",
            "Ensure all user input is properly sanitized",
        ),
    },
    "authorization": {
        "critical": (
            "CRITICAL: {count} endpoints lack authorization - immediate security risk",
            "Add [Authorize] attributes to all controllers and sensitive actions",
            "Implement role-based access control (RBAC)",
            "Review all API endpoints for proper authentication",
        ),
        "high": (
            "HIGH PRIORITY: Secure {count} unprotected endpoints",
            "Add proper authorization attributes",
            "Consider using policy-based authorization",
        ),
        "medium": (
            "Add authorization to {count} controller methods",
            "Use [AllowAnonymous] explicitly for public endpoints",
            "Review current authorization strategy",
        ),
        "*": (
            "Review authorization patterns for {count} methods",
            "Ensure consistent security across all endpoints",
        ),
    },
    "missing authentication": {
        "*": (
            "HIGH PRIORITY: Protect {count} critical operations with authentication",
            "Require [Authorize] with an explicit policy on destructive actions",
            "Audit administrative endpoints for anonymous reachability",
        ),
    },
    "input validation": {
        "critical": (
            "CRITICAL: {count} parameters lack validation - injection risk",
            "Add validation attributes to all user input parameters",
            "Implement custom validation for complex business rules",
            "Use ModelState.IsValid in all actions",
        ),
        "high": (
            "HIGH PRIORITY: Add validation to {count} input parameters",
            "Use data annotations for input validation",
            "Implement FluentValidation for complex scenarios",
        ),
        "*": (
            "Add validation attributes to {count} parameters",
            "Follow defense-in-depth principle for input validation",
        ),
    },
    "logging security": {
        "high": (
            "HIGH RISK: {count} logging statements may expose sensitive data",
            "Sanitize all logged data to remove PII and secrets",
            "Use structured logging with careful property selection",
            "Implement log sanitization middleware",
        ),
        "medium": (
            "Review {count} logging statements for sensitive data",
            "Use logging best practices to avoid data exposure",
        ),
        "*": (
            "Review logging patterns in {count} locations",
            "Ensure no sensitive information is logged",
        ),
    },
    "error handling": {
        "medium": (
            "Improve error handling in {count} locations to prevent information disclosure",
            "Return generic error messages to users",
            "Log detailed errors server-side only",
            "Implement global exception handling middleware",
        ),
        "*": (
            "Review error handling patterns in {count} locations",
            "Ensure error messages don't expose internal details",
        ),
    },
    "resource management": {
        "low": (
            "Improve resource management in {count} locations",
            "Use IHttpClientFactory for HttpClient instances",
            "Implement proper disposal patterns for resources",
        ),
        "*": ("Review resource management patterns in {count} locations",),
    },
    "best practices": {
        "low": (
            "Follow security best practices in {count} locations",
            "Use UTC dates for consistency and security",
            "Follow OWASP guidelines for secure coding",
        ),
        "*": ("Apply security best practices to {count} code locations",),
    },
    "csrf protection": {
        "high": (
            "HIGH PRIORITY: Add CSRF protection to {count} POST endpoints",
            "Use [ValidateAntiForgeryToken] attribute on POST actions",
            "Implement anti-forgery tokens in forms",
            "Review all state-changing operations for CSRF protection",
        ),
        "medium": (
            "Add CSRF protection to {count} POST methods",
            "Consider using [AutoValidateAntiforgeryToken] globally",
        ),
        "*": ("Review CSRF protection for {count} endpoints",),
    },
    "weak cryptography": {
        "critical": (
            "CRITICAL: Replace {count} weak cryptographic implementations immediately",
            "Remove all hardcoded encryption keys - use secure key management",
            "Rotate any compromised cryptographic keys",
        ),
        "high": (
            "HIGH PRIORITY: Replace {count} weak cryptographic algorithms",
            "Use SHA-256 or SHA-512 instead of MD5/SHA-1",
            "Implement proper key management practices",
            "Use cryptographically secure random number generators",
        ),
        "*": (
            "Update {count} cryptographic implementations to use stronger algorithms",
            "Use RandomNumberGenerator instead of System.Random for security-sensitive values",
        ),
    },
    "security misconfiguration": {
        "high": (
            "HIGH PRIORITY: Fix {count} security misconfigurations",
            "Remove overly permissive CORS policies",
            "Disable debug features in production",
            "Implement proper security headers and configurations",
        ),
        "medium": (
            "Review {count} configuration issues for security impact",
            "Implement secure defaults and configuration management",
        ),
        "*": ("Address {count} configuration security issues",),
    },
    "information exposure": {
        "high": (
            "HIGH PRIORITY: Prevent {count} information exposure vulnerabilities",
            "Remove sensitive data from ToString() methods",
            "Sanitize error messages to prevent information disclosure",
            "Review all public-facing methods for data exposure",
        ),
        "*": ("Review {count} potential information exposure points",),
    },
    "authentication failures": {
        "medium": (
            "Strengthen authentication for {count} identified issues",
            "Implement strong password requirements",
            "Add password complexity validation",
            "Consider multi-factor authentication for sensitive operations",
        ),
        "*": ("Review authentication patterns in {count} locations",),
    },
    "data exposure": {
        "critical": (
            "CRITICAL: {count} potential data exposure vulnerabilities found",
            "Never return sensitive user data in API responses",
            "Implement proper data filtering and DTOs",
            "Conduct immediate audit of all API endpoints",
        ),
        "*": ("Review data exposure risks in {count} locations",),
    },
    "file upload security": {
        "high": (
            "HIGH PRIORITY: Secure {count} file upload operations",
            "Validate file types and extensions",
            "Implement file size limits",
            "Store uploaded files outside web root",
        ),
        "*": ("Review file upload security for {count} operations",),
    },
    "command injection": {
        "*": (
            "HIGH PRIORITY: Remove dynamic command construction in {count} locations",
            "Pass process arguments through ArgumentList instead of a concatenated string",
            "Validate any user-influenced values against a strict allowlist",
        ),
    },
    "deserialization": {
        "critical": (
            "CRITICAL: Remove {count} uses of BinaryFormatter/SoapFormatter",
            "Switch to System.Text.Json with explicit target types",
            "Never deserialize untrusted payloads into polymorphic types",
        ),
        "*": (
            "Validate the source and shape of {count} deserialized payloads",
            "Disable type name handling in JSON serializers",
        ),
    },
    "xml security": {
        "*": (
            "Harden {count} XML parsers against XXE",
            "Set DtdProcessing.Prohibit and XmlResolver = null",
            "Prefer XmlReader with secure XmlReaderSettings",
        ),
    },
    "cross-site scripting": {
        "*": (
            "HIGH PRIORITY: Encode output in {count} locations writing user data to the response",
            "Use Razor encoding or HtmlEncoder instead of Response.Write",
            "Add a Content-Security-Policy header",
        ),
    },
    "path traversal": {
        "*": (
            "Validate {count} file paths built from external input",
            "Resolve full paths and verify they stay under an allowed root",
            "Use Path.GetFileName on user-supplied names before combining",
        ),
    },
    "server-side request forgery": {
        "*": (
            "HIGH PRIORITY: Restrict {count} outbound requests built from dynamic URLs",
            "Validate target hosts against an allowlist",
            "Block requests to internal and link-local address ranges",
        ),
    },
    "code injection": {
        "*": (
            "Remove dynamic code evaluation or compilation in {count} locations",
            "Replace runtime compilation with precompiled plugins or expression trees",
        ),
    },
    "memory safety": {
        "*": (
            "Review {count} direct memory operations for out-of-bounds writes",
            "Prefer Span<T> and safe copies over Marshal/Buffer primitives",
        ),
    },
    "integer overflow": {
        "*": (
            "Review {count} uses of MaxValue boundaries for overflow",
            "Use checked arithmetic where values approach type limits",
        ),
    },
    "timing attacks": {
        "*": (
            "Review {count} timing-sensitive code paths",
            "Use CryptographicOperations.FixedTimeEquals for secret comparisons",
        ),
    },
    "null reference": {
        "*": (
            "Add null checks before {count} object method calls",
            "Enable nullable reference types and treat warnings as errors",
            "Use null-conditional (?.) and null-coalescing (??) operators",
        ),
    },
    "credential protection": {
        "*": (
            "Protect credentials in {count} locations",
            "Hash passwords with PBKDF2, bcrypt or Argon2 before storing",
            "Only transmit credentials over HTTPS",
        ),
    },
}


class CategoryAdvice(NamedTuple):
    category: str
    count: int
    recommendations: List[str]


class SeverityTier(NamedTuple):
    severity: str
    heading: str
    categories: List[CategoryAdvice]


def recommendations_for(category: str, severity: str, count: int) -> List[str]:
    key = category.lower()
    table = RECOMMENDATIONS.get(key)
    if table is None:
        return [FALLBACK.format(count=count, category=key)]
    templates = table.get(severity) or table.get("*", ())
    return [t.format(count=count) for t in templates]


def classify(findings: FindingCollector, limit: int = MAX_PER_CATEGORY) -> List[SeverityTier]:
    tiers: List[SeverityTier] = []
    for severity in SEVERITIES_DESC:
        groups = findings.group_by_category(severity)
        if not groups:
            continue
        advice = [
            CategoryAdvice(category, count, recommendations_for(category, severity, count)[:limit])
            for category, count in groups.items()
        ]
        tiers.append(SeverityTier(severity, TIER_HEADINGS[severity], advice))
    return tiers
