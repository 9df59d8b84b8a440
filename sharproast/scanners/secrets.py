import re
from typing import List, NamedTuple, Pattern

from ..utils.findings import Finding

SECRETS = "Hardcoded Secrets"


class PatternRule(NamedTuple):
    id: str
    pattern: Pattern
    description: str
    severity: str
    category: str


def _rule(rule_id: str, pattern: str, description: str, severity: str = "high",
          category: str = SECRETS) -> PatternRule:
    return PatternRule(rule_id, re.compile(pattern, re.I | re.M), description, severity, category)


# Order is part of the output contract: findings are emitted rule by rule.
SECRET_PATTERNS = (
    _rule("SECRET-PASSWORD", r"""password\s*[=:]\s*["'][^"']+["']""",
          "Hardcoded password detected (OWASP A02, CWE-798)"),
    _rule("SECRET-APIKEY", r"""api[_-]?key\s*[=:]\s*["'][^"']+["']""",
          "Hardcoded API key detected (OWASP A02, CWE-798)"),
    _rule("SECRET-GENERIC", r"""secret\s*[=:]\s*["'][^"']+["']""",
          "Hardcoded secret detected (OWASP A02, CWE-798)"),
    _rule("SECRET-TOKEN", r"""token\s*[=:]\s*["'][^"']+["']""",
          "Hardcoded token detected (OWASP A02, CWE-798)"),
    _rule("SECRET-CONNSTR", r"""connectionstring\s*[=:]\s*["'][^"']+["']""",
          "Hardcoded connection string detected (OWASP A02, CWE-798)"),
    _rule("SECRET-PRIVKEY", r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----",
          "Private key embedded in source (OWASP A02, CWE-798)", "critical"),
    _rule("SECRET-AWSKEY", r"\bAKIA[0-9A-Z]{16}\b",
          "AWS access key id embedded in source (OWASP A02, CWE-798)", "critical"),
    _rule("CRYPTO-WEAKCIPHER", r"\bDES\b(?!3)|\bRC4\b|\bRC2\b",
          "Weak encryption algorithm detected (OWASP A02, CWE-327)", category="Weak Cryptography"),
    _rule("CRYPTO-TICKSEED", r"Environment\.TickCount",
          "Predictable random seed detected (CWE-338)", "medium", "Weak Cryptography"),
    _rule("CMD-SHELLBIN", r"cmd\.exe|powershell\.exe",
          "Direct OS command execution detected (OWASP A03, CWE-78)", category="Command Injection"),
    _rule("XSS-RESPONSE-WRITE", r"Response\.Write\s*\([^)]*\+",
          "Potential XSS via Response.Write with concatenation (OWASP A03, CWE-79)",
          category="Cross-Site Scripting"),
    _rule("PATH-DOTDOT", r"\.\.[\\/]",
          "Potential path traversal pattern detected (OWASP A01, CWE-22)", "medium", "Path Traversal"),
    _rule("PATH-READ-CONCAT", r"File\.ReadAllText\s*\([^)]*\+",
          "Potential path traversal in file operations (OWASP A01, CWE-22)", category="Path Traversal"),
    _rule("PATH-COMBINE-REQUEST", r"Path\.Combine\s*\([^)]*Request\.",
          "Path combination with user input (OWASP A01, CWE-22)", category="Path Traversal"),
    _rule("SSRF-HTTPCLIENT", r"HttpClient.*\.GetAsync\s*\([^)]*\+",
          "Potential SSRF via dynamic URL construction (OWASP A10, CWE-918)",
          category="Server-Side Request Forgery"),
    _rule("SSRF-WEBREQUEST", r"WebRequest\.Create\s*\([^)]*\+",
          "Web request with dynamic URL (OWASP A10, CWE-918)", category="Server-Side Request Forgery"),
    _rule("CODE-EVAL", r"\beval\s*\(",
          "Dynamic code evaluation detected (OWASP A03, CWE-94)", category="Code Injection"),
    _rule("CODE-COMPILE", r"CompileAssemblyFromSource",
          "Dynamic code compilation detected (OWASP A03, CWE-94)", category="Code Injection"),
    _rule("MEM-SETBYTE", r"Buffer\.SetByte\s*\(",
          "Direct buffer manipulation detected (CWE-787)", category="Memory Safety"),
    _rule("MEM-MARSHAL-COPY", r"Marshal\.Copy\s*\(",
          "Unsafe memory operation detected (CWE-787)", category="Memory Safety"),
    _rule("INT-MAXVALUE", r"\b(?:int|long)\.MaxValue\b",
          "Potential integer overflow risk, review usage context (CWE-190)", "low", "Integer Overflow"),
    _rule("TIMING-SLEEP0", r"Thread\.Sleep\s*\(\s*0\s*\)",
          "Potential timing attack vulnerability (CWE-208)", "low", "Timing Attacks"),
)


def line_for_offset(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


def scan_secrets(path: str, text: str, rules=SECRET_PATTERNS) -> List[Finding]:
    findings: List[Finding] = []
    for rule in rules:
        for m in rule.pattern.finditer(text):
            findings.append(Finding(
                id=rule.id,
                file_path=path,
                line_number=line_for_offset(text, m.start()),
                severity=rule.severity,
                description=rule.description,
                code_snippet=m.group(0).strip(),
                category=rule.category,
            ))
    return findings
