import re
from typing import List

OWASP_TOP10 = {
    "A01": ("Broken Access Control", "https://owasp.org/Top10/A01_2021-Broken_Access_Control/"),
    "A02": ("Cryptographic Failures", "https://owasp.org/Top10/A02_2021-Cryptographic_Failures/"),
    "A03": ("Injection", "https://owasp.org/Top10/A03_2021-Injection/"),
    "A04": ("Insecure Design", "https://owasp.org/Top10/A04_2021-Insecure_Design/"),
    "A05": ("Security Misconfiguration", "https://owasp.org/Top10/A05_2021-Security_Misconfiguration/"),
    "A06": ("Vulnerable and Outdated Components",
            "https://owasp.org/Top10/A06_2021-Vulnerable_and_Outdated_Components/"),
    "A07": ("Identification and Authentication Failures",
            "https://owasp.org/Top10/A07_2021-Identification_and_Authentication_Failures/"),
    "A08": ("Software and Data Integrity Failures",
            "https://owasp.org/Top10/A08_2021-Software_and_Data_Integrity_Failures/"),
    "A09": ("Security Logging and Monitoring Failures",
            "https://owasp.org/Top10/A09_2021-Security_Logging_and_Monitoring_Failures/"),
    "A10": ("Server-Side Request Forgery (SSRF)",
            "https://owasp.org/Top10/A10_2021-Server-Side_Request_Forgery_%28SSRF%29/"),
}

OWASP_FALLBACK = {"category": "Multiple OWASP categories may apply", "url": "https://owasp.org/Top10/"}

CWE_NAMES = {
    "20": "Improper Input Validation",
    "22": "Path Traversal",
    "77": "Command Injection",
    "78": "OS Command Injection",
    "79": "Cross-site Scripting",
    "89": "SQL Injection",
    "94": "Code Injection",
    "125": "Out-of-bounds Read",
    "190": "Integer Overflow or Wraparound",
    "200": "Exposure of Sensitive Information to an Unauthorized Actor",
    "208": "Observable Timing Discrepancy",
    "209": "Generation of Error Message Containing Sensitive Information",
    "269": "Improper Privilege Management",
    "276": "Incorrect Default Permissions",
    "287": "Improper Authentication",
    "306": "Missing Authentication for Critical Function",
    "321": "Use of Hard-coded Cryptographic Key",
    "327": "Use of a Broken or Risky Cryptographic Algorithm",
    "338": "Use of Cryptographically Weak PRNG",
    "352": "Cross-Site Request Forgery",
    "434": "Unrestricted Upload of File with Dangerous Type",
    "476": "NULL Pointer Dereference",
    "502": "Deserialization of Untrusted Data",
    "521": "Weak Password Requirements",
    "522": "Insufficiently Protected Credentials",
    "532": "Insertion of Sensitive Information into Log File",
    "611": "Improper Restriction of XML External Entity Reference",
    "732": "Incorrect Permission Assignment for Critical Resource",
    "787": "Out-of-bounds Write",
    "798": "Use of Hard-coded Credentials",
    "862": "Missing Authorization",
    "918": "Server-Side Request Forgery",
    "942": "Permissive Cross-domain Policy with Untrusted Domains",
}

CWE_TOP25_URL = "https://cwe.mitre.org/top25/archive/2024/2024_cwe_top25.html"
CWE_FALLBACK = {"id": "Multiple", "name": "Multiple CWE categories may apply", "url": CWE_TOP25_URL}
OWASP_TOP10_URL = "https://owasp.org/Top10/"
NIST_CSF_URL = "https://www.nist.gov/cyberframework"

# whole tokens only: CWE-20 must not match inside CWE-200
_OWASP_RE = re.compile(r"\b(A(?:0[1-9]|10))\b")
_CWE_RE = re.compile(r"\bCWE-(\d+)\b")


def cwe_url(cwe_id: str) -> str:
    return f"https://cwe.mitre.org/data/definitions/{cwe_id}.html"


def owasp_mapping(description: str) -> dict:
    m = _OWASP_RE.search(description)
    if not m:
        return dict(OWASP_FALLBACK)
    name, url = OWASP_TOP10[m.group(1)]
    return {"id": m.group(1), "category": f"{m.group(1)}:2021 - {name}", "url": url}


def cwe_mapping(description: str) -> dict:
    for cwe_id in _CWE_RE.findall(description):
        if cwe_id in CWE_NAMES:
            return {"id": f"CWE-{cwe_id}", "name": CWE_NAMES[cwe_id], "url": cwe_url(cwe_id)}
    return dict(CWE_FALLBACK)


def reference_urls(description: str) -> List[str]:
    urls = [CWE_TOP25_URL]
    if _OWASP_RE.search(description):
        urls.append(OWASP_TOP10_URL)
    for cwe_id in dict.fromkeys(_CWE_RE.findall(description)):
        if cwe_id in CWE_NAMES:
            urls.append(cwe_url(cwe_id))
    urls.append(NIST_CSF_URL)
    return urls
