"""Scan orchestration: select files, run every rule on each, collect findings.

Per-file work is independent, so it may fan out over a thread pool; results are
merged into the collector in file order only after all files are done, which
keeps the finding list identical to a sequential run.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .scanners.auth import (scan_authentication, scan_controller_authorization, scan_critical_functions,
                            scan_csrf, scan_privilege_management)
from .scanners.crypto import scan_deserialization, scan_weak_cryptography, scan_xml_external_entities
from .scanners.exposure import (scan_credential_protection, scan_error_handling, scan_information_exposure,
                                scan_logging, scan_misconfiguration)
from .scanners.hygiene import (scan_bounds_checking, scan_file_operations, scan_null_reference,
                               scan_resource_management)
from .scanners.injection import scan_command_injection, scan_input_validation, scan_sql_injection
from .scanners.secrets import scan_secrets
from .scanners.shared import FileContext
from .utils.config import ScanPolicy
from .utils.csharp import parse_source
from .utils.files import select_files
from .utils.findings import Finding, FindingCollector

logger = logging.getLogger(__name__)

STRUCTURAL_RULES = (
    scan_sql_injection,
    scan_controller_authorization,
    scan_input_validation,
    scan_error_handling,
    scan_logging,
    scan_resource_management,
    scan_csrf,
    scan_weak_cryptography,
    scan_misconfiguration,
    scan_information_exposure,
    scan_authentication,
    scan_file_operations,
    scan_bounds_checking,
    scan_credential_protection,
    scan_xml_external_entities,
    scan_command_injection,
    scan_critical_functions,
    scan_deserialization,
    scan_privilege_management,
    scan_null_reference,
)


class ScanResult:
    """One scan run: its findings plus the bookkeeping the reports need."""

    def __init__(self, target: Union[str, Path]):
        self.target = str(target)
        self.findings = FindingCollector()
        self.files: List[str] = []
        self.errors: List[Dict[str, str]] = []
        self.started = datetime.now(timezone.utc)
        self.finished: Optional[datetime] = None

    def add_error(self, file_path: str, error: str) -> None:
        self.errors.append({"file": file_path, "error": error})

    def finish(self) -> "ScanResult":
        self.finished = datetime.now(timezone.utc)
        return self

    @property
    def duration(self) -> float:
        end = self.finished or datetime.now(timezone.utc)
        return (end - self.started).total_seconds()

    @property
    def files_scanned(self) -> int:
        return len(self.files) - len(self.errors)


def scan_file(path: Union[str, Path], policy: ScanPolicy, rel_path: Optional[str] = None,
              parser=None) -> List[Finding]:
    path = Path(path)
    display = str(path)
    logger.debug("Scanning %s", display)
    source = path.read_text(encoding="utf-8-sig")

    findings = scan_secrets(display, source)
    tree = parse_source(source, parser, display)
    ctx = FileContext(display, rel_path or path.name, source, tree.root_node, policy)
    for rule in STRUCTURAL_RULES:
        findings.extend(rule(ctx))
    return findings


def _scan_isolated(path: Path, root: Path, policy: ScanPolicy) -> Tuple[List[Finding], Optional[str]]:
    rel = path.relative_to(root).as_posix() if root.is_dir() else path.name
    try:
        return scan_file(path, policy, rel), None
    except (OSError, ValueError) as e:
        logger.warning("Could not scan %s: %s", path, e)
        return [], str(e)


def scan_path(target: Union[str, Path], policy: Optional[ScanPolicy] = None,
              workers: int = 1) -> ScanResult:
    """Scan a file or directory. Raises InvalidTargetError before any work is done."""
    policy = policy or ScanPolicy()
    root = Path(target)
    files = select_files(root, policy)

    result = ScanResult(target)
    result.files = [str(f) for f in files]
    logger.info("Scanning %d files with %d worker(s)", len(files), workers)

    if workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(lambda f: _scan_isolated(f, root, policy), files))
    else:
        outcomes = [_scan_isolated(f, root, policy) for f in files]

    for path, (findings, error) in zip(files, outcomes):
        if error is not None:
            result.add_error(str(path), error)
        else:
            result.findings.extend(findings)

    logger.info("Scan finished: %d findings, %d files failed", len(result.findings), len(result.errors))
    return result.finish()
