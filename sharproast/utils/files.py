import logging
from pathlib import Path
from typing import List, Union

from .config import ScanPolicy
from .errors import InvalidTargetError

logger = logging.getLogger(__name__)


def _has_extension(path: Path, policy: ScanPolicy) -> bool:
    return path.suffix.lower() in {e.lower() for e in policy.extensions}


def _is_excluded(relative: Path, policy: ScanPolicy) -> bool:
    dirs = relative.parts[:-1]
    if {d.lower() for d in dirs} & {d.lower() for d in policy.exclude_dirs}:
        return True
    # hardened policy skips test trees
    if policy.hardened and any(policy.is_test_dir(d) for d in dirs):
        return True
    return False


def select_files(target: Union[str, Path], policy: ScanPolicy) -> List[Path]:
    """Return the source files to scan under ``target``, sorted.

    Exclusions are evaluated on the path relative to ``target`` so the location
    of the tree itself never filters anything out.
    """
    root = Path(target)
    if root.is_file():
        if not _has_extension(root, policy):
            raise InvalidTargetError(target)
        return [root]
    if not root.is_dir():
        raise InvalidTargetError(target)

    files: List[Path] = []
    skipped = 0
    for p in sorted(root.rglob("*")):
        if not p.is_file() or not _has_extension(p, policy):
            continue
        if _is_excluded(p.relative_to(root), policy):
            skipped += 1
            continue
        files.append(p)
    logger.info("Selected %d files under %s (%d excluded)", len(files), root, skipped)
    return files
