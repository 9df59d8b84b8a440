import json
import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

TOOL_NAME = "sharproast"

try:
    TOOL_VERSION = version(TOOL_NAME)
except PackageNotFoundError:
    # running from a source checkout
    TOOL_VERSION = "1.0.0"


def write_json(payload: dict, path: Union[str, Path], label: str) -> bool:
    """Write ``payload`` as UTF-8 JSON. Returns False (and logs) on any I/O failure."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        logger.error("Failed to write %s report to %s: %s", label, path, e)
        return False
    logger.info("Wrote %s report to %s", label, path)
    return True
