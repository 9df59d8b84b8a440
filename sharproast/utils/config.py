import logging
from pathlib import Path, PurePosixPath
from typing import List, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .findings import Severity

logger = logging.getLogger(__name__)


class ScanPolicy(BaseModel):
    """Tunables for file selection and the heuristic detectors.

    Defaults are the hardened policy: build output and test-looking paths are
    skipped, and controllers are expected to carry [Authorize].
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    extensions: List[str] = Field(default_factory=lambda: [".cs"])
    exclude_dirs: List[str] = Field(default_factory=lambda: ["bin", "obj"])
    hardened: bool = True
    test_markers: List[str] = Field(default_factory=lambda: ["tests", "test"])
    infrastructure_markers: List[str] = Field(
        default_factory=lambda: ["Repository", "Service", "Infrastructure"]
    )
    controller_suffix: str = "Controller"
    critical_verbs: List[str] = Field(
        default_factory=lambda: ["delete", "remove", "admin", "configure", "reset", "change"]
    )
    sensitive_keywords: List[str] = Field(
        default_factory=lambda: ["password", "token", "secret", "key"]
    )
    authorization_severity: Severity = "medium"

    def is_test_dir(self, name: str) -> bool:
        """``tests``, ``Test`` or a ``*.Tests`` project directory."""
        lowered = name.lower()
        return any(lowered == m.lower() or lowered.endswith("." + m.lower()) for m in self.test_markers)

    def is_test_path(self, path: str) -> bool:
        # directory components only; file names such as LatestNewsController.cs never count
        dirs = PurePosixPath(path.replace("\\", "/")).parts[:-1]
        return any(self.is_test_dir(d) for d in dirs)

    def is_test_name(self, name: str) -> bool:
        lowered = name.lower()
        return any(m.lower() in lowered for m in self.test_markers)

    def is_infrastructure_path(self, path: str) -> bool:
        return any(m in path for m in self.infrastructure_markers)


def load_policy(path: Union[str, Path]) -> ScanPolicy:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    try:
        policy = ScanPolicy(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e

    logger.info("Loaded scan policy from %s", path)
    return policy
