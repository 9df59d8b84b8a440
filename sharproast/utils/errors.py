class SharpRoastError(Exception):
    """Base class for errors that abort a scan run."""


class InvalidTargetError(SharpRoastError):
    def __init__(self, path):
        super().__init__(f"Invalid path: {path}")
        self.path = path


class ConfigError(SharpRoastError):
    pass
