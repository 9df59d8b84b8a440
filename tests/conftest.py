"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from sharproast.scanners.shared import FileContext
from sharproast.utils.config import ScanPolicy
from sharproast.utils.csharp import parse_source

VULNERABLE_CONTROLLER = '''using Microsoft.AspNetCore.Mvc;

public class UsersController : ControllerBase
{
    private const string ApiKey = "live-1234";

    [HttpGet]
    public IActionResult Get(string name)
    {
        var query = "SELECT * FROM Users WHERE name = '" + name + "'";
        return Ok(query);
    }
}
'''

CLEAN_CLASS = '''public class Greeter
{
    public string Hello()
    {
        return "hi";
    }
}
'''


def _make_context(source, path="Sample.cs", rel_path=None, policy=None):
    tree = parse_source(source)
    return FileContext(path, rel_path or path, source, tree.root_node, policy or ScanPolicy())


@pytest.fixture
def make_context():
    """Parse C# text into a FileContext the detectors accept."""
    return _make_context


def _write(root: Path, rel: str, content: str) -> Path:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p


@pytest.fixture
def project(tmp_path):
    """A small source tree with build output and a test project mixed in."""
    root = tmp_path / "app"
    _write(root, "src/Controllers/UsersController.cs", VULNERABLE_CONTROLLER)
    _write(root, "src/Greeter.cs", CLEAN_CLASS)
    _write(root, "bin/Debug/Generated.cs", 'var password = "hunter2";\n')
    _write(root, "obj/Temp.cs", 'var secret = "s3cr3t";\n')
    _write(root, "tests/UsersControllerTests.cs", 'var token = "fixture-token";\n')
    _write(root, "README.md", 'password = "not code"\n')
    return root


@pytest.fixture
def clean_project(tmp_path):
    root = tmp_path / "clean"
    _write(root, "src/Greeter.cs", CLEAN_CLASS)
    return root
