import pytest

from sharproast.utils.config import ScanPolicy
from sharproast.utils.errors import InvalidTargetError, SharpRoastError
from sharproast.utils.files import select_files


def _rel(files, root):
    return [f.relative_to(root).as_posix() for f in files]


class TestSelectFiles:

    def test_hardened_policy(self, project):
        files = select_files(project, ScanPolicy())
        assert _rel(files, project) == ["src/Controllers/UsersController.cs", "src/Greeter.cs"]

    def test_include_tests(self, project):
        files = select_files(project, ScanPolicy(hardened=False))
        assert _rel(files, project) == [
            "src/Controllers/UsersController.cs",
            "src/Greeter.cs",
            "tests/UsersControllerTests.cs",
        ]

    def test_extra_exclusions(self, project):
        files = select_files(project, ScanPolicy(exclude_dirs=["bin", "obj", "Controllers"]))
        assert _rel(files, project) == ["src/Greeter.cs"]

    def test_single_file_target(self, project):
        target = project / "src" / "Greeter.cs"
        assert select_files(target, ScanPolicy()) == [target]

    def test_file_with_wrong_extension(self, project):
        with pytest.raises(InvalidTargetError):
            select_files(project / "README.md", ScanPolicy())

    def test_missing_target(self, tmp_path):
        with pytest.raises(InvalidTargetError) as exc:
            select_files(tmp_path / "nope", ScanPolicy())
        assert isinstance(exc.value, SharpRoastError)
        assert str(exc.value) == f"Invalid path: {tmp_path / 'nope'}"

    def test_test_like_file_names_are_selected(self, tmp_path):
        root = tmp_path / "app"
        (root / "Controllers").mkdir(parents=True)
        (root / "Api.Tests").mkdir()
        (root / "Controllers" / "LatestNewsController.cs").write_text('var token = "abc123";\n')
        (root / "Controllers" / "AttestationService.cs").write_text("class AttestationService {}\n")
        (root / "Api.Tests" / "NewsTests.cs").write_text("class NewsTests {}\n")
        assert _rel(select_files(root, ScanPolicy()), root) == [
            "Controllers/AttestationService.cs",
            "Controllers/LatestNewsController.cs",
        ]

    def test_location_of_tree_does_not_exclude(self, tmp_path):
        root = tmp_path / "tests" / "app"
        root.mkdir(parents=True)
        (root / "A.cs").write_text("class A {}")
        assert _rel(select_files(root, ScanPolicy()), root) == ["A.cs"]
