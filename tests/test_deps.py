"""Tests for workspace_version_tools.deps."""

from __future__ import annotations

from pathlib import Path

from workspace_version_tools.deps import dep_canonical_name, pin_dep, rewrite_pyproject


class TestDepCanonicalName:
    def test_simple_name(self) -> None:
        assert dep_canonical_name("requests") == "requests"

    def test_with_version_spec(self) -> None:
        assert dep_canonical_name("requests>=2.0") == "requests"

    def test_with_extras(self) -> None:
        assert dep_canonical_name("requests[security]>=2.0") == "requests"

    def test_normalizes_underscores(self) -> None:
        assert dep_canonical_name("my_package>=1.0") == "my-package"

    def test_normalizes_case(self) -> None:
        assert dep_canonical_name("MyPackage>=1.0") == "mypackage"


class TestPinDep:
    def test_simple_dep(self) -> None:
        assert pin_dep("requests", "2.31.0") == "requests==2.31.0"

    def test_dep_with_existing_version_bound(self) -> None:
        assert pin_dep("requests>=2.0,<3.0", "2.31.0") == "requests==2.31.0"

    def test_preserves_multiple_extras_sorted(self) -> None:
        assert pin_dep("pkg[z,a,m]>=1.0", "3.0.0") == "pkg[a,m,z]==3.0.0"

    def test_preserves_marker(self) -> None:
        result = pin_dep('core>=1.0; python_version >= "3.11"', "2.0.0")
        assert result == 'core==2.0.0; python_version >= "3.11"'

    def test_prerelease_version(self) -> None:
        assert pin_dep("core>=1.0", "3.0.0-alpha") == "core==3.0.0-alpha"


class TestRewritePyproject:
    def test_updates_version(self, tmp_pyproject: Path) -> None:
        rewrite_pyproject(tmp_pyproject, "2.0.0", {})
        assert 'version = "2.0.0"' in tmp_pyproject.read_text()

    def test_version_untouched_when_none(self, tmp_pyproject: Path) -> None:
        rewrite_pyproject(tmp_pyproject, None, {"internal-dep": "1.5.0"})
        content = tmp_pyproject.read_text()
        assert 'version = "1.0.0"' in content
        assert "internal-dep==1.5.0" in content

    def test_pins_optional_deps(self, tmp_pyproject: Path) -> None:
        rewrite_pyproject(tmp_pyproject, None, {"another-internal": "0.8.0"})
        assert "another-internal==0.8.0" in tmp_pyproject.read_text()

    def test_pins_dependency_groups(self, tmp_pyproject: Path) -> None:
        rewrite_pyproject(tmp_pyproject, None, {"group-internal": "0.2.0"})
        assert "group-internal==0.2.0" in tmp_pyproject.read_text()

    def test_preserves_external_deps(self, tmp_pyproject: Path) -> None:
        rewrite_pyproject(tmp_pyproject, "2.0.0", {"internal-dep": "1.5.0"})
        content = tmp_pyproject.read_text()
        assert '"requests>=2.0"' in content
        assert '"click>=8.0"' in content

    def test_skips_include_group_tables(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            '[project]\nname = "x"\nversion = "1.0.0"\n\n'
            "[dependency-groups]\n"
            'lint = ["ruff"]\n'
            'dev = [{include-group = "lint"}, "core>=1.0"]\n'
        )
        rewrite_pyproject(pyproject, None, {"core": "1.1.0"})
        content = pyproject.read_text()
        assert "core==1.1.0" in content
        assert 'include-group = "lint"' in content
