"""Property-based tests for the declared package metadata.

Every third-party import in the package must be declared in pyproject.toml
with a version constraint, in PEP 508 form.
"""

import ast
import re
import sys
from pathlib import Path

import tomli
from hypothesis import given
from hypothesis import strategies as st
from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

ROOT = Path(__file__).parent.parent.parent
PACKAGE_DIR = ROOT / "network_rollout"

# Import names that differ from the distribution name on the index
IMPORT_TO_DISTRIBUTION = {"yaml": "PyYAML"}


def load_pyproject_toml():
    """Load the pyproject.toml file."""
    with open(ROOT / "pyproject.toml", "rb") as f:
        return tomli.load(f)


def parse_requirement(dep: str) -> Requirement | None:
    """Parse a dependency string, returning None if it is not valid PEP 508."""
    try:
        return Requirement(dep)
    except InvalidRequirement:
        return None


def third_party_imports() -> set[str]:
    """Top-level modules imported by the package that are not stdlib or local."""
    modules = set()
    for path in PACKAGE_DIR.rglob("*.py"):
        tree = ast.parse(path.read_text())
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                modules.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                modules.add(node.module.split(".")[0])
    return {
        m for m in modules if m not in sys.stdlib_module_names and m != PACKAGE_DIR.name
    }


def test_dependencies_are_valid_requirements():
    """Main and optional dependencies are valid PEP 508 strings."""
    project = load_pyproject_toml()["project"]

    assert project["dependencies"], "Project should have dependencies defined"
    for dep in project["dependencies"]:
        assert parse_requirement(dep) is not None, f"Dependency '{dep}' is not valid PEP 508"

    for group_name, group_deps in project.get("optional-dependencies", {}).items():
        for dep in group_deps:
            assert parse_requirement(dep) is not None, (
                f"Optional dependency '{dep}' in group '{group_name}' is not valid PEP 508"
            )


def test_dependencies_are_constrained():
    """Every runtime dependency carries a version constraint."""
    for dep in load_pyproject_toml()["project"]["dependencies"]:
        assert parse_requirement(dep).specifier, (
            f"Dependency '{dep}' should have a version constraint (e.g. '{dep}>=1.0.0')"
        )


def test_every_import_is_declared():
    """Each third-party module the package imports is a declared dependency."""
    declared = {
        canonicalize_name(Requirement(dep).name)
        for dep in load_pyproject_toml()["project"]["dependencies"]
    }

    for module in third_party_imports():
        distribution = IMPORT_TO_DISTRIBUTION.get(module, module)
        assert canonicalize_name(distribution) in declared, (
            f"Module '{module}' is imported but '{distribution}' is not declared"
        )


def test_pyproject_toml_has_required_sections():
    """pyproject.toml defines the build system, project metadata and entry point."""
    pyproject = load_pyproject_toml()

    assert "requires" in pyproject["build-system"]
    assert "build-backend" in pyproject["build-system"]
    for field in ("name", "version", "dependencies"):
        assert field in pyproject["project"], f"[project] must have '{field}' field"
    assert pyproject["project"]["scripts"]["network-rollout"] == "network_rollout.cli:app"


@given(
    package_name=st.from_regex(r"[a-zA-Z0-9]([a-zA-Z0-9._-]*[a-zA-Z0-9])?", fullmatch=True).filter(
        lambda x: x.isascii()
    ),
    version=st.from_regex(r"[0-9]+\.[0-9]+\.[0-9]+", fullmatch=True).filter(lambda x: x.isascii()),
    operator=st.sampled_from([">=", "==", "~=", ">", "<", "!="]),
)
def test_valid_dependency_formats_accepted(package_name, version, operator):
    """Any well-formed name, operator and version combine into a valid requirement."""
    req = parse_requirement(f"{package_name}{operator}{version}")

    assert req is not None
    assert re.sub(r"[-_.]+", "-", req.name).lower() == canonicalize_name(package_name)


@given(
    invalid_dep=st.sampled_from(
        ["", "   ", "-invalid", "invalid-", "invalid package", "package>=", ">=1.0.0"]
    )
)
def test_invalid_dependency_formats_rejected(invalid_dep):
    """Malformed dependency strings are rejected."""
    assert parse_requirement(invalid_dep) is None
