"""Pytest-wide fixtures and hooks for the site-config tests."""

from __future__ import annotations

import io
import os
from pathlib import Path

import pytest
from coverage import Coverage
from coverage.exceptions import CoverageException

# Set BEFORE any imports of site_config so settings load with defaults.
# Keep a developer's .env / shell from changing parser and loader defaults.
for key in [
    "SITE_CONFIG_DIR",
    "SITE_CONFIG_CHECK_WILDCARD_OVERLAP",
    "SITE_CONFIG_LOG_UNKNOWN_DIRECTIVES",
    "LOG_FORMAT_JSON",
]:
    os.environ.pop(key, None)

from site_config.models.domain_index import DomainIndex  # noqa: E402

pytest_plugins = [
    "tests.helpers.filesystem",
]


@pytest.fixture
def sample_index() -> DomainIndex:
    """Index with one key of every kind, shared by resolver/manager tests."""
    return DomainIndex(
        domains={"example.com", "test.com"},
        wildcards=(".example.org",),
        specific_subdomains={"blog.test.net"},
    )


@pytest.fixture
def rule_directory(filesystem_builder):
    """A small ftr-site-config style checkout on disk."""
    return filesystem_builder(
        {
            "example.com.txt": (
                "title: //h1\n"
                "body: //article\n"
                "prune: yes\n"
            ),
            "test.com.txt": "body: //div[@id='content']\n",
            ".example.org.txt": "author: //span[@class='byline']\n",
            "blog.test.net.txt": "date: //time\n",
            "global.txt": "strip: //nav\n",
            "LICENSE.txt": "MIT\n",
            "README.md": "# site configs\n",
        }
    )


# Module-level coverage thresholds expressed as percentages. The paths are
# relative to the project root (session.config.rootpath) so the check works
# both locally and in CI environments.

MODULE_COVERAGE_THRESHOLDS: dict[Path, float]

if os.environ.get("PYTEST_DISABLE_MODULE_THRESHOLDS") == "1":
    MODULE_COVERAGE_THRESHOLDS = {}
else:
    MODULE_COVERAGE_THRESHOLDS = {
        Path("site_config/pipeline/parser.py"): 90.0,
        Path("site_config/pipeline/resolver.py"): 90.0,
    }


def _resolve_threshold_paths(root: Path) -> dict[Path, float]:
    """Return absolute module paths mapped to their required coverage."""
    return {
        root / relative_path: threshold
        for relative_path, threshold in MODULE_COVERAGE_THRESHOLDS.items()
    }


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    """Fail the test session if any module falls below its coverage floor."""
    cov_plugin = session.config.pluginmanager.get_plugin("_cov")
    if cov_plugin is None:
        # Coverage collection was not requested (e.g. ``pytest --no-cov``).
        return

    cov_controller = getattr(cov_plugin, "cov_controller", None)
    cov: Coverage | None
    if cov_controller:
        cov = getattr(cov_controller, "cov", None)
    else:
        cov = None
    if cov is None:
        return

    try:
        cov.load()
    except CoverageException:
        return

    project_root = Path(session.config.rootpath).resolve()
    failures: list[str] = []

    for module_path, threshold in _resolve_threshold_paths(project_root).items():
        if not module_path.exists():
            failures.append(f"{module_path.relative_to(project_root)} missing on disk")
            continue

        buffer = io.StringIO()
        try:
            percent = cov.report(morfs=[str(module_path)], file=buffer)
        except CoverageException as exc:
            failures.append(
                f"{module_path.relative_to(project_root)} coverage unavailable: {exc}"
            )
            continue

        if percent < threshold:
            failures.append(
                f"{module_path.relative_to(project_root)} "
                f"{percent:.2f}% < {threshold:.2f}%"
            )

    if failures:
        reporter = session.config.pluginmanager.get_plugin("terminalreporter")
        if reporter is not None:
            reporter.write_line(
                "Module coverage thresholds not met:", red=True, bold=True
            )
            for message in failures:
                reporter.write_line(f"  {message}", red=True)
        session.exitstatus = pytest.ExitCode.TESTS_FAILED
