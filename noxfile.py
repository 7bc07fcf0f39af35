"""Nox automation configuration for Bluefruit AT.

Provides automated testing, linting, formatting, and build tasks.
"""

import nox

nox.options.sessions = ["lint", "tests"]
nox.options.reuse_existing_virtualenvs = True


@nox.session(python=["3.8", "3.9", "3.10", "3.11", "3.12"])
def tests(session):
    """Run the test suite."""
    session.install("-e", ".[dev]")
    session.run("pytest", *session.posargs)


@nox.session(python="3.10")
def tests_unit(session):
    """Run unit tests only."""
    session.install("-e", ".[dev]")
    session.run("pytest", "tests/unit", "-v", *session.posargs)


@nox.session(python="3.10")
def tests_integration(session):
    """Run integration tests only."""
    session.install("-e", ".[dev]")
    session.run("pytest", "tests/integration", "-v", *session.posargs)


@nox.session(python="3.10")
def tests_engine(session):
    """Run request engine and wire codec tests only."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "tests/unit/test_request_engine.py",
        "tests/unit/test_terminator.py",
        "tests/unit/test_wire_codec.py",
        "-v",
        *session.posargs
    )


@nox.session(python="3.10")
def coverage(session):
    """Run tests with coverage reporting."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "--cov=bluefruit_at",
        "--cov-report=term-missing",
        "--cov-report=html",
        "--cov-report=xml",
        *session.posargs
    )


@nox.session(python="3.10")
def lint(session):
    """Run linters (flake8 and mypy)."""
    session.install("-e", ".[dev]")
    session.run("flake8", "--max-line-length=120", "bluefruit_at", "tests")
    session.run("mypy", "bluefruit_at", "--ignore-missing-imports")


@nox.session(python="3.10")
def format(session):
    """Format code with black."""
    session.install("black")
    session.run("black", "bluefruit_at", "tests", "main.py", "noxfile.py")


@nox.session(python="3.10")
def build(session):
    """Build distribution packages."""
    session.install("build", "twine")
    session.run("python", "-m", "build")
    session.run("twine", "check", "dist/*")


@nox.session(python="3.10")
def ci(session):
    """Run full CI pipeline (tests + coverage + lint)."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "--cov=bluefruit_at",
        "--cov-report=term-missing",
        "--cov-report=xml",
        "--cov-fail-under=80",
        "-v"
    )
    session.run("flake8", "--max-line-length=120", "bluefruit_at", "tests")
    session.run("mypy", "bluefruit_at", "--ignore-missing-imports")
