import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

# Packages with C extensions that must be rebuilt per Python version.
_C_EXT_PACKAGES = ["psycopg2"]


def _install(session: nox.Session, *extras: str) -> None:
    """Install the project with test extras into the nox virtualenv."""
    session.install("-e", f".[{','.join(('test',) + extras)}]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run core tests, against the memory store, across Python versions."""
    _install(session)
    session.run("pytest", "tests", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def sqlite(session: nox.Session) -> None:
    """Run the full suite, including store tests, against SQLite."""
    _install(session)
    session.run("pytest", "tests", "--db", "SQLITE", "--sqlite", "--slow", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def postgresql(session: nox.Session) -> None:
    """Run the full suite against a PostgreSQL server on localhost."""
    _install(session, "postgresql")
    # Force-rebuild C-extension packages so the .so matches this Python version.
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_C_EXT_PACKAGES)
    session.run(
        "pytest", "tests", "--db", "POSTGRESQL", "--postgresql", *session.posargs
    )
