import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

# psycopg2 ships a C extension; poetry's wheel cache can hand back a build for another interpreter
REBUILD_PER_PYTHON = ["psycopg2-binary"]

LAYERS = {
    "domain": "tests/bakery/domain/",
    "application": "tests/bakery/application/",
    "api": "tests/bakery/integration/",
    "bdd": "tests/bakery/bdd/",
}


def _prepare(session: nox.Session) -> None:
    session.run("poetry", "install", "--all-extras", external=True)
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *REBUILD_PER_PYTHON)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Whole suite; extra args go straight to pytest (e.g. ``-- -m 'not slow'``)."""
    _prepare(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
@nox.parametrize("layer", list(LAYERS))
def layer(session: nox.Session, layer: str) -> None:
    """One test layer: pricing and aggregates, commands, HTTP, or feature scenarios."""
    _prepare(session)
    session.run("pytest", LAYERS[layer], *session.posargs)
