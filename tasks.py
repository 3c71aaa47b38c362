"""Invoke tasks for testing, linting, and formatting.

Run tasks with: invoke TASK_NAME

Test Examples:
    invoke test              # Run all tests
    invoke test.unit        # Run unit tests only
    invoke test.integration # Run tests against the in-process registry
    invoke test.coverage    # Generate HTML coverage report
    invoke test.debug       # Run with debugger on failure

Linting Examples:
    invoke lint.flake8      # Check code style with flake8
    invoke lint.black       # Format code with black
    invoke lint.black-check # Check if code needs formatting
"""

from invoke import Collection, task


@task(help={"verbose": "Show verbose output"})
def test(ctx, verbose=False):
    """Run all tests."""
    cmd = "uv run pytest"
    if verbose:
        cmd += " -v"
    ctx.run(cmd)


@task
def unit(ctx):
    """Run unit tests only."""
    ctx.run("uv run pytest -m unit")


@task
def integration(ctx):
    """Run integration tests only (local TCP and unix socket servers)."""
    ctx.run("uv run pytest -m integration")


@task
def skip_integration(ctx):
    """Run tests that do not open sockets."""
    ctx.run('uv run pytest -m "not integration"')


@task(help={"file": "Specific test file to run", "name": "Test name or pattern"})
def specific(ctx, file=None, name=None):
    """Run specific test file, class, or function.

    Examples:
        invoke test.specific --file tests/unit/test_client.py
        invoke test.specific --file tests/unit/test_client.py --name TestStreamRequest
        invoke test.specific --name test_list_tags
    """
    if not file and not name:
        print("Error: Please specify --file and/or --name")
        return

    cmd = "uv run pytest"
    if file:
        cmd += f" {file}"
    if name:
        cmd += f"::{name}" if file else f" -k {name}"

    ctx.run(cmd)


# Coverage tasks
@task
def coverage_html(ctx):
    """Generate HTML coverage report in htmlcov/ directory."""
    ctx.run("uv run pytest --cov=regclient --cov-report=html")
    print("\nCoverage report generated in htmlcov/index.html")


@task
def coverage_term(ctx):
    """Display coverage report in terminal with missing lines."""
    ctx.run("uv run pytest --cov=regclient --cov-report=term-missing")


@task
def coverage(ctx):
    """Generate HTML, terminal, and XML coverage reports."""
    ctx.run(
        "uv run pytest --cov=regclient --cov-report=html "
        "--cov-report=term-missing --cov-report=xml"
    )


@task
def ci(ctx):
    """Run all tests as if in CI (with XML coverage)."""
    ctx.run("uv run pytest --cov=regclient --cov-report=xml")


# Debug tasks
@task
def debug(ctx):
    """Run tests with debugger (pdb) on failure."""
    ctx.run("uv run pytest --pdb")


@task
def stop_first_failure(ctx):
    """Stop at first test failure."""
    ctx.run("uv run pytest -x")


@task(help={"pattern": "Test name or pattern to filter"})
def debug_logs(ctx, pattern=None):
    """Run tests with debug-level logging, optionally filtered.

    Example:
        invoke test.debug-logs --pattern test_unix
    """
    cmd = "uv run pytest --log-cli-level=DEBUG"
    if pattern:
        cmd += f" -k {pattern}"
    ctx.run(cmd)


# Linting tasks
@task(help={"src": "Path to check (default: regclient)"})
def flake8(ctx, src="regclient"):
    """Run flake8 style checker.

    Example:
        invoke lint.flake8
        invoke lint.flake8 --src regclient/registry
    """
    ctx.run(f"uv run flake8 {src}")


@task(help={"check": "Check only, don't modify files"})
def black(ctx, check=False):
    """Format code with black."""
    cmd = "uv run black regclient tests tasks.py"
    if check:
        cmd += " --check"
    ctx.run(cmd)


@task
def black_check(ctx):
    """Check if code needs black formatting."""
    ctx.run("uv run black regclient tests tasks.py --check")


# Namespace for tests
test_ns = Collection("test")
test_ns.add_task(test, default=True)
test_ns.add_task(unit)
test_ns.add_task(integration)
test_ns.add_task(skip_integration)
test_ns.add_task(specific)
test_ns.add_task(coverage_html)
test_ns.add_task(coverage_term)
test_ns.add_task(coverage)
test_ns.add_task(ci)
test_ns.add_task(debug)
test_ns.add_task(stop_first_failure)
test_ns.add_task(debug_logs)

# Namespace for linting
lint_ns = Collection("lint")
lint_ns.add_task(flake8)
lint_ns.add_task(black)
lint_ns.add_task(black_check)

ns = Collection(test_ns, lint_ns)
