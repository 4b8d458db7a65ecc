#!/usr/bin/env python3
"""Local task runner: ``python dev_tasks.py <clean|format|lint|test|build>``."""

import shutil
import subprocess
import sys
from pathlib import Path

SOURCES = ["graftql", "tests"]


def run(*args):
    print("$", " ".join(args))
    return subprocess.run(args).returncode == 0


def clean():
    for path in ["build", "dist", ".pytest_cache", ".mypy_cache", "htmlcov"]:
        shutil.rmtree(path, ignore_errors=True)
    for path in Path(".").glob("*.egg-info"):
        shutil.rmtree(path, ignore_errors=True)
    for path in Path(".").rglob("__pycache__"):
        shutil.rmtree(path, ignore_errors=True)


def format_code():
    return run("black", *SOURCES) and run("isort", *SOURCES)


def lint():
    # Run both so one report does not hide the other
    typed = run("mypy", "graftql")
    styled = run("flake8", *SOURCES)
    return typed and styled


def test():
    return run(sys.executable, "-m", "pytest", "--cov=graftql", "--cov-report=term-missing")


def build():
    clean()
    return run(sys.executable, "-m", "build")


TASKS = {
    "clean": clean,
    "format": format_code,
    "lint": lint,
    "test": test,
    "build": build,
}


def main(argv):
    if len(argv) != 2 or argv[1] not in TASKS:
        print(__doc__.strip())
        return 2
    return 0 if TASKS[argv[1]]() is not False else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
