# Copyright (c) 2025 NASK. All rights reserved.

"""
This is the *txtconv*'s *[Invoke](https://www.pyinvoke.org/) tasks*
file. It defines a handful of *txtconv*-development-related *tasks*.

To make use of it, you need to install *txtconv* in the development
mode, e.g., by executing:

    cd txtconv  # <- your local *txtconv* source code directory
    python3.11 -m venv my-txtconv-venv
    source my-txtconv-venv/bin/activate
    pip install -e '.[dev,tests]'

Then you can list the available tasks by executing the command:

    inv --list

You can also learn more about particular tasks by executing:

    inv <task name> --help

See also:
  * https://docs.pyinvoke.org/en/stable/
"""

from __future__ import annotations

import contextlib
import importlib.metadata
import shlex
import sys
from collections.abc import (
    Callable,
    Generator,
)
from pathlib import (
    PosixPath,
    PurePosixPath,
)
from typing import NoReturn

from invoke import (
    Context,
    Exit,
    task,
)


#
# Auxiliary constants
#


DISTRIBUTION_NAME = 'txtconv'
PACKAGE_DIRNAME = 'txtconv'

PYTEST_DOCTEST_OPT = '--doctest-modules'


#
# Actual task definitions
#


@task
def delete_pycs(
    c: Context,
) -> None:
    """
    Delete all cached Python bytecode (`*.pyc`) files

    (more precisely: all `*.pyc` files being ordinary files as well as
    all `__pycache__` directories, in your local *txtconv*'s source code
    top-level directory and, recursively, in all its subdirectories;
    if a directory cannot be traversed or a file/directory cannot be
    deleted, only a warning is printed by the underlying 'find' command,
    but the entire task is still considered successful).
    """
    with _top_dir_as_cwd(c) as top_dir:
        _intent(
            f"delete any cached Python bytecode "
            f"stuff beneath {str(top_dir)!a}",
        )

        c.run(
            "( find . -type f -name '*.pyc' -delete"
            "; find . -type d -name '__pycache__' -delete"
            "; true )",
        )

        _success(
            c,
            (
                "deleted local `**/*.pyc` files and `**/__pycache__` "
                "directories (if any deletable ones existed)"
            ),
        )


@task(
    pre=[delete_pycs],
    aliases=['test', 'tests'],
    help={
        'doctests': (
            f"Shall also doctests be run, i.e., shall the "
            f"`{PYTEST_DOCTEST_OPT}` option be passed to "
            f"'pytest'? (default: yes)"
        ),
        'pytest_args': (
            "Any extra command-line arguments to 'pytest' "
            "(typically, they need to be quoted as a whole, "
            "to form a single STRING)."
        ),
    },
)
def pytest(
    c: Context,
    doctests: bool = True,
    pytest_args: str = '',
) -> None:
    """
    Run tests for the currently installed *txtconv* package, using *pytest*

    (in the currently used Python environment; optionally, with additional
    *pytest* command-line arguments, if you specify `--pytest-args`...).

    Both unit tests and doctests are run (unless `--no-doctests` is
    specified).

    Note: before the start of this task, the 'delete-pycs' task is invoked
    automatically.
    """
    quo = _make_commandline_arg_quoter(c)

    with _top_dir_as_cwd(c):
        if not _is_txtconv_installed():
            _error(
                f"the {DISTRIBUTION_NAME!a} distribution is not installed "
                f"(try: pip install -e '.[dev,tests]')",
            )

        _intent("test the *txtconv* package (using *pytest*)")

        all_pytest_args = []
        if doctests:
            all_pytest_args.append(PYTEST_DOCTEST_OPT)
        if pytest_args:
            all_pytest_args.extend(_split_commandline_args(c, pytest_args))
        all_pytest_args.append(PACKAGE_DIRNAME)

        all_pytest_args_part = ' '.join(map(quo, all_pytest_args))
        c.run(
            (
                f"{quo(_python_exe_path())}"
                f" -m pytest"
                f" {all_pytest_args_part}"
            ),
            pty=True,
        )

        _success(
            c,
            f"successfully ran tests (using *pytest*) for: {PACKAGE_DIRNAME!a}",
        )


#
# Internal helpers
#


@contextlib.contextmanager
def _top_dir_as_cwd(c: Context) -> Generator[PosixPath]:
    top_dir = _get_top_dir()
    with (
        contextlib.chdir(top_dir),
        c.cd(top_dir),
    ):
        yield top_dir


def _get_top_dir() -> PosixPath:
    top_dir = PosixPath(__file__).parent.resolve(strict=True)
    assert top_dir.is_absolute()
    return top_dir


def _intent(intended_operation_description: str) -> None:
    print(f"About to {intended_operation_description}...")
    sys.stdout.flush()


def _success(
    c: Context,
    successful_operation_description: str,
) -> None:
    print(f"OK, {successful_operation_description}.")
    if c.config.run.dry:
        print("(Well, actually not, because it is a *dry* run...)")
    sys.stdout.flush()


def _error(
    error_msg: str,
    *,
    code: int = 1,
) -> NoReturn:
    raise Exit(f"ERROR! {error_msg}", code=code)


def _make_commandline_arg_quoter(
    c: Context,
) -> Callable[[str | PurePosixPath], str]:
    _verify_invoke_uses_bash(c)

    def quo(obj: str | PurePosixPath) -> str:
        # Sanitize a text or a path (to be placed, as a single command-line
        # argument, within a command which will be run using `c.run()`).
        return shlex.quote(str(obj))

    return quo


def _split_commandline_args(
    c: Context,
    commandline_args: str,
) -> list[str]:
    _verify_invoke_uses_bash(c)

    assert isinstance(commandline_args, str), 'cmd-line args must be given as one string'
    if commandline_args:
        return shlex.split(str(commandline_args))
    return []


def _verify_invoke_uses_bash(c: Context) -> None:
    bin_bash = '/bin/bash'
    used_by_invoke = c.config.run.shell
    if used_by_invoke != bin_bash:
        _error(
            f"For the safety of shell syntax manipulation, we insist "
            f"that *invoke* itself uses the {bin_bash!a} shell! "
            f"(whereas actually it seems to use {used_by_invoke!a})",
        )


def _python_exe_path() -> PosixPath:
    python_exe_path = PosixPath(sys.executable)
    assert python_exe_path.is_absolute()
    return python_exe_path


def _is_txtconv_installed() -> bool:
    try:
        importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        return False
    return True
