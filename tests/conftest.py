"""
Shared fixtures for repoupdate tests.

``make_git`` builds a GitClient double that answers git argument lists
from a table, so no test ever runs the real git executable.
"""

from unittest.mock import MagicMock

import pytest

from repoupdate.infra.git_client import GitClient, CommandResult


def scripted_git(responses=None, default=None):
    """Create a mock GitClient whose run() looks up ``responses`` by args."""
    responses = {tuple(k.split()) if isinstance(k, str) else tuple(k): v
                 for k, v in (responses or {}).items()}
    fallback = default or CommandResult(returncode=0)

    client = MagicMock(spec=GitClient)

    def run(args, cwd=None):
        return responses.get(tuple(args), fallback)

    client.run.side_effect = run
    return client


def git_calls(client):
    """Argument lists passed to a scripted client, in call order."""
    return [list(c.args[0]) for c in client.run.call_args_list]


@pytest.fixture
def make_git():
    return scripted_git


@pytest.fixture
def calls():
    return git_calls
