import copy
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from directadmin.context import Context
from directadmin.objects import AccountType


class RecordingConnection:
    """Stands in for Connection; answers from a canned response table."""

    def __init__(self, username, responses=None, calls=None):
        self.username = username
        self.responses = responses if responses is not None else {}
        self.calls = calls if calls is not None else []

    def invoke_get(self, command, params=None):
        return self._respond("GET", command, params)

    def invoke_post(self, command, params=None):
        return self._respond("POST", command, params)

    def login_as(self, username):
        return RecordingConnection(username, self.responses, self.calls)

    def calls_to(self, command, method=None):
        return [
            call for call in self.calls
            if call[2] == command and (method is None or call[0] == method)
        ]

    def _respond(self, method, command, params):
        params = dict(params or {})
        self.calls.append((method, self.username, command, params))
        response = self.responses.get((self.username, command), self.responses.get(command, {}))
        if callable(response):
            response = response(params)
        return copy.deepcopy(response)


def make_context(username, privilege, responses=None):
    connection = RecordingConnection(username, responses)
    return Context(connection, privilege), connection


@pytest.fixture
def admin():
    return make_context("admin", AccountType.ADMIN)


@pytest.fixture
def reseller():
    return make_context("reseller", AccountType.RESELLER)


@pytest.fixture
def user():
    return make_context("bob", AccountType.USER)
