from __future__ import annotations

import pytest

from tests.utils import StubTransport, make_response


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def stub_transport() -> StubTransport:
    return StubTransport()
