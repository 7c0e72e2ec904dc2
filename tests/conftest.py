import pytest

from perun_proxy.context import Context
from perun_proxy.internal import InternalData
from perun_proxy.state import State

BASE_URL = "https://test-proxy.com"
RPC_URL = "https://perun.example.com/ba/rpc/"


@pytest.fixture
def context():
    context = Context()
    context.state = State()
    return context


@pytest.fixture
def internal_response():
    return InternalData(requester="https://sp.example.com", subject_id="user1")


@pytest.fixture
def rpc_url():
    return RPC_URL


@pytest.fixture
def perun_attribute():
    """
    Factory for attribute objects as returned by attributesManager/getAttributes
    """
    def _perun_attribute(namespace, friendly_name, value, attr_type="java.lang.String"):
        return {
            "id": 1,
            "namespace": namespace,
            "friendlyName": friendly_name,
            "type": attr_type,
            "value": value,
        }
    return _perun_attribute
