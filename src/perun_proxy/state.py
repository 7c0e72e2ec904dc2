"""
Per-request state shared by the micro services of one authentication attempt.
"""
from collections import UserDict
from uuid import uuid4

_SESSION_ID_KEY = "SESSION_ID"


class State(UserDict):
    """
    A mutable bag of values scoped to one authentication attempt. Holds a
    generated session id used to correlate log lines.
    """

    def __init__(self, data=None):
        """
        :type data: dict[str, Any]
        :param data: initial content of the state
        """
        data = dict(data or {})
        data.setdefault(_SESSION_ID_KEY, uuid4().urn)
        super().__init__(data)

    @property
    def session_id(self):
        return self.data.get(_SESSION_ID_KEY)

