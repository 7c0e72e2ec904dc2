from perun_proxy.state import State

IDENTITY_STATE_KEY = "identity"
PRINCIPAL_ID_KEY = "principal_id"


class Context(object):
    """
    Holds the state of the current authentication attempt
    """

    def __init__(self, state=None) -> None:
        self.state = state if state is not None else State()

    @property
    def principal_id(self):
        """
        Registry identifier of the authenticated user, as set by the
        identity resolution step, or None.
        """
        identity = self.state.get(IDENTITY_STATE_KEY) or {}
        return identity.get(PRINCIPAL_ID_KEY)

    @principal_id.setter
    def principal_id(self, principal_id):
        identity = self.state.setdefault(IDENTITY_STATE_KEY, {})
        identity[PRINCIPAL_ID_KEY] = principal_id

