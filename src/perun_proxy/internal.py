"""Internal data carried through the micro service pipeline."""
from __future__ import annotations

from typing import Optional
from collections import UserDict


class InternalData(UserDict):
    """
    The response released to the service provider: who the user is and
    which attributes (name -> list of values) are released about them.
    """

    def __init__(
        self,
        requester: Optional[str] = None,
        subject_id: Optional[str] = None,
        attributes: Optional[dict[str, list[str]]] = None,
    ):
        """
        :param requester: identifier of the requesting service provider
        :param subject_id: identifier of the user at the authenticating source
        :param attributes: released attributes
        """
        super().__init__()
        self.data["requester"] = requester
        self.data["subject_id"] = subject_id
        self.data["attributes"] = attributes if attributes is not None else {}

    def __setattr__(self, key, value):
        if key == "data":
            return super().__setattr__(key, value)
        self.data[key] = value

    def __getattr__(self, key):
        if key == "data":
            raise AttributeError(key)
        try:
            return self.data[key]
        except KeyError as e:
            msg = "'{type}' object has no attribute '{attr}'".format(type=type(self), attr=key)
            raise AttributeError(msg) from e

