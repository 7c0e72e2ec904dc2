"""
Micro service for perun_proxy
"""
import logging
from typing import Any, Callable, Optional

import perun_proxy.context
import perun_proxy.internal

logger = logging.getLogger(__name__)


ProcessReturnType = Any
MicroServiceCallSignature = Callable[[perun_proxy.context.Context, perun_proxy.internal.InternalData], ProcessReturnType]


class MicroService(object):
    """
    Abstract class for micro services
    """

    def __init__(self, name: str, base_url: str, **kwargs: Any):
        self.name = name
        self.base_url = base_url
        self.next: Optional[MicroServiceCallSignature] = None

    def process(self, context: perun_proxy.context.Context, data: perun_proxy.internal.InternalData) -> ProcessReturnType:
        """
        This is where the micro service should modify the response.
        Subclasses must call this method (or in another way make sure the `next`
        callable is called).

        :param context: The current context
        :param data: Data to be modified
        :return: whatever the rest of the pipeline returns
        """
        return self.next(context, data)


class ResponseMicroService(MicroService):
    """
    Base class for response micro services
    """

    pass
