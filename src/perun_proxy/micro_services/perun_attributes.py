"""
Micro service releasing user attributes fetched from the registry.
"""
import logging

import perun_proxy.logging_util as lu
from perun_proxy.adapter import RPC
from perun_proxy.adapter import adapter_from_config
from perun_proxy.exception import InvalidConfigurationError
from perun_proxy.exception import MissingPrincipalError
from perun_proxy.values import normalize

from .base import ResponseMicroService

logger = logging.getLogger(__name__)


def canonical_attribute_map(attr_map):
    """
    Turn a configured attribute map into its canonical form, where every
    registry attribute maps to a tuple of destination attribute names.

    :type attr_map: dict[str, str | list[str]]
    :rtype: dict[str, tuple[str, ...]]
    """
    if not isinstance(attr_map, dict) or not attr_map:
        raise InvalidConfigurationError("'attrMap' must be a non-empty mapping")

    canonical = {}
    for perun_attr, destinations in attr_map.items():
        if isinstance(destinations, str):
            destinations = (destinations,)
        elif isinstance(destinations, (list, tuple)) and all(isinstance(d, str) for d in destinations):
            destinations = tuple(destinations)
        else:
            msg = (
                "Unsupported destination for attribute {}: {!r}. Supported types: string, list of strings."
            ).format(perun_attr, destinations)
            raise InvalidConfigurationError(msg)
        canonical[perun_attr] = destinations
    return canonical


class PerunAttributes(ResponseMicroService):
    """
    Fetch the attributes listed as keys of 'attrMap' for the authenticated
    user and append their values to the attributes named by the 'attrMap'
    values. Existing values are kept.

    Relies on an identity resolution step to put the registry user id into
    the request state; without it the service does nothing.

    Example configuration:

    ```yaml
    module: perun_proxy.micro_services.perun_attributes.PerunAttributes
    name: PerunAttributes
    config:
      interface: rpc
      rpc:
        url: https://perun.example.org/ba/rpc/
        user: !ENV PERUN_RPC_USER
        password: !ENV PERUN_RPC_PASSWORD
        timeout: 5
      attrMap:
        urn:perun:user:attribute-def:def:preferredMail: mail
        urn:perun:user:attribute-def:virt:eduPersonScopedAffiliations:
          - eduPersonScopedAffiliation
          - affiliation
    ```
    """

    def __init__(self, config, *args, adapter=None, **kwargs):
        """
        :type config: dict[str, Any]
        :type adapter: perun_proxy.adapter.Adapter

        :param config: micro service configuration
        :param adapter: adapter to use instead of one built from the configuration
        """
        super().__init__(*args, **kwargs)
        config = config or {}

        if "attrMap" not in config:
            msg = "Missing mandatory configuration option 'attrMap'"
            logger.error(msg)
            raise InvalidConfigurationError(msg)
        try:
            self.attr_map = canonical_attribute_map(config["attrMap"])
        except InvalidConfigurationError as err:
            logger.error(str(err))
            raise

        self.interface = str(config.get("interface") or RPC)
        self.adapter = adapter or adapter_from_config(self.interface, config)
        logger.info("Perun attributes micro service initialized with interface {}".format(self.interface))

    def _principal_id(self, context):
        principal_id = context.principal_id
        if principal_id is None:
            raise MissingPrincipalError("Registry user id has not been found in the request state")
        return principal_id

    def process(self, context, data):
        state = context.state
        session_id = lu.get_session_id(state)

        try:
            principal_id = self._principal_id(context)
        except MissingPrincipalError as err:
            msg = "{}. Continuing with the next micro service".format(err)
            logline = lu.LOG_FMT.format(id=session_id, message=msg)
            logger.debug(logline)
            return super().process(context, data)

        fetched = self.adapter.get_user_attributes(principal_id, self.attr_map.keys())

        for perun_attr, raw_value in fetched.items():
            values = normalize(raw_value, perun_attr)
            destinations = self.attr_map[perun_attr]

            msg = {
                "message": "Perun attribute fetched",
                "attribute": perun_attr,
                "values": values,
                "destinations": list(destinations),
            }
            logline = lu.LOG_FMT.format(id=session_id, message=msg)
            logger.debug(logline)

            for attribute in destinations:
                data.attributes[attribute] = list(data.attributes.get(attribute, [])) + values

        return super().process(context, data)
