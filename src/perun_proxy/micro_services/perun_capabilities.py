"""
Micro service generating capabilities from already released attributes.
"""
import logging
from urllib.parse import quote

import perun_proxy.logging_util as lu
from perun_proxy.exception import InvalidConfigurationError

from .base import ResponseMicroService

logger = logging.getLogger(__name__)

DEFAULT_CAPABILITY_ATTRIBUTE = "eduPersonEntitlement"


def capability_urn(namespace, resource, value, authority):
    """
    Build a capability, e.g. 'urn:mace:egi.eu:res:c-scale:user-category:premium#aai.egi.eu'.

    The value is percent-encoded as a URL component, only letters, digits
    and '-_.~' are left as they are.
    """
    return "{}:res:{}:{}#{}".format(namespace, resource, quote(value, safe=""), authority)


def _unique(values):
    return list(dict.fromkeys(values))


class PerunCapabilities(ResponseMicroService):
    """
    Generate capabilities from attribute values. Every non-empty value of an
    attribute listed in 'resAttrMap' becomes one capability of the mapped
    resource, added to 'capabilityAttribute'. The attributes are read from
    the response, so put this service after the one releasing them.

    Example configuration:

    ```yaml
    module: perun_proxy.micro_services.perun_capabilities.PerunCapabilities
    name: PerunCapabilities
    config:
      capabilityAttribute: eduPersonEntitlement
      urnNamespace: urn:mace:egi.eu
      urnAuthority: aai.egi.eu
      resAttrMap:
        cscaleUserCategory: c-scale:user-category
        cscaleCompany: c-scale:company
    ```

    Empty 'urnNamespace' and 'urnAuthority' are accepted and produce
    capabilities like ':res:c-scale:company:acme#'.
    """

    def __init__(self, config, *args, **kwargs):
        super().__init__(*args, **kwargs)
        config = config or {}

        self.capability_attribute = self._string_option(
            config, "capabilityAttribute", DEFAULT_CAPABILITY_ATTRIBUTE)
        self.urn_namespace = self._string_option(config, "urnNamespace", "")
        self.urn_authority = self._string_option(config, "urnAuthority", "")

        res_attr_map = config.get("resAttrMap", {})
        if res_attr_map is None:
            res_attr_map = {}
        if not isinstance(res_attr_map, dict) or not all(
            isinstance(resource, str) for resource in res_attr_map.values()
        ):
            msg = "Configuration error: 'resAttrMap' must map attribute names to resource strings"
            logger.error(msg)
            raise InvalidConfigurationError(msg)
        self.res_attr_map = dict(res_attr_map)

    @staticmethod
    def _string_option(config, option, default):
        value = config.get(option, default)
        if not isinstance(value, str):
            msg = "Configuration error: '{}' not a string literal".format(option)
            logger.error(msg)
            raise InvalidConfigurationError(msg)
        return value

    def process(self, context, data):
        session_id = lu.get_session_id(context.state)
        attributes = data.attributes

        for attr_name, resource in self.res_attr_map.items():
            # if there is no value for the attribute then do nothing
            if not attributes.get(attr_name):
                continue
            for value in attributes[attr_name]:
                if value is None or not str(value).strip():
                    continue
                capability = capability_urn(self.urn_namespace, resource, str(value), self.urn_authority)
                attributes.setdefault(self.capability_attribute, []).append(capability)
                msg = "Adding capability {!r}".format(capability)
                logline = lu.LOG_FMT.format(id=session_id, message=msg)
                logger.debug(logline)

        if attributes.get(self.capability_attribute):
            # Remove duplicates if any
            attributes[self.capability_attribute] = _unique(attributes[self.capability_attribute])

        return super().process(context, data)
