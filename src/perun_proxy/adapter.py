"""
Access to user attributes stored in the registry.

Two interfaces are supported: the JSON RPC interface of the registry itself
and the read-only LDAP mirror the registry provisions. Each micro service
holds its own adapter, built from its configuration with
:func:`adapter_from_config`.
"""
import copy
import logging

import ldap3
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars

from .exception import InvalidConfigurationError
from .exception import RegistryUnavailableError
from .logging_util import hide_secrets
from .rpc_connector import DEFAULT_TIMEOUT
from .rpc_connector import RpcConnector
from .values import ABSENT
from .values import RawValue

logger = logging.getLogger(__name__)

RPC = "rpc"
LDAP = "ldap"


class Adapter(object):
    """
    Abstract class for registry adapters
    """

    def get_user_attributes(self, principal_id, attribute_names):
        """
        Fetch attributes of a user.

        :type principal_id: int | str
        :type attribute_names: Iterable[str]
        :rtype: dict[str, perun_proxy.values.RawValue]

        :param principal_id: registry identifier of the user
        :param attribute_names: names of the attributes to fetch, not empty
        :return: every requested name mapped to its value, ABSENT for the
                 attributes the registry did not return
        """
        attribute_names = list(attribute_names)
        if not attribute_names:
            raise ValueError("At least one attribute name must be requested")
        fetched = self._fetch(principal_id, attribute_names)
        return {name: fetched.get(name, ABSENT) for name in attribute_names}

    def _fetch(self, principal_id, attribute_names):
        raise NotImplementedError()


class RpcAdapter(Adapter):
    """
    Reads attributes through the registry JSON RPC interface.
    """

    def __init__(self, connector):
        """
        :type connector: perun_proxy.rpc_connector.RpcConnector
        """
        self.connector = connector

    def _fetch(self, principal_id, attribute_names):
        operation = "attributesManager/getAttributes"
        params = {"user": principal_id, "attrNames": attribute_names}
        perun_attrs = self.connector.get("attributesManager", "getAttributes", params)

        if not isinstance(perun_attrs, list):
            raise RegistryUnavailableError(
                "Unexpected response, a list of attributes was expected", operation, params, perun_attrs
            )

        attributes = {}
        for perun_attr in perun_attrs:
            try:
                name = "{}:{}".format(perun_attr["namespace"], perun_attr["friendlyName"])
                value = perun_attr.get("value")
            except (KeyError, TypeError) as err:
                raise RegistryUnavailableError(
                    "Malformed attribute in response", operation, params, perun_attrs
                ) from err
            attributes[name] = RawValue.from_registry(name, value)
        return attributes


def _ldap_text(value):
    """
    ldap3 formats values by the server schema: integers come back as int,
    binary values as bytes. Released attributes are strings.
    """
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (list, tuple)):
        return [_ldap_text(item) for item in value]
    if value is None or isinstance(value, (str, dict)):
        return value
    return str(value)


class LdapAdapter(Adapter):
    """
    Reads attributes from the LDAP mirror of the registry. Attribute names
    are LDAP attribute names.
    """

    config_defaults = {
        "ldap_url": None,
        "bind_dn": None,
        "bind_password": None,
        "search_base": None,
        "ldap_identifier_attribute": "perunUserId",
        "auto_bind": "AUTO_BIND_NO_TLS",
        "client_strategy": "RESTARTABLE",
        "read_only": True,
        "version": 3,
        "timeout": DEFAULT_TIMEOUT,
    }

    def __init__(self, config, connection=None):
        """
        :type config: dict[str, Any]
        :type connection: ldap3.Connection

        :param config: LDAP configuration, see config_defaults
        :param connection: an already set up connection to use instead of
                           creating one from the configuration
        """
        self.config = copy.deepcopy(self.config_defaults)
        self.config.update(config or {})
        if not self.config["search_base"]:
            raise InvalidConfigurationError("search_base is not configured")
        self.connection = connection or self._ldap_connection_factory(self.config)

    def _ldap_connection_factory(self, config):
        """
        Use the input configuration to instantiate and return
        a ldap3 Connection object.
        """
        for option in ("ldap_url", "bind_dn", "bind_password"):
            if not config[option]:
                raise InvalidConfigurationError("{} is not configured".format(option))

        client_strategy_map = {
            "SYNC": ldap3.SYNC,
            "RESTARTABLE": ldap3.RESTARTABLE,
            "MOCK_SYNC": ldap3.MOCK_SYNC,
        }
        auto_bind_map = {
            "AUTO_BIND_NONE": ldap3.AUTO_BIND_NONE,
            "AUTO_BIND_NO_TLS": ldap3.AUTO_BIND_NO_TLS,
            "AUTO_BIND_TLS_AFTER_BIND": ldap3.AUTO_BIND_TLS_AFTER_BIND,
            "AUTO_BIND_TLS_BEFORE_BIND": ldap3.AUTO_BIND_TLS_BEFORE_BIND,
        }
        try:
            client_strategy = client_strategy_map[config["client_strategy"]]
            auto_bind = auto_bind_map[config["auto_bind"]]
        except KeyError as err:
            raise InvalidConfigurationError("Unsupported LDAP option value {}".format(err)) from err

        logger.debug("Creating a new LDAP connection with {}".format(hide_secrets(config)))
        server = ldap3.Server(config["ldap_url"], connect_timeout=config["timeout"])
        try:
            connection = ldap3.Connection(
                server,
                config["bind_dn"],
                config["bind_password"],
                auto_bind=auto_bind,
                client_strategy=client_strategy,
                read_only=config["read_only"],
                version=config["version"],
                receive_timeout=config["timeout"],
            )
        except LDAPException as e:
            msg = "Caught exception when connecting to LDAP server: {}".format(e)
            logger.error(msg)
            raise RegistryUnavailableError(msg, "bind") from e

        logger.debug("Successfully connected to LDAP server")
        return connection

    def _fetch(self, principal_id, attribute_names):
        search_filter = "({}={})".format(
            self.config["ldap_identifier_attribute"],
            escape_filter_chars(str(principal_id)),
        )
        logger.debug("LDAP query with search filter {}".format(search_filter))

        try:
            results = self.connection.search(
                self.config["search_base"], search_filter, attributes=attribute_names
            )
        except LDAPException as err:
            msg = "Caught LDAP exception: {}".format(err)
            logger.error(msg)
            raise RegistryUnavailableError(msg, "search", search_filter) from err

        if isinstance(results, bool):
            responses = self.connection.response or []
        else:
            responses = self.connection.get_response(results)[0]
        entries = [response for response in responses if response.get("type", "searchResEntry") == "searchResEntry"]

        if not entries:
            logger.warning("No LDAP record found for {}, no attributes fetched".format(search_filter))
            return {}
        if len(entries) > 1:
            logger.warning("LDAP server returned {} records for {}, using the first".format(
                len(entries), search_filter))

        record = entries[0]
        logger.debug("Using LDAP record {}".format(record.get("dn")))
        ldap_attributes = record.get("attributes") or {}
        # LDAP attribute names are case insensitive
        requested = {name.lower(): name for name in attribute_names}
        return {
            requested[ldap_name.lower()]: RawValue.from_registry(ldap_name, _ldap_text(value))
            for ldap_name, value in ldap_attributes.items()
            if ldap_name.lower() in requested
        }


def adapter_from_config(interface, config):
    """
    Build the adapter for the given interface.

    :type interface: str
    :type config: dict[str, Any]
    :rtype: Adapter

    :param interface: 'rpc' or 'ldap'
    :param config: micro service configuration holding an 'rpc' or 'ldap' block
    :return: an adapter
    """
    interface = interface or RPC
    if interface not in (RPC, LDAP):
        msg = "Unknown registry interface '{}', use '{}' or '{}'".format(interface, RPC, LDAP)
        logger.error(msg)
        raise InvalidConfigurationError(msg)

    interface_config = config.get(interface)
    if not isinstance(interface_config, dict):
        msg = "Missing configuration block '{}' for the registry interface".format(interface)
        logger.error(msg)
        raise InvalidConfigurationError(msg)

    if interface == LDAP:
        return LdapAdapter(interface_config)

    try:
        connector = RpcConnector(
            interface_config["url"],
            interface_config["user"],
            interface_config["password"],
            timeout=interface_config.get("timeout", DEFAULT_TIMEOUT),
        )
    except KeyError as err:
        msg = "Missing mandatory registry RPC option {}".format(err)
        logger.error(msg)
        raise InvalidConfigurationError(msg) from err
    return RpcAdapter(connector)
