"""
Client for the Perun JSON RPC interface.

The registry should be considered unreliable: callers are expected to cope
with RegistryUnavailableError, e.g. by releasing attributes from another
source instead.
"""
import json
import logging
from urllib.parse import urlencode

import requests

from .exception import RegistryError
from .exception import RegistryUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


def build_query(params):
    """
    URL-encode call parameters the way the registry expects them.

    List values are sent as repeated 'name[]=value' pairs. Positional
    indices ('name[0]=value') are rejected by the registry.
    Parameters without a value are left out.

    :type params: dict[str, Any]
    :rtype: str
    """
    pairs = []
    for name, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            pairs.extend(("{}[]".format(name), item) for item in value)
        elif isinstance(value, bool):
            pairs.append((name, "true" if value else "false"))
        else:
            pairs.append((name, value))
    return urlencode(pairs)


class RpcConnector(object):
    """
    Calls methods of the registry managers, e.g.

        connector.get("attributesManager", "getAttribute",
                      {"user": 42, "attributeName": "urn:perun:user:attribute-def:def:preferredMail"})
    """

    def __init__(self, rpc_url, user, password, timeout=DEFAULT_TIMEOUT, session=None):
        """
        :type rpc_url: str
        :type user: str
        :type password: str
        :type timeout: float
        :type session: requests.Session

        :param rpc_url: base URL of the RPC interface, e.g. https://perun.example.org/ba/rpc/
        :param user: user for HTTP basic authentication
        :param password: password for HTTP basic authentication
        :param timeout: seconds to wait for the registry before giving up
        :param session: session to issue the calls with
        """
        self.rpc_url = rpc_url if rpc_url.endswith("/") else rpc_url + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (user, password)

    def _uri(self, manager, method):
        return "{}json/{}/{}".format(self.rpc_url, manager, method)

    def get(self, manager, method, params=None):
        """
        Call a registry method with URL-encoded parameters.

        :type manager: str
        :type method: str
        :type params: dict[str, Any]
        :rtype: Any

        :param manager: registry manager, e.g. 'attributesManager'
        :param method: method of the manager, e.g. 'getAttributes'
        :param params: call parameters
        :return: the decoded response
        """
        query = build_query(params or {})
        return self._call("GET", manager, method, query, params=query)

    def post(self, manager, method, params=None):
        """
        Call a registry method with a JSON body.

        :type manager: str
        :type method: str
        :type params: dict[str, Any]
        :rtype: Any

        :param manager: registry manager, e.g. 'usersManager'
        :param method: method of the manager
        :param params: call parameters
        :return: the decoded response
        """
        body = json.dumps(params or {})
        return self._call(
            "POST", manager, method, body,
            data=body, headers={"Content-Type": "application/json"},
        )

    def _call(self, http_method, manager, method, sent_params, **kwargs):
        uri = self._uri(manager, method)
        operation = "{}/{}".format(manager, method)

        try:
            response = self.session.request(http_method, uri, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as err:
            msg = "Timed out after {} seconds waiting for the registry".format(self.timeout)
            logger.error("{}. Call: {}, params: {}".format(msg, uri, sent_params))
            raise RegistryUnavailableError(msg, operation, sent_params) from err
        except requests.exceptions.RequestException as err:
            msg = "Could not connect to the registry: {}".format(err)
            logger.error("{}. Call: {}, params: {}".format(msg, uri, sent_params))
            raise RegistryUnavailableError(msg, operation, sent_params) from err

        logger.debug(
            "perun.RPC: {} call {} with params: {}, response: {}".format(
                http_method, uri, sent_params, response.text
            )
        )

        try:
            result = response.json()
        except ValueError as err:
            msg = "Can't decode response from the registry"
            raise RegistryUnavailableError(msg, operation, sent_params, response.text) from err

        if isinstance(result, dict) and "errorId" in result:
            raise RegistryError(
                result["errorId"], result.get("name"), result.get("message"), operation, sent_params
            )

        if not response.ok:
            msg = "Got status code '{}' from the registry".format(response.status_code)
            raise RegistryUnavailableError(msg, operation, sent_params, response.text)

        return result
