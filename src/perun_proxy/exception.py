"""
Exceptions for perun_proxy
"""


class PerunProxyError(Exception):
    """
    Base perun_proxy exception
    """
    pass


class InvalidConfigurationError(PerunProxyError):
    """
    Raised when a micro service or the registry client is misconfigured.
    Always raised before any request is processed.
    """
    pass


class MissingPrincipalError(PerunProxyError):
    """
    The request state carries no principal id. Not fatal: the micro service
    catching it does nothing for the current request.
    """
    pass


class UnsupportedValueShapeError(PerunProxyError):
    """
    A registry attribute value is neither null, a string, a list nor a map.
    """

    def __init__(self, attribute_name, value=None):
        """
        :type attribute_name: str
        :type value: Any

        :param attribute_name: name of the offending registry attribute
        :param value: the offending value
        """
        message = (
            "Unsupported attribute type. Attribute name: {name}, value type: {type}. "
            "Supported types: null, string, list, map."
        ).format(name=attribute_name, type=type(value).__name__)
        super().__init__(message)
        self.attribute_name = attribute_name


class RegistryUnavailableError(PerunProxyError):
    """
    The registry could not be reached or answered with something that
    could not be decoded.
    """

    def __init__(self, message, operation=None, params=None, response=None):
        """
        :type message: str
        :type operation: str
        :type params: Any
        :type response: str

        :param message: what went wrong
        :param operation: the attempted call, e.g. 'attributesManager/getAttributes'
        :param params: parameters sent with the call
        :param response: raw response body, if any was received
        """
        super().__init__(message)
        self.operation = operation
        self.params = params
        self.response = response

    def __str__(self):
        return "{msg} (call: {op}, params: {params}, response: {resp})".format(
            msg=self.args[0], op=self.operation, params=self.params, resp=self.response
        )


class RegistryError(PerunProxyError):
    """
    The registry rejected the call and reported an error of its own.
    """

    def __init__(self, error_id, name, message, operation=None, params=None):
        """
        :type error_id: str
        :type name: str
        :type message: str

        :param error_id: registry error identifier ('errorId')
        :param name: registry exception name, e.g. 'UserNotExistsException'
        :param message: registry error message
        :param operation: the attempted call
        :param params: parameters sent with the call
        """
        super().__init__("{name}: {message}".format(name=name, message=message))
        self.error_id = error_id
        self.name = name
        self.message = message
        self.operation = operation
        self.params = params
