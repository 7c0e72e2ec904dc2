"""
Help functions to load and chain perun_proxy micro services
"""
import json
import logging
import os
from pydoc import locate

from .exception import InvalidConfigurationError
from .micro_services.base import MicroService, ResponseMicroService
from .yaml import YAMLError
from .yaml import load as yaml_load

logger = logging.getLogger(__name__)


def _micro_service_filter(cls):
    """
    Accept subclasses of MicroService other than the base classes themselves.

    :type cls: type
    :rtype: bool

    :param cls: A class object
    :return: True if match, else false
    """
    return (
        isinstance(cls, type)
        and issubclass(cls, MicroService)
        and cls not in (MicroService, ResponseMicroService)
    )


def _load_plugin_config(config):
    """
    :type config: str
    :rtype: dict[str, Any]

    :param config: YAML document, or path to a file holding one
    """
    try:
        if os.path.isfile(config):
            with open(config) as f:
                return yaml_load(f)
        return yaml_load(config)
    except YAMLError as exc:
        if hasattr(exc, 'problem_mark'):
            mark = exc.problem_mark
            logger.error("Error position: (%s:%s)" % (mark.line + 1, mark.column + 1))
        raise InvalidConfigurationError("The configuration is corrupt.") from exc


def _load_microservice(plugin_config):
    _mandatory_params = ("name", "module")
    if not isinstance(plugin_config, dict) or not all(k in plugin_config for k in _mandatory_params):
        raise InvalidConfigurationError(
            "Missing mandatory plugin configuration parameter: {}".format(_mandatory_params))

    module_class = locate(plugin_config["module"])
    if not module_class:
        raise InvalidConfigurationError("Can't find module '%s'" % plugin_config["module"])
    if not _micro_service_filter(module_class):
        raise InvalidConfigurationError("'%s' is not a micro service" % plugin_config["module"])
    return module_class


def load_micro_services(plugins, base_url, callback):
    """
    Load the micro services and chain them in the given order.

    :type plugins: list[str | dict[str, Any]]
    :type base_url: str
    :type callback: (perun_proxy.context.Context, perun_proxy.internal.InternalData) -> Any
    :rtype: list[perun_proxy.micro_services.base.MicroService]

    :param plugins: micro service definitions, or YAML documents / file paths holding them
    :param base_url: base url of the proxy
    :param callback: called by the last micro service
    :return: the loaded micro services, the first one is the entry of the chain
    """
    services = []
    for plugin in plugins:
        plugin_config = _load_plugin_config(plugin) if isinstance(plugin, str) else plugin
        try:
            module_class = _load_microservice(plugin_config)
        except InvalidConfigurationError as e:
            raise InvalidConfigurationError(
                "Configuration error in {}".format(json.dumps(plugin_config, default=str))) from e

        instance = module_class(config=plugin_config.get("config"), name=plugin_config["name"], base_url=base_url)
        services.append(instance)

    for service, following in zip(services, services[1:]):
        service.next = following.process
    if services:
        services[-1].next = callback

    logger.info("Loaded micro services: %s" % [type(k).__name__ for k in services])
    return services
