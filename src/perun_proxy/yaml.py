"""
YAML loading for micro service definitions.

Secrets such as the registry password are kept out of the files with two
tags:

    password: !ENV PERUN_RPC_PASSWORD           # value of the variable
    password: !ENVFILE PERUN_RPC_PASSWORD_FILE  # content of the file it names
"""
import os

from yaml import SafeLoader as _safe_loader
from yaml import YAMLError
from yaml import safe_load as load

TAG_ENV = "!ENV"
TAG_ENVFILE = "!ENVFILE"

__all__ = ["load", "YAMLError", "TAG_ENV", "TAG_ENVFILE"]


def _constructor_env_variables(loader, node):
    """
    :param yaml.Loader loader: the yaml loader
    :param node: the current node in the yaml
    :return: value of the environment variable named by the node
    """
    variable = loader.construct_scalar(node)
    value = os.environ.get(variable)
    if value is None:
        msg = "Cannot construct value from {tag} {variable}: variable is not set".format(
            tag=TAG_ENV, variable=variable
        )
        raise YAMLError(msg)
    return value


def _constructor_envfile_variables(loader, node):
    """
    :param yaml.Loader loader: the yaml loader
    :param node: the current node in the yaml
    :return: stripped content of the file named by the environment variable
    """
    variable = loader.construct_scalar(node)
    filepath = os.environ.get(variable)
    try:
        with open(filepath, "r") as fd:
            value = fd.read()
    except (TypeError, IOError) as e:
        msg = "Cannot construct value from {tag} {variable}: cannot read {path}".format(
            tag=TAG_ENVFILE, variable=variable, path=filepath
        )
        raise YAMLError(msg) from e
    return value.strip()


_safe_loader.add_constructor(TAG_ENV, _constructor_env_variables)
_safe_loader.add_constructor(TAG_ENVFILE, _constructor_envfile_variables)
