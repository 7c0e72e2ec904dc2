import json
import logging

import click

from ..context import Context
from ..exception import PerunProxyError
from ..internal import InternalData
from ..plugin_loader import load_micro_services
from ..succinct_log_filter import SuccinctLogFilter


def release_attributes(plugins, principal_id, base_url, attributes=None):
    """
    Run the micro services for a user and return the attributes they release.

    :type plugins: list[str | dict[str, Any]]
    :type principal_id: str
    :type base_url: str
    :type attributes: dict[str, list[str]]
    :rtype: dict[str, list[str]]
    """
    services = load_micro_services(plugins, base_url, lambda context, data: data)
    data = InternalData(attributes=attributes)
    if not services:
        return data.attributes

    context = Context()
    context.principal_id = principal_id
    result = services[0].process(context, data)
    return result.attributes


@click.command()
@click.argument("micro_service_conf", nargs=-1, required=True)
@click.option("--principal-id", required=True, help="Registry id of the user.")
@click.option("--base-url", default="https://localhost", help="Base URL of the proxy.")
@click.option("--attribute", "-a", multiple=True, metavar="NAME=VALUE",
              help="Attribute already released before the micro services run, may be repeated.")
@click.option("--max-log-length", type=click.INT, default=None,
              help="Truncate the registry audit log lines to this many characters.")
@click.option("--verbose", "-v", is_flag=True, type=click.BOOL, default=False, help="Log debug messages.")
def show_released_attributes(micro_service_conf, principal_id, base_url, attribute, max_log_length, verbose):
    """
    Print, as JSON, the attributes released for PRINCIPAL_ID by the micro services
    defined in the MICRO_SERVICE_CONF files, in the order given.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    if max_log_length is not None:
        log_filter = SuccinctLogFilter({"rpc_connector:_call": max_log_length})
        for handler in logging.getLogger().handlers:
            handler.addFilter(log_filter)

    attributes = {}
    for pair in attribute:
        name, sep, value = pair.partition("=")
        if not sep:
            raise click.BadParameter("expected NAME=VALUE, got '{}'".format(pair), param_hint="--attribute")
        attributes.setdefault(name, []).append(value)

    try:
        released = release_attributes(list(micro_service_conf), principal_id, base_url, attributes)
    except PerunProxyError as err:
        raise click.ClickException(str(err)) from err
    click.echo(json.dumps(released, indent=2, sort_keys=True))
