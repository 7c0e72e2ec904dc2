import pytest

from perun_proxy.exception import InvalidConfigurationError
from perun_proxy.internal import InternalData
from perun_proxy.micro_services.base import MicroService, ResponseMicroService
from perun_proxy.micro_services.perun_capabilities import PerunCapabilities
from perun_proxy.plugin_loader import _load_plugin_config
from perun_proxy.plugin_loader import _micro_service_filter
from perun_proxy.plugin_loader import load_micro_services

CAPABILITIES_CONF = """
module: perun_proxy.micro_services.perun_capabilities.PerunCapabilities
name: PerunCapabilities
config:
  urnNamespace: urn:mace:egi.eu
  urnAuthority: aai.egi.eu
  resAttrMap:
    cscaleUserCategory: c-scale:user-category
"""


class TestFilters(object):
    class ResponseTestMicroService(ResponseMicroService):
        pass

    def test_rejects_base_classes(self):
        assert not _micro_service_filter(MicroService)
        assert not _micro_service_filter(ResponseMicroService)

    def test_rejects_other_objects(self):
        assert not _micro_service_filter(dict)
        assert not _micro_service_filter(load_micro_services)

    def test_accepts_micro_service(self):
        assert _micro_service_filter(TestFilters.ResponseTestMicroService)
        assert _micro_service_filter(PerunCapabilities)


class TestLoadPluginConfig(object):
    def test_document(self):
        assert _load_plugin_config(CAPABILITIES_CONF)["name"] == "PerunCapabilities"

    def test_file(self, tmpdir):
        path = tmpdir.join("capabilities.yaml")
        path.write(CAPABILITIES_CONF)
        assert _load_plugin_config(str(path))["config"]["urnAuthority"] == "aai.egi.eu"

    def test_corrupt(self):
        with pytest.raises(InvalidConfigurationError):
            _load_plugin_config("name: [unclosed")


class TestLoadMicroServices(object):
    def test_load_and_chain(self, context):
        callback_args = []
        services = load_micro_services(
            [CAPABILITIES_CONF, {"module": "perun_proxy.micro_services.perun_capabilities.PerunCapabilities",
                                 "name": "Second", "config": {"resAttrMap": {"role": "vo"}}}],
            "https://satosa.example.com",
            lambda ctx, data: callback_args.append(data) or "done",
        )

        assert [s.name for s in services] == ["PerunCapabilities", "Second"]
        assert services[0].next == services[1].process
        assert services[0].base_url == "https://satosa.example.com"

        data = InternalData(attributes={"cscaleUserCategory": ["premium"], "role": ["admin"]})
        assert services[0].process(context, data) == "done"
        assert callback_args == [data]
        assert data.attributes["eduPersonEntitlement"] == [
            "urn:mace:egi.eu:res:c-scale:user-category:premium#aai.egi.eu",
            ":res:vo:admin#",
        ]

    @pytest.mark.parametrize("plugin", [
        {"name": "no module"},
        {"module": "perun_proxy.micro_services.perun_capabilities.PerunCapabilities"},
        {"name": "unknown", "module": "perun_proxy.does.not.Exist"},
        {"name": "not a service", "module": "perun_proxy.context.Context"},
    ])
    def test_invalid_plugin(self, plugin):
        with pytest.raises(InvalidConfigurationError):
            load_micro_services([plugin], "https://satosa.example.com", lambda ctx, data: data)

    def test_configuration_errors_of_the_service_propagate(self):
        plugin = {"name": "bad", "module": "perun_proxy.micro_services.perun_attributes.PerunAttributes",
                  "config": {}}
        with pytest.raises(InvalidConfigurationError):
            load_micro_services([plugin], "https://satosa.example.com", lambda ctx, data: data)
