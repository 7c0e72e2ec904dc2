from urllib.parse import unquote

import pytest

from perun_proxy.exception import InvalidConfigurationError
from perun_proxy.internal import InternalData
from perun_proxy.micro_services.perun_capabilities import PerunCapabilities
from perun_proxy.micro_services.perun_capabilities import capability_urn


class TestCapabilityUrn(object):
    def test_format(self):
        urn = capability_urn("urn:mace:egi.eu", "c-scale:user-category", "premium", "aai.egi.eu")
        assert urn == "urn:mace:egi.eu:res:c-scale:user-category:premium#aai.egi.eu"

    @pytest.mark.parametrize("value", ["a#b", "x:y", "with space", "50%", "a/b?c=d&e", "žluťoučký"])
    def test_value_is_percent_encoded(self, value):
        urn = capability_urn("urn:ns", "res", value, "auth")

        encoded = urn[len("urn:ns:res:res:"):-len("#auth")]
        assert ":" not in encoded and "#" not in encoded and " " not in encoded
        assert unquote(encoded) == value

    def test_unreserved_characters_are_kept(self):
        assert capability_urn("n", "r", "a-b_c.d~e", "a") == "n:res:r:a-b_c.d~e#a"

    def test_empty_namespace_and_authority(self):
        assert capability_urn("", "x", "y", "") == ":res:x:y#"


class TestPerunCapabilities(object):
    config = {
        "urnNamespace": "urn:mace:egi.eu",
        "urnAuthority": "aai.egi.eu",
        "resAttrMap": {
            "cscaleUserCategory": "c-scale:user-category",
            "cscaleCompany": "c-scale:company",
        },
    }

    def create_service(self, config):
        service = PerunCapabilities(config=config, name="test_capabilities", base_url="https://satosa.example.com")
        service.next = lambda ctx, data: data
        return service

    def test_generates_capability(self, context):
        service = self.create_service(self.config)
        data = InternalData(attributes={"cscaleUserCategory": ["premium"]})

        service.process(context, data)

        assert data.attributes["eduPersonEntitlement"] == [
            "urn:mace:egi.eu:res:c-scale:user-category:premium#aai.egi.eu"
        ]

    def test_keeps_existing_and_appends_in_order(self, context):
        service = self.create_service(self.config)
        data = InternalData(attributes={
            "eduPersonEntitlement": ["urn:existing"],
            "cscaleUserCategory": ["premium", "basic"],
            "cscaleCompany": ["ACME Inc."],
        })

        service.process(context, data)

        assert data.attributes["eduPersonEntitlement"] == [
            "urn:existing",
            "urn:mace:egi.eu:res:c-scale:user-category:premium#aai.egi.eu",
            "urn:mace:egi.eu:res:c-scale:user-category:basic#aai.egi.eu",
            "urn:mace:egi.eu:res:c-scale:company:ACME%20Inc.#aai.egi.eu",
        ]

    def test_deduplicates(self, context):
        config = {
            "urnNamespace": "urn:ns",
            "urnAuthority": "auth",
            "resAttrMap": {"first": "shared", "second": "shared"},
        }
        service = self.create_service(config)
        data = InternalData(attributes={
            "eduPersonEntitlement": ["urn:ns:res:shared:b#auth"],
            "first": ["a", "b", "a"],
            "second": ["a", "c"],
        })

        service.process(context, data)

        assert data.attributes["eduPersonEntitlement"] == [
            "urn:ns:res:shared:b#auth",
            "urn:ns:res:shared:a#auth",
            "urn:ns:res:shared:c#auth",
        ]

    def test_skips_blank_values(self, context):
        service = self.create_service(self.config)
        data = InternalData(attributes={"cscaleUserCategory": ["", "  ", "premium"]})

        service.process(context, data)

        assert data.attributes["eduPersonEntitlement"] == [
            "urn:mace:egi.eu:res:c-scale:user-category:premium#aai.egi.eu"
        ]

    def test_no_source_values(self, context):
        service = self.create_service(self.config)
        data = InternalData(attributes={"cscaleUserCategory": [], "cscaleCompany": [""]})

        service.process(context, data)

        assert not data.attributes.get("eduPersonEntitlement")

    def test_custom_capability_attribute(self, context):
        config = dict(self.config, capabilityAttribute="capabilities")
        service = self.create_service(config)
        data = InternalData(attributes={"cscaleCompany": ["acme"]})

        service.process(context, data)

        assert data.attributes["capabilities"] == ["urn:mace:egi.eu:res:c-scale:company:acme#aai.egi.eu"]
        assert "eduPersonEntitlement" not in data.attributes

    def test_defaults(self, context):
        service = self.create_service({"resAttrMap": {"role": "vo"}})
        data = InternalData(attributes={"role": ["admin"]})

        service.process(context, data)

        assert service.capability_attribute == "eduPersonEntitlement"
        assert data.attributes["eduPersonEntitlement"] == [":res:vo:admin#"]

    def test_empty_configuration(self, context):
        service = self.create_service(None)
        data = InternalData(attributes={"role": ["admin"]})

        service.process(context, data)

        assert data.attributes == {"role": ["admin"]}

    @pytest.mark.parametrize("config", [
        {"capabilityAttribute": ["eduPersonEntitlement"]},
        {"urnNamespace": 5},
        {"urnAuthority": None},
        {"resAttrMap": "cscaleUserCategory"},
        {"resAttrMap": {"cscaleUserCategory": ["a", "b"]}},
    ])
    def test_invalid_configuration(self, config):
        with pytest.raises(InvalidConfigurationError):
            PerunCapabilities(config=config, name="test", base_url="https://satosa.example.com")
