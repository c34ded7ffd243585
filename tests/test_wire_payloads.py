from deviceservice.models.resources import AssetSpec, CronTabSpec, DataPoint
from deviceservice.models.wire import (
    Device,
    DeviceChangeRequest,
    QueryDeviceCredentialRequest,
    QueryDeviceCredentialResponse,
    QueryDeviceRequest,
    QueryDeviceResponse,
)


def test_query_device_request_defaults_non_string_fields() -> None:
    assert QueryDeviceRequest.from_dict({"id": "a", "protocol": "onvif"}) == QueryDeviceRequest("a", "onvif")
    assert QueryDeviceRequest.from_dict({"id": 1, "protocol": None}) == QueryDeviceRequest("", "")
    assert QueryDeviceRequest.from_dict("nope") == QueryDeviceRequest()


def test_credential_request_reads_nested_data() -> None:
    request = QueryDeviceCredentialRequest.from_dict(
        {"protocol": "onvif", "data": {"id": "cam-1", "properties": {"ip": "1.2.3.4", "port": 80}}}
    )

    assert request.protocol == "onvif"
    assert request.id == "cam-1"
    assert request.properties == {"ip": "1.2.3.4"}
    assert QueryDeviceCredentialRequest.from_dict({"protocol": "onvif", "data": []}).id == ""


def test_device_change_request_accepts_both_key_styles() -> None:
    request = DeviceChangeRequest.from_dict(
        {
            "protocol": "onvif",
            "data": {
                "reason": "add",
                "device": {
                    "id": "cam-1",
                    "mounts": [
                        {"containerPath": "/a", "hostPath": "/b", "readOnly": True},
                        {"container_path": "/c", "host_path": "/d", "read_only": "yes"},
                    ],
                    "device_specs": [{"container_path": "/dev/x", "host_path": "/dev/y", "permissions": "rw"}],
                },
            },
        }
    )

    device = request.device
    assert request.reason == "add"
    assert [m.container_path for m in device.mounts] == ["/a", "/c"]
    assert device.mounts[0].read_only is True
    assert device.mounts[1].read_only is False
    assert device.device_specs[0].permissions == "rw"
    assert device.to_dict()["deviceSpecs"] == [
        {"containerPath": "/dev/x", "hostPath": "/dev/y", "permissions": "rw"}
    ]


def test_device_defaults_wrongly_typed_containers() -> None:
    device = Device.from_dict({"id": "x", "properties": [], "mounts": {}, "deviceSpecs": "nope"})

    assert device == Device(id="x")


def test_response_payload_shapes() -> None:
    assert QueryDeviceResponse.accept({"k": "v"}).to_dict() == {"result": "accept", "properties": {"k": "v"}}
    assert QueryDeviceResponse.reject().accepted is False
    assert QueryDeviceCredentialResponse.fail().to_dict() == {
        "result": "fail",
        "credentialType": "",
        "credentials": {},
    }


def test_resource_specs_serialize_with_camel_case() -> None:
    spec = AssetSpec(
        asset_endpoint_profile_uri="uri",
        data_points=[DataPoint(data_source="ns=3;s=X")],
    )
    wire = spec.to_wire()

    assert wire["assetEndpointProfileUri"] == "uri"
    assert wire["enabled"] is False
    assert wire["dataPoints"][0]["observabilityMode"] == "none"
    assert wire["status"] == {"errors": [], "version": 0}
    assert CronTabSpec.model_validate({"cronSpec": "c", "image": "i", "capacity": 1}).cron_spec == "c"


def test_device_without_mounts_keeps_id_and_properties() -> None:
    request = DeviceChangeRequest.from_dict(
        {"protocol": "onvif", "data": {"reason": "add", "device": {"id": "cam-9", "properties": {"ip": "10.0.0.9"}}}}
    )

    assert request.device == Device(id="cam-9", properties={"ip": "10.0.0.9"})
