"""Configuration schema using Pydantic."""

import os

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class ServerConfig(BaseModel):
    """HTTP gateway listener configuration."""

    host: str = "0.0.0.0"
    port: int = 8080
    max_body_bytes: int = 1024 * 1024
    request_timeout_seconds: float = 30.0  # Upper bound for one dispatch round trip


class ResourceKindConfig(BaseModel):
    """Coordinates of one custom resource kind in the declarative store."""

    group: str
    version: str
    kind: str
    plural: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"


def _default_asset_kind() -> ResourceKindConfig:
    return ResourceKindConfig(
        group="deviceregistry.microsoft.com",
        version="v1beta1",
        kind="Asset",
        plural="assets",
    )


def _default_scheduled_job_kind() -> ResourceKindConfig:
    return ResourceKindConfig(
        group="stable.example.com",
        version="v1",
        kind="CronTab",
        plural="crontabs",
    )


class StoreConfig(BaseModel):
    """Declarative store (Kubernetes-style API) client configuration."""

    backend: str = "kube"  # kube | memory
    base_url: str = ""  # Empty means in-cluster: https://$KUBERNETES_SERVICE_HOST:$KUBERNETES_SERVICE_PORT
    token: str = ""
    token_path: str = "/var/run/secrets/kubernetes.io/serviceaccount/token"
    ca_path: str = "/var/run/secrets/kubernetes.io/serviceaccount/ca.crt"
    verify_tls: bool = True
    timeout_seconds: float = 10.0
    asset: ResourceKindConfig = Field(default_factory=_default_asset_kind)
    scheduled_job: ResourceKindConfig = Field(default_factory=_default_scheduled_job_kind)


class NamingConfig(BaseModel):
    """Deterministic resource naming."""

    asset_prefix: str = "onvif-asset-"
    digest_bytes: int = Field(default=4, ge=1, le=64)  # 4 bytes: birthday collisions near ~77k devices


class ScheduledJobTemplate(BaseModel):
    """Desired ScheduledJob spec provisioned by a query rule."""

    namespace: str
    schedule: str
    image: str
    capacity: int = 1


def _default_no_instance_job() -> ScheduledJobTemplate:
    return ScheduledJobTemplate(
        namespace="newcr-no-instance",
        schedule="* * */3",
        image="newcr-no-instance_cron_image",
    )


def _default_with_instance_job() -> ScheduledJobTemplate:
    return ScheduledJobTemplate(
        namespace="newcr-with-instance",
        schedule="* * * */4",
        image="newcr-with-instance_cron_image",
    )


class DebugEchoConfig(BaseModel):
    """debugEcho test protocol configuration."""

    credential_device_id: str = "foo0"
    username: str = "debugEchoUser1"
    password: str = "debugEchoPassword1"
    no_instance_job: ScheduledJobTemplate = Field(default_factory=_default_no_instance_job)
    with_instance_job: ScheduledJobTemplate = Field(default_factory=_default_with_instance_job)


class DataPointTemplate(BaseModel):
    """Synthetic data point attached to provisioned assets."""

    name: str = "data point name"
    data_source: str = "ns=3;s=FastUInt100"
    capability_id: str = "capability id"
    observability_mode: str = "none"
    data_point_configuration: str = "{}"


class OnvifConfig(BaseModel):
    """ONVIF protocol configuration."""

    secret_directory: str = Field(default_factory=lambda: os.environ.get("ONVIF_SECRET_DIRECTORY", ""))
    asset_namespace: str = "azure-iot-operations"
    display_name: str = "onvif-device-display-name"
    endpoint_profile_uri: str = "onvif-endpoint-profile-uri"
    data_point: DataPointTemplate = Field(default_factory=DataPointTemplate)


class Config(BaseSettings):
    """Root configuration for deviceservice."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)
    debug_echo: DebugEchoConfig = Field(default_factory=DebugEchoConfig)
    onvif: OnvifConfig = Field(default_factory=OnvifConfig)

    model_config = ConfigDict(
        env_prefix="DEVICESERVICE_",
        env_nested_delimiter="__",
    )
