"""Модели KDM-документа (Kubernetes distribution metadata).

Документ публикуется как data.json для каждого канала и релиза Rancher.
Нас интересует только часть полей, остальные игнорируются:

{
    "K8sVersionRKESystemImages": {
        "v1.24.10-rancher1-1": {"etcd": "rancher/mirrored-coreos-etcd:v3.5.4", ...}
    },
    "K8sVersionedTemplates": {
        "coredns": {">=1.21.0-rancher1-1 <1.24.0": "coredns-v1.8.3-rancher2"},
        "templateKeys": {"coredns-v1.8.3-rancher2": "..."}
    },
    "K8sVersionInfo": {"v1.24": {"maxRancherVersion": "2.7.99"}},
    "rke2": {"releases": [{"version": "v1.24.10+rke2r1", ...}]}
}

Документ неизменяем после разбора (frozen=True).
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

TEMPLATE_KEYS = "templateKeys"


class RKESystemImages(BaseModel):
    """Образы системных компонентов для одной версии Kubernetes.

    Порядок полей важен: images_for_k8s_version() обходит их в порядке
    объявления (см. IMAGE_FIELDS). Пустая строка: образ не нужен.
    """

    etcd: str = ""
    alpine: str = ""
    nginx_proxy: str = Field(default="", alias="nginxProxy")
    cert_downloader: str = Field(default="", alias="certDownloader")
    kubernetes_services_sidecar: str = Field(default="", alias="kubernetesServicesSidecar")
    kubedns: str = ""
    dnsmasq: str = ""
    kubedns_sidecar: str = Field(default="", alias="kubednsSidecar")
    kubedns_autoscaler: str = Field(default="", alias="kubednsAutoscaler")
    coredns: str = ""
    coredns_autoscaler: str = Field(default="", alias="corednsAutoscaler")
    nodelocal: str = ""
    kubernetes: str = ""
    flannel: str = ""
    flannel_cni: str = Field(default="", alias="flannelCni")
    calico_node: str = Field(default="", alias="calicoNode")
    calico_cni: str = Field(default="", alias="calicoCni")
    calico_controllers: str = Field(default="", alias="calicoControllers")
    calico_ctl: str = Field(default="", alias="calicoCtl")
    calico_flex_vol: str = Field(default="", alias="calicoFlexVol")
    canal_node: str = Field(default="", alias="canalNode")
    canal_cni: str = Field(default="", alias="canalCni")
    canal_controllers: str = Field(default="", alias="canalControllers")
    canal_flannel: str = Field(default="", alias="canalFlannel")
    canal_flex_vol: str = Field(default="", alias="canalFlexVol")
    weave_node: str = Field(default="", alias="weaveNode")
    weave_cni: str = Field(default="", alias="weaveCni")
    pod_infra_container: str = Field(default="", alias="podInfraContainer")
    ingress: str = ""
    ingress_backend: str = Field(default="", alias="ingressBackend")
    ingress_webhook: str = Field(default="", alias="ingressWebhook")
    metrics_server: str = Field(default="", alias="metricsServer")
    windows_pod_infra_container: str = Field(default="", alias="windowsPodInfraContainer")
    aci_cni_deploy_container: str = Field(default="", alias="aciCniDeployContainer")
    aci_host_container: str = Field(default="", alias="aciHostContainer")
    aci_opflex_container: str = Field(default="", alias="aciOpflexContainer")
    aci_mcast_container: str = Field(default="", alias="aciMcastContainer")
    aci_open_vswitch_container: str = Field(default="", alias="aciOpenvSwitchContainer")
    aci_controller_container: str = Field(default="", alias="aciControllerContainer")
    aci_gbp_server_container: str = Field(default="", alias="aciGbpServerContainer")
    aci_opflex_server_container: str = Field(default="", alias="aciOpflexServerContainer")

    model_config = {"populate_by_name": True, "frozen": True}


# Явный список полей в порядке объявления, без интроспекции.
IMAGE_FIELDS: tuple[str, ...] = (
    "etcd",
    "alpine",
    "nginx_proxy",
    "cert_downloader",
    "kubernetes_services_sidecar",
    "kubedns",
    "dnsmasq",
    "kubedns_sidecar",
    "kubedns_autoscaler",
    "coredns",
    "coredns_autoscaler",
    "nodelocal",
    "kubernetes",
    "flannel",
    "flannel_cni",
    "calico_node",
    "calico_cni",
    "calico_controllers",
    "calico_ctl",
    "calico_flex_vol",
    "canal_node",
    "canal_cni",
    "canal_controllers",
    "canal_flannel",
    "canal_flex_vol",
    "weave_node",
    "weave_cni",
    "pod_infra_container",
    "ingress",
    "ingress_backend",
    "ingress_webhook",
    "metrics_server",
    "windows_pod_infra_container",
    "aci_cni_deploy_container",
    "aci_host_container",
    "aci_opflex_container",
    "aci_mcast_container",
    "aci_open_vswitch_container",
    "aci_controller_container",
    "aci_gbp_server_container",
    "aci_opflex_server_container",
)


class K8sVersionInfo(BaseModel):
    """Ограничения применимости версии Kubernetes к релизам Rancher/RKE."""

    min_rancher_version: str = Field(default="", alias="minRancherVersion")
    max_rancher_version: str = Field(default="", alias="maxRancherVersion")
    deprecate_rancher_version: str = Field(default="", alias="deprecateRancherVersion")
    min_rke_version: str = Field(default="", alias="minRKEVersion")
    max_rke_version: str = Field(default="", alias="maxRKEVersion")
    deprecate_rke_version: str = Field(default="", alias="deprecateRKEVersion")

    model_config = {"populate_by_name": True, "frozen": True}


class DistroRelease(BaseModel):
    """Один релиз RKE2/K3s и окно совместимых версий Rancher."""

    version: str
    min_channel_server_version: str = Field(default="", alias="minChannelServerVersion")
    max_channel_server_version: str = Field(default="", alias="maxChannelServerVersion")

    model_config = {"populate_by_name": True, "frozen": True}


class DistroReleases(BaseModel):
    releases: list[DistroRelease] = Field(default_factory=list)

    model_config = {"frozen": True}


class KDMData(BaseModel):
    """Корневая модель KDM-документа.

    images_by_k8s_version — образы по версии Kubernetes
    templates_by_addon — add-on -> semver-диапазон -> id шаблона,
        плюс служебный ключ templateKeys (id шаблона -> имя/тело)
    service_options, windows_service_options — опции сервисов по версии
    version_info — ограничения по версиям Rancher (по версии и по vX.Y)
    rke2, k3s — релизы дистрибутивов
    """

    images_by_k8s_version: dict[str, RKESystemImages] = Field(
        default_factory=dict, alias="K8sVersionRKESystemImages"
    )
    templates_by_addon: dict[str, dict[str, str]] = Field(
        default_factory=dict, alias="K8sVersionedTemplates"
    )
    service_options: dict[str, dict[str, Any]] = Field(
        default_factory=dict, alias="K8sVersionServiceOptions"
    )
    windows_service_options: dict[str, dict[str, Any]] = Field(
        default_factory=dict, alias="K8sVersionWindowsServiceOptions"
    )
    version_info: dict[str, K8sVersionInfo] = Field(
        default_factory=dict, alias="K8sVersionInfo"
    )
    rke2: DistroReleases = Field(default_factory=DistroReleases)
    k3s: DistroReleases = Field(default_factory=DistroReleases)

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def template_keys(self) -> dict[str, str]:
        return self.templates_by_addon.get(TEMPLATE_KEYS, {})


class Product(str, Enum):
    """Дистрибутивы, версии которых описаны в KDM."""

    RKE = "rke"
    RKE2 = "rke2"
    K3S = "k3s"


VALID_PRODUCTS = [p.value for p in Product]
