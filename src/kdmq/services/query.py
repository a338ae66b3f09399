"""Read-only queries over a parsed KDM document.

- list_k8s_versions: Kubernetes versions a Rancher release can deploy
- images_for_k8s_version: unique system images of one Kubernetes version
- resolve_template: add-on template selected by semver range
- list_addon_names: add-ons with versioned templates
"""

import logging

import semver

from kdmq.errors import (
    InvalidProductError,
    InvalidVersionError,
    NoImagesFoundError,
    TemplateNotFoundError,
)
from kdmq.models.kdm import (
    IMAGE_FIELDS,
    TEMPLATE_KEYS,
    VALID_PRODUCTS,
    DistroReleases,
    K8sVersionInfo,
    KDMData,
    Product,
)
from kdmq.services.diff import unique
from kdmq.services.versions import (
    compare_loose,
    k8s_version_key,
    major_minor_tag,
    parse_range,
    parse_semver,
)

logger = logging.getLogger(__name__)

# RKE2 and K3s releases older than this are not listed.
MINIMUM_DISTRO_K8S_VERSION = semver.Version(1, 21, 0)


def list_k8s_versions(data: KDMData, release_version: str, product: str = Product.RKE.value) -> list[str]:
    """Kubernetes versions applicable to release_version, sorted.

    An empty list is a valid answer; the caller decides whether it is fatal.
    """
    try:
        product = Product(product)
    except ValueError:
        raise InvalidProductError(
            f"not a valid product [{product}], valid options are [{','.join(VALID_PRODUCTS)}]"
        ) from None

    if product is Product.RKE2:
        return _distro_versions(data.rke2, release_version)
    if product is Product.K3S:
        return _distro_versions(data.k3s, release_version)

    versions = []
    for k8s_version in data.images_by_k8s_version:
        info = data.version_info.get(k8s_version)
        if info and _ignored_for_release(info, release_version):
            logger.debug("Skipping %s: outside min/deprecate window for %s", k8s_version, release_version)
            continue
        minor_info = data.version_info.get(major_minor_tag(k8s_version))
        if minor_info and _ignored_for_current(minor_info, release_version):
            logger.debug("Skipping %s: minor version capped below %s", k8s_version, release_version)
            continue
        versions.append(k8s_version)
    return sorted(versions)


def _ignored_for_release(info: K8sVersionInfo, release_version: str) -> bool:
    if info.deprecate_rancher_version and compare_loose(release_version, info.deprecate_rancher_version) >= 0:
        return True
    # Only the minimum counts here; a maximum must not hide versions of upgraded clusters.
    if info.min_rancher_version and compare_loose(release_version, info.min_rancher_version) < 0:
        return True
    return False


def _ignored_for_current(info: K8sVersionInfo, release_version: str) -> bool:
    return bool(info.max_rancher_version) and compare_loose(release_version, info.max_rancher_version) > 0


def _distro_versions(distro: DistroReleases, release_version: str) -> list[str]:
    """Runtime image tags of RKE2/K3s releases shipped with release_version.

    "v1.24.10+rke2r1" is reported as "v1.24.10-rke2r1", the tag of its
    runtime image.
    """
    versions = []
    for release in distro.releases:
        if parse_semver(release.version) < MINIMUM_DISTRO_K8S_VERSION:
            continue
        if release.min_channel_server_version and compare_loose(
            release_version, release.min_channel_server_version
        ) < 0:
            continue
        if release.max_channel_server_version and compare_loose(
            release.max_channel_server_version, release_version
        ) < 0:
            continue
        versions.append(release.version.replace("+", "-"))
    return sorted(unique(versions))


def latest_per_minor(k8s_versions: list[str]) -> list[str]:
    """Keep the highest version of each vMAJOR.MINOR line, sorted."""
    latest: dict[str, str] = {}
    for k8s_version in k8s_versions:
        minor = major_minor_tag(k8s_version)
        current = latest.get(minor)
        if current is None or k8s_version_key(k8s_version) > k8s_version_key(current):
            latest[minor] = k8s_version
    return sorted(latest.values())


def images_for_k8s_version(data: KDMData, k8s_version: str) -> list[str]:
    """Non-empty images in field declaration order, first occurrence kept.

    An unknown version gives an empty list. The result is not sorted.
    """
    images = data.images_by_k8s_version.get(k8s_version)
    if images is None:
        return []
    return unique(value for value in (getattr(images, field) for field in IMAGE_FIELDS) if value)


def require_images_for_k8s_version(data: KDMData, k8s_version: str) -> list[str]:
    """Like images_for_k8s_version but an unknown version is an error."""
    if k8s_version not in data.images_by_k8s_version:
        raise NoImagesFoundError(k8s_version, sorted(data.images_by_k8s_version))
    return images_for_k8s_version(data, k8s_version)


def images_for_release(data: KDMData, k8s_versions: list[str]) -> list[str]:
    """Images of every given Kubernetes version, concatenated in order."""
    images: list[str] = []
    for k8s_version in k8s_versions:
        images.extend(images_for_k8s_version(data, k8s_version))
    return images


def list_addon_names(data: KDMData) -> list[str]:
    return sorted(name for name in data.templates_by_addon if name != TEMPLATE_KEYS)


def resolve_template(data: KDMData, addon: str, k8s_version: str) -> tuple[str, str]:
    """Return (template id, template name) for an add-on and Kubernetes version.

    Ranges are tested in document order and the first match wins. When
    ranges of one add-on overlap, the answer depends on that order.
    The name comes from templateKeys and is "" when missing there.
    """
    to_match = parse_semver(k8s_version)
    for expression, template_id in data.templates_by_addon.get(addon, {}).items():
        try:
            matches = parse_range(expression)
        except InvalidVersionError as e:
            raise InvalidVersionError(f"range for {addon} not sem-ver: {e}") from e
        if matches(to_match):
            logger.debug("Template %s matched %s for %s via [%s]", template_id, addon, k8s_version, expression)
            return template_id, data.template_keys.get(template_id, "")
    raise TemplateNotFoundError(addon, k8s_version)
