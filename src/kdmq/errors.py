"""Error taxonomy for kdmq.

Every error carries enough context (version, channel, URL, path or add-on)
to be actionable on its own. The CLI turns them into click exceptions.
"""


class KDMQError(Exception):
    """Base class for all kdmq errors."""


class InvalidChannelError(KDMQError):
    pass


class InvalidVersionError(KDMQError):
    pass


class InvalidChannelVersionError(KDMQError):
    pass


class InvalidProductError(KDMQError):
    pass


class NotFoundError(KDMQError):
    pass


class FetchError(KDMQError):
    pass


class ParseError(KDMQError):
    pass


class TemplateNotFoundError(KDMQError):
    def __init__(self, addon: str, k8s_version: str):
        self.addon = addon
        self.k8s_version = k8s_version
        super().__init__(f"no {addon} template found for k8sVersion {k8s_version}")


class NoImagesFoundError(KDMQError):
    def __init__(self, k8s_version: str, available: list[str]):
        self.k8s_version = k8s_version
        self.available = available
        listed = ", ".join(available) if available else "none"
        super().__init__(
            f"no images found for Kubernetes version [{k8s_version}], "
            f"available versions: [{listed}]"
        )
