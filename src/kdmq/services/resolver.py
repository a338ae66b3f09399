"""Resolve a (Rancher version, channel) pair to a KDM document.

Channel kinds, decided once by parse_channel():
  ./path        -> local file
  scheme://host -> custom URL, fetched as-is
  release       -> embedded snapshot of that exact Rancher version
  latest, dev   -> channel data.json for the Rancher MAJOR.MINOR line
"""

import logging
import re

from kdmq.errors import InvalidChannelVersionError
from kdmq.models.channel import (
    Channel,
    ChannelName,
    LocalChannel,
    NamedChannel,
    URLChannel,
    parse_channel,
    parse_channel_name,
)
from kdmq.models.kdm import KDMData
from kdmq.models.settings import Settings
from kdmq.services.kdm_client import KDMClient, load_kdm_file
from kdmq.services.versions import parse_semver

logger = logging.getLogger(__name__)

CHANNEL_VERSION_PATTERN = re.compile(r"^v2\.[4-9]")


def resolve(
    release_version: str,
    channel: str | Channel,
    client: KDMClient,
    settings: Settings | None = None,
) -> KDMData:
    """Return the KDM document for release_version in channel."""
    settings = settings or Settings()
    if isinstance(channel, str):
        channel = parse_channel(channel)

    if isinstance(channel, LocalChannel):
        logger.debug("Reading KDM data from local file %s", channel.path)
        return load_kdm_file(channel.path)
    if isinstance(channel, URLChannel):
        return client.fetch(channel.url)
    return client.fetch(named_channel_url(release_version, channel, settings))


def named_channel_url(release_version: str, channel: NamedChannel, settings: Settings) -> str:
    if channel.name is ChannelName.RELEASE:
        return settings.embedded_url_template.format(rancher_version=release_version)
    version = parse_semver(release_version)
    return metadata_url(channel.name, f"v{version.major}.{version.minor}", settings)


def metadata_url(channel: ChannelName, channel_version: str, settings: Settings) -> str:
    # "latest" is published under the release path
    path_channel = ChannelName.RELEASE if channel is ChannelName.LATEST else channel
    return settings.metadata_url_template.format(
        channel=path_channel.value, channel_version=channel_version
    )


def validate_channel_version(channel_version: str) -> str:
    if not CHANNEL_VERSION_PATTERN.match(channel_version):
        raise InvalidChannelVersionError(f"not a valid channel version [{channel_version}]")
    return channel_version


def fetch_channel_data(
    channel: str,
    channel_version: str,
    client: KDMClient,
    settings: Settings | None = None,
) -> KDMData:
    """Fetch data.json of a named channel for an explicit channel version (v2.7).

    Both arguments are validated before any request is made.
    """
    settings = settings or Settings()
    name = parse_channel_name(channel)
    validate_channel_version(channel_version)
    return client.fetch(metadata_url(name, channel_version, settings))
