"""Модели канала KDM-данных.

Строка канала из командной строки разбирается один раз (parse_channel)
в один из трёх вариантов:

    ./data.json                              -> LocalChannel
    https://example.com/kdm/data.json        -> URLChannel
    release | latest | dev                   -> NamedChannel
"""

from enum import Enum
from pathlib import Path
from typing import Literal, Union
from urllib.parse import urlparse

from pydantic import BaseModel

from kdmq.errors import InvalidChannelError

LOCAL_PREFIX = "./"


class ChannelName(str, Enum):
    """Допустимые именованные каналы."""

    RELEASE = "release"
    LATEST = "latest"
    DEV = "dev"


VALID_CHANNELS = [c.value for c in ChannelName]


class LocalChannel(BaseModel):
    """Локальный файл с KDM-данными."""

    kind: Literal["local"] = "local"
    path: Path

    model_config = {"frozen": True}


class URLChannel(BaseModel):
    """Произвольный URL с KDM-данными (без шаблонизации пути)."""

    kind: Literal["url"] = "url"
    url: str

    model_config = {"frozen": True}


class NamedChannel(BaseModel):
    """Именованный канал публикации KDM."""

    kind: Literal["named"] = "named"
    name: ChannelName

    model_config = {"frozen": True}


Channel = Union[LocalChannel, URLChannel, NamedChannel]


def parse_channel(value: str) -> Channel:
    """Разобрать строку канала в вариант Channel.

    Порядок проверки фиксирован: локальный путь, URL, именованный канал.
    """
    if value.startswith(LOCAL_PREFIX):
        return LocalChannel(path=Path(value))
    if is_valid_url(value):
        return URLChannel(url=value)
    return NamedChannel(name=parse_channel_name(value))


def parse_channel_name(name: str) -> ChannelName:
    try:
        return ChannelName(name)
    except ValueError:
        raise InvalidChannelError(
            f"not a valid channel [{name}], valid options are [{','.join(VALID_CHANNELS)}]"
        ) from None


def is_valid_url(value: str) -> bool:
    """URL считается валидным только при наличии схемы и хоста."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)
