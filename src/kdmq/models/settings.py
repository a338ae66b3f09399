"""Модель YAML-файла настроек kdmq.

Файл необязателен: по умолчанию используются публичные адреса.
Пример (kdmq.yaml):

    metadataUrlTemplate: https://mirror.example.com/kdm/{channel}-{channel_version}/data.json
    embeddedUrlTemplate: https://mirror.example.com/embedded/data.{rancher_version}.json

Политика повторных запросов не настраивается.
"""

from pydantic import BaseModel, Field, field_validator

DEFAULT_METADATA_URL_TEMPLATE = (
    "https://releases.rancher.com/kontainer-driver-metadata/{channel}-{channel_version}/data.json"
)
DEFAULT_EMBEDDED_URL_TEMPLATE = (
    "https://raw.githubusercontent.com/superseb/kdmq/main/embedded/data.{rancher_version}.json"
)


class Settings(BaseModel):
    """Корневая модель настроек.

    metadata_url_template — адрес data.json канала, плейсхолдеры
        {channel} и {channel_version} (например "release", "v2.7")
    embedded_url_template — адрес встроенного снимка релиза,
        плейсхолдер {rancher_version}
    """

    metadata_url_template: str = Field(
        default=DEFAULT_METADATA_URL_TEMPLATE, alias="metadataUrlTemplate"
    )
    embedded_url_template: str = Field(
        default=DEFAULT_EMBEDDED_URL_TEMPLATE, alias="embeddedUrlTemplate"
    )

    model_config = {"populate_by_name": True, "frozen": True, "extra": "forbid"}

    @field_validator("metadata_url_template")
    @classmethod
    def _check_metadata_placeholders(cls, value: str) -> str:
        for placeholder in ("{channel}", "{channel_version}"):
            if placeholder not in value:
                raise ValueError(f"missing placeholder {placeholder}")
        return _check_format(value, channel="release", channel_version="v2.7")

    @field_validator("embedded_url_template")
    @classmethod
    def _check_embedded_placeholders(cls, value: str) -> str:
        if "{rancher_version}" not in value:
            raise ValueError("missing placeholder {rancher_version}")
        return _check_format(value, rancher_version="v2.7.1")


def _check_format(template: str, **placeholders: str) -> str:
    """Шаблон должен форматироваться только известными плейсхолдерами."""
    try:
        template.format(**placeholders)
    except (KeyError, IndexError, AttributeError, ValueError) as e:
        raise ValueError(f"cannot format template {template}: {type(e).__name__} {e}") from e
    return template
