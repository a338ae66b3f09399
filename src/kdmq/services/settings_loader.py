from pathlib import Path

import yaml

from kdmq.models.settings import Settings


def load_settings(path: Path | None) -> Settings:
    if path is None:
        return Settings()
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)  # YAML → Python dict
    return Settings.model_validate(raw or {})  # dict → Pydantic model
