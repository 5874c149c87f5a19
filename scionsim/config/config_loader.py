"""
Configuration file loading.

JSON is the native format; YAML files (.yml / .yaml) are accepted as
well and go through the same schema.
"""

import json
import logging
from pathlib import Path

import yaml

from scionsim.config.schema import ScionSimConfig
from scionsim.errors import MalformedDocument

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yml", ".yaml")


def load_document(text: str, fmt: str = "json") -> ScionSimConfig:
    """Decode configuration text and check its shape."""
    try:
        if fmt == "yaml":
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise MalformedDocument(f"cannot decode {fmt} document: {e}") from None

    return ScionSimConfig.from_dict(data)


class ConfigLoader:
    def __init__(self, config_path: str | Path = "config.json"):
        self.config_path = Path(config_path)

    @property
    def format(self) -> str:
        if self.config_path.suffix.lower() in YAML_SUFFIXES:
            return "yaml"
        return "json"

    def load(self) -> ScionSimConfig:
        logger.info("Reading config from: %s", self.config_path)
        try:
            text = self.config_path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDocument(f"config file is not valid UTF-8: {e}") from None
        return load_document(text, self.format)
