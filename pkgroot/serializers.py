"""Configuration serializers keyed by a string discriminator.

Package configuration files are written and read through one of these
serializers. The installer and the catalog are handed a kind (``"json"`` or
``"yaml"``) and resolve it here.
"""

import json

import yaml

from pkgroot.errors import ConfigError


class ConfigurationSerializer:
    """Base class: turns a document dict into text and back."""

    kind = ""
    suffix = ""

    def dumps(self, data: dict) -> str:
        raise NotImplementedError

    def loads(self, text: str) -> dict:
        raise NotImplementedError


class JsonSerializer(ConfigurationSerializer):
    kind = "json"
    suffix = ".json"

    def dumps(self, data: dict) -> str:
        return json.dumps(data, indent=2) + "\n"

    def loads(self, text: str) -> dict:
        from pkgroot.config import loads_jsonish

        return loads_jsonish(text)


class YamlSerializer(ConfigurationSerializer):
    kind = "yaml"
    suffix = ".yaml"

    def dumps(self, data: dict) -> str:
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)

    def loads(self, text: str) -> dict:
        try:
            result = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Config YAML error: {e}") from e
        if not isinstance(result, dict):
            raise ConfigError(f"Config must be a mapping, got {type(result).__name__}")
        return result


SERIALIZERS: dict[str, type[ConfigurationSerializer]] = {
    JsonSerializer.kind: JsonSerializer,
    YamlSerializer.kind: YamlSerializer,
}


def get_serializer(kind: str) -> ConfigurationSerializer:
    """Return a serializer instance for ``kind``.

    Raises:
        ValueError: If no serializer is registered under ``kind``
    """
    try:
        return SERIALIZERS[kind]()
    except KeyError:
        valid = ", ".join(sorted(SERIALIZERS))
        raise ValueError(f"Unknown serializer '{kind}'. Must be one of: {valid}") from None


__all__ = [
    "ConfigurationSerializer",
    "JsonSerializer",
    "YamlSerializer",
    "SERIALIZERS",
    "get_serializer",
]
