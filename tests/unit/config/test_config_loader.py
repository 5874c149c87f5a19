"""
Unit tests for configuration file loading.
"""

import pytest

from scionsim.config import ConfigLoader, load_document
from scionsim.errors import MalformedDocument

YAML_DOCUMENT = """
topology:
  ases:
    - isd_as: "1-11"
      is_core: true
    - isd_as: "1-12"
      is_core: false
  links:
    - "1-11:1-12"
endhost_apis:
  - isds: ["1"]
    listening_addr: "127.0.0.1:9010"
management_listen_addr: "127.0.0.1:8082"
"""


class TestLoadDocument:
    def test_json(self):
        config = load_document(
            '{"topology": {"ases": [], "links": []}, "management_listen_addr": "127.0.0.1:1"}'
        )

        assert config.topology.ases == []

    def test_yaml(self):
        config = load_document(YAML_DOCUMENT, "yaml")

        assert len(config.topology.ases) == 2
        assert config.endhost_apis[0].listening_addr == "127.0.0.1:9010"

    @pytest.mark.parametrize("text", ["{", "", "not json", '{"topology": ]'])
    def test_undecodable_json(self, text):
        with pytest.raises(MalformedDocument):
            load_document(text)

    def test_undecodable_yaml(self):
        with pytest.raises(MalformedDocument):
            load_document("topology: [unclosed", "yaml")


class TestConfigLoader:
    def test_loads_json_file(self, write_config, base_document):
        path = write_config(base_document)
        loader = ConfigLoader(path)

        assert loader.format == "json"
        assert loader.load().topology.links == ["1-11:1-12"]

    def test_loads_yaml_file(self, write_config):
        loader = ConfigLoader(write_config(YAML_DOCUMENT, name="testnet.yml"))

        assert loader.format == "yaml"
        assert loader.load().management_listen_addr == "127.0.0.1:8082"

    def test_malformed_file(self, write_config):
        with pytest.raises(MalformedDocument):
            ConfigLoader(write_config("{ broken")).load()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(tmp_path / "missing.json").load()

    def test_invalid_utf8_is_malformed(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_bytes(b'{"topology": "\xff\xfe"}')

        with pytest.raises(MalformedDocument) as exc_info:
            ConfigLoader(path).load()

        assert "UTF-8" in str(exc_info.value)
