# tests/integration/test_testnet_manager_integration.py
"""
Lifecycle and command line handling of the testnet manager.
"""

import pytest

from tools.testnet_manager import AsyncTestnetManager, main, parse_args


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])

        assert args.config == "config.json"
        assert args.log_level == "info"

    def test_custom(self):
        args = parse_args(["-c", "net.json", "--log", "trace"])

        assert args.config == "net.json"
        assert args.log_level == "trace"

    def test_unknown_level_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["--log", "verbose"])


class TestMainErrors:
    def test_missing_config_file(self, tmp_path):
        assert main(["--config", str(tmp_path / "missing.json")]) == 1

    def test_malformed_config(self, write_config):
        assert main(["--config", str(write_config("{ nope"))]) == 1

    def test_config_not_utf8(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_bytes(b'{"topology": "\xff\xfe"}')

        assert main(["--config", str(path)]) == 1

    def test_invalid_interface(self, write_config, base_document):
        base_document["routers"] = [{"isd_as": "1-11", "interfaces": [0]}]

        assert main(["--config", str(write_config(base_document))]) == 1


class TestAsyncTestnetManager:
    def test_load_config(self, write_config, full_document):
        manager = AsyncTestnetManager(write_config(full_document))
        spec = manager.load_config()

        assert manager.spec is spec
        assert len(spec.system_state.routers) == 2

    @pytest.mark.asyncio
    async def test_start_and_stop(self, write_config, base_document):
        base_document["management_listen_addr"] = "127.0.0.1:0"
        manager = AsyncTestnetManager(write_config(base_document))

        await manager.start()
        assert manager.running is True
        assert manager.runtime.management_addr is not None

        await manager.stop()
        assert manager.running is False
        assert manager.runtime is None
