import copy
import json

import pytest

BASE_DOCUMENT = {
    "topology": {
        "ases": [
            {"isd_as": "1-11", "is_core": True},
            {"isd_as": "1-12", "is_core": False},
        ],
        "links": ["1-11:1-12"],
    },
    "management_listen_addr": "127.0.0.1:8082",
}


@pytest.fixture
def base_document():
    """Two-AS topology with a single link and nothing else."""
    return copy.deepcopy(BASE_DOCUMENT)


@pytest.fixture
def full_document(base_document):
    """Document exercising every entity kind and both router variants."""
    base_document["snaps"] = [
        {
            "listening_addr": "127.0.0.1:9001",
            "data_planes": [
                {
                    "isd_as": "1-12",
                    "listening_addr": "127.0.0.1:9002",
                    "address_range": ["10.0.0.0/24"],
                },
                {
                    "isd_as": "1-11",
                    "listening_addr": "127.0.0.1:9003",
                    "address_range": ["10.0.1.0/24", "fd00::/64"],
                },
            ],
        }
    ]
    base_document["endhost_apis"] = [
        {"isds": ["1"], "listening_addr": "127.0.0.1:9010"},
    ]
    base_document["routers"] = [
        {
            "isd_as": "1-11",
            "interfaces": [1, 2],
            "local_addresses": ["192.168.1.0/24"],
            "next_hops": {"1": "127.0.0.1:9101", "2": "127.0.0.1:9102"},
        },
        {
            "isd_as": "1-12",
            "interfaces": [1],
            "listening_addr": "127.0.0.1:9201",
            "snap_data_plane_excludes": ["10.0.0.128/25"],
            "snap_data_plane_interfaces": {"1": "127.0.0.1:9202"},
        },
    ]
    return base_document


@pytest.fixture
def write_config(tmp_path):
    """Write a document to a config file and return its path."""

    def _write(document, name="config.json"):
        path = tmp_path / name
        if isinstance(document, str):
            path.write_text(document)
        else:
            path.write_text(json.dumps(document, indent=2))
        return path

    return _write
