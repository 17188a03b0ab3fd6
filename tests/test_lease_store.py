import json

import pytest

from adapters.lease_store import export_lease_json, load_lease_json
from conftest import LEASE_JSON
from core.domain.models import Lease
from core.errors import DecodeError


def test_export_then_load(tmp_path):
    lease = Lease.model_validate(LEASE_JSON)
    path = export_lease_json(lease=lease, output_path=tmp_path / "nested" / "lease.json")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["Subnet"] == "10.1.2.0/24"
    assert load_lease_json(path) == lease


def test_load_rejects_non_lease(tmp_path):
    path = tmp_path / "lease.json"
    path.write_text('{"PublicIP": "1.2.3.4"}', encoding="utf-8")
    with pytest.raises(DecodeError):
        load_lease_json(path)
