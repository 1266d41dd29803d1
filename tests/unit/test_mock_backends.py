"""Smoke tests for mock backends."""

import pytest

from pd_scaler.backends.mock.pd import FakePDClient
from pd_scaler.core import naming
from pd_scaler.core.errors import NotFound, PDApiError
from tests.unit.builders import make_pod, make_pvc


def test_kube_store_pvc_crud(kube):
    kube.add_pvc(make_pvc(0))
    kube.add_pvc(make_pvc(1))

    got = kube.get_pvc("default", "pd-basic-pd-0")
    assert got is not None
    assert kube.list_pvcs("default", naming.pvc_selector("basic", 1))[0]["metadata"]["name"] == "pd-basic-pd-1"
    assert len(kube.list_pvcs("default", naming.cluster_selector("basic"))) == 2
    assert kube.list_pvcs("other", naming.cluster_selector("basic")) == []

    got["metadata"]["annotations"] = {"a": "b"}
    kube.update_pvc(got)
    assert kube.get_pvc("default", "pd-basic-pd-0")["metadata"]["annotations"] == {"a": "b"}

    kube.delete_pvc("default", "pd-basic-pd-0")
    assert kube.get_pvc("default", "pd-basic-pd-0") is None
    with pytest.raises(NotFound):
        kube.delete_pvc("default", "pd-basic-pd-0")


def test_kube_store_error_injection(kube):
    kube.add_pvc(make_pvc(0))
    kube.add_pvc(make_pvc(1))
    kube.set_delete_pvc_error(RuntimeError("boom"), after=1)

    kube.delete_pvc("default", "pd-basic-pd-0")
    with pytest.raises(RuntimeError):
        kube.delete_pvc("default", "pd-basic-pd-1")
    assert kube.deleted == ["pd-basic-pd-0"]


def test_kube_store_pods(kube):
    kube.add_pod(make_pod(3, ["pd-basic-pd-3"]))

    assert kube.get_pod("default", "basic-pd-3")["spec"]["volumes"][0]["persistentVolumeClaim"] == {
        "claimName": "pd-basic-pd-3"
    }
    assert kube.get_pod("default", "basic-pd-4") is None


def test_fake_pd_client_defaults():
    pd = FakePDClient(members=["basic-pd-0", "basic-pd-1"])

    assert pd.get_leader() == {"name": "basic-pd-0"}
    assert pd.get_members() == [{"name": "basic-pd-0"}, {"name": "basic-pd-1"}]

    pd.transfer_leader("basic-pd-1")
    assert pd.leader == "basic-pd-1"
    with pytest.raises(PDApiError):
        pd.transfer_leader("basic-pd-9")

    pd.delete_member("basic-pd-0")
    pd.delete_member("basic-pd-0")
    assert pd.members == ["basic-pd-1"]
    assert pd.actions().count("delete_member") == 2
