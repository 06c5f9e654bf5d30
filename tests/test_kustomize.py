from krmkit.krm import (
    LOCAL_CONFIG_ANNOTATION,
    PATH_ANNOTATION,
    KubeObject,
    ResourceList,
)
from krmkit.kustomize import merge_and_remove_duplicates, run


def obj(kind, name, path, local=False, api_version="v1"):
    annotations = {PATH_ANNOTATION: path}
    if local:
        annotations[LOCAL_CONFIG_ANNOTATION] = "true"
    return KubeObject(
        {"apiVersion": api_version, "kind": kind,
         "metadata": {"name": name, "annotations": annotations}}
    )


def kustomizations(rl):
    return [i for i in rl.items if i.is_group_kind("kustomize.config.k8s.io", "Kustomization")]


def test_creates_kustomization_listing_non_local_resources():
    rl = ResourceList(items=[
        obj("ConfigMap", "a", "a.yaml"),
        obj("ConfigMap", "b", "b.yaml"),
        obj("Kptfile", "k", "Kptfile", local=True),
    ])
    assert run(rl) is True
    found = kustomizations(rl)
    assert len(found) == 1
    assert found[0].get_nested("resources") == ["a.yaml", "b.yaml"]
    assert found[0].path_annotation() == "kustomization.yaml"
    assert found[0].name == "upsert-kustomize-res"


def test_merges_into_existing_kustomization():
    existing = obj("Kustomization", "kust", "kustomization.yaml",
                   api_version="kustomize.config.k8s.io/v1beta1")
    existing.set_nested(["old.yaml", "a.yaml"], "resources")
    rl = ResourceList(items=[existing, obj("ConfigMap", "a", "a.yaml"),
                             obj("ConfigMap", "c", "c.yaml")])
    run(rl)
    found = kustomizations(rl)
    assert len(found) == 1
    assert found[0].get_nested("resources") == ["old.yaml", "a.yaml", "c.yaml"]


def test_run_is_idempotent():
    rl = ResourceList(items=[obj("ConfigMap", "a", "a.yaml")])
    run(rl)
    first = [i.to_dict() for i in rl.items]
    run(rl)
    assert [i.to_dict() for i in rl.items] == first


def test_merge_and_remove_duplicates_keeps_order():
    assert merge_and_remove_duplicates(["a", "b"], ["b", "c"], ["a"]) == ["a", "b", "c"]
    assert merge_and_remove_duplicates() == []