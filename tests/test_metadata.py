import pytest

from krmkit.krm import KubeObject
from krmkit.metadata import (
    add_annotations,
    add_finalizer,
    finalizer_exists,
    remove_annotations,
    remove_finalizer,
    remove_string,
)


def pod(**metadata):
    return KubeObject({"apiVersion": "v1", "kind": "Pod", "metadata": dict(metadata)})


@pytest.mark.parametrize(
    "obj, expected",
    [
        (pod(annotations={"ek": "ev"}), {"ek": "ev", "k": "v"}),
        (pod(), {"k": "v"}),
    ],
)
def test_add_annotations(obj, expected):
    add_annotations(obj, {"k": "v"})
    assert obj.annotations == expected


@pytest.mark.parametrize(
    "obj, expected",
    [
        (pod(annotations={"kA": "vA", "kB": "vB"}), {"kB": "vB"}),
        (pod(), None),
    ],
)
def test_remove_annotations(obj, expected):
    remove_annotations(obj, "kA")
    assert obj.annotations == expected


@pytest.mark.parametrize(
    "obj, expected",
    [
        (pod(), ["fin"]),
        (pod(finalizers=["fin"]), ["fin"]),
        (pod(finalizers=["fun"]), ["fun", "fin"]),
    ],
)
def test_add_finalizer(obj, expected):
    add_finalizer(obj, "fin")
    assert obj.finalizers == expected


@pytest.mark.parametrize(
    "obj, expected",
    [
        (pod(), None),
        (pod(finalizers=["fin"]), []),
        (pod(finalizers=["fin", "fun"]), ["fun"]),
    ],
)
def test_remove_finalizer(obj, expected):
    remove_finalizer(obj, "fin")
    assert obj.finalizers == expected


@pytest.mark.parametrize(
    "obj, expected",
    [
        (pod(), False),
        (pod(finalizers=["fin"]), True),
        (pod(finalizers=["fun"]), False),
    ],
)
def test_finalizer_exists(obj, expected):
    assert finalizer_exists(obj, "fin") is expected


@pytest.mark.parametrize(
    "items, value, expected",
    [
        (["a", "b"], "b", ["a"]),
        ([], "b", []),
        (["a", "b"], "c", ["a", "b"]),
    ],
)
def test_remove_string(items, value, expected):
    assert remove_string(items, value) == expected


def test_remove_string_leaves_input_untouched():
    items = ["a", "b", "a"]
    assert remove_string(items, "a") == ["b"]
    assert items == ["a", "b", "a"]