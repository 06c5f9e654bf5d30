"""Clients for a Kubernetes API server: a mockable client, an applicator
that creates or patches objects, and a finalizer manager."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from krmkit.errors import ResourceError, is_not_found
from krmkit.krm import GroupVersionKind, KubeObject
from krmkit.metadata import add_finalizer, finalizer_exists, remove_finalizer

ERR_UPDATE_OBJECT = "cannot update object"
MERGE_PATCH_TYPE = "application/merge-patch+json"

# Called before patching the current object to match the desired one.
ApplyOption = Callable[[KubeObject, KubeObject], None]
# Inspects or updates an object handed to a mock client call.
ObjectFn = Callable[[Any], None]


@dataclass(frozen=True)
class ObjectKey:
    """The name and namespace that identify an object."""

    name: str = ""
    namespace: str = ""


@runtime_checkable
class Client(Protocol):
    """The operations of a Kubernetes API client; failures are raised."""

    def get(self, key: ObjectKey, obj: Any, *args: Any) -> None: ...

    def list(self, obj_list: Any, *args: Any) -> None: ...

    def create(self, obj: Any, *args: Any) -> None: ...

    def delete(self, obj: Any, *args: Any) -> None: ...

    def delete_all_of(self, obj: Any, *args: Any) -> None: ...

    def update(self, obj: Any, *args: Any) -> None: ...

    def patch(self, obj: Any, patch: Any, *args: Any) -> None: ...


@dataclass
class MergePatch:
    """A JSON merge patch that brings an object to the state of ``source``."""

    source: KubeObject

    @property
    def type(self) -> str:
        return MERGE_PATCH_TYPE

    def data(self, obj: Any = None) -> bytes:
        """Return the patch body; the target object does not affect it."""
        return json.dumps(self.source.to_dict(), default=str).encode()


def new_mock_get_fn(error: BaseException | None, *args: ObjectFn) -> Callable[..., None]:
    """Return a get function that runs the object functions, then raises ``error``."""

    def mock_get(key: ObjectKey, obj: Any) -> None:
        for object_fn in args:
            object_fn(obj)
        if error is not None:
            raise error

    return mock_get


def new_mock_object_fn(error: BaseException | None, *args: ObjectFn) -> Callable[..., None]:
    """Return a call taking the object first that runs the object functions,
    then raises ``error``."""

    def mock_call(obj: Any, *rest: Any) -> None:
        for object_fn in args:
            object_fn(obj)
        if error is not None:
            raise error

    return mock_call


def new_mock_scheme_fn(scheme: Any) -> Callable[[], Any]:
    """Return a function that returns ``scheme``."""
    return lambda: scheme


def update_fn(fn: Callable[[KubeObject, KubeObject], Any]) -> ApplyOption:
    """Return an apply option that lets ``fn`` copy fields from desired to current."""

    def option(current: KubeObject, desired: KubeObject) -> None:
        fn(current, desired)

    return option


def _noop() -> Callable[..., None]:
    return new_mock_object_fn(None)


def _never_namespaced() -> Callable[[Any], bool]:
    return lambda obj: False


@dataclass
class MockSubResourceClient:
    """A sub-resource client whose every call is a replaceable function."""

    mock_get: Callable[..., None] = field(default_factory=_noop)
    mock_create: Callable[..., None] = field(default_factory=_noop)
    mock_update: Callable[..., None] = field(default_factory=_noop)
    mock_patch: Callable[..., None] = field(default_factory=_noop)

    def get(self, obj: Any, sub_resource: Any, *args: Any) -> None:
        self.mock_get(obj, sub_resource, *args)

    def create(self, obj: Any, sub_resource: Any, *args: Any) -> None:
        self.mock_create(obj, sub_resource, *args)

    def update(self, obj: Any, *args: Any) -> None:
        self.mock_update(obj, *args)

    def patch(self, obj: Any, patch: Any, *args: Any) -> None:
        self.mock_patch(obj, patch, *args)


@dataclass
class MockClient:
    """A client whose every call is a replaceable function.

    By default every call does nothing and succeeds.
    """

    mock_get: Callable[..., None] = field(default_factory=lambda: new_mock_get_fn(None))
    mock_list: Callable[..., None] = field(default_factory=_noop)
    mock_create: Callable[..., None] = field(default_factory=_noop)
    mock_delete: Callable[..., None] = field(default_factory=_noop)
    mock_delete_all_of: Callable[..., None] = field(default_factory=_noop)
    mock_update: Callable[..., None] = field(default_factory=_noop)
    mock_patch: Callable[..., None] = field(default_factory=_noop)

    mock_status_create: Callable[..., None] = field(default_factory=_noop)
    mock_status_update: Callable[..., None] = field(default_factory=_noop)
    mock_status_patch: Callable[..., None] = field(default_factory=_noop)

    mock_sub_resource_get: Callable[..., None] = field(default_factory=_noop)
    mock_sub_resource_create: Callable[..., None] = field(default_factory=_noop)
    mock_sub_resource_update: Callable[..., None] = field(default_factory=_noop)
    mock_sub_resource_patch: Callable[..., None] = field(default_factory=_noop)

    mock_scheme: Callable[[], Any] = field(default_factory=lambda: new_mock_scheme_fn(None))
    mock_rest_mapper: Callable[[], Any] = field(
        default_factory=lambda: new_mock_scheme_fn(None)
    )
    mock_is_object_namespaced: Callable[[Any], bool] = field(
        default_factory=_never_namespaced
    )

    def get(self, key: ObjectKey, obj: Any, *args: Any) -> None:
        self.mock_get(key, obj)

    def list(self, obj_list: Any, *args: Any) -> None:
        self.mock_list(obj_list, *args)

    def create(self, obj: Any, *args: Any) -> None:
        self.mock_create(obj, *args)

    def delete(self, obj: Any, *args: Any) -> None:
        self.mock_delete(obj, *args)

    def delete_all_of(self, obj: Any, *args: Any) -> None:
        self.mock_delete_all_of(obj, *args)

    def update(self, obj: Any, *args: Any) -> None:
        self.mock_update(obj, *args)

    def patch(self, obj: Any, patch: Any, *args: Any) -> None:
        self.mock_patch(obj, patch, *args)

    def status(self) -> MockSubResourceClient:
        """Return a writer for the status sub-resource."""
        return MockSubResourceClient(
            mock_create=self.mock_status_create,
            mock_update=self.mock_status_update,
            mock_patch=self.mock_status_patch,
        )

    def sub_resource(self, name: str) -> MockSubResourceClient:
        return MockSubResourceClient(
            mock_get=self.mock_sub_resource_get,
            mock_create=self.mock_sub_resource_create,
            mock_update=self.mock_sub_resource_update,
            mock_patch=self.mock_sub_resource_patch,
        )

    def rest_mapper(self) -> Any:
        """Return the REST mapper; none by default."""
        return self.mock_rest_mapper()

    def scheme(self) -> Any:
        return self.mock_scheme()

    def group_version_kind_for(self, obj: Any) -> GroupVersionKind:
        return GroupVersionKind()

    def is_object_namespaced(self, obj: Any) -> bool:
        """Report whether ``obj`` is namespaced; false by default."""
        return self.mock_is_object_namespaced(obj)


@dataclass
class APIPatchingApplicator:
    """Applies an object by creating it, or patching it when it exists."""

    client: Client

    def apply(self, obj: KubeObject, *args: ApplyOption) -> None:
        """Create the object if it does not exist, otherwise patch it.

        The apply options run only when the object already exists, before
        the patch; their errors propagate unchanged.
        """
        if not isinstance(obj, KubeObject):
            raise TypeError("cannot access object metadata")

        if not obj.name and obj.get_nested("metadata", "generateName"):
            self._create(obj)
            return

        desired = obj.deep_copy()
        try:
            self.client.get(ObjectKey(name=obj.name, namespace=obj.namespace), obj)
        except Exception as exc:
            if is_not_found(exc):
                self._create(obj)
                return
            raise ResourceError("cannot get object", exc) from exc

        for option in args:
            option(obj, desired)

        try:
            self.client.patch(obj, MergePatch(desired))
        except Exception as exc:
            raise ResourceError("cannot patch object", exc) from exc

    def _create(self, obj: KubeObject) -> None:
        try:
            self.client.create(obj)
        except Exception as exc:
            raise ResourceError("cannot create object", exc) from exc


@dataclass
class APIFinalizer:
    """Manages one finalizer on objects stored in an API server."""

    client: Client
    finalizer: str

    def add_finalizer(self, obj: KubeObject) -> None:
        """Add the finalizer and update the object, unless it is already set."""
        if finalizer_exists(obj, self.finalizer):
            return
        add_finalizer(obj, self.finalizer)
        try:
            self.client.update(obj)
        except Exception as exc:
            raise ResourceError(ERR_UPDATE_OBJECT, exc) from exc

    def remove_finalizer(self, obj: KubeObject) -> None:
        """Remove the finalizer and update the object; a vanished object is fine."""
        if not finalizer_exists(obj, self.finalizer):
            return
        remove_finalizer(obj, self.finalizer)
        try:
            self.client.update(obj)
        except Exception as exc:
            if is_not_found(exc):
                return
            raise ResourceError(ERR_UPDATE_OBJECT, exc) from exc