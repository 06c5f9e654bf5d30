# krmkit

A small toolkit for working with Kubernetes Resource Model (KRM) objects and
KRM functions. A KRM function reads a `ResourceList` as YAML on standard input
and writes the updated list to standard output.

## Modules

* `krmkit.krm`: `KubeObject` wraps a plain nested mapping. It gives access to
  nested fields, annotations and identity, and it can report whether an object
  is local config. `ResourceList` holds the items, the function config and the
  results of a function run. `parse_kube_object` and `read_resource_list` parse
  YAML. `as_main` runs a processor on a resource list read from a stream and
  returns an exit status. `get_unstructured_from_gvk` and `was_deleted` are small
  helpers.
* `krmkit.metadata`: `add_annotations` and `remove_annotations` manage
  annotations. `add_finalizer`, `remove_finalizer` and `finalizer_exists` manage
  finalizers. `remove_string` removes a string from a list.
* `krmkit.errors`: `ApiError`, `NotFoundError` and `BadRequestError` are API
  errors. `ResourceError`, `wrap` and `cause` wrap errors and unwrap them.
  `ignore`, `ignore_any`, `ignore_not_found`, `is_not_found`, `is_api_error` and
  `is_api_error_wrapped` filter errors.
* `krmkit.client`:
  * `Client` is a protocol of API operations.
  * `MockClient` and `MockSubResourceClient` let you replace every operation
    with your own function. With the defaults, every operation succeeds and
    does nothing.
  * `APIPatchingApplicator` creates an object when it is not found, and
    otherwise merge-patches it with a `MergePatch`. It runs any apply options,
    such as those made with `update_fn`, before the patch.
  * `APIFinalizer` adds a finalizer and updates the object, or removes a
    finalizer and updates the object.
* `krmkit.conditions`: `get_porch_conditions` converts `KptCondition` values to
  `PorchCondition` values. `has_specific_type_conditions` checks whether a
  condition type starts with a given prefix followed by a dot.
* `krmkit.gotemplate`: `Template` is a small engine for the action syntax of Go
  templates. It supports field access, literals, `if`/`else`/`end`, `range`,
  `with`, `define`, `template`, comments and trim markers. Parse and execution
  failures raise `TemplateError`.
* `krmkit.genconfigmap` and `krmkit.kustomize` are the two KRM functions described
  below.

## Installation

```
pip install .
```

## Commands

### `krm-gen-configmap`

This command builds a ConfigMap from a `GenConfigMap` function config. Entries of type
`gotmpl` are rendered as templates, with `params` as the data. Any other entry is
copied as a literal value.

```yaml
apiVersion: fn.kpt.dev/v1alpha1
kind: GenConfigMap
metadata:
  name: my-config
params:
  region: us-east
data:
- type: gotmpl
  key: greeting
  value: "hello from {{ .region }}"
- type: literal
  key: mode
  value: fast
```

```
krm-gen-configmap < resource-list.yaml > out.yaml
```

The ConfigMap is named after `configMapMetadata.name`. If that is not set, it takes
the name of the function config. It is written to the path
`_gen_configmap_<name>.yaml`. The function reports an error in the results, and
exits with status 1, in these cases:

* an entry has an empty key
* a template fails to parse
* a template fails to execute

### `krm-gen-kustomize`

This command creates or updates a `Kustomization`. Its `resources` list names the path
of every item that is not local config. If a Kustomization already exists, its
resources are kept and new paths are appended, without duplicates. A new
Kustomization is written to `kustomization.yaml`.

```
krm-gen-kustomize < resource-list.yaml > out.yaml
```

## Library use

```python
from krmkit.krm import read_resource_list
from krmkit.genconfigmap import process

with open("resource-list.yaml") as f:
    rl = read_resource_list(f.read())
process(rl)
print(rl.to_yaml())
```

```python
from krmkit.metadata import add_finalizer, finalizer_exists
from krmkit.krm import parse_kube_object

obj = parse_kube_object("apiVersion: v1\nkind: Pod\nmetadata:\n  name: p\n")
add_finalizer(obj, "example.com/cleanup")
assert finalizer_exists(obj, "example.com/cleanup")
```

## What it does not do

The package does not connect to a Kubernetes API server. `krmkit.client` defines
only the `Client` protocol and an in-memory `MockClient`. To use
`APIPatchingApplicator` or `APIFinalizer` against a real cluster, you must supply
your own client that implements the protocol. The package also contains no
controllers and no reconcile loop.

## Tests

```
pip install .[test]
pytest
```