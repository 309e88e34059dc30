# ackcore

Building blocks for Kubernetes controllers that manage AWS resources.
The package has no runtime dependencies.

## What is inside

- `ackcore.annotations`: the `services.k8s.aws/` annotation names (such as
  `ANNOTATION_ADOPTED`, `ANNOTATION_REGION` and `ANNOTATION_DELETION_POLICY`),
  the identifier types `AWSRegion`, `AWSAccountID`, `TeamID` and
  `AWSResourceName`, and the `FieldExportOutputType` enum.
- `ackcore.conditions`: `ConditionType`, `ConditionStatus` and the `Condition`
  data class that custom resources carry in their status, with
  `Condition.to_dict()`.
- `ackcore.deletion_policy`: `DeletionPolicy` (`delete` or `retain`) and
  `parse_deletion_policy`, which raises `ValueError` for any other value.
- `ackcore.requeue`: the exceptions `NoRequeue`, `RequeueNeeded` and
  `RequeueNeededAfter`, made with `no_requeue`, `needed` and `needed_after`.
  Each wraps an optional error (`unwrap()`); `RequeueNeededAfter` also carries a
  `duration`.
- `ackcore.resources`: data classes for the core API kinds (`AdoptedResource`,
  `FieldExport`, their specs, statuses and lists, `SecretKeyReference`,
  `ResourceMetadata`, `AWSIdentifiers` and others), `GroupVersion`,
  `GroupVersionKind`, `GroupKind`, plus `to_dict`, which serialises them to
  plain data with camel-case keys, and `registered_kinds`.
- `ackcore.featuregate`: `FeatureGates` (a `dict` with `is_enabled`,
  `get_feature` and `feature_names`), `Feature`, `FeatureStage`,
  `get_default_feature_gates` and `get_feature_gates_with_overrides`.
- `ackcore.delta`: `Path`, `Difference` and `Delta`, which records differences
  at dotted field paths and answers `different_at` and `different_except`.
- `ackcore.compare`: equality helpers for maps, string sequences, metadata
  objects and secret key references, and `get_tags_difference`.
- `ackcore.reporter`: `Reporter`, which follows a path during a structural
  comparison and collects `DiffItem`s where values differ.
- `ackcore.flags`: parsers for flag values: `parse_reconcile_flag_argument`,
  `parse_watch_namespace_string`, `parse_feature_gates` and
  `validate_namespace_name`.
- `ackcore.config`: `Config`, which adds the controller's options to an
  `argparse.ArgumentParser` (`bind_flags`), takes the parsed values
  (`update_from_args`), sets up logging (`setup_logger`) and validates the
  result (`validate`). `Option` and `with_gvks` pass the managed resource
  kinds to validation.

## Examples

```python
from ackcore.featuregate import get_feature_gates_with_overrides

gates = get_feature_gates_with_overrides({"ReadOnlyResources": True})
assert gates.is_enabled("ReadOnlyResources")
```

```python
from ackcore.delta import Delta

delta = Delta()
delta.add("Spec.Tags", {"a": "1"}, {"a": "2"})
assert delta.different_at("Spec")
assert not delta.different_except("Spec.Tags")
```

```python
from ackcore.compare import get_tags_difference

added, unchanged, removed = get_tags_difference({"a": "1", "b": "2"}, {"b": "2", "c": "3"})
assert added == {"c": "3"} and unchanged == {"b": "2"} and removed == {"a": "1"}
```

```python
import argparse

from ackcore.config import Config

parser = argparse.ArgumentParser()
cfg = Config()
cfg.bind_flags(parser)
cfg.update_from_args(parser.parse_args([
    "--aws-region", "us-west-2",
    "--reconcile-resource-max-concurrent-syncs", "Bucket=4",
]))
assert cfg.get_reconcile_resource_max_concurrency("bucket") == 4
assert cfg.get_reconcile_resource_max_concurrency("Queue") == 1
```

`Config.validate` looks up the caller's AWS account with a signed STS
`GetCallerIdentity` request, using the `AWS_ACCESS_KEY_ID`,
`AWS_SECRET_ACCESS_KEY` and optional `AWS_SESSION_TOKEN` environment variables,
so it needs network access and credentials.

## What the package does not do

- It has no helpers that read or set conditions on a resource; `Condition` is
  only the record itself.
- It has no exception hierarchy for controller errors beyond the requeue
  signals in `ackcore.requeue`.
- It keeps no metrics and exposes no metrics endpoint.
- It does not run a controller, talk to a Kubernetes cluster or provide a
  command; it is a library.

## Running the tests

```
pip install -e ".[test]"
pytest
```