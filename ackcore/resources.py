"""Custom resource types of the core ACK API group and their serialisation."""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ackcore.annotations import (
    AWSAccountID,
    AWSRegion,
    AWSResourceName,
    FieldExportOutputType,
)
from ackcore.conditions import Condition


def _json(
    name: str,
    *,
    omitempty: bool = False,
    inline: bool = False,
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    """Declare a dataclass field together with its serialised name."""
    metadata = {"json": name, "omitempty": omitempty, "inline": inline}
    if default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    if default is not MISSING:
        return field(default=default, metadata=metadata)
    return field(metadata=metadata)


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with a version of it."""

    group: str
    version: str

    def with_kind(self, kind: str) -> GroupVersionKind:
        """Return the group-version-kind for ``kind`` in this group version."""
        return GroupVersionKind(self.group, self.version, kind)

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


@dataclass(frozen=True)
class GroupVersionKind:
    """A kind of resource within an API group version."""

    group: str
    version: str
    kind: str

    @property
    def group_version(self) -> GroupVersion:
        """The group version this kind belongs to."""
        return GroupVersion(self.group, self.version)

    def __str__(self) -> str:
        return f"{self.group_version}, Kind={self.kind}"


@dataclass(frozen=True)
class GroupKind:
    """A kind of resource within an API group, without a version."""

    group: str = ""
    kind: str = ""

    def __str__(self) -> str:
        if not self.group:
            return self.kind
        return f"{self.kind}.{self.group}"


GROUP_VERSION = GroupVersion(group="services.k8s.aws", version="v1alpha1")

_REGISTERED: list[type] = []


def _register(cls: type) -> type:
    _REGISTERED.append(cls)
    return cls


def registered_kinds() -> list[GroupVersionKind]:
    """Return the kinds registered in the core ACK group version, in order."""
    return [GROUP_VERSION.with_kind(cls.__name__) for cls in _REGISTERED]


@dataclass(kw_only=True)
class TypeMeta:
    """Kind and API version of a serialised object."""

    kind: str = _json("kind", omitempty=True, default="")
    api_version: str = _json("apiVersion", omitempty=True, default="")


@dataclass(kw_only=True)
class OwnerReference:
    """Reference to an object that owns another one."""

    api_version: str = _json("apiVersion", default="")
    kind: str = _json("kind", default="")
    name: str = _json("name", default="")
    uid: str = _json("uid", default="")
    controller: bool | None = _json("controller", omitempty=True, default=None)
    block_owner_deletion: bool | None = _json(
        "blockOwnerDeletion", omitempty=True, default=None
    )


@dataclass(kw_only=True)
class ObjectMeta:
    """Metadata that every persisted object carries."""

    name: str = _json("name", omitempty=True, default="")
    generate_name: str = _json("generateName", omitempty=True, default="")
    namespace: str = _json("namespace", omitempty=True, default="")
    self_link: str = _json("selfLink", omitempty=True, default="")
    uid: str = _json("uid", omitempty=True, default="")
    resource_version: str = _json("resourceVersion", omitempty=True, default="")
    generation: int = _json("generation", omitempty=True, default=0)
    creation_timestamp: datetime | None = _json("creationTimestamp", default=None)
    deletion_timestamp: datetime | None = _json(
        "deletionTimestamp", omitempty=True, default=None
    )
    deletion_grace_period_seconds: int | None = _json(
        "deletionGracePeriodSeconds", omitempty=True, default=None
    )
    labels: dict[str, str] = _json("labels", omitempty=True, default_factory=dict)
    annotations: dict[str, str] = _json(
        "annotations", omitempty=True, default_factory=dict
    )
    owner_references: list[OwnerReference] = _json(
        "ownerReferences", omitempty=True, default_factory=list
    )
    finalizers: list[str] = _json("finalizers", omitempty=True, default_factory=list)
    managed_fields: list[dict[str, Any]] = _json(
        "managedFields", omitempty=True, default_factory=list
    )


@dataclass(kw_only=True)
class ListMeta:
    """Metadata of a list of objects."""

    self_link: str = _json("selfLink", omitempty=True, default="")
    resource_version: str = _json("resourceVersion", omitempty=True, default="")
    continue_: str = _json("continue", omitempty=True, default="")
    remaining_item_count: int | None = _json(
        "remainingItemCount", omitempty=True, default=None
    )


@dataclass(kw_only=True)
class PartialObjectMeta:
    """The subset of object metadata a user may set inside a spec."""

    name: str = _json("name", omitempty=True, default="")
    generate_name: str = _json("generateName", omitempty=True, default="")
    namespace: str = _json("namespace", omitempty=True, default="")
    labels: dict[str, str] = _json("labels", omitempty=True, default_factory=dict)
    annotations: dict[str, str] = _json(
        "annotations", omitempty=True, default_factory=dict
    )
    owner_references: list[OwnerReference] = _json(
        "ownerReferences", omitempty=True, default_factory=list
    )


@dataclass(kw_only=True)
class AWSIdentifiers:
    """All the ways of identifying an AWS resource."""

    arn: AWSResourceName | None = _json("arn", omitempty=True, default=None)
    name_or_id: str = _json("nameOrID", omitempty=True, default="")
    additional_keys: dict[str, str] = _json(
        "additionalKeys", omitempty=True, default_factory=dict
    )


@dataclass(kw_only=True)
class NamespacedResource:
    """An ACK resource of a given kind in the custom resource's namespace."""

    group: str = _json("group", default="")
    kind: str = _json("kind", default="")
    name: str | None = _json("name", default=None)

    @property
    def group_kind(self) -> GroupKind:
        """The group and kind of the referenced resource."""
        return GroupKind(self.group, self.kind)


@dataclass(kw_only=True)
class ResourceWithMetadata:
    """A Kubernetes resource kind with metadata overrides."""

    group: str = _json("group", default="")
    kind: str = _json("kind", default="")
    metadata: PartialObjectMeta | None = _json(
        "metadata", omitempty=True, default=None
    )

    @property
    def group_kind(self) -> GroupKind:
        """The group and kind of the resource to create."""
        return GroupKind(self.group, self.kind)


@dataclass(kw_only=True)
class ResourceFieldSelector:
    """A single field on a single Kubernetes resource."""

    resource: NamespacedResource = _json(
        "resource", default_factory=NamespacedResource
    )
    path: str | None = _json("path", default=None)


@dataclass(kw_only=True)
class AWSResourceReference:
    """Another Kubernetes resource from which an identifier is taken."""

    name: str | None = _json("name", omitempty=True, default=None)
    namespace: str | None = _json("namespace", omitempty=True, default=None)


@dataclass(kw_only=True)
class AWSResourceReferenceWrapper:
    """Wrapper giving references their ``from`` syntax."""

    from_: AWSResourceReference | None = _json("from", omitempty=True, default=None)


@dataclass(kw_only=True)
class FieldExportTarget:
    """Where a field export writes its output."""

    name: str | None = _json("name", default=None)
    namespace: str | None = _json("namespace", omitempty=True, default=None)
    kind: FieldExportOutputType = _json("kind")
    key: str | None = _json("key", omitempty=True, default=None)


@dataclass(kw_only=True)
class FieldExportSpec:
    """Desired state of a FieldExport."""

    from_: ResourceFieldSelector | None = _json("from", default=None)
    to: FieldExportTarget | None = _json("to", default=None)


@dataclass(kw_only=True)
class FieldExportStatus:
    """Observed state of a FieldExport."""

    conditions: list[Condition] = _json("conditions", default_factory=list)


@_register
@dataclass(kw_only=True)
class FieldExport:
    """Copies a field of a resource into a ConfigMap or Secret."""

    type_meta: TypeMeta = _json("", inline=True, default_factory=TypeMeta)
    metadata: ObjectMeta = _json("metadata", omitempty=True, default_factory=ObjectMeta)
    spec: FieldExportSpec = _json(
        "spec", omitempty=True, default_factory=FieldExportSpec
    )
    status: FieldExportStatus = _json(
        "status", omitempty=True, default_factory=FieldExportStatus
    )


@_register
@dataclass(kw_only=True)
class FieldExportList:
    """A list of FieldExports."""

    type_meta: TypeMeta = _json("", inline=True, default_factory=TypeMeta)
    metadata: ListMeta = _json("metadata", omitempty=True, default_factory=ListMeta)
    items: list[FieldExport] = _json("items", default_factory=list)


@dataclass(kw_only=True)
class AdoptedResourceSpec:
    """Desired state of an AdoptedResource."""

    kubernetes: ResourceWithMetadata | None = _json("kubernetes", default=None)
    aws: AWSIdentifiers | None = _json("aws", default=None)


@dataclass(kw_only=True)
class AdoptedResourceStatus:
    """Observed state of an AdoptedResource."""

    conditions: list[Condition] = _json("conditions", default_factory=list)


@dataclass(kw_only=True)
class _AdoptedResourceBase:
    type_meta: TypeMeta = _json("", inline=True, default_factory=TypeMeta)
    metadata: ObjectMeta = _json("metadata", omitempty=True, default_factory=ObjectMeta)
    spec: AdoptedResourceSpec = _json(
        "spec", omitempty=True, default_factory=AdoptedResourceSpec
    )
    status: AdoptedResourceStatus = _json(
        "status", omitempty=True, default_factory=AdoptedResourceStatus
    )


@_register
@dataclass(kw_only=True)
class AdoptedResource(_AdoptedResourceBase):
    """Requests that an existing AWS resource be brought under management."""


@_register
@dataclass(kw_only=True)
class AdoptedResourceList:
    """A list of AdoptedResources."""

    type_meta: TypeMeta = _json("", inline=True, default_factory=TypeMeta)
    metadata: ListMeta = _json("metadata", omitempty=True, default_factory=ListMeta)
    items: list[AdoptedResource] = _json("items", default_factory=list)


@dataclass(kw_only=True)
class ResourceMetadata:
    """Identifiers of the backend AWS resource kept in a CR's status."""

    arn: AWSResourceName | None = _json("arn", omitempty=True, default=None)
    owner_account_id: AWSAccountID | None = _json("ownerAccountID", default=None)
    region: AWSRegion | None = _json("region", default=None)


@dataclass(kw_only=True)
class SecretKeyReference:
    """A key within a named Secret."""

    name: str = _json("name", omitempty=True, default="")
    namespace: str = _json("namespace", omitempty=True, default="")
    key: str = _json("key", default="")


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, Enum):
        return value.value == ""
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    return False


def _convert(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Condition):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return _format_time(value)
    if is_dataclass(value) and not isinstance(value, type):
        return _convert_dataclass(value)
    if isinstance(value, (list, tuple)):
        return [_convert(item) for item in value]
    if isinstance(value, dict):
        return {key: _convert(item) for key, item in value.items()}
    return value


def _convert_dataclass(obj: Any) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for spec in fields(obj):
        if "json" not in spec.metadata:
            continue
        value = getattr(obj, spec.name)
        if spec.metadata["inline"]:
            data.update(_convert_dataclass(value))
            continue
        if spec.metadata["omitempty"] and _is_empty(value):
            continue
        data[spec.metadata["json"]] = _convert(value)
    return data


def to_dict(obj: Any) -> dict[str, Any]:
    """Return the serialised form of an API object as plain data."""
    if isinstance(obj, Condition):
        return obj.to_dict()
    if not is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"cannot serialise object of type {type(obj).__name__}")
    return _convert_dataclass(obj)