"""Annotation keys and common identifier types for ACK custom resources."""

from __future__ import annotations

from enum import Enum
from typing import NewType

ANNOTATION_PREFIX = "services.k8s.aws/"

# When true, the backend AWS resource is expected to exist already and is
# adopted into management rather than created.
ANNOTATION_ADOPTED = ANNOTATION_PREFIX + "adopted"
# AWS account that owns the resource; enables cross-account management.
ANNOTATION_OWNER_ACCOUNT_ID = ANNOTATION_PREFIX + "owner-account-id"
# Team identifier whose role is assumed to manage the resource.
ANNOTATION_TEAM_ID = ANNOTATION_PREFIX + "team-id"
# Region in which the resource is created; never overridden by the controller.
ANNOTATION_REGION = ANNOTATION_PREFIX + "region"
# Namespace-level default region, used when no region annotation is set.
ANNOTATION_DEFAULT_REGION = ANNOTATION_PREFIX + "default-region"
# Namespace-level endpoint URL override.
ANNOTATION_ENDPOINT_URL = ANNOTATION_PREFIX + "endpoint-url"
# Deletion policy for the resource: "delete" or "retain".
ANNOTATION_DELETION_POLICY = ANNOTATION_PREFIX + "deletion-policy"
# When true, the resource is never created, patched or deleted.
ANNOTATION_READ_ONLY = ANNOTATION_PREFIX + "read-only"

AWSRegion = NewType("AWSRegion", str)
AWSAccountID = NewType("AWSAccountID", str)
TeamID = NewType("TeamID", str)
AWSResourceName = NewType("AWSResourceName", str)


class FieldExportOutputType(str, Enum):
    """Kinds of object a field export can write to."""

    CONFIG_MAP = "configmap"
    SECRET = "secret"

    def __str__(self) -> str:
        return self.value