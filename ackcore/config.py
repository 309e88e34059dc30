"""Configuration of an ACK service controller: flags, validation and logging."""

from __future__ import annotations

import argparse
import hashlib
import hmac
import json
import logging
import os
import urllib.error
import urllib.request
import xml.etree.ElementTree as ElementTree
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import SplitResult, urlsplit

from ackcore.deletion_policy import DeletionPolicy, parse_deletion_policy
from ackcore.featuregate import (
    FeatureGates,
    get_default_feature_gates,
    get_feature_gates_with_overrides,
)
from ackcore.flags import (
    _parse_bool,
    parse_feature_gates,
    parse_reconcile_flag_argument,
    parse_watch_namespace_string,
)
from ackcore.resources import GroupVersionKind

FLAG_ENABLE_ADOPTED_RESOURCE_RECONCILER = "enable-adopted-resource-reconciler"
FLAG_ENABLE_LEADER_ELECTION = "enable-leader-election"
FLAG_LEADER_ELECTION_NAMESPACE = "leader-election-namespace"
FLAG_METRIC_ADDR = "metrics-addr"
FLAG_HEALTHZ_ADDR = "healthz-addr"
FLAG_ENABLE_DEV_LOGGING = "enable-development-logging"
FLAG_AWS_REGION = "aws-region"
FLAG_AWS_ENDPOINT_URL = "aws-endpoint-url"
FLAG_AWS_IDENTITY_ENDPOINT_URL = "aws-identity-endpoint-url"
FLAG_UNSAFE_AWS_ENDPOINT_URLS = "allow-unsafe-aws-endpoint-urls"
FLAG_LOG_LEVEL = "log-level"
FLAG_RESOURCE_TAGS = "resource-tags"
FLAG_WATCH_NAMESPACE = "watch-namespace"
FLAG_ENABLE_WEBHOOK_SERVER = "enable-webhook-server"
FLAG_WEBHOOK_SERVER_ADDR = "webhook-server-addr"
FLAG_DELETION_POLICY = "deletion-policy"
FLAG_RECONCILE_DEFAULT_RESYNC_SECONDS = "reconcile-default-resync-seconds"
FLAG_RECONCILE_RESOURCE_RESYNC_SECONDS = "reconcile-resource-resync-seconds"
FLAG_RECONCILE_DEFAULT_MAX_CONCURRENCY = "reconcile-default-max-concurrent-syncs"
FLAG_RECONCILE_RESOURCE_MAX_CONCURRENCY = "reconcile-resource-max-concurrent-syncs"
FLAG_FEATURE_GATES = "feature-gates"
ENV_VAR_AWS_REGION = "AWS_REGION"

SERVICE_ALIAS_TAG_FORMAT = "%CONTROLLER_SERVICE%"
CONTROLLER_VERSION_TAG_FORMAT = "%CONTROLLER_VERSION%"
NAMESPACE_TAG_FORMAT = "%K8S_NAMESPACE%"

DEFAULT_RESOURCE_TAGS: tuple[str, ...] = (
    "services.k8s.aws/controller-version="
    f"{SERVICE_ALIAS_TAG_FORMAT}-{CONTROLLER_VERSION_TAG_FORMAT}",
    f"services.k8s.aws/namespace={NAMESPACE_TAG_FORMAT}",
)

_STS_GLOBAL_ENDPOINT = "https://sts.amazonaws.com/"
_STS_BODY = b"Action=GetCallerIdentity&Version=2011-06-15"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "dpanic": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}


@dataclass(frozen=True)
class Option:
    """Extra information used when validating a configuration."""

    gvks: tuple[GroupVersionKind, ...] = ()


def with_gvks(gvks: Iterable[GroupVersionKind]) -> Option:
    """Validate against the given resource kinds managed by the controller."""
    return Option(gvks=tuple(gvks))


def _merge_options(options: Iterable[Option]) -> Option:
    merged = Option()
    for option in options:
        if option.gvks:
            merged = Option(gvks=option.gvks)
    return merged


def _bool_flag(text: str) -> bool:
    try:
        return _parse_bool(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _deletion_policy_flag(text: str) -> DeletionPolicy:
    try:
        return parse_deletion_policy(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _csv_flag(text: str) -> list[str]:
    return [] if text == "" else text.split(",")


class _ISO8601Formatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        moment = datetime.fromtimestamp(record.created).astimezone()
        return moment.isoformat(timespec="milliseconds")


class _JSONFormatter(_ISO8601Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": record.levelname.lower(),
            "ts": self.formatTime(record),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["stacktrace"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _hmac(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def _sign_sts_request(
    endpoint: SplitResult,
    region: str,
    access_key: str,
    secret_key: str,
    session_token: str | None,
    now: datetime,
) -> dict[str, str]:
    """Return the headers of a SigV4-signed GetCallerIdentity request."""
    amz_date = now.strftime("%Y%m%dT%H%M%SZ")
    date = now.strftime("%Y%m%d")
    headers = {
        "content-type": "application/x-www-form-urlencoded; charset=utf-8",
        "host": endpoint.netloc,
        "x-amz-date": amz_date,
    }
    if session_token:
        headers["x-amz-security-token"] = session_token
    names = sorted(headers)
    signed_headers = ";".join(names)
    canonical_headers = "".join(f"{name}:{headers[name]}\n" for name in names)
    canonical_request = "\n".join(
        [
            "POST",
            endpoint.path or "/",
            "",
            canonical_headers,
            signed_headers,
            hashlib.sha256(_STS_BODY).hexdigest(),
        ]
    )
    scope = f"{date}/{region}/sts/aws4_request"
    string_to_sign = "\n".join(
        [
            "AWS4-HMAC-SHA256",
            amz_date,
            scope,
            hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
        ]
    )
    signing_key = ("AWS4" + secret_key).encode("utf-8")
    for part in (date, region, "sts", "aws4_request"):
        signing_key = _hmac(signing_key, part)
    signature = hmac.new(
        signing_key, string_to_sign.encode("utf-8"), hashlib.sha256
    ).hexdigest()
    headers["authorization"] = (
        f"AWS4-HMAC-SHA256 Credential={access_key}/{scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )
    return headers


def _account_from_response(payload: bytes) -> str:
    root = ElementTree.fromstring(payload)
    for element in root.iter():
        if element.tag.rsplit("}", 1)[-1] == "Account" and element.text:
            return element.text.strip()
    raise ValueError("response holds no account")


@dataclass
class Config:
    """Configuration options of an ACK service controller."""

    metrics_addr: str = "0.0.0.0:8080"
    healthz_addr: str = "0.0.0.0:8081"
    enable_leader_election: bool = False
    enable_adopted_resource_reconciler: bool = True
    leader_election_namespace: str = ""
    enable_development_logging: bool = False
    account_id: str = ""
    region: str = ""
    identity_endpoint_url: str = ""
    endpoint_url: str = ""
    allow_unsafe_endpoint_url: bool = False
    log_level: str = "info"
    resource_tags: list[str] = field(
        default_factory=lambda: list(DEFAULT_RESOURCE_TAGS)
    )
    watch_namespace: str = ""
    enable_webhook_server: bool = False
    webhook_server_addr: str = "0.0.0.0:9433"
    deletion_policy: DeletionPolicy | None = None
    reconcile_default_resync_seconds: int = 0
    reconcile_resource_resync_seconds: list[str] = field(default_factory=list)
    reconcile_default_max_concurrency: int = 1
    reconcile_resource_max_concurrency: list[str] = field(default_factory=list)
    feature_gates: FeatureGates = field(default_factory=FeatureGates)
    feature_gates_raw: str = ""

    def bind_flags(self, parser: argparse.ArgumentParser) -> None:
        """Add the controller's command-line options to ``parser``."""

        def add_bool(flag: str, dest: str, default: bool, help_text: str) -> None:
            parser.add_argument(
                f"--{flag}",
                dest=dest,
                nargs="?",
                const=True,
                default=default,
                type=_bool_flag,
                help=help_text,
            )

        parser.add_argument(
            f"--{FLAG_METRIC_ADDR}",
            dest="metrics_addr",
            default="0.0.0.0:8080",
            help="The address the metric endpoint binds to.",
        )
        parser.add_argument(
            f"--{FLAG_HEALTHZ_ADDR}",
            dest="healthz_addr",
            default="0.0.0.0:8081",
            help="The address the health probe endpoint binds to.",
        )
        add_bool(
            FLAG_ENABLE_WEBHOOK_SERVER,
            "enable_webhook_server",
            False,
            "Enable webhook server for controller manager.",
        )
        parser.add_argument(
            f"--{FLAG_WEBHOOK_SERVER_ADDR}",
            dest="webhook_server_addr",
            default="0.0.0.0:9433",
            help="The address the webhook endpoint binds to.",
        )
        add_bool(
            FLAG_ENABLE_LEADER_ELECTION,
            "enable_leader_election",
            False,
            "Enable leader election for controller manager. Enabling this will "
            "ensure there is only one active controller manager.",
        )
        add_bool(
            FLAG_ENABLE_ADOPTED_RESOURCE_RECONCILER,
            "enable_adopted_resource_reconciler",
            True,
            "Enable the AdoptedResource reconciler.",
        )
        parser.add_argument(
            f"--{FLAG_LEADER_ELECTION_NAMESPACE}",
            dest="leader_election_namespace",
            default="",
            help="Namespace holding the lease object used for leader election. "
            "Defaults to the namespace of the controller's service account.",
        )
        add_bool(
            FLAG_ENABLE_DEV_LOGGING,
            "enable_development_logging",
            False,
            "Use human-readable development logging instead of JSON logs.",
        )
        parser.add_argument(
            f"--{FLAG_AWS_REGION}",
            dest="region",
            default=os.environ.get(ENV_VAR_AWS_REGION, ""),
            help="The AWS Region in which the service controller will create "
            "its resources",
        )
        parser.add_argument(
            f"--{FLAG_AWS_ENDPOINT_URL}",
            dest="endpoint_url",
            default="",
            help="Override of the AWS endpoint URL used to manage resources.",
        )
        parser.add_argument(
            f"--{FLAG_AWS_IDENTITY_ENDPOINT_URL}",
            dest="identity_endpoint_url",
            default="",
            help="Override of the AWS endpoint URL used to query STS.",
        )
        add_bool(
            FLAG_UNSAFE_AWS_ENDPOINT_URLS,
            "allow_unsafe_endpoint_url",
            False,
            "Allow an unsafe AWS endpoint URL over http",
        )
        parser.add_argument(
            f"--{FLAG_LOG_LEVEL}",
            dest="log_level",
            default="info",
            help="The log level. The default is info. The options are: debug, "
            "info, warn, error, dpanic, panic, fatal",
        )
        parser.add_argument(
            f"--{FLAG_RESOURCE_TAGS}",
            dest="resource_tags",
            action="append",
            type=_csv_flag,
            default=None,
            help="Key/value tags always set on resources managed by the "
            "controller.",
        )
        parser.add_argument(
            f"--{FLAG_WATCH_NAMESPACE}",
            dest="watch_namespace",
            default="",
            help="A comma-separated list of valid RFC-1123 namespace names to "
            "watch. If unspecified, all namespaces are watched.",
        )
        parser.add_argument(
            f"--{FLAG_DELETION_POLICY}",
            dest="deletion_policy",
            type=_deletion_policy_flag,
            default=None,
            metavar="DeletionPolicy",
            help="The default deletion policy for all resources managed by the "
            "controller",
        )
        parser.add_argument(
            f"--{FLAG_RECONCILE_DEFAULT_RESYNC_SECONDS}",
            dest="reconcile_default_resync_seconds",
            type=int,
            default=0,
            help="Default number of seconds to wait before resyncing resources.",
        )
        parser.add_argument(
            f"--{FLAG_RECONCILE_RESOURCE_RESYNC_SECONDS}",
            dest="reconcile_resource_resync_seconds",
            action="append",
            default=None,
            help="Resource-specific resync periods, as kind=seconds.",
        )
        parser.add_argument(
            f"--{FLAG_RECONCILE_DEFAULT_MAX_CONCURRENCY}",
            dest="reconcile_default_max_concurrency",
            type=int,
            default=1,
            help="Default maximum number of concurrent reconciles. Default is 1.",
        )
        parser.add_argument(
            f"--{FLAG_RECONCILE_RESOURCE_MAX_CONCURRENCY}",
            dest="reconcile_resource_max_concurrency",
            action="append",
            default=None,
            help="Resource-specific maximum concurrent reconciles, as kind=number.",
        )
        parser.add_argument(
            f"--{FLAG_FEATURE_GATES}",
            dest="feature_gates_raw",
            default="",
            help="Comma-separated key=value pairs of feature gates. Available "
            "features: "
            + ", ".join(get_default_feature_gates().feature_names()),
        )

    def update_from_args(self, args: argparse.Namespace) -> None:
        """Copy the values parsed by a parser set up with ``bind_flags``."""
        plain = (
            "metrics_addr",
            "healthz_addr",
            "enable_webhook_server",
            "webhook_server_addr",
            "enable_leader_election",
            "enable_adopted_resource_reconciler",
            "leader_election_namespace",
            "enable_development_logging",
            "region",
            "endpoint_url",
            "identity_endpoint_url",
            "allow_unsafe_endpoint_url",
            "log_level",
            "watch_namespace",
            "deletion_policy",
            "reconcile_default_resync_seconds",
            "reconcile_default_max_concurrency",
            "feature_gates_raw",
        )
        for name in plain:
            if hasattr(args, name):
                setattr(self, name, getattr(args, name))
        if hasattr(args, "resource_tags"):
            groups = args.resource_tags
            self.resource_tags = (
                list(DEFAULT_RESOURCE_TAGS)
                if groups is None
                else [tag for group in groups for tag in group]
            )
        for name in (
            "reconcile_resource_resync_seconds",
            "reconcile_resource_max_concurrency",
        ):
            if hasattr(args, name):
                setattr(self, name, list(getattr(args, name) or []))

    def setup_logger(self) -> logging.Logger:
        """Configure and return the root logger from the logging options."""
        level = _LOG_LEVELS.get(self.log_level.lower(), logging.INFO)
        root = logging.getLogger()
        for handler in list(root.handlers):
            if getattr(handler, "_ackcore_handler", False):
                root.removeHandler(handler)
        handler = logging.StreamHandler()
        handler._ackcore_handler = True  # type: ignore[attr-defined]
        if self.enable_development_logging:
            handler.setFormatter(
                _ISO8601Formatter("%(asctime)s\t%(levelname)s\t%(name)s\t%(message)s")
            )
        else:
            handler.setFormatter(_JSONFormatter())
        root.addHandler(handler)
        root.setLevel(level)
        return root

    def set_aws_account_id(self) -> None:
        """Look up the caller's AWS account with STS and store it.

        Raises RuntimeError if the identity cannot be determined.
        """
        access_key = os.environ.get("AWS_ACCESS_KEY_ID", "")
        secret_key = os.environ.get("AWS_SECRET_ACCESS_KEY", "")
        session_token = os.environ.get("AWS_SESSION_TOKEN")
        if not access_key or not secret_key:
            raise RuntimeError(
                "unable to get caller identity: no AWS credentials found"
            )
        if self.identity_endpoint_url:
            try:
                endpoint = urlsplit(self.identity_endpoint_url)
            except ValueError as exc:
                raise RuntimeError(f"unable to create session: {exc}") from exc
            signing_region = (
                os.environ.get(ENV_VAR_AWS_REGION) or self.region or "us-east-1"
            )
        else:
            endpoint = urlsplit(_STS_GLOBAL_ENDPOINT)
            signing_region = "us-east-1"
        headers = _sign_sts_request(
            endpoint,
            signing_region,
            access_key,
            secret_key,
            session_token,
            datetime.now(timezone.utc),
        )
        headers.pop("host")
        request = urllib.request.Request(
            endpoint.geturl(), data=_STS_BODY, headers=headers, method="POST"
        )
        try:
            with urllib.request.urlopen(request, timeout=30) as response:
                payload = response.read()
            self.account_id = _account_from_response(payload)
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise RuntimeError(f"unable to get caller identity: {exc}") from exc

    def validate(self, *options: Option) -> None:
        """Check the options, filling in derived values.

        Raises ValueError for invalid settings and RuntimeError when the AWS
        account cannot be determined.
        """
        merged = _merge_options(options)
        if merged.gvks:
            try:
                self._validate_reconcile_config_resources(merged.gvks)
            except ValueError as exc:
                raise ValueError(
                    f"invalid value for flag "
                    f"'{FLAG_RECONCILE_RESOURCE_RESYNC_SECONDS}': {exc}"
                ) from exc

        if self.region == "":
            raise ValueError(
                "unable to start service controller as AWS region is missing. "
                "Please pass --aws-region flag or set AWS_REGION environment "
                "variable"
            )

        for url, what in (
            (self.endpoint_url, "service"),
            (self.identity_endpoint_url, "identity"),
        ):
            if url == "":
                continue
            try:
                endpoint = urlsplit(url)
                endpoint.port
            except ValueError:
                raise ValueError(
                    f"invalid {what} endpoint. Please refer to the AWS service "
                    "endpoint documentation for more details"
                ) from None
            self._check_unsafe_endpoint(endpoint)

        try:
            self.set_aws_account_id()
        except RuntimeError as exc:
            raise RuntimeError(f"unable to determine account ID: {exc}") from exc

        if self.enable_webhook_server and self.webhook_server_addr == "":
            raise ValueError("empty webhook server address")

        if self.deletion_policy is None:
            self.deletion_policy = DeletionPolicy.DELETE

        if self.reconcile_default_resync_seconds < 0:
            raise ValueError(
                f"invalid value for flag '{FLAG_RECONCILE_DEFAULT_RESYNC_SECONDS}': "
                "resync seconds default must be greater than 0"
            )
        if self.reconcile_default_max_concurrency < 1:
            raise ValueError(
                f"invalid value for flag '{FLAG_RECONCILE_DEFAULT_MAX_CONCURRENCY}': "
                "max concurrency default must be greater than 0"
            )

        try:
            overrides = parse_feature_gates(self.feature_gates_raw)
        except ValueError as exc:
            raise ValueError(
                f"invalid value for flag '{FLAG_FEATURE_GATES}': {exc}"
            ) from exc
        try:
            self.feature_gates = get_feature_gates_with_overrides(overrides)
        except ValueError as exc:
            raise ValueError(f"error overriding feature gates: {exc}") from exc

    def _check_unsafe_endpoint(self, endpoint: SplitResult) -> None:
        if (
            not self.allow_unsafe_endpoint_url
            and endpoint.scheme != "https"
            and endpoint.netloc != ""
        ):
            raise ValueError(
                "using an unsafe endpoint is not allowed. Please review the "
                "controller configuration"
            )

    def _validate_reconcile_config_resources(
        self, supported_gvks: Iterable[GroupVersionKind]
    ) -> None:
        valid_names = [gvk.kind for gvk in supported_gvks]
        for flag, arguments in (
            (FLAG_RECONCILE_RESOURCE_RESYNC_SECONDS, self.reconcile_resource_resync_seconds),
            (
                FLAG_RECONCILE_RESOURCE_MAX_CONCURRENCY,
                self.reconcile_resource_max_concurrency,
            ),
        ):
            for argument in arguments:
                try:
                    _validate_reconcile_config_resource(valid_names, argument)
                except ValueError as exc:
                    raise ValueError(
                        f"invalid value for flag '{flag}': {exc}"
                    ) from exc

    def get_watch_namespaces(self) -> list[str] | None:
        """Return the namespaces to watch, or None for all namespaces."""
        return parse_watch_namespace_string(self.watch_namespace)

    def parse_reconcile_resource_resync_seconds(self) -> dict[str, int]:
        """Map lower-cased resource kinds to their resync period in seconds."""
        return dict(
            _lenient_parse(argument)
            for argument in self.reconcile_resource_resync_seconds
        )

    def get_reconcile_resource_max_concurrency(self, resource_name: str) -> int:
        """Return the concurrency limit for a kind, or the default limit."""
        for argument in self.reconcile_resource_max_concurrency:
            name, limit = _lenient_parse(argument, lower=False)
            if name.casefold() == resource_name.casefold():
                return limit
        return self.reconcile_default_max_concurrency


def _lenient_parse(argument: str, lower: bool = True) -> tuple[str, int]:
    try:
        name, value = parse_reconcile_flag_argument(argument)
    except ValueError:
        return "", 0
    return (name.lower() if lower else name), value


def _validate_reconcile_config_resource(valid_names: list[str], argument: str) -> None:
    try:
        name, _ = parse_reconcile_flag_argument(argument)
    except ValueError as exc:
        raise ValueError(
            f"error parsing flag argument '{argument}': {exc}. "
            "Expected format: string=number"
        ) from exc
    if name not in valid_names:
        raise ValueError(
            f"error parsing flag argument '{argument}': resource '{name}' is not "
            "managed by this controller. Expected one of "
            + ", ".join(valid_names)
        )