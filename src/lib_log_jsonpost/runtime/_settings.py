"""Runtime configuration inputs and their environment overrides.

Purpose
-------
Translate :class:`JsonPostConfig` plus ``LOG_JSONPOST_*`` environment
variables into validated :class:`RuntimeSettings` consumed by the composition
root. Environment values win over arguments so operators can redirect or
reconfigure shipping without code changes.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from lib_log_jsonpost.domain.errors import DeliveryError
from lib_log_jsonpost.domain.fields import FieldSpec, parse_fields
from lib_log_jsonpost.domain.policy import FailurePolicy

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None

ENV_URL = "LOG_JSONPOST_URL"
ENV_FIELDS = "LOG_JSONPOST_FIELDS"
ENV_THROW_ON_FAILED_POST = "LOG_JSONPOST_THROW_ON_FAILED_POST"
ENV_TIMEOUT = "LOG_JSONPOST_TIMEOUT"
ENV_MAX_CONCURRENCY = "LOG_JSONPOST_MAX_CONCURRENCY"
ENV_FAILURE_POLICY = "LOG_JSONPOST_FAILURE_POLICY"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(slots=True, frozen=True)
class JsonPostConfig:
    """Caller-facing configuration of the JSON shipper.

    Attributes
    ----------
    url:
        Destination URL template, e.g. ``"https://logs.example/{LoggerName}"``.
    fields:
        Ordered field list; plain strings use the ``name`` / ``name=template``
        form understood by :meth:`FieldSpec.parse`.
    throw_exceptions_on_failed_post:
        Treat non-2xx responses as delivery failures.
    timeout:
        Per-request timeout in seconds.
    headers:
        Extra default request headers.
    max_concurrency:
        Optional bound on simultaneous requests.
    failure_policy, on_failure:
        Where delivery failures are reported (see :class:`FailurePolicy`).
    poll_interval:
        Drain polling interval in seconds.
    shutdown_timeout:
        Drain deadline applied by :func:`lib_log_jsonpost.runtime.shutdown`.
    diagnostic_hook:
        Optional ``(name, payload)`` callback for delivery milestones.
    """

    url: str | None = None
    fields: Sequence[FieldSpec | str] = ()
    throw_exceptions_on_failed_post: bool = False
    timeout: float | None = 30.0
    headers: Mapping[str, str] | None = None
    max_concurrency: int | None = None
    failure_policy: FailurePolicy | str = FailurePolicy.LOG
    on_failure: Callable[[DeliveryError], None] | None = None
    poll_interval: float = 0.001
    shutdown_timeout: float | None = 10.0
    diagnostic_hook: DiagnosticHook = None


@dataclass(slots=True, frozen=True)
class RuntimeSettings:
    """Validated settings handed to :func:`build_runtime`."""

    url: str
    fields: tuple[FieldSpec, ...]
    throw_on_failure: bool
    timeout: float | None
    headers: dict[str, str] = field(default_factory=dict)
    max_concurrency: int | None = None
    failure_policy: FailurePolicy = FailurePolicy.LOG
    on_failure: Callable[[DeliveryError], None] | None = None
    poll_interval: float = 0.001
    shutdown_timeout: float | None = 10.0
    diagnostic_hook: DiagnosticHook = None


def build_runtime_settings(config: JsonPostConfig) -> RuntimeSettings:
    """Merge ``config`` with environment overrides and validate the result.

    Raises
    ------
    ValueError
        When the URL or field list is missing, or an override is malformed.
    """

    url = os.getenv(ENV_URL) or config.url
    if not url or not url.strip():
        raise ValueError(f"A destination URL is required (argument or {ENV_URL})")

    raw_fields = os.getenv(ENV_FIELDS)
    fields = parse_fields(raw_fields) if raw_fields else _coerce_fields(config.fields)
    if not fields:
        raise ValueError(f"At least one field is required (argument or {ENV_FIELDS})")

    throw_on_failure = _env_bool(ENV_THROW_ON_FAILED_POST, config.throw_exceptions_on_failed_post)
    timeout = _env_timeout(ENV_TIMEOUT, config.timeout)
    max_concurrency = _env_positive_int(ENV_MAX_CONCURRENCY, config.max_concurrency)
    policy = FailurePolicy.from_name(os.getenv(ENV_FAILURE_POLICY) or config.failure_policy)
    if policy is FailurePolicy.CALLBACK and config.on_failure is None:
        raise ValueError("failure_policy 'callback' requires on_failure")
    if config.poll_interval <= 0:
        raise ValueError("poll_interval must be positive")

    return RuntimeSettings(
        url=url.strip(),
        fields=fields,
        throw_on_failure=throw_on_failure,
        timeout=timeout,
        headers=dict(config.headers or {}),
        max_concurrency=max_concurrency,
        failure_policy=policy,
        on_failure=config.on_failure,
        poll_interval=config.poll_interval,
        shutdown_timeout=config.shutdown_timeout,
        diagnostic_hook=config.diagnostic_hook,
    )


def _coerce_fields(fields: Sequence[FieldSpec | str]) -> tuple[FieldSpec, ...]:
    return tuple(spec if isinstance(spec, FieldSpec) else FieldSpec.parse(spec) for spec in fields)


def _env_bool(name: str, default: bool) -> bool:
    """Return the boolean value of an environment variable with fallback.

    Examples
    --------
    >>> import os
    >>> _ = os.environ.pop('LOG_EXAMPLE_BOOL', None)
    >>> _env_bool('LOG_EXAMPLE_BOOL', default=True)
    True
    >>> os.environ['LOG_EXAMPLE_BOOL'] = 'off'
    >>> _env_bool('LOG_EXAMPLE_BOOL', default=True)
    False
    >>> del os.environ['LOG_EXAMPLE_BOOL']
    """
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag (1/0, true/false, yes/no, on/off); got {value!r}")


def _env_timeout(name: str, default: float | None) -> float | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    if value.strip().lower() == "none":
        return None
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds; got {value!r}") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be positive; got {value!r}")
    return parsed


def _env_positive_int(name: str, default: int | None) -> int | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer; got {value!r}") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be positive; got {value!r}")
    return parsed


__all__ = [
    "DiagnosticHook",
    "ENV_FAILURE_POLICY",
    "ENV_FIELDS",
    "ENV_MAX_CONCURRENCY",
    "ENV_THROW_ON_FAILED_POST",
    "ENV_TIMEOUT",
    "ENV_URL",
    "JsonPostConfig",
    "RuntimeSettings",
    "build_runtime_settings",
]
