"""Error taxonomy for workload metric queries.

Validation errors are raised before any I/O. Access and backend errors carry
the underlying cause so handlers can log it without echoing it to callers.
"""

from __future__ import annotations


class MetricsQueryError(Exception):
    """Base class for every failure raised while serving a metrics query."""


class ParameterValidationError(MetricsQueryError):
    """A query parameter is malformed or out of its allowed domain."""

    def __init__(self, parameter: str, message: str) -> None:
        super().__init__(message)
        self.parameter = parameter
        self.message = message

    @classmethod
    def unparseable(cls, parameter: str, detail: str | None = None) -> ParameterValidationError:
        message = f"cannot parse query parameter '{parameter}'"
        if detail:
            message = f"{message}: {detail}"
        return cls(parameter, message)

    @classmethod
    def not_one_of(cls, parameter: str, allowed: tuple[str, ...]) -> ParameterValidationError:
        choices = " or ".join(f"'{value}'" for value in allowed)
        return cls(parameter, f"query parameter '{parameter}' must be either {choices}")


class AccessDeniedError(MetricsQueryError):
    """The caller may not read the requested namespace."""

    def __init__(self, namespace: str, cause: str | None = None) -> None:
        super().__init__(f"namespace '{namespace}' is not accessible")
        self.namespace = namespace
        self.cause = cause


class BackendQueryError(MetricsQueryError):
    """A single expression failed against the metrics backend."""

    def __init__(self, expression: str, cause: str) -> None:
        super().__init__(f"query failed: {cause}")
        self.expression = expression
        self.cause = cause


class QueryExecutionError(MetricsQueryError):
    """One or more backend calls for a request failed."""

    def __init__(self, failures: list[BackendQueryError]) -> None:
        self.failures = failures
        count = len(failures)
        noun = "query" if count == 1 else "queries"
        causes = "; ".join(dict.fromkeys(failure.cause for failure in failures))
        super().__init__(f"{count} metrics {noun} failed: {causes}")
