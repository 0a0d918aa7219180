"""Error taxonomy for the execution and scoring pipeline.

Two families:

* request-level errors (``ConfigurationError``, ``NotFound``) abort the whole
  compile/submit call and surface as 4xx responses;
* ``Judge0Error`` subclasses are scoped to a single test case and are turned into a
  failed test case result by the runner.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """The question or request is set up in a way that can never be executed."""

    error_code = "E_CONFIGURATION"


class UnsupportedLanguage(ConfigurationError):
    pass


class MissingPlaceholder(ConfigurationError):
    pass


class NoTestCases(ConfigurationError):
    pass


class NotFound(LookupError):
    error_code = "E_NOT_FOUND"


class Judge0Error(Exception):
    """Failure talking to the execution service for one job."""


class DispatchFailed(Judge0Error):
    pass


class ResultFetchFailed(Judge0Error):
    pass


class ExecutionTimeout(Judge0Error):
    pass


class ExecutionCancelled(Judge0Error):
    pass


__all__ = [
    "ConfigurationError",
    "UnsupportedLanguage",
    "MissingPlaceholder",
    "NoTestCases",
    "NotFound",
    "Judge0Error",
    "DispatchFailed",
    "ResultFetchFailed",
    "ExecutionTimeout",
    "ExecutionCancelled",
]
