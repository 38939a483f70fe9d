# ================================================================================
# Retry Executor Module
# ================================================================================
#
# Fault-tolerant execution of flaky browser interactions.
#
# Key Features:
#   - Exponential backoff: initial_delay * 2^(attempt - 1), optional clamp
#   - Fault classification from a configured allow-list of exception kinds
#   - Result classification for value-returning operations
#   - Explicit outcome tagging (Success / ExhaustedWithLastValue)
#   - Decorator form for page-object methods
#
# Usage:
#   executor = RetryExecutor(retryable_faults=["playwright.sync_api.TimeoutError"])
#   executor.execute(lambda: page.click("#login-button"))
#   text = executor.execute_with_result(read_error, result_condition=bool)
#
# ================================================================================

from __future__ import annotations

import builtins
import importlib
import time
from dataclasses import dataclass
from functools import wraps
from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
)

from loguru import logger


T = TypeVar("T")

FaultKind = Union[str, Type[BaseException]]
FaultClassifier = Callable[[BaseException], bool]


def retry_any_exception(error: BaseException) -> bool:
    """Fault classifier used when no retryable fault kinds are configured."""
    return isinstance(error, Exception)


def calculate_backoff(
    initial_delay: float,
    attempt_number: int,
    max_delay: Optional[float] = None,
) -> float:
    """
    Delay to wait after the given failed attempt.

    Args:
        initial_delay: Base delay in seconds (the wait after attempt 1)
        attempt_number: 1-based number of the attempt that just failed
        max_delay: Optional upper bound in seconds

    Returns:
        initial_delay * 2^(attempt_number - 1), clamped to max_delay if set
    """
    if attempt_number < 1:
        raise ValueError(f"attempt_number must be >= 1, got {attempt_number}")

    delay = initial_delay * (2 ** (attempt_number - 1))
    if max_delay is not None:
        delay = min(delay, max_delay)
    return delay


# ================================================================================
# Fault Classification
# ================================================================================

def _resolve_fault_kind(name: str) -> Optional[Type[BaseException]]:
    """Import ``package.module.ClassName`` and return it if it is an exception type."""
    module_name, _, attr = name.rpartition(".")
    try:
        module = importlib.import_module(module_name) if module_name else builtins
    except ImportError:
        return None

    candidate = getattr(module, attr, None)
    if isinstance(candidate, type) and issubclass(candidate, BaseException):
        return candidate
    return None


def _mro_names_match(error: BaseException, name: str) -> bool:
    for cls in type(error).__mro__:
        if cls.__name__ == name or f"{cls.__module__}.{cls.__qualname__}" == name:
            return True
    return False


def _fault_matcher(kind: FaultKind) -> FaultClassifier:
    if isinstance(kind, type):
        return lambda error: isinstance(error, kind)

    # Bare names match any class in the failure's hierarchy with that name,
    # so "TimeoutError" covers both the builtin and Playwright's variant.
    if "." not in kind:
        return lambda error: _mro_names_match(error, kind)

    resolved = _resolve_fault_kind(kind)
    if resolved is not None:
        return lambda error: isinstance(error, resolved)

    logger.debug(f"Fault kind '{kind}' is not importable; matching by qualified name")
    return lambda error: _mro_names_match(error, kind)


def build_fault_classifier(fault_kinds: Optional[Iterable[FaultKind]]) -> FaultClassifier:
    """
    Build a predicate equivalent to ``kind_0 matches OR kind_1 matches OR ...``.

    A failure matches a kind when it is that kind or a subclass of it.
    An empty allow-list classifies every ``Exception`` as retryable.

    Args:
        fault_kinds: Exception classes, dotted import paths
            ("playwright.sync_api.TimeoutError") or bare class names

    Returns:
        Fault classifier callable
    """
    kinds = list(fault_kinds or [])
    if not kinds:
        return retry_any_exception

    matchers = [_fault_matcher(kind) for kind in kinds]

    def classify(error: BaseException) -> bool:
        return any(matcher(error) for matcher in matchers)

    return classify


# ================================================================================
# Policy and Outcomes
# ================================================================================

@dataclass
class RetryPolicy(Generic[T]):
    """
    Retry policy for a single call.

    Attributes:
        max_attempts: Total attempts including the first one
        initial_delay: Wait in seconds after the first failed attempt
        fault_classifier: Decides whether a raised failure may be retried
        result_classifier: Decides whether a returned value is acceptable
        max_delay: Optional clamp for any single backoff wait
    """
    max_attempts: int = 3
    initial_delay: float = 1.0
    fault_classifier: FaultClassifier = retry_any_exception
    result_classifier: Optional[Callable[[T], bool]] = None
    max_delay: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.max_delay is not None and self.max_delay < 0:
            raise ValueError(f"max_delay must be >= 0, got {self.max_delay}")

    def delay_for(self, attempt_number: int) -> float:
        return calculate_backoff(self.initial_delay, attempt_number, self.max_delay)


@dataclass(frozen=True)
class Success(Generic[T]):
    """The operation produced an acceptable value."""
    value: T
    attempts: int

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class ExhaustedWithLastValue(Generic[T]):
    """Every attempt returned a value the result classifier rejected."""
    value: T
    attempts: int

    @property
    def succeeded(self) -> bool:
        return False


RetryOutcome = Union[Success[T], ExhaustedWithLastValue[T]]


# ================================================================================
# Executor
# ================================================================================

class RetryExecutor:
    """
    Executes operations under a retry policy with exponential backoff.

    The executor is synchronous: backoff waits block the calling thread.
    One instance per test is expected; instances share no state.

    Example:
        retry = RetryExecutor(retryable_faults=["playwright.sync_api.TimeoutError"])
        retry.execute(lambda: button.click(), max_attempts=3, initial_delay=0.5)

        message = retry.execute_with_result(
            lambda: error_banner.text_content(),
            result_condition=lambda text: bool(text and text.strip()),
        )
    """

    def __init__(
        self,
        retryable_faults: Optional[Iterable[FaultKind]] = None,
        max_delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the executor.

        Args:
            retryable_faults: Allow-list of fault kinds, read once here.
                Empty or None retries any Exception.
            max_delay: Clamp in seconds for a single backoff wait (None = no clamp)
            sleep: Blocking wait function, injectable for tests
        """
        self.retryable_faults: List[FaultKind] = list(retryable_faults or [])
        self.fault_classifier = build_fault_classifier(self.retryable_faults)
        self.max_delay = max_delay
        self._sleep = sleep

        logger.info(
            f"RetryExecutor initialized. Retryable faults: "
            f"{[self._kind_name(k) for k in self.retryable_faults] or 'any Exception'}, "
            f"max delay: {max_delay if max_delay is not None else 'unbounded'}"
        )

    @staticmethod
    def _kind_name(kind: FaultKind) -> str:
        return kind if isinstance(kind, str) else kind.__name__

    def build_policy(
        self,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        result_condition: Optional[Callable[[Any], bool]] = None,
    ) -> RetryPolicy:
        """Policy using this executor's fault classifier and delay clamp."""
        return RetryPolicy(
            max_attempts=max_attempts,
            initial_delay=initial_delay,
            fault_classifier=self.fault_classifier,
            result_classifier=result_condition,
            max_delay=self.max_delay,
        )

    def execute_with_policy(
        self,
        function: Callable[[], T],
        policy: RetryPolicy,
        action_logger=None,
        description: Optional[str] = None,
    ) -> RetryOutcome:
        """
        Run ``function`` until it succeeds or the policy is exhausted.

        Args:
            function: Zero-argument callable
            policy: Retry policy to apply
            action_logger: Logger for attempt records (defaults to module logger)
            description: Name used in log records

        Returns:
            Success or ExhaustedWithLastValue

        Raises:
            The last failure, unchanged, once attempts are exhausted, or the
            first failure the fault classifier rejects.
        """
        log = action_logger or logger
        name = description or getattr(function, "__name__", "operation")
        attempt = 1

        while True:
            try:
                value = function()
            except Exception as error:
                fault = type(error).__name__
                if not policy.fault_classifier(error):
                    log.error(
                        f"Non-retryable {fault} in '{name}' on attempt "
                        f"{attempt}/{policy.max_attempts}: {error}"
                    )
                    raise
                if attempt >= policy.max_attempts:
                    log.error(
                        f"All {policy.max_attempts} attempts failed for '{name}'. "
                        f"Last failure {fault}: {error}"
                    )
                    raise
                delay = policy.delay_for(attempt)
                log.warning(
                    f"Retry {attempt}/{policy.max_attempts} for '{name}' (fault) due to "
                    f"{fault}: {error}. Waiting {delay:.3f}s before next attempt."
                )
            else:
                if policy.result_classifier is None or policy.result_classifier(value):
                    if attempt > 1:
                        log.info(f"'{name}' succeeded on attempt {attempt}/{policy.max_attempts}")
                    return Success(value=value, attempts=attempt)
                if attempt >= policy.max_attempts:
                    log.warning(
                        f"Result condition for '{name}' still unmet after "
                        f"{policy.max_attempts} attempts. Returning last value {value!r}."
                    )
                    return ExhaustedWithLastValue(value=value, attempts=attempt)
                delay = policy.delay_for(attempt)
                log.warning(
                    f"Retry {attempt}/{policy.max_attempts} for '{name}' (result condition) "
                    f"because result was {value!r}. Waiting {delay:.3f}s before next attempt."
                )

            self._sleep(delay)
            attempt += 1

    def execute(
        self,
        operation: Callable[[], Any],
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        action_logger=None,
        description: Optional[str] = None,
    ) -> None:
        """
        Execute an action, retrying classified faults with exponential backoff.

        Args:
            operation: Zero-argument callable; its return value is ignored
            max_attempts: Total attempts including the first
            initial_delay: Wait in seconds after the first failure
            action_logger: Logger for attempt records
            description: Name used in log records
        """
        policy = self.build_policy(max_attempts, initial_delay)
        self.execute_with_policy(operation, policy, action_logger, description)

    def execute_with_result(
        self,
        function: Callable[[], T],
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        result_condition: Optional[Callable[[T], bool]] = None,
        action_logger=None,
        description: Optional[str] = None,
    ) -> T:
        """
        Execute a function and return its value.

        If ``result_condition`` is never satisfied, the value of the last
        attempt is returned without raising. Callers that need exhaustion to
        be fatal must assert on the returned value, or use
        ``execute_for_outcome``.
        """
        return self.execute_for_outcome(
            function,
            max_attempts=max_attempts,
            initial_delay=initial_delay,
            result_condition=result_condition,
            action_logger=action_logger,
            description=description,
        ).value

    def execute_for_outcome(
        self,
        function: Callable[[], T],
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        result_condition: Optional[Callable[[T], bool]] = None,
        action_logger=None,
        description: Optional[str] = None,
    ) -> RetryOutcome:
        """Same loop as ``execute_with_result`` but tags the outcome explicitly."""
        policy = self.build_policy(max_attempts, initial_delay, result_condition)
        return self.execute_with_policy(function, policy, action_logger, description)


def retryable(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    result_condition: Optional[Callable[[Any], bool]] = None,
    executor: Optional[RetryExecutor] = None,
):
    """
    Decorator running a method through a RetryExecutor.

    The executor is taken from the ``executor`` argument, else from a ``retry``
    attribute on the bound instance (page objects carry one), else a default
    executor that retries any Exception.

    Args:
        max_attempts: Total attempts including the first
        initial_delay: Wait in seconds after the first failure
        result_condition: Optional acceptance check on the returned value
        executor: Explicit executor to use
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            active = executor
            if active is None and args:
                active = getattr(args[0], "retry", None)
            if not isinstance(active, RetryExecutor):
                active = RetryExecutor()

            return active.execute_with_result(
                lambda: func(*args, **kwargs),
                max_attempts=max_attempts,
                initial_delay=initial_delay,
                result_condition=result_condition,
                description=func.__qualname__,
            )

        return wrapper
    return decorator


__all__ = [
    "ExhaustedWithLastValue",
    "RetryExecutor",
    "RetryOutcome",
    "RetryPolicy",
    "Success",
    "build_fault_classifier",
    "calculate_backoff",
    "retry_any_exception",
    "retryable",
]
