"""Exceptions that tell the reconciler whether and when to requeue."""

from __future__ import annotations

from datetime import timedelta

DEFAULT_REQUEUE_AFTER_DURATION = timedelta(seconds=30)


class _WrappingError(Exception):
    """An exception carrying an optional underlying error."""

    def __init__(self, err: BaseException | None = None) -> None:
        super().__init__()
        self.err = err
        self.__cause__ = err

    def __str__(self) -> str:
        return "" if self.err is None else str(self.err)

    def unwrap(self) -> BaseException | None:
        """Return the wrapped error, or None."""
        return self.err


class NoRequeue(_WrappingError):
    """Report the error but do not requeue the item that raised it."""


class RequeueNeeded(_WrappingError):
    """Requeue the item without logging the error as a failure."""


class RequeueNeededAfter(RequeueNeeded):
    """Requeue the item after a given delay without logging an error."""

    def __init__(
        self,
        err: BaseException | None = None,
        duration: timedelta = timedelta(0),
    ) -> None:
        super().__init__(err)
        self.duration = duration


def no_requeue(err: BaseException | None) -> NoRequeue:
    """Wrap ``err`` so that it is reported but not requeued."""
    return NoRequeue(err)


def needed(err: BaseException | None) -> RequeueNeeded:
    """Wrap ``err`` so that the item is requeued."""
    return RequeueNeeded(err)


def needed_after(err: BaseException | None, duration: timedelta) -> RequeueNeededAfter:
    """Wrap ``err`` so that the item is requeued after ``duration``."""
    return RequeueNeededAfter(err, duration)