"""Cooperative cancellation for generation runs."""

from .errors import GenerationCancelled


class CancellationToken:
    """
    Flag shared between a pipeline and the run it started.

    Cancelling does not interrupt an in-flight call; the run observes the
    flag at its next checkpoint and unwinds with GenerationCancelled.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise GenerationCancelled()
