from __future__ import annotations


class CancellationToken:
    """Marks a translation request as superseded.

    Adapters hand one token to every request they issue and cancel it when
    their input changes or they are closed; late results are then dropped.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
