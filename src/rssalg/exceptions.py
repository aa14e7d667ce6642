"""
Exception hierarchy for RSSalg experiments.

All errors raised by the package derive from RSSalgError so callers can
catch experiment failures as a group. None of them is used for ordinary
control flow.
"""

from typing import Optional


class RSSalgError(Exception):
    """Base class for all RSSalg errors."""


class ConfigurationError(RSSalgError, ValueError):
    """Invalid experiment settings, detected eagerly at construction time."""


class TrainingError(RSSalgError):
    """
    A classifier could not be fitted on a partition.

    The optional context (view, iteration, fold) is appended to the message
    so the failing run can be located.
    """

    def __init__(
        self,
        message: str,
        view: Optional[int] = None,
        iteration: Optional[int] = None,
        fold: Optional[int] = None
    ):
        self.view = view
        self.iteration = iteration
        self.fold = fold
        context = []
        if view is not None:
            context.append(f"view={view}")
        if iteration is not None:
            context.append(f"iteration={iteration}")
        if fold is not None:
            context.append(f"fold={fold}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class MissingInstanceError(RSSalgError, LookupError):
    """An instance id expected in a partition (or statistic) is absent."""

    def __init__(self, instance_id, message: Optional[str] = None):
        self.instance_id = instance_id
        super().__init__(message or f"Instance {instance_id} not found")

    def __str__(self) -> str:
        # LookupError would otherwise repr() the message
        return self.args[0]


class DataLeakageError(RSSalgError):
    """A test-set instance was found in the accumulated ensemble statistics."""

    def __init__(self, instance_id):
        self.instance_id = instance_id
        super().__init__(
            f"Training on test data: instance {instance_id} from the test set "
            f"is present in the ensemble statistics"
        )


class PersistenceError(RSSalgError):
    """Persisted statistics could not be written or read."""

    def __init__(self, path, message: str):
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")
