"""ErrorClassifier implementation for step attribution.

Maps the free-form ``BatchErrorInfo.type`` tag reported by a pipeline onto the
step enumeration of that pipeline. Classification is total: an unrecognized,
empty or non-string tag becomes the enumeration's ``UNKNOWN`` member and is
never an error.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from cronguard.core.logging import get_logger

from .codes import BatchStep, StepType

# Module-level logger for error classification
_logger = get_logger("errors")

S = TypeVar("S", bound=StepType)


class ErrorClassifier(Generic[S]):
    """Classify raw error tags into pipeline steps.

    The lookup table is built from the step enumeration itself, so every member
    except ``UNKNOWN`` is a known tag and adding a member to the enumeration is
    enough to classify it.

    Example:
        classifier = ErrorClassifier()
        classifier.classify("japan-news-fetch")  # BatchStep.JAPAN_NEWS_FETCH
        classifier.classify("quota")             # BatchStep.UNKNOWN
    """

    def __init__(self, step_type: type[S] = BatchStep) -> None:  # type: ignore[assignment]
        """Initialize the classifier for a step enumeration.

        Args:
            step_type: Enumeration with string values and an ``UNKNOWN`` member.
                Defaults to the news pipeline's BatchStep.
        """
        self.step_type = step_type
        self.unknown: S = step_type["UNKNOWN"]
        self._table: dict[str, S] = {
            member.value: member for member in step_type if member is not self.unknown
        }

    def classify(self, raw_tag: Any) -> S:
        """Return the step a raw error tag belongs to.

        Args:
            raw_tag: The ``type`` field of a BatchErrorInfo.

        Returns:
            The matching step, or ``UNKNOWN`` for anything unrecognized.
        """
        if not isinstance(raw_tag, str):
            return self.unknown
        step = self._table.get(raw_tag)
        if step is None:
            _logger.debug("unclassified_error_tag", raw_tag=raw_tag)
            return self.unknown
        return step

    def known_tags(self) -> frozenset[str]:
        """Return the tags that receive first-class classification."""
        return frozenset(self._table)
