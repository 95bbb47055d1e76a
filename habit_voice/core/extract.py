"""
Extraction pipeline: one finalized transcript segment in, at most one activity out.

Walks the cascade tiers in priority order, and within each tier the candidates
in the order the tier produced them, asking the activation predicate about each.
The first accepted candidate ends the run for that segment.
"""

import logging
from typing import Callable, Optional

from .cascade import TIERS
from .debug_log import get_debug_logger
from .registry import ActivityRegistry
from .timing import timer
from .types import ExtractionResult, ExtractionTrace, TraceStep

logger = logging.getLogger(__name__)

ActivationPredicate = Callable[[str], bool]
DetectionCallback = Callable[[ExtractionResult], None]


def _allow_all(_: str) -> bool:
    return True


def run_cascade(text: str, is_active: Optional[ActivationPredicate] = None) -> ExtractionTrace:
    """
    Run the cascade over a segment, recording every admission attempt.

    Args:
        text: One finalized transcript segment
        is_active: Activation predicate; admits every name when None

    Returns:
        ExtractionTrace whose result is the first accepted candidate, if any
    """
    predicate = is_active or _allow_all
    trace = ExtractionTrace(text=text)

    for rank, (tier_name, tier) in enumerate(TIERS, start=1):
        for candidate in tier(text):
            accepted = predicate(candidate.name)
            trace.steps.append(TraceStep(tier=rank, tier_name=tier_name, candidate=candidate, accepted=accepted))
            if accepted:
                trace.result = ExtractionResult(name=candidate.name, quantity=candidate.quantity, unit=candidate.unit, transcribed_phrase=text)
                return trace
            logger.debug(f"Tier {tier_name} candidate {candidate.name!r} rejected by activation check")

    return trace


@timer
def extract_activity(
    text: str,
    is_active: Optional[ActivationPredicate] = None,
    on_detected: Optional[DetectionCallback] = None,
    project_root: str = ".",
) -> Optional[ExtractionResult]:
    """
    Extract the first admitted activity from a transcript segment.

    Not finding anything is a normal outcome and returns None.

    Args:
        text: One finalized transcript segment
        is_active: Activation predicate; admits every name when None
        on_detected: Called with the result at the moment it is accepted
        project_root: Where debug traces are written when HV_DEBUG=1

    Returns:
        The accepted ExtractionResult, or None
    """
    trace = run_cascade(text, is_active)

    debug_logger = get_debug_logger(project_root)
    if debug_logger.is_enabled():
        debug_logger.log_extraction_trace(trace)

    if trace.result is not None and on_detected is not None:
        on_detected(trace.result)
    return trace.result


def parse_activity(text: str, on_detected: DetectionCallback, is_active: Optional[ActivationPredicate] = None) -> bool:
    """Callback-style entry point: True if an activity was detected and handed off."""
    return extract_activity(text, is_active, on_detected) is not None


class ExtractionPipeline:
    """
    Binds the extraction engine to a registry snapshot and a result handler.

    The registry supplies the activation predicate; the handler is typically
    ActivityRecorder.on_activity_detected.
    """

    def __init__(self, registry: Optional[ActivityRegistry] = None, on_detected: Optional[DetectionCallback] = None, project_root: str = "."):
        self.registry = registry
        self.on_detected = on_detected
        self.project_root = project_root

    @property
    def is_active(self) -> Optional[ActivationPredicate]:
        return self.registry.is_active if self.registry is not None else None

    def process(self, text: str) -> Optional[ExtractionResult]:
        """Run one finalized segment; blank segments yield nothing."""
        if not text or not text.strip():
            return None
        return extract_activity(text, self.is_active, self.on_detected, self.project_root)

    def explain(self, text: str) -> ExtractionTrace:
        """Trace every candidate the cascade would try, without invoking the handler."""
        return run_cascade(text, self.is_active)
