"""
Transcript session accumulation at the speech-capture boundary.

The capture side delivers ordered batches of recognition results, each interim
or final. TranscriptSession is an immutable accumulator value: ingesting a batch
returns a new session plus the finalized segment (if any) to hand to the
extraction pipeline. A transition from not-speaking to speaking starts a new
session.

Recognition faults map onto a RestartPolicy decision; this module does not
capture audio itself.
"""

from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .config import config
from .extract import ExtractionPipeline
from .types import ExtractionResult


class TranscriptResult(BaseModel):
    """One recognition result as delivered by the speech engine."""

    text: str = Field(..., description="Recognized text")
    is_final: bool = Field(default=False, description="Whether the engine finalized this result")


class TranscriptSession(BaseModel):
    """
    Accumulated transcript for one speaking session.

    Attributes:
        buffer: All finalized text so far, each final followed by a space
        display: Buffer plus the latest interim text
        speaking: True from speech onset until the next silence
    """

    model_config = {"frozen": True}

    buffer: str = ""
    display: str = ""
    speaking: bool = False

    def ingest(self, results: Sequence[TranscriptResult]) -> Tuple["TranscriptSession", Optional[str]]:
        """
        Fold a batch of results into the session.

        Returns:
            Tuple of (new_session, finalized_segment) where the segment is the
            stripped concatenation of this batch's finals, or None
        """
        final_text = ""
        interim_text = ""
        for result in results:
            if result.is_final:
                final_text += result.text + " "
            else:
                interim_text += result.text

        buffer = self.buffer + final_text
        session = TranscriptSession(buffer=buffer, display=buffer + interim_text, speaking=self.speaking)
        segment = final_text.strip() if final_text else None
        return session, segment or None

    def begin_speaking(self) -> "TranscriptSession":
        """Mark speech onset; resets the buffer only when coming from silence."""
        if self.speaking:
            return self
        return TranscriptSession(speaking=True)

    def end_speaking(self) -> "TranscriptSession":
        """Mark silence; the buffer is kept until speech starts again."""
        return TranscriptSession(buffer=self.buffer, display=self.buffer, speaking=False)


class RecognitionFault(str, Enum):
    NOT_ALLOWED = "not-allowed"
    ABORTED = "aborted"
    NO_SPEECH = "no-speech"
    OTHER = "other"


class RestartAction(str, Enum):
    STOP = "stop"
    RESTART = "restart"
    IGNORE = "ignore"
    REPORT = "report"


class RestartPolicy:
    """
    Decides how the capture loop reacts to recognition faults.

    Permission denial stops permanently. Aborts restart immediately, up to
    max_restarts consecutive times (HV_MAX_RESTARTS by default). Silence is
    ignored. Anything else is reported while listening continues.
    """

    def __init__(self, max_restarts: Optional[int] = None):
        self.max_restarts = config.max_restarts if max_restarts is None else max_restarts
        self.consecutive_restarts = 0
        self.stopped = False

    def on_fault(self, fault: str) -> Tuple[RestartAction, Optional[str]]:
        """
        Args:
            fault: Fault code reported by the recognition engine

        Returns:
            Tuple of (action, user_message)
        """
        if fault == RecognitionFault.NOT_ALLOWED.value:
            self.stopped = True
            return RestartAction.STOP, "Microphone permission denied. Please allow microphone access and restart."

        if fault == RecognitionFault.ABORTED.value:
            if self.consecutive_restarts >= self.max_restarts:
                self.stopped = True
                return RestartAction.STOP, f"Recognition aborted {self.consecutive_restarts} times in a row; giving up."
            self.consecutive_restarts += 1
            return RestartAction.RESTART, None

        if fault == RecognitionFault.NO_SPEECH.value:
            return RestartAction.IGNORE, None

        return RestartAction.REPORT, f"Recognition error: {fault}"

    def on_result(self) -> None:
        """A successful result resets the consecutive-restart count."""
        self.consecutive_restarts = 0


def process_stream(
    batches: Iterable[Sequence[TranscriptResult]],
    pipeline: ExtractionPipeline,
    session: Optional[TranscriptSession] = None,
) -> Tuple[TranscriptSession, List[ExtractionResult]]:
    """
    Drive a session over an ordered stream of result batches.

    Each finalized segment runs through the pipeline to completion before the
    next batch is ingested. Consecutive non-empty batches share one session;
    an empty batch marks silence, and the next non-empty batch starts a new one.

    Returns:
        Tuple of (final_session, accepted_results)
    """
    current = session or TranscriptSession()
    accepted: List[ExtractionResult] = []

    for batch in batches:
        if not batch:
            current = current.end_speaking()
            continue

        current = current.begin_speaking()
        current, segment = current.ingest(batch)
        if segment:
            result = pipeline.process(segment)
            if result is not None:
                accepted.append(result)

    return current, accepted
