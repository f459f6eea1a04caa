"""Sequencing services: routing, waiting, recording and running."""

from .recorder import Result, ResultRecorder, SequenceOutcome
from .router import MessageRouter
from .sequence import SequenceBody, SequenceRunner, SequenceTest
from .waiter import Predicate, WaitEngine

__all__ = [
    "MessageRouter",
    "Predicate",
    "Result",
    "ResultRecorder",
    "SequenceBody",
    "SequenceOutcome",
    "SequenceRunner",
    "SequenceTest",
    "WaitEngine",
]
