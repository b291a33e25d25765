import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from .base import TokenStream
from .tokenizer import StandardTokenizer

logger = logging.getLogger(__name__)


@dataclass
class PipelineState:
    """An assembled pipeline: the tokenizer at its head and the outermost stage."""

    field_name: str
    tokenizer: StandardTokenizer
    stream: TokenStream


class AnalysisContext:
    """
    Reusable pipelines owned by one caller.

    Holds one PipelineState per field name. The cached tokenizers carry
    mutable read state, so a context must only be used by one worker at a
    time; give each thread (or task) its own. Closing the context, or leaving
    its ``with`` block, drops the cached pipelines.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self._states: Dict[str, PipelineState] = {}

    def get(self, field_name: str) -> Optional[PipelineState]:
        return self._states.get(field_name)

    def put(self, state: PipelineState) -> None:
        self._states[state.field_name] = state

    def close(self) -> None:
        if self._states:
            logger.debug(f"Releasing {len(self._states)} cached pipeline(s) for context {self.name}")
        self._states.clear()

    def __enter__(self) -> "AnalysisContext":
        return self

    def __exit__(self, *args):
        self.close()

    def __contains__(self, field_name: str) -> bool:
        return field_name in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        return f"AnalysisContext(name={self.name!r}, fields={sorted(self._states)})"
