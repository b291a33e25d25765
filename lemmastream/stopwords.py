import json
import logging
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, TextIO, Union

import chardet

from .errors import ResourceLoadError

logger = logging.getLogger(__name__)

StopWordSource = Union[str, Path, TextIO, Iterable[str]]

_STOPWORDS_PATH = Path(__file__).parent / "fdata" / "stopwords.json"


def _load_bundled_stopwords() -> FrozenSet[str]:
    """Load the classic English analyzer stop set from fdata/stopwords.json."""
    try:
        with open(_STOPWORDS_PATH, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ResourceLoadError(
            f"Could not load bundled stopwords from {_STOPWORDS_PATH}: {e}",
            _STOPWORDS_PATH,
        ) from e
    return frozenset(data["english"])


ENGLISH_STOP_WORDS: FrozenSet[str] = _load_bundled_stopwords()


def _decode(raw: bytes, path: Path) -> str:
    """Decode a word list, falling back to chardet when it is not UTF-8."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        detected = chardet.detect(raw)
        encoding = detected.get("encoding")
        if not encoding:
            raise ResourceLoadError(f"Could not detect encoding of {path}", path)
        logger.warning(
            f"{path} is not valid UTF-8, decoding as {encoding} "
            f"(confidence {detected.get('confidence', 0):.2f})"
        )
        try:
            return raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise ResourceLoadError(f"Could not decode {path} as {encoding}: {e}", path) from e


def read_word_set(text: str) -> FrozenSet[str]:
    """Split whitespace-separated words into a lowercased set."""
    return frozenset(word.lower() for word in text.split())


def load_stopwords(source: Optional[StopWordSource]) -> Optional[FrozenSet[str]]:
    """
    Build a stop set from an in-memory collection, a file path or a text stream.

    Files and streams hold whitespace-separated words. Returns None when
    ``source`` is None. Raises ResourceLoadError if the source cannot be read.
    """
    if source is None:
        return None

    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise ResourceLoadError(f"Could not read stopword file {path}: {e}", path) from e
        words = read_word_set(_decode(raw, path))
        logger.info(f"Loaded {len(words)} stopwords from {path}")
        return words

    if hasattr(source, "read"):
        try:
            text = source.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceLoadError(f"Could not read stopword stream: {e}", source) from e
        if isinstance(text, bytes):
            text = _decode(text, Path(getattr(source, "name", "<stream>")))
        return read_word_set(text)

    return frozenset(word.lower() for word in source)
