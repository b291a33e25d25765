import re
from typing import Iterator, List, Optional, TextIO, Tuple, Union

from .base import Token, TokenStream, TokenType

DEFAULT_MAX_TOKEN_LENGTH = 255
DEFAULT_BUFFER_SIZE = 4096

# CJK ideographs and kana are emitted one character per token
_CJ = (
    r"[\u3040-\u30ff\u3100-\u312f\u31f0-\u31ff\u3300-\u337f"
    r"\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff\uff65-\uff9f]"
)
_ALNUM = rf"(?:(?!{_CJ})[^\W_])"
_LETTER = rf"(?:(?!{_CJ})[^\W\d_])"
_RUN = rf"{_ALNUM}+"

_CJ_RE = re.compile(_CJ)
_TOKEN_START_RE = re.compile(rf"{_ALNUM}|{_CJ}")
# No multi-character token contains one of these, so input may be cut after it
_BREAK_RE = re.compile(rf"{_CJ}|[^\w.,/@&'-]")

# Host-like strings ending in a dot ("www.example.com."), which older
# tokenizers misreported as acronyms.
_ACRONYM_DEP = "ACRONYM_DEP"

# Candidates are tried at every token start and the longest match wins;
# on a tie the earlier entry wins.
_GRAMMAR: List[Tuple[str, "re.Pattern"]] = [
    (TokenType.EMAIL, re.compile(rf"{_RUN}(?:[._-]{_RUN})*@{_RUN}(?:[.-]{_RUN})+")),
    (TokenType.ACRONYM, re.compile(rf"{_LETTER}\.(?:{_LETTER}\.)+")),
    (_ACRONYM_DEP, re.compile(rf"{_RUN}\.(?:{_RUN}\.)+")),
    (TokenType.NUM, re.compile(rf"{_RUN}(?:[-_/.,]{_RUN})+")),
    (TokenType.HOST, re.compile(rf"{_RUN}(?:\.{_RUN})+")),
    (TokenType.COMPANY, re.compile(rf"{_LETTER}+[&@]{_LETTER}+")),
    (TokenType.APOSTROPHE, re.compile(rf"{_LETTER}+(?:'{_LETTER}+)+")),
    (TokenType.ALPHANUM, re.compile(_RUN)),
]

CharSource = Union[str, TextIO]


def _scan(text: str, base: int) -> Iterator[Tuple[str, int, int, str]]:
    """Yield (text, start, end, type) for every token in a complete segment."""
    pos = 0
    length = len(text)
    while pos < length:
        start_match = _TOKEN_START_RE.search(text, pos)
        if start_match is None:
            return
        start = start_match.start()

        if _CJ_RE.match(text, start):
            yield text[start], base + start, base + start + 1, TokenType.CJ
            pos = start + 1
            continue

        best_type = None
        best_end = start
        for token_type, pattern in _GRAMMAR:
            match = pattern.match(text, start)
            if match is None or match.end() <= best_end:
                continue
            if token_type is TokenType.NUM and not any(
                c.isdigit() for c in match.group()
            ):
                continue
            best_type = token_type
            best_end = match.end()

        yield text[start:best_end], base + start, base + best_end, best_type
        pos = best_end


class StandardTokenizer(TokenStream):
    """
    Grammar-based tokenizer for European-language text.

    Splits on word boundaries and classifies each token (EMAIL, HOST, ACRONYM,
    COMPANY, NUM, APOSTROPHE, CJ, ALPHANUM). The source is read lazily in
    chunks of ``buffer_size`` characters. No token spans whitespace, a CJ
    character or punctuation outside the joiners (``.,/@&'-``), so a chunk
    is scanned up to its last such character and the rest is carried into the
    next read.

    Tokens longer than ``max_token_length`` are discarded whole. The skipped
    position is added to the increment of the next token that is emitted.

    ``reset()`` rebinds the tokenizer to a new source. The tokenizer is not
    re-entrant: do not iterate it again while a previous pass is still live.
    """

    def __init__(
        self,
        source: Optional[CharSource] = None,
        max_token_length: int = DEFAULT_MAX_TOKEN_LENGTH,
        replace_invalid_acronym: bool = True,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        self.max_token_length = max_token_length
        self.replace_invalid_acronym = replace_invalid_acronym
        self.buffer_size = buffer_size
        self._source: Optional[CharSource] = None
        if source is not None:
            self.reset(source)

    def reset(self, source: CharSource) -> None:
        """Bind the tokenizer to a new character source."""
        if not isinstance(source, str) and not hasattr(source, "read"):
            raise TypeError(
                f"Expected a str or a readable text stream, got {type(source).__name__}"
            )
        self._source = source

    def _read(self) -> Iterator[Tuple[str, bool]]:
        """Yield (chunk, at_eof) pairs from the bound source."""
        source = self._source
        if isinstance(source, str):
            yield source, True
            return
        while True:
            chunk = source.read(self.buffer_size)
            if not chunk:
                yield "", True
                return
            yield chunk, False

    def _segments(self) -> Iterator[Tuple[str, int]]:
        """Yield (segment, absolute_offset) pieces that end on a token boundary."""
        pending = ""
        base = 0
        for chunk, at_eof in self._read():
            buf = pending + chunk
            if at_eof:
                if buf:
                    yield buf, base
                return
            cut = len(buf)
            while cut > 0 and not _BREAK_RE.match(buf, cut - 1):
                cut -= 1
            if cut == 0:
                pending = buf
                continue
            yield buf[:cut], base
            pending = buf[cut:]
            base += cut

    def __iter__(self) -> Iterator[Token]:
        if self._source is None:
            return
        skipped = 0
        for segment, base in self._segments():
            for text, start, end, token_type in _scan(segment, base):
                if token_type == _ACRONYM_DEP:
                    if self.replace_invalid_acronym:
                        token_type = TokenType.HOST
                        text = text[:-1]
                        end -= 1
                    else:
                        token_type = TokenType.ACRONYM
                if len(text) > self.max_token_length:
                    skipped += 1
                    continue
                yield Token(text, start, end, 1 + skipped, token_type)
                skipped = 0
