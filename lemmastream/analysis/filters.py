from typing import Iterable, Iterator, List

from .base import Token, TokenFilter, TokenStream, TokenType
from .lemmatizer import LemmatizerConfig


class LemmaFilter(TokenFilter):
    """
    Replaces each token with its lemmas.

    For every incoming token the lemmatizer is asked for candidates:

    * each distinct candidate is emitted as a WORD token over the original
      offsets; the first one takes the token's position, the others stack on
      the same position (increment 0). With ``return_pos`` the candidate's
      part of speech is kept on the token.
    * with ``return_original`` the surface form follows the candidates at
      the same position, unless it is identical to one of them.
    * a token without candidates is passed through when
      ``return_oov_original`` is set and dropped otherwise. A dropped token's
      position is added to the next emitted token.
    """

    def __init__(self, input: TokenStream, config: LemmatizerConfig):
        super().__init__(input)
        self.config = config

    def __iter__(self) -> Iterator[Token]:
        lemmatize = self.config.lemmatizer.lemmatize
        return_original = self.config.return_original
        return_oov_original = self.config.return_oov_original
        return_pos = self.config.return_pos

        carry = 0
        for token in self.input:
            analyses = list(lemmatize(token.text))
            increment = token.position_increment + carry

            if not analyses:
                if return_oov_original:
                    carry = 0
                    yield token.copy_with(position_increment=increment)
                else:
                    carry = increment
                continue

            carry = 0
            emitted: List[str] = []
            for analysis in analyses:
                if isinstance(analysis, str):
                    lemma, pos = analysis, None
                else:
                    lemma, pos = analysis
                if lemma.lower() in emitted:
                    continue
                yield Token(
                    lemma,
                    token.start_offset,
                    token.end_offset,
                    0 if emitted else increment,
                    TokenType.WORD,
                    pos if return_pos else None,
                )
                emitted.append(lemma.lower())

            if return_original and token.text.lower() not in emitted:
                yield token.copy_with(position_increment=0)

    def __repr__(self) -> str:
        return f"LemmaFilter({self.input!r}, {self.config.lemmatizer!r})"


class StandardFilter(TokenFilter):
    """Normalizes token shapes: strips possessive 's and dots from acronyms."""

    def __iter__(self) -> Iterator[Token]:
        for token in self.input:
            text = token.text
            if token.type is TokenType.APOSTROPHE and text[-2:] in ("'s", "'S"):
                yield token.copy_with(text=text[:-2])
            elif token.type is TokenType.ACRONYM:
                yield token.copy_with(text=text.replace(".", ""))
            else:
                yield token


class LowerCaseFilter(TokenFilter):
    """Filter that lowercases token text."""

    def __iter__(self) -> Iterator[Token]:
        for token in self.input:
            if token.text.islower():
                yield token
            else:
                yield token.copy_with(text=token.text.lower())


class StopFilter(TokenFilter):
    """
    Removes stop words from the stream.

    With ``enable_position_increments`` the positions of removed words are
    added to the next surviving token, so phrase and proximity queries still
    see the gap; otherwise survivors keep their own increment.
    """

    def __init__(
        self,
        input: TokenStream,
        stop_words: Iterable[str],
        enable_position_increments: bool = True,
    ):
        super().__init__(input)
        self.stop_words = frozenset(word.lower() for word in stop_words)
        self.enable_position_increments = enable_position_increments

    def __iter__(self) -> Iterator[Token]:
        stop_words = self.stop_words
        skipped = 0
        for token in self.input:
            if token.text.lower() in stop_words:
                if self.enable_position_increments:
                    skipped += token.position_increment
                continue
            if skipped:
                token = token.copy_with(
                    position_increment=token.position_increment + skipped
                )
                skipped = 0
            yield token

    def __repr__(self) -> str:
        return f"StopFilter({self.input!r}, stop_words={len(self.stop_words)})"
