"""Vocabulary entity: id to subword mapping plus the blank token id."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from parakeet_dictate.l1_entities.errors import VocabularyParseError

BLANK_TOKEN = '<blk>'
WORD_BOUNDARY = '▁'  # SentencePiece lower one-eighth block


@dataclass(frozen=True)
class Vocabulary:
    """Immutable token table. Built once per model load, shared read-only."""

    tokens: Mapping[int, str]
    blank_id: int

    def __post_init__(self) -> None:
        object.__setattr__(self, 'tokens', MappingProxyType(dict(self.tokens)))

    @property
    def vocab_size(self) -> int:
        return len(self.tokens)

    def piece(self, token_id: int) -> str | None:
        return self.tokens.get(token_id)


def parse_vocabulary(lines: Iterable[str]) -> Vocabulary:
    """Parse ``token id`` lines into a Vocabulary.

    The word-boundary marker is rewritten to a plain space. Blank lines are
    skipped. If no ``<blk>`` entry exists the blank id defaults to 0. A
    repeated id is an error.
    """
    tokens: dict[int, str] = {}
    blank_id = 0
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        parts = line.split()
        if len(parts) != 2:
            raise VocabularyParseError(f'Malformed vocab line {lineno}: {raw.rstrip()!r}')
        token, id_text = parts
        try:
            token_id = int(id_text)
        except ValueError as exc:
            raise VocabularyParseError(f'Invalid vocab ID on line {lineno}: {id_text}') from exc
        if token_id in tokens:
            raise VocabularyParseError(f'Duplicate vocab ID {token_id} on line {lineno}')
        if token == BLANK_TOKEN:
            blank_id = token_id
        tokens[token_id] = token.replace(WORD_BOUNDARY, ' ')
    return Vocabulary(tokens=tokens, blank_id=blank_id)
