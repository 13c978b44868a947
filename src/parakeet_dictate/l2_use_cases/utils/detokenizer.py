"""Render emitted token ids back to text."""

from __future__ import annotations

from collections.abc import Iterable

from parakeet_dictate.l1_entities.vocabulary import Vocabulary


def detokenize(tokens: Iterable[int], vocabulary: Vocabulary) -> str:
    """Join token pieces in order, then trim and collapse whitespace runs.

    Pieces already carry their word-boundary spaces; ids missing from the
    vocabulary are skipped. No casing or punctuation is touched.
    """
    pieces = []
    for token_id in tokens:
        piece = vocabulary.piece(token_id)
        if piece is not None:
            pieces.append(piece)
    return ' '.join(''.join(pieces).split())
