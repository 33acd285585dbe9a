"""Card encoding, normalisation and deck helpers.

Maps the standard 52-card deck to a flat ``[0, 51]`` integer space
which also fixes the deck iteration order used across the engine.

Encoding: ``index = rank_idx * 4 + suit_idx``
where ``RANKS = '23456789TJQKA'`` and ``SUITS = 'cdhs'``.

This module is the **single source of truth** for card-string helpers
used across ``core``, ``tools`` and the command line.
"""

from __future__ import annotations

import random
from typing import Iterable, Sequence

RANKS = "23456789TJQKA"
"""Ordered rank characters (``2``–``A``). Index position is the rank id."""

SUITS = "cdhs"
"""Ordered suit characters (clubs, diamonds, hearts, spades)."""


# ── Index encoding ────────────────────────────────────────────────


def index_to_card(index: int) -> str:
    """Convert an integer index back to a two-character card string."""
    if not 0 <= index <= 51:
        raise ValueError(f"Card index out of range [0, 51]: {index}")
    rank_idx, suit_idx = divmod(index, len(SUITS))
    return f"{RANKS[rank_idx]}{SUITS[suit_idx]}"


# ── Normalisation (canonical ``Xs`` format) ───────────────────────


def normalize_card(card: str) -> str | None:
    """Normalise a card string to canonical ``Xs`` format.

    Accepts common variants like ``"10h"`` → ``"Th"``, ``"aS"`` → ``"As"``.
    Returns ``None`` if the input is not a valid card.
    """
    if not isinstance(card, str):
        return None
    cleaned = card.strip().upper().replace("10", "T")
    if len(cleaned) != 2:
        return None
    rank = cleaned[0]
    suit = cleaned[1].lower()
    if rank not in RANKS or suit not in SUITS:
        return None
    return f"{rank}{suit}"


def parse_card_text(text: str) -> list[str]:
    """Split ``"As Kd,Qc"`` style text into raw card tokens."""
    return [token for token in text.replace(",", " ").split() if token]


# ── Deck ──────────────────────────────────────────────────────────


def full_deck() -> list[str]:
    """Return all 52 cards in index order (rank-major, suit-minor)."""
    return [index_to_card(index) for index in range(52)]


def remove_known(deck: Iterable[str], used: Iterable[str]) -> list[str]:
    """Return *deck* without the cards in *used*.

    Cards in *used* that are not part of *deck* are ignored.
    """
    blocked = set(used)
    return [card for card in deck if card not in blocked]


def shuffle_deck(cards: Iterable[str], rng: random.Random) -> list[str]:
    """Return a uniformly shuffled copy of *cards* drawn from *rng*."""
    shuffled = list(cards)
    rng.shuffle(shuffled)
    return shuffled


def streets_left(board_cards: Sequence[str]) -> int:
    """Number of community cards still to come (``0`` on the river)."""
    return max(0, 5 - len(board_cards))


# ── Poker math helpers ────────────────────────────────────────────


def pot_odds(pot: float, bet: float) -> float:
    """Share of the final pot hero has to put in to call.

    ``bet / (pot + bet)``  — returns 0.0 when the bet is non-positive.
    """
    if bet <= 0:
        return 0.0
    return bet / max(max(pot, 0.0) + bet, 1e-6)
