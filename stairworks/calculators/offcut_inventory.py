"""
Offcut inventory — reusable slab leftovers carried from step to step.

One inventory per stair calculation. The slab planner consumes pieces from it
and replenishes it with the leftovers of new cuts; what is left after step i
decides what step i+1 can reuse. Pieces are never merged.

Axis naming: a query asks for (required_width, required_length) and a piece
fits when its width/length cover them, or, if it may be rotated, its
length/width do.
"""

import logging
from collections import namedtuple
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from .tolerance import is_reusable_remainder, is_useful_offcut

logger = logging.getLogger(__name__)


class InventoryUnderflowError(AssertionError):
    """An offcut was consumed that the inventory does not hold."""


# across: piece dimension laid against required_width
# along:  piece dimension laid against required_length
Fit = namedtuple("Fit", ["across", "along", "rotated"])


@dataclass(eq=False)
class WastePiece:
    width: float
    length: float
    source: str
    rotatable: bool = True

    @property
    def area(self) -> float:
        return self.width * self.length

    @property
    def long_side(self) -> float:
        return max(self.width, self.length)

    def fit(self, required_width: float, required_length: float) -> Optional[Fit]:
        """How this piece covers the request, preferring no rotation. None if it cannot."""
        if self.width >= required_width and self.length >= required_length:
            return Fit(self.width, self.length, False)
        if self.rotatable and self.length >= required_width and self.width >= required_length:
            return Fit(self.length, self.width, True)
        return None

    def covering(self, required_width: float) -> Optional[Fit]:
        """Fit against required_width alone, using as much length as the piece has."""
        if self.width >= required_width:
            return Fit(self.width, self.length, False)
        if self.rotatable and self.length >= required_width:
            return Fit(self.length, self.width, True)
        return None

    def to_dict(self) -> dict:
        return {
            "width": round(self.width, 2),
            "length": round(self.length, 2),
            "source": self.source,
            "rotatable": self.rotatable,
        }


class OffcutInventory:
    """Ordered multiset of WastePiece. Identity, not value, decides membership."""

    def __init__(self, pieces: Optional[Iterable[WastePiece]] = None):
        self._pieces: List[WastePiece] = list(pieces or [])

    def __len__(self) -> int:
        return len(self._pieces)

    def __iter__(self) -> Iterator[WastePiece]:
        return iter(list(self._pieces))

    def __contains__(self, piece: WastePiece) -> bool:
        return any(p is piece for p in self._pieces)

    @property
    def pieces(self) -> Tuple[WastePiece, ...]:
        return tuple(self._pieces)

    @property
    def total_area(self) -> float:
        return sum(p.area for p in self._pieces)

    def replenish(self, piece: WastePiece) -> WastePiece:
        """Append a piece. No coalescing with neighbours."""
        self._pieces.append(piece)
        logger.debug("Offcut added: %.1f x %.1f from %s", piece.width, piece.length, piece.source)
        return piece

    def find_usable(self, required_width: float, required_length: float) -> List[WastePiece]:
        """
        Pieces that cover the request (rotated if allowed), smallest area first.
        Slivers at or under 1 cm on either side are never offered.
        """
        candidates = [
            p for p in self._pieces
            if is_useful_offcut(p.width, p.length)
            and p.fit(required_width, required_length) is not None
        ]
        # Stable sort keeps insertion order among equal areas
        candidates.sort(key=lambda p: p.area)
        return candidates

    def find_partial(self, required_width: float,
                     exclude: Iterable[WastePiece] = ()) -> List[WastePiece]:
        """Pieces that cover required_width on some axis, whatever their other side. Smallest first."""
        excluded = list(exclude)
        candidates = [
            p for p in self._pieces
            if not any(p is e for e in excluded)
            and is_useful_offcut(p.width, p.length)
            and p.covering(required_width) is not None
        ]
        candidates.sort(key=lambda p: p.area)
        return candidates

    def remove(self, piece: WastePiece) -> None:
        for i, p in enumerate(self._pieces):
            if p is piece:
                del self._pieces[i]
                return
        raise InventoryUnderflowError(
            "Offcut %.1f x %.1f from %s is not in the inventory"
            % (piece.width, piece.length, piece.source)
        )

    def consume(self, piece: WastePiece, required_width: float, required_length: float,
                parent_width: float) -> Tuple[Fit, Optional[WastePiece]]:
        """
        Take a piece out and use (required_width x required_length) of it.

        The leftover along the length axis goes back in when it is a genuine
        offcut (over 1 mm and narrower than the parent slab). Trim along the
        width axis is not kept. Returns the fit used and the re-added piece.
        """
        fit = piece.fit(required_width, required_length)
        if fit is None:
            raise InventoryUnderflowError(
                "Offcut %.1f x %.1f from %s cannot cover %.1f x %.1f"
                % (piece.width, piece.length, piece.source, required_width, required_length)
            )
        self.remove(piece)

        remainder = fit.along - required_length
        leftover = None
        if is_reusable_remainder(remainder, parent_width) and is_useful_offcut(fit.across, remainder):
            leftover = WastePiece(
                width=fit.across,
                length=remainder,
                source="Remaining from %s" % piece.source,
                rotatable=True,
            )
            used_area = required_width * required_length
            assert used_area + leftover.area <= piece.area + 1e-6, "offcut grew during reuse"
            self.replenish(leftover)

        return fit, leftover

    def snapshot(self) -> List[dict]:
        return [p.to_dict() for p in self._pieces]
