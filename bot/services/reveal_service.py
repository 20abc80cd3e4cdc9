"""Progressive reveal of the trail map.

The map starts a third visible. A first wrong guess opens it to two thirds, a
second wrong guess or any correct guess shows all of it. The percentage never
goes down, and the focal point stays fixed until the next puzzle.
"""

from models import FocalPoint, RevealRegion

INITIAL_REVEAL = 33
FULL_REVEAL = 100

# Reveal percentage after the Nth wrong guess
WRONG_GUESS_REVEAL = {
    1: 66,
    2: FULL_REVEAL,
}


def next_reveal_percentage(current: int, guess_count: int, correct: bool) -> int:
    """Reveal percentage after the `guess_count`-th guess (1-based)."""
    if current >= FULL_REVEAL or correct:
        return FULL_REVEAL
    return max(current, WRONG_GUESS_REVEAL.get(guess_count, FULL_REVEAL))


def visible_region(percentage: int, focal_point: FocalPoint) -> RevealRegion:
    """Square clip box of side `percentage` centered on the focal point.

    The box is shifted, not shrunk, to stay inside the image.
    """
    size = max(0, min(FULL_REVEAL, percentage))
    left = min(max(focal_point.x - size / 2, 0), FULL_REVEAL - size)
    top = min(max(focal_point.y - size / 2, 0), FULL_REVEAL - size)
    return RevealRegion(left=left, top=top, right=left + size, bottom=top + size)


class RevealStateMachine:
    """Reveal state for one puzzle instance."""

    def __init__(self, focal_point: FocalPoint, percentage: int = INITIAL_REVEAL):
        self.focal_point = focal_point
        self.percentage = max(0, min(FULL_REVEAL, percentage))

    @property
    def fully_revealed(self) -> bool:
        return self.percentage >= FULL_REVEAL

    def advance(self, guess_count: int, correct: bool) -> int:
        """Apply a guess outcome and return the new percentage."""
        self.percentage = next_reveal_percentage(self.percentage, guess_count, correct)
        return self.percentage

    def region(self) -> RevealRegion:
        return visible_region(self.percentage, self.focal_point)
