import random
from dataclasses import dataclass, field

from .enums import TileColor

TILES_PER_COLOR = 20


def full_bag() -> list[TileColor]:
    bag = []
    for color in TileColor:
        bag.extend([color] * TILES_PER_COLOR)
    return bag


@dataclass
class TileSupply:
    """The draw bag and the discard lid.

    ``rng`` is the only source of randomness in a game; seeding it makes a
    sequence of moves replay identically.
    """

    bag: list[TileColor] = field(default_factory=list)
    discard_lid: list[TileColor] = field(default_factory=list)
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @classmethod
    def fresh(cls, rng: random.Random) -> "TileSupply":
        bag = full_bag()
        rng.shuffle(bag)
        return cls(bag=bag, discard_lid=[], rng=rng)

    def refill(self) -> None:
        # Random.shuffle is an in-place Fisher-Yates swap shuffle.
        self.rng.shuffle(self.discard_lid)
        self.bag.extend(self.discard_lid)
        self.discard_lid = []

    def draw(self, count: int = 1) -> list[TileColor]:
        drawn = []
        while len(drawn) < count:
            if not self.bag:
                if not self.discard_lid:
                    break
                self.refill()
            drawn.append(self.bag.pop())
        return drawn

    def discard(self, tiles: list[TileColor]) -> None:
        self.discard_lid.extend(tiles)

    def clone(self) -> "TileSupply":
        rng = random.Random()
        rng.setstate(self.rng.getstate())
        return TileSupply(bag=list(self.bag), discard_lid=list(self.discard_lid), rng=rng)
