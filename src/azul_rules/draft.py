from dataclasses import dataclass, field

from .enums import TileColor
from .errors import InvalidSource
from .supply import TileSupply

FACTORY_COUNT = {2: 5, 3: 7, 4: 9}
TILES_PER_FACTORY = 4
CENTER = -1


@dataclass
class Pick:
    color: TileColor
    tiles: list[TileColor]
    took_marker: bool = False


@dataclass
class DraftPool:
    factories: list[list[TileColor]] = field(default_factory=list)
    center: list[TileColor] = field(default_factory=list)
    marker_in_center: bool = True

    @classmethod
    def for_players(cls, num_players: int) -> "DraftPool":
        return cls(factories=[[] for _ in range(FACTORY_COUNT[num_players])])

    def fill(self, supply: TileSupply) -> None:
        for idx in range(len(self.factories)):
            self.factories[idx] = supply.draw(TILES_PER_FACTORY)
        self.center = []
        self.marker_in_center = True

    def is_empty(self) -> bool:
        return all(not f for f in self.factories) and not self.center

    def source_tiles(self, source_index: int) -> list[TileColor]:
        if source_index == CENTER:
            return self.center
        if not 0 <= source_index < len(self.factories):
            raise InvalidSource(f"no factory {source_index}")
        return self.factories[source_index]

    def take(self, source_index: int, color: TileColor) -> Pick:
        tiles = self.source_tiles(source_index)
        if not tiles:
            raise InvalidSource("source is empty")
        if color not in tiles:
            raise InvalidSource(f"no {color.value} tiles in source")
        taken = [t for t in tiles if t == color]
        remaining = [t for t in tiles if t != color]
        if source_index == CENTER:
            self.center = remaining
            took_marker = self.marker_in_center
            self.marker_in_center = False
            return Pick(color=color, tiles=taken, took_marker=took_marker)
        self.factories[source_index] = []
        self.center.extend(remaining)
        return Pick(color=color, tiles=taken)

    def sources(self):
        """Yield (source_index, tiles) for every non-empty source."""
        for idx, tiles in enumerate(self.factories):
            if tiles:
                yield idx, tiles
        if self.center:
            yield CENTER, self.center

    def clone(self) -> "DraftPool":
        return DraftPool(
            factories=[list(f) for f in self.factories],
            center=list(self.center),
            marker_in_center=self.marker_in_center,
        )
