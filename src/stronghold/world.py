# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
world.py — Layer 0: the realm's World State, its enumerations and derived values.

One WorldState object is owned by the driver and passed by reference into
every layer function; no layer keeps a private copy between ticks.

Derived values (never stored, always recomputed):
    max_storage(state)       -> int    per-good storage cap
    max_population(state)    -> int    housing capacity

Creation:
    new_realm(seed)          -> WorldState
"""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass, field

from .scheduler import Agenda


# ══════════════════════════════════════════════════════════════════════════
# Closed enumerations
# ══════════════════════════════════════════════════════════════════════════

class Resource(enum.Enum):
    RAW_WOOD    = 'raw_wood'
    RAW_STONE   = 'raw_stone'
    IRON_ORE    = 'iron_ore'
    WHEAT       = 'wheat'
    PLANKS      = 'planks'
    BLOCKS      = 'blocks'
    IRON_INGOTS = 'iron_ingots'
    BREAD       = 'bread'
    GOLD        = 'gold'


RAW_GOODS       = (Resource.RAW_WOOD, Resource.RAW_STONE, Resource.IRON_ORE, Resource.WHEAT)
PROCESSED_GOODS = (Resource.PLANKS, Resource.BLOCKS, Resource.IRON_INGOTS, Resource.BREAD)
GOODS           = RAW_GOODS + PROCESSED_GOODS     # everything subject to the storage cap


class Category(enum.Enum):
    CIVIL      = 'civil'
    EXTRACTION = 'extraction'
    INDUSTRY   = 'industry'
    MILITARY   = 'military'


class Building(enum.Enum):
    TOWN_CENTER = 'town_center'
    HOUSE       = 'house'
    WAREHOUSE   = 'warehouse'
    WALL        = 'wall'
    CATHEDRAL   = 'cathedral'
    MARKET      = 'market'
    LUMBER_HUT  = 'lumber_hut'
    QUARRY      = 'quarry'
    IRON_MINE   = 'iron_mine'
    FARM        = 'farm'
    SAWMILL     = 'sawmill'
    MASONRY     = 'masonry'
    FOUNDRY     = 'foundry'
    WINDMILL    = 'windmill'
    BARRACKS    = 'barracks'
    STABLE      = 'stable'
    BLACKSMITH  = 'blacksmith'


BUILDING_CATEGORY: dict[Building, Category] = {
    Building.TOWN_CENTER: Category.CIVIL,
    Building.HOUSE:       Category.CIVIL,
    Building.WAREHOUSE:   Category.CIVIL,
    Building.WALL:        Category.CIVIL,
    Building.CATHEDRAL:   Category.CIVIL,
    Building.MARKET:      Category.CIVIL,
    Building.LUMBER_HUT:  Category.EXTRACTION,
    Building.QUARRY:      Category.EXTRACTION,
    Building.IRON_MINE:   Category.EXTRACTION,
    Building.FARM:        Category.EXTRACTION,
    Building.SAWMILL:     Category.INDUSTRY,
    Building.MASONRY:     Category.INDUSTRY,
    Building.FOUNDRY:     Category.INDUSTRY,
    Building.WINDMILL:    Category.INDUSTRY,
    Building.BARRACKS:    Category.MILITARY,
    Building.STABLE:      Category.MILITARY,
    Building.BLACKSMITH:  Category.MILITARY,
}


class Unit(enum.Enum):
    LANCER = 'lancer'
    ARCHER = 'archer'
    KNIGHT = 'knight'


class TaxLevel(enum.Enum):
    NONE      = 'none'
    LOW       = 'low'
    NORMAL    = 'normal'
    HIGH      = 'high'
    EXTORTION = 'extortion'


class Policy(enum.Enum):
    RATIONING         = 'rationing'
    FORCED_LABOR      = 'forced_labor'
    FESTIVALS         = 'festivals'
    MILITARY_TRAINING = 'military_training'


class Stance(enum.Enum):
    DEFENSIVE  = 'defensive'
    BALANCED   = 'balanced'
    AGGRESSIVE = 'aggressive'


class Tech(enum.Enum):
    CROP_ROTATION  = 'crop_rotation'
    HEAVY_PLOUGH   = 'heavy_plough'
    TRADE_GUILDS   = 'trade_guilds'
    DEEP_MINING    = 'deep_mining'
    IRON_WEAPONS   = 'iron_weapons'
    STANDING_ARMY  = 'standing_army'
    STONE_WALLS    = 'stone_walls'
    URBAN_PLANNING = 'urban_planning'
    SANITATION     = 'sanitation'
    FEUDAL_CODE    = 'feudal_code'


class Relation(enum.Enum):
    WAR      = 'war'
    HOSTILE  = 'hostile'
    NEUTRAL  = 'neutral'
    FRIENDLY = 'friendly'
    ALLY     = 'ally'
    VASSAL   = 'vassal'


ABSORBING = frozenset({Relation.WAR, Relation.VASSAL})   # periodic classifier never touches these


class Biome(enum.Enum):
    FOREST   = 'forest'
    MOUNTAIN = 'mountain'
    PLAINS   = 'plains'
    SWAMP    = 'swamp'
    DESERT   = 'desert'


class Trend(enum.Enum):
    UP     = 'up'
    DOWN   = 'down'
    STABLE = 'stable'


# ══════════════════════════════════════════════════════════════════════════
# Constants
# ══════════════════════════════════════════════════════════════════════════

BASE_STORAGE        = 500
WAREHOUSE_STORAGE   = 1000
HOUSE_CAPACITY      = 5
URBAN_PLANNING_BONUS = 2
TOWN_CENTER_CAPACITY = 10
POPULATION_FLOOR    = 2

STARTING_RESOURCES: dict[Resource, float] = {
    Resource.PLANKS: 200,
    Resource.BREAD:  300,
    Resource.GOLD:   150,
}
STARTING_BUILDINGS: dict[Building, int] = {
    Building.TOWN_CENTER: 1,
    Building.HOUSE:       1,
    Building.LUMBER_HUT:  1,
    Building.FARM:        1,
}
STARTING_POPULATION = 5

NEIGHBOR_NAMES = [
    'Iron Barony', 'Hill Fort', 'Village of Winds', 'Black Castle',
    'Lowlands', 'Lost Sanctuary', 'Storm Peak', 'Mist Vale',
]


# ══════════════════════════════════════════════════════════════════════════
# Records
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class MarketPrice:
    base:  float
    buy:   float
    sell:  float
    trend: Trend = Trend.STABLE


@dataclass
class ActiveResearch:
    tech:     Tech
    progress: int  = 0
    paused:   bool = False


@dataclass
class TradeConfig:
    import_res: Resource | None = None
    export_res: Resource | None = None


@dataclass
class ArmyUpgrades:
    weapons: int = 0
    armor:   int = 0


@dataclass(frozen=True)
class NeighborProfile:
    """The parts of a neighbour that never change after realm creation."""
    id:         str
    name:       str
    biome:      Biome
    exports:    Resource
    imports:    Resource
    distance:   int
    position:   tuple[int, int]
    population: int


@dataclass
class Neighbor:
    profile:             NeighborProfile
    military_power:      float
    wealth:              float
    relation_score:      float
    relation:            Relation    = Relation.NEUTRAL
    route_active:        bool        = False
    route:               TradeConfig = field(default_factory=TradeConfig)
    intel_level:         int         = 0
    last_espionage_tick: int | None  = None

    @property
    def id(self) -> str:
        return self.profile.id

    @property
    def name(self) -> str:
        return self.profile.name


@dataclass
class WorldState:
    resources:       dict[Resource, float]
    buildings:       dict[Building, int]
    troops:          dict[Unit, int]
    population:      float
    happiness:       float
    prices:          dict[Resource, MarketPrice]
    neighbors:       list[Neighbor]
    tax_level:       TaxLevel             = TaxLevel.NORMAL
    stance:          Stance               = Stance.BALANCED
    policies:        set[Policy]          = field(default_factory=set)
    unlocked:        set[Tech]            = field(default_factory=set)
    research:        ActiveResearch | None = None
    research_points: float                = 0.0
    upgrades:        ArmyUpgrades         = field(default_factory=ArmyUpgrades)
    tick:            int                  = 0
    rng:             random.Random        = field(default_factory=random.Random)
    agenda:          Agenda               = field(default_factory=Agenda)

    def has_tech(self, tech: Tech) -> bool:
        return tech in self.unlocked

    def has_policy(self, policy: Policy) -> bool:
        return policy in self.policies

    def level(self, building: Building) -> int:
        return self.buildings.get(building, 0)

    def stock(self, res: Resource) -> float:
        return self.resources.get(res, 0)

    def neighbor(self, neighbor_id: str) -> Neighbor | None:
        for n in self.neighbors:
            if n.id == neighbor_id:
                return n
        return None


# ══════════════════════════════════════════════════════════════════════════
# Derived values
# ══════════════════════════════════════════════════════════════════════════

def max_storage(state: WorldState) -> int:
    return BASE_STORAGE + WAREHOUSE_STORAGE * state.level(Building.WAREHOUSE)


def max_population(state: WorldState) -> int:
    per_house = HOUSE_CAPACITY
    if state.has_tech(Tech.URBAN_PLANNING):
        per_house += URBAN_PLANNING_BONUS
    return (state.level(Building.HOUSE) * per_house
            + state.level(Building.TOWN_CENTER) * TOWN_CENTER_CAPACITY)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def free_storage(state: WorldState, res: Resource) -> float:
    return max(0.0, max_storage(state) - state.stock(res))


# ══════════════════════════════════════════════════════════════════════════
# Realm creation
# ══════════════════════════════════════════════════════════════════════════

def _initial_prices() -> dict[Resource, MarketPrice]:
    # local import: market imports world
    from .market import BASE_PRICES
    return {
        res: MarketPrice(base=base, buy=round(base * 1.2, 2), sell=round(base * 0.8, 2))
        for res, base in BASE_PRICES.items()
    }


def generate_neighbors(rng: random.Random) -> list[Neighbor]:
    """Eight neighbours, each stronger and richer than the one before."""
    names = list(NEIGHBOR_NAMES)
    rng.shuffle(names)
    biomes = list(Biome)
    out: list[Neighbor] = []
    for i, name in enumerate(names):
        exports, imports = rng.sample(GOODS, 2)
        profile = NeighborProfile(
            id         = f'n{i}',
            name       = name,
            biome      = rng.choice(biomes),
            exports    = exports,
            imports    = imports,
            distance   = rng.randint(1, 5),
            position   = (rng.randint(10, 90), rng.randint(10, 90)),
            population = 10 + i * 5,
        )
        out.append(Neighbor(
            profile        = profile,
            military_power = 50 + i * 120,
            wealth         = 500 + i * 200,
            relation_score = rng.randint(-20, 39),
        ))
    return out


def new_realm(seed: int | None = None) -> WorldState:
    """Fresh realm with the starting ledger, buildings and eight neighbours."""
    rng = random.Random(seed)
    resources = {res: 0.0 for res in Resource}
    resources.update({res: float(v) for res, v in STARTING_RESOURCES.items()})
    buildings = {b: 0 for b in Building}
    buildings.update(STARTING_BUILDINGS)
    return WorldState(
        resources  = resources,
        buildings  = buildings,
        troops     = {u: 0 for u in Unit},
        population = float(STARTING_POPULATION),
        happiness  = 100.0,
        prices     = _initial_prices(),
        neighbors  = generate_neighbors(rng),
        rng        = rng,
    )


def can_afford(state: WorldState, cost: dict[Resource, float]) -> bool:
    return all(state.stock(res) >= amount for res, amount in cost.items())


def pay(state: WorldState, cost: dict[Resource, float]) -> None:
    for res, amount in cost.items():
        state.resources[res] -= amount
