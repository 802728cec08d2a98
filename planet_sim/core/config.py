"""All tunable constants for the planet simulation.

Every magic number in the codebase must reference this file.
"""

# =============================================================================
# ENERGY SOURCES
# =============================================================================
ENERGY_SOURCES: tuple[str, ...] = ("solar", "wind", "hydro", "geo", "fossil")
RENEWABLE_SOURCES: tuple[str, ...] = ("solar", "wind", "hydro", "geo")

# Base efficiency per source (0.0 - 1.0)
ENERGY_EFFICIENCIES: dict[str, float] = {
    "solar": 0.80,
    "wind": 0.90,
    "hydro": 0.85,
    "geo": 0.95,
    "fossil": 0.90,
}

# Environmental modifiers on efficiency
SOLAR_POLLUTION_DIVISOR: float = 200.0   # -pollution/200, up to -0.5 at 100
WIND_COLD_THRESHOLD: float = 15.0
WIND_COLD_PENALTY: float = -0.2
WIND_HOT_THRESHOLD: float = 35.0
WIND_HOT_PENALTY: float = -0.15
WIND_BONUS_DIVISOR: float = 50.0         # bonus = temperature/50 in between
HYDRO_HEAT_THRESHOLD: float = 30.0
HYDRO_HEAT_DIVISOR: float = 20.0
HYDRO_MAX_PENALTY: float = 0.3

# =============================================================================
# CONSUMPTION / STORAGE
# =============================================================================
CONSUMPTION_BASE: int = 50               # MW
EFFICIENCY_CONSUMPTION_REDUCTION: float = 0.95
DEFAULT_MAX_STORAGE: int = 100           # MW
STORAGE_LOSS_RATE: float = 0.02          # per turn
CRITICAL_DEFICIT: int = 30               # MW

# =============================================================================
# EXPANSION
# =============================================================================
# Credits per expansion batch. Fossil is priced for expansion_cost() lookups
# only: the ACTIONS table below deliberately offers no way to build fossil,
# so its popularity reaction (rich +5, poor -3, middle -1) never applies.
EXPANSION_COSTS: dict[str, int] = {
    "solar": 200,
    "wind": 150,
    "hydro": 300,
    "geo": 250,
    "fossil": 100,
}

# MW added per batch
EXPANSION_BATCH_MW: dict[str, int] = {
    "solar": 10,
    "wind": 10,
    "hydro": 15,
    "geo": 8,
}

TRANSITION_THRESHOLD_MW: int = 20        # renewable MW in one action
TRANSITION_MAX_REDUCTION: int = 5        # fossil MW retired automatically
TRANSITION_STEP_MW: int = 10             # 1 MW fossil per 10 MW renewables

# =============================================================================
# PLAYER ACTIONS
# =============================================================================
# credits: cost, source/capacity: MW change, pollution: immediate delta,
# popularity: per-class approval delta
ACTIONS: dict[str, dict] = {
    "expand_solar": {
        "credits": 200, "source": "solar", "capacity": 10, "pollution": 2,
        "popularity": {"poor": 0, "middle": 3, "rich": 1},
    },
    "expand_wind": {
        "credits": 150, "source": "wind", "capacity": 10, "pollution": 1,
        "popularity": {"poor": 2, "middle": 2, "rich": 1},
    },
    "expand_hydro": {
        "credits": 300, "source": "hydro", "capacity": 15, "pollution": 3,
        "popularity": {"poor": -1, "middle": 1, "rich": 2},
    },
    "expand_geo": {
        "credits": 250, "source": "geo", "capacity": 8, "pollution": 1,
        "popularity": {"poor": 0, "middle": 2, "rich": 2},
    },
    "reduce_fossil": {
        "credits": 0, "source": "fossil", "capacity": -5, "pollution": -5,
        "popularity": {"poor": 4, "middle": 2, "rich": -3},
    },
    "invest_research": {
        "credits": 100, "pollution": 0,
        "popularity": {"poor": 0, "middle": 3, "rich": 2},
    },
    "public_campaign": {
        "credits": 50, "pollution": 0,
        "popularity": {"poor": 3, "middle": 1, "rich": 0},
    },
    "environmental_program": {
        "credits": 150, "pollution": -10, "cleanup": True,
        "popularity": {"poor": 4, "middle": 3, "rich": -2},
    },
}

MAX_BATCHES_PER_ACTION: int = 10

# =============================================================================
# ENVIRONMENT
# =============================================================================
POLLUTION_RATES: dict[str, float] = {
    "solar": 0.1,
    "wind": 0.05,
    "hydro": 0.2,
    "geo": 0.15,
    "fossil": 2.0,
}

POLLUTION_TEMPERATURE_FACTOR: float = 0.1
RENEWABLE_COOLING_FACTOR: float = 0.5
PASSIVE_COOLING_THRESHOLD: float = 25.0
PASSIVE_COOLING: float = 0.1
CLEANUP_REDUCTION: float = 2.0
PURIFICATION_RATE: float = 0.02
PURIFICATION_CAP: float = 1.0

POLLUTION_RANGE: tuple[float, float] = (0.0, 100.0)
TEMPERATURE_RANGE: tuple[float, float] = (15.0, 50.0)
POPULARITY_RANGE: tuple[int, int] = (0, 100)

# Environmental health score (advisory)
HEALTH_POLLUTION_WEIGHT: float = 0.8
HEALTH_TEMPERATURE_BASELINE: float = 25.0
HEALTH_TEMPERATURE_WEIGHT: float = 2.0
HEALTH_BANDS: list[tuple[float, str]] = [
    (80.0, "Excellent"),
    (60.0, "Good"),
    (40.0, "Fair"),
    (20.0, "Poor"),
    (0.0, "Critical"),
]

# =============================================================================
# ECONOMY
# =============================================================================
# Credits per popularity point
INCOME_RATES: dict[str, int] = {
    "poor": 5,
    "middle": 10,
    "rich": 15,
}

AUTHORITARIAN_TAX_THRESHOLD: int = 40    # rich popularity below this
AUTHORITARIAN_TAX_RATE: float = 0.10
SUBSIDY_THRESHOLD: int = 30              # poor popularity below this
SUBSIDY_RATE: float = 0.05

# Credits per 10 MW installed
MAINTENANCE_COSTS: dict[str, int] = {
    "solar": 10,
    "wind": 8,
    "hydro": 15,
    "geo": 12,
    "fossil": 20,
}
MAINTENANCE_UNIT_MW: int = 10

# Economic health status (advisory)
ECONOMY_CRITICAL_CREDITS: int = 100
ECONOMY_WORRYING_CREDITS: int = 500
ECONOMY_STABLE_MARGIN: int = 100         # income - expenses below this is "Stable"

# =============================================================================
# SOCIETY
# =============================================================================
SOCIAL_CLASSES: tuple[str, ...] = ("poor", "middle", "rich")

DRIFT_POLLUTION_THRESHOLD: float = 50.0
DRIFT_POLLUTION_DIVISORS: dict[str, int] = {"poor": 20, "middle": 30}
DRIFT_TEMPERATURE_THRESHOLD: float = 35.0
DRIFT_TEMPERATURE_DIVISORS: dict[str, int] = {"poor": 2, "middle": 3}
DRIFT_LOW_CREDITS: int = 200
DRIFT_LOW_CREDITS_PENALTY: dict[str, int] = {"poor": 2, "middle": 1}
DRIFT_DEFICIT_THRESHOLD: int = -10
DRIFT_DEFICIT_PENALTY: dict[str, int] = {"poor": 2, "middle": 1, "rich": 1}

MIGRATION_POOR_EMIGRATION: int = 20
MIGRATION_MIDDLE_DOWN: int = 30
MIGRATION_MIDDLE_UP: int = 80

REVOLT_SAFE_POPULARITY: float = 60.0
REVOLT_CERTAIN_POPULARITY: float = 20.0

SATISFACTION_BANDS: list[tuple[float, str]] = [
    (70.0, "Satisfied"),
    (50.0, "Neutral"),
    (30.0, "Dissatisfied"),
    (0.0, "Revolting"),
]

# =============================================================================
# EVENTS
# =============================================================================
EVENT_BASE_CHANCE: float = 10.0          # percent per turn

# =============================================================================
# DECISIONS
# =============================================================================
DECISION_BASE_CHANCE: float = 10.0       # percent per turn
DECISION_LOW_POPULARITY_BONUS: float = 15.0
DECISION_LOW_POPULARITY_THRESHOLD: int = 50
DECISION_CRISIS_BONUS: float = 10.0
DECISION_CRISIS_POLLUTION: float = 70.0
DECISION_CRISIS_DEFICIT: int = -20
DECISION_MAX_CHANCE: float = 50.0
TARGET_CLASS_MARGIN: float = 10.0        # points below the class average

# =============================================================================
# VICTORY / DEFEAT
# =============================================================================
DEFEAT_CREDITS: int = 0
DEFEAT_POLLUTION: float = 100.0
DEFEAT_TEMPERATURE: float = 45.0
DEFEAT_POPULARITY: float = 20.0
DEFEAT_ENERGY_DEFICIT: int = 30

VICTORY_TIERS: dict[str, dict[str, float]] = {
    "sustainable_complete": {
        "max_pollution": 10, "min_renewable_ratio": 0.8,
        "min_popularity": 70, "max_turn": 50,
    },
    "energy_victory": {
        "min_surplus": 20, "max_pollution": 50, "max_turn": 30,
    },
    "partial_victory": {
        "max_pollution": 30, "min_popularity": 60,
        "min_credits": 500, "max_turn": 40,
    },
}

# (threshold, points), first match wins
SCORE_POLLUTION_BANDS: list[tuple[float, int]] = [(20, 30), (40, 20), (60, 10)]
SCORE_SURPLUS_BANDS: list[tuple[float, int]] = [(20, 25), (0, 15)]
SCORE_SURPLUS_FLOOR: int = 5
SCORE_POPULARITY_BANDS: list[tuple[float, int]] = [(80, 25), (60, 15), (40, 10)]
SCORE_CREDIT_BANDS: list[tuple[float, int]] = [(1000, 20), (500, 10)]
SCORE_TURN_HORIZON: int = 50
SCORE_MAX: int = 100

# End-of-game ratings, first match wins
ECOLOGY_RATINGS: list[tuple[float, float, str]] = [  # (max pollution, max temperature, label)
    (10, 20, "Excellent"),
    (30, 25, "Good"),
    (50, 30, "Fair"),
    (70, 35, "Poor"),
]
ECOLOGY_WORST_RATING: str = "Disastrous"
SOCIETY_RATINGS: list[tuple[float, str]] = [
    (80, "Harmonious"),
    (60, "Stable"),
    (40, "Tense"),
    (20, "Unstable"),
]
SOCIETY_WORST_RATING: str = "Chaotic"
ECONOMY_RATINGS: list[tuple[float, str]] = [
    (1000, "Prosperous"),
    (500, "Stable"),
    (200, "Worrying"),
    (0, "Critical"),
]
ECONOMY_WORST_RATING: str = "Bankrupt"

# =============================================================================
# LOGGING / PERSISTENCE
# =============================================================================
LOG_BUFFER_SIZE: int = 50
LOG_TYPES: tuple[str, ...] = ("info", "success", "warning", "error", "event")
SAVE_VERSION: str = "1.0.0"

# =============================================================================
# STARTING CONDITIONS
# =============================================================================
START_TURN: int = 1
START_CREDITS: int = 1000
START_POLLUTION: float = 0.0
START_TEMPERATURE: float = 20.0
START_POPULARITY: int = 50
START_CAPACITY: dict[str, int] = {
    "solar": 0,
    "wind": 0,
    "hydro": 0,
    "geo": 0,
    "fossil": 50,
}
