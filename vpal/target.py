import math
from typing import List, Optional

TARGET_DARK_LUMA = 0.26
MAX_DARK_LUMA = 0.45

MIN_LIGHT_LUMA = 0.55
TARGET_LIGHT_LUMA = 0.74

MIN_NORMAL_LUMA = 0.3
TARGET_NORMAL_LUMA = 0.5
MAX_NORMAL_LUMA = 0.7

TARGET_MUTED_SATURATION = 0.3
MAX_MUTED_SATURATION = 0.4

TARGET_VIBRANT_SATURATION = 1.0
MIN_VIBRANT_SATURATION = 0.35

WEIGHT_SATURATION = 0.24
WEIGHT_LUMA = 0.52
WEIGHT_POPULATION = 0.24

INDEX_MIN = 0
INDEX_TARGET = 1
INDEX_MAX = 2

INDEX_WEIGHT_SAT = 0
INDEX_WEIGHT_LUMA = 1
INDEX_WEIGHT_POP = 2


class Target:
    """
    A scoring profile used to pick one swatch out of a palette.

    Saturation and lightness are given as (min, target, max) ranges in [0, 1].
    Weights are non-negative; they are rescaled to sum to 1 before scoring.
    An exclusive target claims its selected color so later targets skip it.
    """

    def __init__(
        self,
        minimum_saturation: float = 0.0,
        target_saturation: float = 0.5,
        maximum_saturation: float = 1.0,
        minimum_lightness: float = 0.0,
        target_lightness: float = 0.5,
        maximum_lightness: float = 1.0,
        saturation_weight: float = WEIGHT_SATURATION,
        lightness_weight: float = WEIGHT_LUMA,
        population_weight: float = WEIGHT_POPULATION,
        exclusive: bool = True,
        name: Optional[str] = None,
    ):
        self.saturation_targets: List[float] = [minimum_saturation, target_saturation, maximum_saturation]
        self.lightness_targets: List[float] = [minimum_lightness, target_lightness, maximum_lightness]
        self.weights: List[float] = [saturation_weight, lightness_weight, population_weight]
        self.exclusive = exclusive
        self.name = name

    @property
    def minimum_saturation(self) -> float:
        return self.saturation_targets[INDEX_MIN]

    @property
    def target_saturation(self) -> float:
        return self.saturation_targets[INDEX_TARGET]

    @property
    def maximum_saturation(self) -> float:
        return self.saturation_targets[INDEX_MAX]

    @property
    def minimum_lightness(self) -> float:
        return self.lightness_targets[INDEX_MIN]

    @property
    def target_lightness(self) -> float:
        return self.lightness_targets[INDEX_TARGET]

    @property
    def maximum_lightness(self) -> float:
        return self.lightness_targets[INDEX_MAX]

    @property
    def saturation_weight(self) -> float:
        return self.weights[INDEX_WEIGHT_SAT]

    @property
    def lightness_weight(self) -> float:
        return self.weights[INDEX_WEIGHT_LUMA]

    @property
    def population_weight(self) -> float:
        return self.weights[INDEX_WEIGHT_POP]

    def is_exclusive(self) -> bool:
        return self.exclusive

    def normalize_weights(self) -> None:
        """Scale positive weights so they sum to 1. Zero and negative weights are left alone."""
        total = sum(w for w in self.weights if w > 0)
        if total == 0 or math.isclose(total, 1.0):
            return
        self.weights = [w / total if w > 0 else w for w in self.weights]

    def copy(self, **overrides) -> "Target":
        """
        New target with this one's ranges and weights, with keyword overrides
        (same names as the constructor). `exclusive` and `name` are not carried over.
        """
        values = dict(
            minimum_saturation=self.minimum_saturation,
            target_saturation=self.target_saturation,
            maximum_saturation=self.maximum_saturation,
            minimum_lightness=self.minimum_lightness,
            target_lightness=self.target_lightness,
            maximum_lightness=self.maximum_lightness,
            saturation_weight=self.saturation_weight,
            lightness_weight=self.lightness_weight,
            population_weight=self.population_weight,
        )
        values.update(overrides)
        return Target(**values)

    def __repr__(self):
        label = self.name or "custom"
        return (f"Target({label}, saturation={tuple(self.saturation_targets)}, "
                f"lightness={tuple(self.lightness_targets)}, weights={tuple(self.weights)}, "
                f"exclusive={self.exclusive})")


_LIGHT = dict(minimum_lightness=MIN_LIGHT_LUMA, target_lightness=TARGET_LIGHT_LUMA)
_NORMAL = dict(minimum_lightness=MIN_NORMAL_LUMA, target_lightness=TARGET_NORMAL_LUMA,
               maximum_lightness=MAX_NORMAL_LUMA)
_DARK = dict(target_lightness=TARGET_DARK_LUMA, maximum_lightness=MAX_DARK_LUMA)
_VIBRANT = dict(minimum_saturation=MIN_VIBRANT_SATURATION, target_saturation=TARGET_VIBRANT_SATURATION)
_MUTED = dict(target_saturation=TARGET_MUTED_SATURATION, maximum_saturation=MAX_MUTED_SATURATION)

LIGHT_VIBRANT = Target(name="light_vibrant", **_LIGHT, **_VIBRANT)
VIBRANT = Target(name="vibrant", **_NORMAL, **_VIBRANT)
DARK_VIBRANT = Target(name="dark_vibrant", **_DARK, **_VIBRANT)
LIGHT_MUTED = Target(name="light_muted", **_LIGHT, **_MUTED)
MUTED = Target(name="muted", **_NORMAL, **_MUTED)
DARK_MUTED = Target(name="dark_muted", **_DARK, **_MUTED)

# Order matters: exclusive targets earlier in the list claim colors first.
DEFAULT_TARGETS = (LIGHT_VIBRANT, VIBRANT, DARK_VIBRANT, LIGHT_MUTED, MUTED, DARK_MUTED)

TARGETS_BY_NAME = {t.name: t for t in DEFAULT_TARGETS}
