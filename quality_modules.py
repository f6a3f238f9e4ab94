'''
Quality tiers and module strengths.

Every item has one of five qualities, from normal up to legendary.
Modules (and the buildings they sit in) can themselves be of any quality,
and a higher quality module is stronger by a fixed multiplier:

    normal 1.0, uncommon 1.3, rare 1.6, epic 1.9, legendary 2.5

Quality modules add a flat chance to upgrade each craft, productivity modules add
a flat bonus to the number of items crafted. Productivity is always a whole number of
percent in game, so it is floored after the multiplier is applied.
'''
import math
from enum import Enum

import numpy as np

QUALITY_NAMES = ['normal', 'uncommon', 'rare', 'epic', 'legendary']
QUALITY_LEVELS = { quality_name: quality_level for quality_level, quality_name in enumerate(QUALITY_NAMES) }
NUM_QUALITIES = len(QUALITY_NAMES)

# base strength of a normal quality module, indexed by module level 1..3
QUALITY_MODULE_BASE_PROBABILITIES = {1: 0.01, 2: 0.02, 3: 0.025}
# in percent
PROD_MODULE_BASE_BONUSES = {1: 4, 2: 6, 3: 10}


class InvalidModuleLevelError(ValueError):
    pass


class ItemTier(Enum):
    NORMAL = (0, 1.0)
    UNCOMMON = (1, 1.3)
    RARE = (2, 1.6)
    EPIC = (3, 1.9)
    LEGENDARY = (4, 2.5)

    def __init__(self, rank, multiplier):
        self.rank = rank
        self.multiplier = multiplier

    @property
    def display_name(self):
        return self.name.capitalize()

    @classmethod
    def from_rank(cls, rank):
        for tier in cls:
            if tier.rank == rank:
                return tier
        raise ValueError(f'No quality tier with rank {rank}')

    @classmethod
    def from_name(cls, name):
        if name.lower() not in QUALITY_LEVELS:
            raise ValueError(f'Unknown quality {name!r}, expected one of {QUALITY_NAMES}')
        return cls.from_rank(QUALITY_LEVELS[name.lower()])


def check_module_level(module_level):
    if module_level not in QUALITY_MODULE_BASE_PROBABILITIES:
        raise InvalidModuleLevelError(f'Invalid module level {module_level}, must be 1, 2 or 3')


def quality_module_effect(module_level, module_tier):
    '''Upgrade chance added by one quality module, as a fraction.'''
    check_module_level(module_level)
    return QUALITY_MODULE_BASE_PROBABILITIES[module_level] * module_tier.multiplier


def prod_module_effect(module_level, module_tier):
    '''Productivity added by one productivity module, as a fraction.

    The game truncates to whole percents, so e.g. a level 2 rare module is
    floor(6 * 1.6) = 9%, not 9.6%.
    '''
    check_module_level(module_level)
    return math.floor(PROD_MODULE_BASE_BONUSES[module_level] * module_tier.multiplier) / 100.0


def quality_module_table():
    # rows are module levels 1..3, columns are module qualities
    return np.array([[quality_module_effect(level, tier) for tier in ItemTier] for level in (1, 2, 3)])


def prod_module_table():
    return np.array([[prod_module_effect(level, tier) for tier in ItemTier] for level in (1, 2, 3)])
