'''
Iterative simulation of a craft -> recycle quality loop.

The loop looks like this:

    ingredients -> assembler (configured modules) -> products -> recycler (quality modules) -> ingredients

Any product below the desired quality is recycled back into ingredients, a quarter of
which survive. Products of the desired quality are pulled out of the loop.
We start with a batch of ingredients and push them around the loop a fixed number of times,
which gives an estimate of how many desired products the batch turns into.

All probabilities are applied as expected values, so a "cycle" moves fractional items around:
    items[i] = amount of quality i items, i = 0 (normal) .. 4 (legendary)
The vector always has 5 slots, qualities above max_item_tier stay at 0.

Upgrade chances follow the game: with quality q the next quality is hit with probability q,
and each further quality is 10x less likely than the one before it.
'''
import logging
import numbers
from dataclasses import dataclass, fields

import numpy as np

from quality_modules import NUM_QUALITIES, ItemTier, prod_module_effect, quality_module_effect

logger = logging.getLogger(__name__)

RECYCLING_RATIO = 0.25
JUMP_QUALITY_PROBABILITY = 0.1
BUILDING_PROD_BONUS = 0.5
NUM_RECYCLING_MODULE_SLOTS = 4
NUM_CRAFTING_MODULE_SLOTS = 5
TOP_TIER = ItemTier.LEGENDARY.rank

# legendary ingredients can't be upgraded any more, so they are always crafted
# with a full set of legendary prod 3 modules in a building with +50% productivity
MAX_TOP_TIER_PRODUCTIVITY = NUM_CRAFTING_MODULE_SLOTS * prod_module_effect(3, ItemTier.LEGENDARY) + BUILDING_PROD_BONUS


def is_integer(value):
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


class InvalidTierOrderingError(ValueError):
    pass


class InvalidConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class LoopConfig:
    total_cycles: int = 1
    recycler_quality: float = 0.0
    production_quality: float = 0.0
    production_productivity: float = 0.0
    max_item_tier: int = TOP_TIER
    # run total_cycles + 1 cycles, i.e. count cycles 0..total_cycles inclusive
    inclusive_cycles: bool = True
    top_tier_productivity: float = MAX_TOP_TIER_PRODUCTIVITY

    def __post_init__(self):
        if not is_integer(self.total_cycles) or self.total_cycles < 0:
            raise InvalidConfigurationError(f'total_cycles must be a non-negative integer, got {self.total_cycles!r}')
        if not is_integer(self.max_item_tier) or not (0 <= self.max_item_tier < NUM_QUALITIES):
            raise InvalidConfigurationError(f'max_item_tier must be between 0 and {NUM_QUALITIES-1}, got {self.max_item_tier!r}')
        if not isinstance(self.inclusive_cycles, bool):
            raise InvalidConfigurationError('inclusive_cycles must be a boolean')
        for name in ['recycler_quality', 'production_quality', 'production_productivity', 'top_tier_productivity']:
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise InvalidConfigurationError(f'{name} must be a non-negative number, got {value!r}')

        for name in ['recycler_quality', 'production_quality']:
            # normal items have the most qualities to jump to, so they go negative first
            keep_probability = calculate_upgrade_distribution(0, self.max_item_tier, getattr(self, name))[0]
            if keep_probability < 0:
                logger.warning('%s=%s gives a negative chance (%s) of keeping quality, results will include negative amounts',
                    name, getattr(self, name), keep_probability)

    @property
    def num_cycles_run(self):
        return self.total_cycles + 1 if self.inclusive_cycles else self.total_cycles

    @classmethod
    def from_modules(cls, num_production_quality_modules=0, num_production_prod_modules=0,
            num_recycler_quality_modules=NUM_RECYCLING_MODULE_SLOTS, quality_module_level=3, prod_module_level=3,
            module_tier=ItemTier.LEGENDARY, building_prod_bonus=BUILDING_PROD_BONUS, **kwargs):
        '''Build a config from the modules placed in the assembler and the recycler.'''
        if num_production_quality_modules + num_production_prod_modules > NUM_CRAFTING_MODULE_SLOTS:
            raise InvalidConfigurationError(f'assembler only has {NUM_CRAFTING_MODULE_SLOTS} module slots')
        if num_recycler_quality_modules > NUM_RECYCLING_MODULE_SLOTS:
            raise InvalidConfigurationError(f'recycler only has {NUM_RECYCLING_MODULE_SLOTS} module slots')
        quality_probability = quality_module_effect(quality_module_level, module_tier)
        prod_bonus = prod_module_effect(prod_module_level, module_tier)
        return cls(
            recycler_quality=quality_probability * num_recycler_quality_modules,
            production_quality=quality_probability * num_production_quality_modules,
            production_productivity=prod_bonus * num_production_prod_modules + building_prod_bonus,
            **kwargs
        )

    @classmethod
    def from_dict(cls, config):
        '''Build a config from a json object.

        Accepts the LoopConfig fields directly, and optionally a "modules" object
        with the arguments of from_modules (module_tier given as a quality name).
        '''
        field_names = {f.name for f in fields(cls)}
        unknown_keys = set(config.keys()) - field_names - {'modules'}
        if unknown_keys:
            raise InvalidConfigurationError(f'unknown config keys: {sorted(unknown_keys)}')
        kwargs = {key: value for key, value in config.items() if key != 'modules'}
        try:
            if 'modules' not in config:
                return cls(**kwargs)
            modules = dict(config['modules'])
            if 'module_tier' in modules:
                modules['module_tier'] = ItemTier.from_name(modules['module_tier'])
            return cls.from_modules(**modules, **kwargs)
        except TypeError as e:
            raise InvalidConfigurationError(f'bad config {config}: {e}') from e


@dataclass(frozen=True)
class SimulationStep:
    cycle: int
    items: np.ndarray
    cycle_yield: float
    cumulative_yield: float


def check_items(config, items):
    items = np.array(items, dtype=float)
    if items.shape != (NUM_QUALITIES,):
        raise InvalidConfigurationError(f'item vector must have {NUM_QUALITIES} entries, got shape {items.shape}')
    if not np.all(np.isfinite(items)) or np.any(items < 0):
        raise InvalidConfigurationError(f'item amounts must be finite and non-negative, got {items}')
    if np.any(items[config.max_item_tier+1:] != 0):
        raise InvalidConfigurationError(f'qualities above max_item_tier={config.max_item_tier} must be empty, got {items}')
    return items


def calculate_upgrade_step(starting_quality, ending_quality, quality_percent):
    if starting_quality >= ending_quality:
        raise InvalidTierOrderingError(f"Can't calculate upgrade from quality {starting_quality} to {ending_quality}")
    return quality_percent * JUMP_QUALITY_PROBABILITY ** (ending_quality - starting_quality - 1)


def calculate_upgrade_distribution(starting_quality, max_quality, quality_percent):
    '''Probability that an item crafted at starting_quality comes out at each quality.

    Whatever does not upgrade stays at starting_quality. Nothing above max_quality is reachable,
    and the chance to jump past max_quality stays at starting_quality rather than being
    folded into max_quality.
    '''
    distribution = np.zeros(NUM_QUALITIES)
    total_upgrade_probability = 0.0
    for ending_quality in range(starting_quality+1, max_quality+1):
        distribution[ending_quality] = calculate_upgrade_step(starting_quality, ending_quality, quality_percent)
        total_upgrade_probability += distribution[ending_quality]
    # not clamped, quality above 100% leaves a negative chance here
    distribution[starting_quality] = 1.0 - total_upgrade_probability
    return distribution


def craft(config, items):
    production_items = np.zeros(NUM_QUALITIES)
    for quality in range(config.max_item_tier+1):
        if quality == TOP_TIER:
            productivity = config.top_tier_productivity
        else:
            productivity = config.production_productivity
        distribution = calculate_upgrade_distribution(quality, config.max_item_tier, config.production_quality)
        production_items += items[quality] * (1.0 + productivity) * distribution
    return production_items


def recycle(config, production_items):
    recycled_items = np.zeros(NUM_QUALITIES)
    for quality in range(config.max_item_tier+1):
        # desired products are taken out of the loop
        if quality == config.max_item_tier:
            continue
        distribution = calculate_upgrade_distribution(quality, config.max_item_tier, config.recycler_quality)
        recycled_items += production_items[quality] * RECYCLING_RATIO * distribution
    return recycled_items


def run_cycle(config, items):
    production_items = craft(config, items)
    recycled_items = recycle(config, production_items)
    return recycled_items, float(production_items[config.max_item_tier])


def calculate_cycle(config, items):
    '''Run one craft + recycle pass.

    Returns the ingredients to feed into the next cycle and the amount of
    max_item_tier products crafted this cycle.
    '''
    return run_cycle(config, check_items(config, items))


def count_cycles(config, cycles=None):
    if cycles is None:
        cycles = config.total_cycles
    if cycles < 0:
        raise InvalidConfigurationError(f'cycles must be non-negative, got {cycles}')
    return cycles + 1 if config.inclusive_cycles else cycles


def iterate_cycles(config, items, num_cycles):
    cumulative_yield = 0.0
    for cycle in range(num_cycles):
        items, cycle_yield = run_cycle(config, items)
        cumulative_yield += cycle_yield
        logger.debug('cycle %d: yield %s, cumulative %s, leftover %s', cycle, cycle_yield, cumulative_yield, items)
        yield SimulationStep(cycle=cycle, items=items, cycle_yield=cycle_yield, cumulative_yield=cumulative_yield)


def simulation_steps(config, initial_items, cycles=None):
    '''Same loop as simulate, one SimulationStep per cycle.

    Arguments are checked here, before the first step is requested.
    '''
    num_cycles = count_cycles(config, cycles)
    return iterate_cycles(config, check_items(config, initial_items), num_cycles)


def simulate(config, initial_items, cycles=None):
    '''Push initial_items around the loop and total up the desired products.

    The returned vector holds the leftover ingredients after the last cycle, except for
    the max_item_tier slot which holds every desired product crafted along the way.
    '''
    num_cycles = count_cycles(config, cycles)
    items = check_items(config, initial_items)
    cumulative_yield = 0.0
    for step in iterate_cycles(config, items, num_cycles):
        items, cumulative_yield = step.items, step.cumulative_yield

    result = items.copy()
    result[config.max_item_tier] = cumulative_yield
    return result


def format_result(result):
    return ', '.join(f'{tier.display_name}: {result[tier.rank]:.2f}' for tier in ItemTier)
