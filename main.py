'''
This script compares module setups for the following loop.
We start with a batch of normal ingredients A and want legendary products B.
Every craft A->B goes through an assembler with 5 module slots and +50% productivity,
and any non-legendary B gets recycled back into A by a recycler with 4 quality modules.
Legendary A is always crafted with 5 prod modules since it can't get any better.

For each strategy we push the batch around the loop for a number of cycles
(see recycling_loop.py) and report the total legendary B made along the way,
as well as the ingredients still left in the loop.

The default strategies split the 5 assembler slots between quality and prod modules:
quality 5/0, hybrid 4/1, 3/2, 2/3, 1/4 and productivity 0/5.
Custom scenarios can be loaded from a json file, see examples/strategy_comparison.json.
'''
import argparse
import json
import logging

import pandas as pd

from logging_config import setup_logging
from quality_modules import NUM_QUALITIES, ItemTier
from recycling_loop import InvalidConfigurationError, LoopConfig, check_items, format_result, simulate

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_NORMAL_ITEMS = 10000.0
DEFAULT_CYCLES = 10
DEFAULT_MODULE_LEVEL = 3
DEFAULT_MODULE_QUALITY = 'legendary'
DEFAULT_MAX_QUALITY = 'legendary'

# (name, assembler quality modules, assembler prod modules)
DEFAULT_STRATEGIES = [
    ('quality', 5, 0),
    ('hybrid41', 4, 1),
    ('hybrid32', 3, 2),
    ('hybrid23', 2, 3),
    ('hybrid14', 1, 4),
    ('productivity', 0, 5),
]

def build_default_scenarios(cycles=DEFAULT_CYCLES, quality_module_level=DEFAULT_MODULE_LEVEL, prod_module_level=DEFAULT_MODULE_LEVEL,
        module_tier=ItemTier.LEGENDARY, max_item_tier=ItemTier.LEGENDARY.rank, inclusive_cycles=True):
    scenarios = []
    for name, num_qual_modules, num_prod_modules in DEFAULT_STRATEGIES:
        config = LoopConfig.from_modules(
            num_production_quality_modules=num_qual_modules,
            num_production_prod_modules=num_prod_modules,
            quality_module_level=quality_module_level,
            prod_module_level=prod_module_level,
            module_tier=module_tier,
            total_cycles=cycles,
            max_item_tier=max_item_tier,
            inclusive_cycles=inclusive_cycles
        )
        scenarios.append((name, config))
    return scenarios

def load_scenarios(config_data):
    '''Parse a scenario file into (initial_items, [(name, LoopConfig), ...]).'''
    if not isinstance(config_data, dict):
        raise InvalidConfigurationError(f'scenario file must contain a json object, got {type(config_data).__name__}')
    initial_items = config_data.get('initial_items', [DEFAULT_INITIAL_NORMAL_ITEMS] + [0.0]*(NUM_QUALITIES-1))
    cycles = config_data.get('cycles', DEFAULT_CYCLES)
    if not isinstance(config_data.get('scenarios'), list) or len(config_data['scenarios']) == 0:
        raise InvalidConfigurationError('scenario file must contain a non-empty "scenarios" list')

    scenarios = []
    for i, scenario_data in enumerate(config_data['scenarios']):
        if not isinstance(scenario_data, dict):
            raise InvalidConfigurationError(f'scenario {i} must be a json object')
        scenario_data = dict(scenario_data)
        name = scenario_data.pop('name', f'scenario-{i}')
        scenario_data.setdefault('total_cycles', cycles)
        config = LoopConfig.from_dict(scenario_data)
        # the batch has to fit every scenario's max_item_tier
        check_items(config, initial_items)
        scenarios.append((name, config))
    return initial_items, scenarios

def run_scenarios(scenarios, initial_items):
    total_input = float(sum(initial_items))
    rows = []
    for name, config in scenarios:
        logger.debug('simulating %s with %s', name, config)
        result = simulate(config, initial_items)
        print(f'{name} result after {config.total_cycles} recycler loops {format_result(result)}')

        row = {'strategy': name}
        for tier in ItemTier:
            row[tier.display_name] = result[tier.rank]
        row['yield_per_input'] = result[config.max_item_tier] / total_input if total_input > 0 else 0.0
        rows.append(row)
    return pd.DataFrame(rows)

def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='Quality Loop Simulator',
        description='This program compares prod/qual module setups in a craft and recycle loop by simulating it for a number of cycles',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('-c', '--config', type=str, default=None, help='Scenario file. If not present, compares the default quality/prod module splits.')
    parser.add_argument('-n', '--cycles', type=int, default=DEFAULT_CYCLES, help='Number of recycler loops. Ignored if --config is set.')
    parser.add_argument('-i', '--initial-normal', type=float, default=DEFAULT_INITIAL_NORMAL_ITEMS, help='Amount of normal ingredients to start with. Ignored if --config is set.')
    parser.add_argument('-ql', '--quality-level', type=int, default=DEFAULT_MODULE_LEVEL, help='Quality module level. Number from 1 to 3.')
    parser.add_argument('-pl', '--prod-level', type=int, default=DEFAULT_MODULE_LEVEL, help='Productivity module level. Number from 1 to 3.')
    parser.add_argument('-mt', '--module-tier', type=str, default=DEFAULT_MODULE_QUALITY, help='Quality of the modules in the assembler and recycler.')
    parser.add_argument('-mq', '--max-quality', type=str, default=DEFAULT_MAX_QUALITY, help='Desired product quality. Products of this quality are never recycled.')
    parser.add_argument('--inclusive-cycles', default=True, action=argparse.BooleanOptionalAction, help='Run cycles+1 loops, counting loops 0..cycles. Disable to run exactly --cycles loops.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose mode. Logs every cycle of every scenario.')
    args = parser.parse_args(argv)

    setup_logging('DEBUG' if args.verbose else 'INFO')

    if args.config is not None:
        try:
            with open(args.config) as f:
                config_data = json.load(f)
            initial_items, scenarios = load_scenarios(config_data)
        except (OSError, json.JSONDecodeError, ValueError) as e:
            parser.error(f'could not load {args.config}: {e}')
    else:
        try:
            module_tier = ItemTier.from_name(args.module_tier)
            max_item_tier = ItemTier.from_name(args.max_quality).rank
        except ValueError as e:
            parser.error(str(e))
        initial_items = [args.initial_normal] + [0.0]*(NUM_QUALITIES-1)
        scenarios = build_default_scenarios(
            cycles=args.cycles,
            quality_module_level=args.quality_level,
            prod_module_level=args.prod_level,
            module_tier=module_tier,
            max_item_tier=max_item_tier,
            inclusive_cycles=args.inclusive_cycles
        )

    print('')
    df = run_scenarios(scenarios, initial_items)
    print('')
    print(df.round(2).to_string(index=False))

if __name__=='__main__':
    main()
