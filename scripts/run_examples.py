'''
Runs every scenario file in examples/ and prints a results table for each.

The simulator modules live at the root of the repo, so either install it first (pip install -e .)
or run this from the repo root as a module:

    python -m scripts.run_examples
'''
import json
import os
from main import load_scenarios, run_scenarios

CODEBASE_PATH = os.path.dirname(os.path.dirname(os.path.realpath(__file__)))
EXAMPLES_PATH = os.path.join(CODEBASE_PATH, 'examples')

def main(examples_path=EXAMPLES_PATH):
    for example_config in sorted(os.listdir(examples_path)):
        example_config_filename = os.path.join(examples_path, example_config)
        with open(example_config_filename) as f:
            example_config_data = json.load(f)
        print(f'{example_config}:')
        initial_items, scenarios = load_scenarios(example_config_data)
        df = run_scenarios(scenarios, initial_items)
        print(df.round(2).to_string(index=False))
        print('')

if __name__=='__main__':
    main()
