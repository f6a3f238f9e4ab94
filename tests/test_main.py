"""Tests for the strategy comparison entry point."""

import json

import pytest

from main import DEFAULT_STRATEGIES, build_default_scenarios, load_scenarios, main, run_scenarios
from recycling_loop import InvalidConfigurationError, LoopConfig


class TestBuildDefaultScenarios:

    def test_one_scenario_per_strategy(self):
        scenarios = build_default_scenarios()
        assert [name for name, _ in scenarios] == [name for name, _, _ in DEFAULT_STRATEGIES]

    def test_module_split(self):
        scenarios = dict(build_default_scenarios())
        assert scenarios["quality"].production_quality == pytest.approx(0.3125)
        assert scenarios["quality"].production_productivity == pytest.approx(0.5)
        assert scenarios["productivity"].production_quality == 0.0
        assert scenarios["productivity"].production_productivity == pytest.approx(1.75)
        for config in scenarios.values():
            assert config.recycler_quality == pytest.approx(0.25)
            assert config.total_cycles == 10


class TestLoadScenarios:

    def test_example_file(self, strategy_comparison_file):
        with open(strategy_comparison_file) as f:
            config_data = json.load(f)
        initial_items, scenarios = load_scenarios(config_data)
        assert initial_items == [10000.0, 0.0, 0.0, 0.0, 0.0]
        assert len(scenarios) == 6
        # the example file describes the same strategies as the defaults
        assert scenarios == build_default_scenarios()

    def test_defaults_and_names(self):
        initial_items, scenarios = load_scenarios({"scenarios": [{"production_quality": 0.1}]})
        assert initial_items == [10000.0, 0.0, 0.0, 0.0, 0.0]
        name, config = scenarios[0]
        assert name == "scenario-0"
        assert config == LoopConfig(total_cycles=10, production_quality=0.1)

    def test_scenario_cycles_override_file_cycles(self):
        _, scenarios = load_scenarios({"cycles": 3, "scenarios": [{"name": "a"}, {"name": "b", "total_cycles": 7}]})
        assert [config.total_cycles for _, config in scenarios] == [3, 7]

    def test_requires_scenarios(self):
        with pytest.raises(InvalidConfigurationError):
            load_scenarios({"cycles": 3})

    @pytest.mark.parametrize("config_data", [[], "scenarios", {"scenarios": {"name": "a"}}, {"scenarios": [3]}])
    def test_rejects_non_object_json(self, config_data):
        with pytest.raises(InvalidConfigurationError):
            load_scenarios(config_data)

    def test_checks_initial_items(self):
        with pytest.raises(InvalidConfigurationError, match="5 entries"):
            load_scenarios({"initial_items": [1.0, 0.0, 0.0, 0.0], "scenarios": [{"name": "a"}]})

    def test_initial_items_must_fit_every_scenario(self):
        config_data = {
            "initial_items": [0.0, 0.0, 0.0, 10.0, 0.0],
            "scenarios": [{"name": "legendary"}, {"name": "rare", "max_item_tier": 2}],
        }
        with pytest.raises(InvalidConfigurationError, match="max_item_tier"):
            load_scenarios(config_data)


class TestRunScenarios:

    def test_one_row_per_scenario(self, capsys, normal_batch):
        scenarios = [("none", LoopConfig(total_cycles=0)), ("uncommon", LoopConfig(production_quality=0.1, max_item_tier=1, total_cycles=1))]
        df = run_scenarios(scenarios, normal_batch)

        assert list(df["strategy"]) == ["none", "uncommon"]
        assert list(df.columns) == ["strategy", "Normal", "Uncommon", "Rare", "Epic", "Legendary", "yield_per_input"]
        assert df.loc[0, "Normal"] == pytest.approx(2500.0)
        assert df.loc[1, "Uncommon"] == pytest.approx(1225.0)
        assert df.loc[1, "yield_per_input"] == pytest.approx(0.1225)

        out = capsys.readouterr().out
        assert "none result after 0 recycler loops Normal: 2500.00" in out

    def test_empty_batch(self):
        df = run_scenarios([("empty", LoopConfig())], [0.0, 0.0, 0.0, 0.0, 0.0])
        assert df.loc[0, "yield_per_input"] == 0.0


class TestMain:

    def test_default_comparison(self, capsys):
        main(["-n", "2"])
        out = capsys.readouterr().out
        for name, _, _ in DEFAULT_STRATEGIES:
            assert f"{name} result after 2 recycler loops" in out
        assert "yield_per_input" in out

    def test_config_file(self, capsys, tmp_path):
        config_file = tmp_path / "scenarios.json"
        config_file.write_text(json.dumps({
            "initial_items": [0.0, 0.0, 0.0, 0.0, 100.0],
            "cycles": 0,
            "scenarios": [{"name": "legendary-only"}],
        }))
        main(["-c", str(config_file)])
        out = capsys.readouterr().out
        assert "legendary-only result after 0 recycler loops" in out
        assert "Legendary: 275.00" in out

    def test_unknown_quality(self):
        with pytest.raises(SystemExit):
            main(["-mq", "mythic"])

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["-c", str(tmp_path / "missing.json")])

    @pytest.mark.parametrize("config_data", [
        {"initial_items": [1.0, 0.0, 0.0, 0.0], "scenarios": [{"name": "short"}]},
        {"initial_items": [1.0, -5.0, 0.0, 0.0, 0.0], "scenarios": [{"name": "negative"}]},
        [],
    ])
    def test_bad_scenario_file_is_a_usage_error(self, tmp_path, config_data):
        config_file = tmp_path / "scenarios.json"
        config_file.write_text(json.dumps(config_data))
        with pytest.raises(SystemExit):
            main(["-c", str(config_file)])

    def test_invalid_config_file(self, tmp_path):
        config_file = tmp_path / "scenarios.json"
        config_file.write_text(json.dumps({"scenarios": [{"max_item_tier": 9}]}))
        with pytest.raises(SystemExit):
            main(["-c", str(config_file)])
