"""Tests for CostingConfig and the global division policy."""

import pytest
from datetime import timedelta

from costnet.config import (
    CostingConfig,
    DivisionPolicy,
    division_policy,
    get_division_policy,
    set_division_policy,
)
from costnet.constants import DEFAULT_WINDOW_CAPACITY, MIN_FINALIZED


class TestCostingConfig:
    """Tests for CostingConfig defaults and validation."""

    def test_defaults(self):
        """Defaults are lenient, capacity 100, threshold 2, aggregates on."""
        config = CostingConfig()
        assert config.division_policy == DivisionPolicy.LENIENT
        assert config.window_capacity == DEFAULT_WINDOW_CAPACITY == 100
        assert config.window_max_age is None
        assert config.min_finalized == MIN_FINALIZED == 2
        assert config.use_aggregates is True

    def test_policy_from_string(self):
        """A policy given as a string is coerced."""
        assert CostingConfig(division_policy="strict").division_policy == DivisionPolicy.STRICT

    @pytest.mark.parametrize("kwargs", [
        {"window_capacity": 0},
        {"min_finalized": -1},
        {"window_max_age": timedelta(0)},
        {"division_policy": "sometimes"},
    ])
    def test_invalid(self, kwargs):
        """Invalid values are rejected."""
        with pytest.raises(ValueError):
            CostingConfig(**kwargs)


class TestFromEnv:
    """Tests for CostingConfig.from_env."""

    def test_empty_env_defaults(self):
        """Unset variables keep defaults."""
        assert CostingConfig.from_env(environ={}) == CostingConfig()

    def test_overrides(self):
        """Every variable is read with the prefix."""
        config = CostingConfig.from_env(environ={
            "COSTNET_DIVISION_POLICY": "STRICT",
            "COSTNET_WINDOW_CAPACITY": "25",
            "COSTNET_WINDOW_MAX_AGE_HOURS": "48",
            "COSTNET_MIN_FINALIZED": "5",
            "COSTNET_USE_AGGREGATES": "no",
        })
        assert config.division_policy == DivisionPolicy.STRICT
        assert config.window_capacity == 25
        assert config.window_max_age == timedelta(hours=48)
        assert config.min_finalized == 5
        assert config.use_aggregates is False

    def test_custom_prefix(self):
        """A custom prefix selects other variables."""
        config = CostingConfig.from_env(prefix="APP_", environ={"APP_WINDOW_CAPACITY": "7"})
        assert config.window_capacity == 7

    def test_reads_os_environ(self, monkeypatch):
        """Without an explicit mapping the process environment is used."""
        monkeypatch.setenv("COSTNET_MIN_FINALIZED", "3")
        assert CostingConfig.from_env().min_finalized == 3

    def test_bad_bool(self):
        """Unparseable booleans raise ValueError."""
        with pytest.raises(ValueError):
            CostingConfig.from_env(environ={"COSTNET_USE_AGGREGATES": "maybe"})

    def test_bad_int(self):
        """Unparseable integers raise ValueError."""
        with pytest.raises(ValueError):
            CostingConfig.from_env(environ={"COSTNET_WINDOW_CAPACITY": "lots"})


class TestGlobalPolicy:
    """Tests for the process-wide division policy."""

    def test_default_lenient(self):
        """The global policy starts lenient."""
        assert get_division_policy() == DivisionPolicy.LENIENT

    def test_set(self):
        """set_division_policy accepts enum members and values."""
        set_division_policy("strict")
        assert get_division_policy() == DivisionPolicy.STRICT

    def test_context_manager_restores(self):
        """The context manager restores the previous policy."""
        with division_policy(DivisionPolicy.STRICT) as active:
            assert active == DivisionPolicy.STRICT
            assert get_division_policy() == DivisionPolicy.STRICT
        assert get_division_policy() == DivisionPolicy.LENIENT

    def test_context_manager_restores_on_error(self):
        """The previous policy comes back even if the block raises."""
        with pytest.raises(RuntimeError):
            with division_policy(DivisionPolicy.STRICT):
                raise RuntimeError("boom")
        assert get_division_policy() == DivisionPolicy.LENIENT
