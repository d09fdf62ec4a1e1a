"""Unit tests for the plugin lifecycle state machine."""

import pytest

from plugin_config.config.state_machine import (
    ConfigStateError,
    PluginState,
    PluginStateMachine,
)


class TestPluginState:
    """Tests for PluginState enum."""

    @pytest.mark.unit
    def test_all_states_defined(self) -> None:
        """Test that all expected states are defined."""
        expected_states = {"UNINITIALIZED", "LOADING", "READY", "FAILED"}
        actual_states = {state.name for state in PluginState}
        assert actual_states == expected_states


class TestPluginStateMachine:
    """Tests for PluginStateMachine."""

    @pytest.mark.unit
    def test_initial_state(self) -> None:
        """Test that initial state is UNINITIALIZED."""
        machine = PluginStateMachine()
        assert machine.state == PluginState.UNINITIALIZED

    @pytest.mark.unit
    def test_happy_path(self) -> None:
        """Test UNINITIALIZED -> LOADING -> READY."""
        machine = PluginStateMachine()
        machine.transition(PluginState.LOADING)
        machine.transition(PluginState.READY)
        assert machine.state == PluginState.READY
        machine.require_ready()

    @pytest.mark.unit
    def test_failure_only_during_startup(self) -> None:
        """Test that UNINITIALIZED and LOADING can fail, READY cannot."""
        for path in ([], [PluginState.LOADING]):
            machine = PluginStateMachine()
            for state in path:
                machine.transition(state)
            machine.transition(PluginState.FAILED)
            assert machine.state == PluginState.FAILED

        machine = PluginStateMachine()
        machine.transition(PluginState.LOADING)
        machine.transition(PluginState.READY)
        assert not machine.can_transition(PluginState.FAILED)
        with pytest.raises(ConfigStateError):
            machine.transition(PluginState.FAILED)

    @pytest.mark.unit
    def test_cannot_skip_loading(self) -> None:
        """Test that READY requires LOADING first."""
        machine = PluginStateMachine()
        with pytest.raises(ConfigStateError) as exc_info:
            machine.transition(PluginState.READY)

        assert exc_info.value.from_state == PluginState.UNINITIALIZED
        assert exc_info.value.to_state == PluginState.READY
        assert "UNINITIALIZED -> READY" in str(exc_info.value)

    @pytest.mark.unit
    def test_failed_is_terminal(self) -> None:
        """Test that no transition leaves FAILED."""
        machine = PluginStateMachine()
        machine.transition(PluginState.FAILED)
        for state in PluginState:
            assert not machine.can_transition(state)

    @pytest.mark.unit
    def test_require_ready_before_init(self) -> None:
        """Test that use before READY is rejected."""
        machine = PluginStateMachine()
        with pytest.raises(ConfigStateError):
            machine.require_ready()
