"""Configuration plugin lifecycle state machine."""

from enum import Enum, auto
from typing import ClassVar


class PluginState(Enum):
    """Configuration plugin lifecycle states.

    State transitions:
        UNINITIALIZED -> LOADING: init() started
        LOADING -> READY: file loaded and placeholders expanded
        UNINITIALIZED, LOADING -> FAILED: init() failed
    """

    UNINITIALIZED = auto()
    LOADING = auto()
    READY = auto()
    FAILED = auto()


class ConfigStateError(Exception):
    """Raised when an invalid state transition or premature use is attempted."""

    def __init__(self, from_state: PluginState, to_state: PluginState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition: {from_state.name} -> {to_state.name}"
        )


class PluginStateMachine:
    """State machine for the configuration plugin lifecycle."""

    VALID_TRANSITIONS: ClassVar[dict[PluginState, set[PluginState]]] = {
        PluginState.UNINITIALIZED: {PluginState.LOADING, PluginState.FAILED},
        PluginState.LOADING: {PluginState.READY, PluginState.FAILED},
        PluginState.READY: set(),
        PluginState.FAILED: set(),  # Terminal state
    }

    def __init__(self) -> None:
        """Initialize the state machine in UNINITIALIZED state."""
        self._state = PluginState.UNINITIALIZED

    @property
    def state(self) -> PluginState:
        """Get the current state."""
        return self._state

    def can_transition(self, to_state: PluginState) -> bool:
        """Check if a transition to the given state is valid."""
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: PluginState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            ConfigStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            raise ConfigStateError(self._state, to_state)
        self._state = to_state

    def require_ready(self) -> None:
        """Ensure the plugin finished initialization.

        Raises:
            ConfigStateError: If the plugin is not READY.
        """
        if self._state != PluginState.READY:
            raise ConfigStateError(self._state, PluginState.READY)
