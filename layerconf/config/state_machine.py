"""Configuration loader state machine implementation."""

from enum import Enum, auto
from typing import ClassVar


class ConfigState(Enum):
    """Configuration loading states.

    State transitions:
        UNLOADED -> LOADING: A loader step starts
        UNLOADED -> VALIDATED/INVALID: Validation of a store filled elsewhere
        LOADING -> LOADED: The step finished (recoverable errors included)
        LOADING -> FAILED: An unexpected error escaped the step
        LOADED -> LOADING: Another loader step starts
        LOADED -> VALIDATED: Validation found no empty values
        LOADED -> INVALID: Validation found empty values
        VALIDATED/INVALID -> LOADING: Further loading after validation
        VALIDATED/INVALID -> VALIDATED/INVALID: Re-validation
    """

    UNLOADED = auto()
    LOADING = auto()
    LOADED = auto()
    VALIDATED = auto()
    INVALID = auto()
    FAILED = auto()


class ConfigStateError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: ConfigState, to_state: ConfigState) -> None:
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


class ConfigStateMachine:
    """State machine for configuration loading.

    Enforces valid state transitions across loader steps and validation.
    """

    VALID_TRANSITIONS: ClassVar[dict[ConfigState, set[ConfigState]]] = {
        ConfigState.UNLOADED: {
            ConfigState.LOADING,
            ConfigState.VALIDATED,
            ConfigState.INVALID,
            ConfigState.FAILED,
        },
        ConfigState.LOADING: {ConfigState.LOADED, ConfigState.FAILED},
        ConfigState.LOADED: {
            ConfigState.LOADING,
            ConfigState.VALIDATED,
            ConfigState.INVALID,
            ConfigState.FAILED,
        },
        ConfigState.VALIDATED: {
            ConfigState.LOADING,
            ConfigState.VALIDATED,
            ConfigState.INVALID,
            ConfigState.FAILED,
        },
        ConfigState.INVALID: {
            ConfigState.LOADING,
            ConfigState.VALIDATED,
            ConfigState.INVALID,
            ConfigState.FAILED,
        },
        ConfigState.FAILED: set(),  # Terminal state
    }

    def __init__(self) -> None:
        """Initialize the state machine in UNLOADED state."""
        self._state = ConfigState.UNLOADED

    @property
    def state(self) -> ConfigState:
        """Get the current state."""
        return self._state

    def can_transition(self, to_state: ConfigState) -> bool:
        """Check if a transition to the given state is valid.

        Args:
            to_state: The target state.

        Returns:
            True if the transition is valid, False otherwise.
        """
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: ConfigState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            ConfigStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            raise ConfigStateError(self._state, to_state)
        self._state = to_state

    def is_terminal(self) -> bool:
        """Check if the current state is terminal (no more transitions allowed)."""
        return self._state == ConfigState.FAILED

    def is_loaded(self) -> bool:
        """Check if at least one loader step completed."""
        return self._state in {
            ConfigState.LOADED,
            ConfigState.VALIDATED,
            ConfigState.INVALID,
        }

    def is_failed(self) -> bool:
        """Check if configuration loading has failed."""
        return self._state == ConfigState.FAILED
