"""Application-specific exceptions for poisson-party.

The estimator itself is total over valid snapshots and raises none of these.
They are raised by the caller-side layers that build snapshots: input
validation, configuration and the party session.

Exception Hierarchy:
    PartyError (base)
    ├── ConfigurationError
    ├── InvalidInputError
    │   ├── TimeParseError
    │   └── InvalidSnapshotError
    └── SessionStateError
"""


class PartyError(Exception):
    """Base exception for all poisson-party errors.

    All application-specific exceptions inherit from this class,
    allowing callers to catch all poisson-party errors with a single handler.
    """


class ConfigurationError(PartyError):
    """Raised when an estimator configuration value is invalid.

    Attributes:
        parameter: The configuration parameter that is invalid.
        message: Human-readable error description.
    """

    def __init__(self, parameter: str, message: str | None = None) -> None:
        self.parameter = parameter
        self.message = message or f"Invalid configuration for '{parameter}'"
        super().__init__(self.message)


class InvalidInputError(PartyError):
    """Raised when a user-supplied party input is out of range.

    Attributes:
        field: Name of the input that was rejected.
        value: The rejected value.
        message: Human-readable error description.
    """

    def __init__(self, field: str, value: object, message: str | None = None) -> None:
        self.field = field
        self.value = value
        self.message = message or f"Invalid value for {field}: {value!r}"
        super().__init__(self.message)


class TimeParseError(InvalidInputError):
    """Raised when an elapsed time string cannot be parsed.

    Attributes:
        text: The text that could not be parsed.
        message: Human-readable error description.
    """

    def __init__(self, text: str, message: str | None = None) -> None:
        self.text = text
        super().__init__(
            "elapsed",
            text,
            message or f"Could not parse elapsed time {text!r} (expected HH:MM:SS)",
        )


class InvalidSnapshotError(InvalidInputError):
    """Raised when a party snapshot violates the estimator's preconditions.

    Attributes:
        problems: Every violation found in the snapshot.
        message: Human-readable error description.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("snapshot", None, "Invalid party snapshot: " + "; ".join(problems))


class SessionStateError(PartyError):
    """Raised when a session action is not allowed in the current state.

    Attributes:
        action: The action that was attempted.
        state: The session state at the time.
        message: Human-readable error description.
    """

    def __init__(self, action: str, state: str, message: str | None = None) -> None:
        self.action = action
        self.state = state
        self.message = message or f"Cannot {action} while the party is {state}"
        super().__init__(self.message)
