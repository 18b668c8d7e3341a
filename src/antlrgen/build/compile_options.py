"""ANTLR compile options.

Design:
    The option set is closed. OPTION_SPECS declares every option with its
    default and accepted type; merge_options() layers caller overrides over
    the defaults and rejects unknown keys or badly typed values before any
    grammar is compiled. The result is an immutable CompileOptions mapping
    shared by every compile unit of a run.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from antlrgen.errors import InvalidOptionValue, UnknownConfigurationOption

MESSAGE_FORMATS = ("antlr", "gnu", "vs2005")


@dataclass(frozen=True)
class OptionSpec:
    """Declaration of a single ANTLR option.

    Attributes:
        name: Option key as used in configuration (e.g. "max-switch-case-labels")
        default: Value used when the option is not overridden
        kind: Accepted Python type (bool, int or str)
        choices: Allowed values for str options (empty means any)
        description: Human-readable description
    """

    name: str
    default: Any
    kind: type
    choices: tuple[str, ...]
    description: str


OPTION_SPECS: dict[str, OptionSpec] = {
    spec.name: spec
    for spec in (
        OptionSpec("debug", False, bool, (), "Generate a parser that emits debugging events"),
        OptionSpec("trace", False, bool, (), "Generate a parser that traces rule entry/exit"),
        OptionSpec("dfa-dot-output", False, bool, (), "Write DOT graphs of the lookahead DFAs"),
        OptionSpec("nfa-dot-output", False, bool, (), "Write DOT graphs of the rule NFAs"),
        OptionSpec("message-format", "antlr", str, MESSAGE_FORMATS, "Diagnostic message format"),
        OptionSpec("verbose", True, bool, (), "Print the tool version and extra information"),
        OptionSpec("max-switch-case-labels", 300, int, (), "Largest switch statement to generate"),
        OptionSpec("print-grammar", False, bool, (), "Print the grammar without actions"),
        OptionSpec("report", False, bool, (), "Print a report about the grammar(s) processed"),
        OptionSpec("profile", False, bool, (), "Generate a parser that computes profiling information"),
    )
}

OPTION_NAMES: frozenset[str] = frozenset(OPTION_SPECS)

DEFAULT_OPTIONS: Mapping[str, Any] = MappingProxyType({name: spec.default for name, spec in OPTION_SPECS.items()})


class CompileOptions(Mapping[str, Any]):
    """Immutable, fully populated set of ANTLR options.

    Always contains every key in OPTION_NAMES. Build instances with
    merge_options() rather than directly.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any]):
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"CompileOptions({dict(self._values)!r})"

    def overrides(self) -> dict[str, Any]:
        """Return only the options whose value differs from the default."""
        return {k: v for k, v in self._values.items() if v != DEFAULT_OPTIONS[k]}


def _validate(spec: OptionSpec, value: Any) -> None:
    if spec.kind is bool:
        if not isinstance(value, bool):
            raise InvalidOptionValue(spec.name, value, "true or false")
    elif spec.kind is int:
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidOptionValue(spec.name, value, "a positive integer")
    elif not isinstance(value, str) or (spec.choices and value not in spec.choices):
        expected = "one of " + ", ".join(spec.choices) if spec.choices else "a string"
        raise InvalidOptionValue(spec.name, value, expected)


def merge_options(overrides: Optional[Mapping[str, Any]] = None) -> CompileOptions:
    """Merge caller overrides over DEFAULT_OPTIONS.

    Args:
        overrides: Option values keyed by option name; override wins on collision

    Returns:
        Immutable CompileOptions with every option set

    Raises:
        UnknownConfigurationOption: If overrides contains a key outside OPTION_NAMES
        InvalidOptionValue: If an override has the wrong type or value
    """
    overrides = dict(overrides or {})
    unknown = set(overrides) - OPTION_NAMES
    if unknown:
        raise UnknownConfigurationOption(list(unknown))

    for key, value in overrides.items():
        _validate(OPTION_SPECS[key], value)

    return CompileOptions({**DEFAULT_OPTIONS, **overrides})


_TRUE_STRINGS = ("true", "yes", "on", "1")
_FALSE_STRINGS = ("false", "no", "off", "0")


def parse_option_assignment(assignment: str) -> tuple[str, Any]:
    """Parse a "key=value" command-line override into a typed pair.

    The value is coerced to the option's declared type, e.g.
    "debug=true" -> ("debug", True), "max-switch-case-labels=50" -> (..., 50).

    Raises:
        UnknownConfigurationOption: If key is not a known option
        InvalidOptionValue: If the text cannot be coerced
    """
    key, sep, text = assignment.partition("=")
    key = key.strip()
    text = text.strip()
    if key not in OPTION_SPECS:
        raise UnknownConfigurationOption([key])
    spec = OPTION_SPECS[key]
    if not sep:
        # Bare "-O debug" switches a boolean on
        if spec.kind is bool:
            return key, True
        raise InvalidOptionValue(key, assignment, "key=value")

    if spec.kind is bool:
        lowered = text.lower()
        if lowered in _TRUE_STRINGS:
            return key, True
        if lowered in _FALSE_STRINGS:
            return key, False
        raise InvalidOptionValue(key, text, "true or false")
    if spec.kind is int:
        try:
            value: Any = int(text)
        except ValueError:
            raise InvalidOptionValue(key, text, "a positive integer") from None
        _validate(spec, value)
        return key, value
    _validate(spec, text)
    return key, text
