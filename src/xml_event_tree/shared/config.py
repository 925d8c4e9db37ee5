"""Configuration classes for event-driven XML tree building.

This module provides configuration objects for the lexical source, the
remote and local readers and the reusable parser, with validation on
construction and JSON round-tripping.
"""

import codecs
import json
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class ErrorPolicy(Enum):
    """What to do when the lexical source reports malformed XML."""

    RECOVER = auto()    # Record a diagnostic and keep scanning
    RAISE = auto()      # Abort the parse with LexicalError


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


def _check_codec(name: str, field_name: str) -> None:
    try:
        codecs.lookup(name)
    except LookupError as e:
        raise ConfigValidationError(
            f"Unknown encoding: {name}",
            field_name=field_name,
            suggestions=["Use a Python codec name such as 'utf-8' or 'latin-1'"],
        ) from e


@dataclass(frozen=True)
class LexicalConfig:
    """Options handed to the lexical source."""

    lowercase: bool = True
    trim: bool = True
    error_policy: ErrorPolicy = ErrorPolicy.RECOVER

    def __post_init__(self) -> None:
        if not isinstance(self.error_policy, ErrorPolicy):
            raise ConfigValidationError(
                f"error_policy must be an ErrorPolicy, got {self.error_policy!r}",
                field_name="error_policy",
            )


@dataclass(frozen=True)
class FetchConfig:
    """Options for retrieving remote XML over HTTP."""

    follow_redirects: bool = True
    max_redirects: int = 10
    encoding: str = "UTF8"
    timeout_ms: int = 10000

    def __post_init__(self) -> None:
        if self.max_redirects < 0:
            raise ConfigValidationError(
                "max_redirects must be >= 0", field_name="max_redirects"
            )
        if self.timeout_ms <= 0:
            raise ConfigValidationError(
                "timeout_ms must be > 0", field_name="timeout_ms"
            )
        _check_codec(self.encoding, "encoding")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


@dataclass(frozen=True)
class FileConfig:
    """Options for reading XML from the local file system."""

    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        _check_codec(self.encoding, "encoding")


@dataclass(frozen=True)
class ApiConfig:
    """Configuration for the reusable parser."""

    max_concurrent_operations: int = 4

    def __post_init__(self) -> None:
        if self.max_concurrent_operations <= 0:
            raise ConfigValidationError(
                "max_concurrent_operations must be > 0",
                field_name="max_concurrent_operations",
            )


_SECTIONS = ("lexical", "fetch", "file", "api")


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for one parser.

    Immutable, so a single instance can be shared between threads.
    """

    lexical: LexicalConfig = field(default_factory=LexicalConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    file: FileConfig = field(default_factory=FileConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    name: Optional[str] = None

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Nested fields use ``section__field`` notation.

        Example:
            >>> config = ParserConfig()
            >>> new_config = config.override(
            ...     lexical__trim=False,
            ...     fetch__timeout_ms=2000
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                section, field_name = key.split("__", 1)
                if section not in _SECTIONS:
                    raise ConfigValidationError(
                        f"Unknown configuration section: {section}",
                        field_name=key,
                        suggestions=[f"Use one of {list(_SECTIONS)}"],
                    )
                nested_overrides.setdefault(section, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        for section, values in nested_overrides.items():
            try:
                new_fields[section] = replace(getattr(self, section), **values)
            except TypeError as e:
                raise ConfigValidationError(str(e), field_name=section) from e

        try:
            return replace(self, **new_fields)
        except TypeError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary."""
        sections = {
            "lexical": LexicalConfig,
            "fetch": FetchConfig,
            "file": FileConfig,
            "api": ApiConfig,
        }
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in sections:
                section_values = dict(value)
                if key == "lexical" and isinstance(
                    section_values.get("error_policy"), str
                ):
                    policy = section_values["error_policy"]
                    try:
                        section_values["error_policy"] = ErrorPolicy[policy]
                    except KeyError as e:
                        raise ConfigValidationError(
                            f"Unknown error policy: {policy}",
                            field_name="lexical.error_policy",
                            suggestions=[p.name for p in ErrorPolicy],
                        ) from e
                try:
                    values[key] = sections[key](**section_values)
                except TypeError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key == "name":
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Preset that aborts on the first malformed fragment."""
        return cls(
            lexical=LexicalConfig(error_policy=ErrorPolicy.RAISE),
            name="strict",
        )

    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Preset that keeps scanning past malformed fragments."""
        return cls(
            lexical=LexicalConfig(error_policy=ErrorPolicy.RECOVER),
            name="lenient",
        )
