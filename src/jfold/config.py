"""Viewer configuration.

Settings are plain frozen dataclasses with defaults. ``ViewerConfig.from_mapping``
merges a nested mapping (``{"display": {...}, "behavior": {...}}``) over the
defaults; where that mapping comes from (CLI flags, a settings file) is up to
the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from jfold._format import FormatOptions, IndentConfig
from jfold._highlight import SearchScope

STYLES = ("json", "tree")


class ConfigError(ValueError):
    """A configuration value has the wrong type or is out of range."""


@dataclass(frozen=True)
class DisplayConfig:
    indent: int = 2
    use_tabs: bool = False
    style: str = "json"  # "json" | "tree"
    show_line_numbers: bool = False
    show_array_indices: bool = False
    show_primitive_values: bool = True
    max_value_length: int = 0  # 0 = no truncation
    use_unicode_tree: bool = True

    @property
    def indent_config(self) -> IndentConfig:
        return IndentConfig(self.indent, self.use_tabs)

    @property
    def format_options(self) -> FormatOptions:
        return FormatOptions(
            show_array_indices=self.show_array_indices,
            show_primitive_values=self.show_primitive_values,
            max_value_length=self.max_value_length,
            use_unicode_tree=self.use_unicode_tree,
        )


@dataclass(frozen=True)
class BehaviorConfig:
    expand_depth: int | None = None  # None = expand everything on load
    page_size: int = 0  # 0 = viewport height
    half_page_scroll: bool = True
    scroll_margin: int = 0
    search_scope: str = "all"

    @property
    def scope(self) -> SearchScope:
        return SearchScope(self.search_scope)


@dataclass(frozen=True)
class ViewerConfig:
    display: DisplayConfig = field(default_factory=DisplayConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> ViewerConfig:
        """Merge *data* over the defaults. Unknown keys are ignored."""
        config = cls()
        if not data:
            return config
        display = _merge(config.display, data.get("display"), "display")
        behavior = _merge(config.behavior, data.get("behavior"), "behavior")
        config = cls(display, behavior)
        config.validate()
        return config

    def validate(self) -> None:
        if self.display.style not in STYLES:
            raise ConfigError(
                f"display.style must be one of {', '.join(STYLES)}, "
                f"got {self.display.style!r}"
            )
        if self.display.indent < 0:
            raise ConfigError("display.indent must be >= 0")
        if self.display.max_value_length < 0:
            raise ConfigError("display.max_value_length must be >= 0")
        depth = self.behavior.expand_depth
        if depth is not None and depth < 0:
            raise ConfigError("behavior.expand_depth must be >= 0")
        try:
            SearchScope(self.behavior.search_scope)
        except ValueError:
            raise ConfigError(
                f"behavior.search_scope must be one of all, keys, values, "
                f"got {self.behavior.search_scope!r}"
            ) from None


def _merge(base: Any, overrides: Any, section: str) -> Any:
    if overrides is None:
        return base
    if not isinstance(overrides, Mapping):
        raise ConfigError(f"{section} must be a mapping")
    changes: dict[str, Any] = {}
    for f in fields(base):
        if f.name not in overrides:
            continue
        value = overrides[f.name]
        default = getattr(base, f.name)
        changes[f.name] = _check_type(f"{section}.{f.name}", value, default)
    return replace(base, **changes)


def _check_type(name: str, value: Any, default: Any) -> Any:
    if default is None:
        # optional int
        if value is None or (isinstance(value, int) and not isinstance(value, bool)):
            return value
        raise ConfigError(f"{name} must be an integer or null")
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        raise ConfigError(f"{name} must be a boolean")
    if isinstance(default, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise ConfigError(f"{name} must be an integer")
    if isinstance(default, str):
        if isinstance(value, str):
            return value
        raise ConfigError(f"{name} must be a string")
    return value
