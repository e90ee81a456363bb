# eventfsm/core/options.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict

from eventfsm.core.errors import ConfigurationError

OptionMethod = Callable[[Any], Any]
Fallback = Callable[[str, Any], Any]


def apply_options(options: Any, methods: Dict[str, OptionMethod], fallback: Fallback) -> None:
    """
    Apply a configuration mapping key by key.

    Keys found in ``methods`` are passed to that method; every other key is
    handed to ``fallback`` together with its value. Keys are processed in
    mapping order.

    :param options: The configuration mapping.
    :param methods: Explicit table of option names to handlers.
    :param fallback: Called as ``fallback(key, value)`` for unlisted keys.
    :raises ConfigurationError: If options is not a mapping or has a non-string key.
    """
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"Expected a configuration mapping, got {type(options).__name__}")

    for key, value in options.items():
        if not isinstance(key, str):
            raise ConfigurationError(f"Configuration keys must be strings, got {key!r}")
        method = methods.get(key)
        if method is not None:
            method(value)
        else:
            fallback(key, value)
