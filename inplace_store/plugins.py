"""Checksum plugin registry.

Fixity claims whose algorithm is not one of the built-in ones are computed
by external plugins, looked up by name at verification time.

Example:
    Register a function as a plugin:

    >>> @checksum_plugin("SHA256")
    ... def sha256_plugin(path: str, prior_value: str | None) -> str:
    ...     return hashlib.sha256(Path(path).read_bytes()).hexdigest()

    Or register a bundled hashlib plugin instance:

    >>> register_plugin(HashlibChecksumPlugin("SHA512", "sha512"))

    Retrieve and use a plugin:

    >>> get_plugin("SHA256").compute("/repo/file.bin", None)
"""

from __future__ import annotations

import hashlib
import importlib
import logging
from collections.abc import Callable
from pathlib import Path

from inplace_store.config import DEFAULT_CHUNK_SIZE
from inplace_store.errors import UnknownAlgorithmPluginError
from inplace_store.protocols import ChecksumPlugin

logger = logging.getLogger(__name__)

PluginFunction = Callable[[str, "str | None"], str]


class FunctionChecksumPlugin:
    """Adapts a plain ``(path, prior_value) -> value`` function to ChecksumPlugin."""

    def __init__(self, name: str, func: PluginFunction):
        self.name = name
        self._func = func

    def compute(self, path: str, prior_value: str | None) -> str:
        return self._func(path, prior_value)

    def __repr__(self) -> str:
        func_name = getattr(self._func, "__name__", repr(self._func))
        return f"FunctionChecksumPlugin({self.name!r}, {func_name})"


class HashlibChecksumPlugin:
    """Plugin computing any ``hashlib`` algorithm as lowercase hex."""

    def __init__(self, name: str, hash_name: str, *, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if hash_name.lower() not in hashlib.algorithms_available:
            raise ValueError(
                f"hashlib does not provide '{hash_name}'. "
                f"Available: {sorted(hashlib.algorithms_available)}"
            )
        self.name = name
        self.hash_name = hash_name.lower()
        self.chunk_size = chunk_size

    def compute(self, path: str, prior_value: str | None) -> str:
        hasher = hashlib.new(self.hash_name)
        with Path(path).open("rb") as handle:
            for chunk in iter(lambda: handle.read(self.chunk_size), b""):
                hasher.update(chunk)
        return hasher.hexdigest()

    def __repr__(self) -> str:
        return f"HashlibChecksumPlugin({self.name!r}, {self.hash_name!r})"


class ChecksumPluginRegistry:
    """Name -> plugin mapping consulted for external fixity algorithms."""

    def __init__(self) -> None:
        self._plugins: dict[str, ChecksumPlugin] = {}

    def register(self, plugin: ChecksumPlugin, *, replace: bool = False) -> ChecksumPlugin:
        """Register a plugin under ``plugin.name``.

        Raises:
            ValueError: If a plugin with the same name is registered and replace is False
        """
        if not replace and plugin.name in self._plugins:
            raise ValueError(
                f"Checksum plugin '{plugin.name}' is already registered. "
                f"Existing plugin: {self._plugins[plugin.name]!r}"
            )
        self._plugins[plugin.name] = plugin
        logger.debug("Registered checksum plugin %s", plugin.name)
        return plugin

    def unregister(self, name: str) -> None:
        self._plugins.pop(name, None)

    def clear(self) -> None:
        self._plugins.clear()

    def get(self, name: str) -> ChecksumPlugin:
        """Get a registered plugin.

        Raises:
            UnknownAlgorithmPluginError: If no plugin is registered under name
        """
        try:
            return self._plugins[name]
        except KeyError:
            raise UnknownAlgorithmPluginError(name, self.names()) from None

    def compute(self, name: str, path: str, prior_value: str | None) -> str:
        return self.get(name).compute(path, prior_value)

    def is_registered(self, name: str) -> bool:
        return name in self._plugins

    def names(self) -> list[str]:
        return sorted(self._plugins)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)


# Global plugin registry
_DEFAULT_REGISTRY = ChecksumPluginRegistry()


def default_registry() -> ChecksumPluginRegistry:
    return _DEFAULT_REGISTRY


def register_plugin(plugin: ChecksumPlugin, *, replace: bool = False) -> ChecksumPlugin:
    """Register a plugin in the default registry."""
    return _DEFAULT_REGISTRY.register(plugin, replace=replace)


def get_plugin(name: str) -> ChecksumPlugin:
    return _DEFAULT_REGISTRY.get(name)


def list_plugins() -> list[str]:
    """List registered plugin names (sorted)."""
    return _DEFAULT_REGISTRY.names()


def is_plugin_registered(name: str) -> bool:
    return _DEFAULT_REGISTRY.is_registered(name)


def checksum_plugin(name: str, *, registry: ChecksumPluginRegistry | None = None):
    """Decorator to register a ``(path, prior_value) -> value`` function as a plugin.

    Args:
        name: Algorithm name the plugin answers to
        registry: Registry to use (defaults to the global registry)

    Raises:
        ValueError: If a plugin is already registered under name
    """

    def decorator(func: PluginFunction) -> PluginFunction:
        target = registry if registry is not None else _DEFAULT_REGISTRY
        target.register(FunctionChecksumPlugin(name, func))
        return func

    return decorator


def load_plugin(spec: str, name: str | None = None) -> ChecksumPlugin:
    """Build a plugin from an import spec ``"package.module:attribute"``.

    The attribute may be a plugin instance, a plugin class (instantiated with
    no arguments, or with ``name`` when given) or a plain function.
    ``"hashlib:<algorithm>"`` builds a HashlibChecksumPlugin.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Invalid plugin spec '{spec}'. Expected 'package.module:attribute'")

    if module_name == "hashlib":
        return HashlibChecksumPlugin(name or attr.upper(), attr)

    module = importlib.import_module(module_name)
    try:
        target = getattr(module, attr)
    except AttributeError:
        raise ValueError(f"Module '{module_name}' has no attribute '{attr}'") from None

    if isinstance(target, type):
        plugin = target(name) if name is not None else target()
    elif isinstance(target, ChecksumPlugin):
        plugin = target
    elif callable(target):
        plugin = FunctionChecksumPlugin(name or attr, target)
    else:
        raise ValueError(f"'{spec}' is neither a checksum plugin nor a callable")

    if name is not None and plugin.name != name:
        plugin = FunctionChecksumPlugin(name, plugin.compute)
    return plugin
