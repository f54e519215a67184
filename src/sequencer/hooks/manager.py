"""Project-wide pluggy manager for the call lifecycle hooks."""

from inspect import isclass
from typing import Any

from pluggy import PluginManager

from sequencer.context import HooksContext

from .markers import HOOK_NAMESPACE
from .specs import CallSpec

_PLUGIN_HOOKS = "sequencer.hooks"  # entry-point group of installed hook plugins


def initialize_hooks() -> None:
    """(Re)creates the hook manager shared by every sequencer created afterwards."""
    if previous := HooksContext.get():
        previous.__exit__()

    manager = PluginManager(HOOK_NAMESPACE)
    manager.add_hookspecs(CallSpec)
    HooksContext(manager=manager).__enter__()


def get_hook_manager() -> PluginManager:
    """Returns initialized hook plugin manager or raises an exception."""
    context = HooksContext.get()
    if context is None or context.manager is None:
        raise RuntimeError("Attempted access of Hook plugin manager without initialization.")
    return context.manager


def register_hooks(*plugins: Any) -> None:
    """Register plugin instances implementing any of the call hooks; repeats are ignored."""
    manager = get_hook_manager()
    for plugin in plugins:
        if isclass(plugin):
            raise TypeError(
                "Sequencer expects hooks to be registered as instances. "
                "Have you forgotten the `()` when registering a hook class?"
            )
        if not manager.is_registered(plugin):
            manager.register(plugin)


def unregister_hooks(*plugins: Any) -> None:
    """Unregister previously registered plugins; unknown plugins are ignored."""
    manager = get_hook_manager()
    for plugin in plugins:
        if manager.is_registered(plugin):
            manager.unregister(plugin)


def register_hooks_entry_points() -> None:
    """Register the hook plugins advertised by installed packages under `sequencer.hooks`."""
    get_hook_manager().load_setuptools_entrypoints(_PLUGIN_HOOKS)
