from .manager import get_hook_manager
from .manager import initialize_hooks
from .manager import register_hooks
from .manager import register_hooks_entry_points
from .manager import unregister_hooks
from .markers import hook_impl
from .markers import hook_spec

__all__ = [
    "get_hook_manager",
    "hook_impl",
    "hook_spec",
    "initialize_hooks",
    "register_hooks",
    "register_hooks_entry_points",
    "unregister_hooks",
]
