from unittest.mock import Mock
from unittest.mock import patch

import pytest

from sequencer.hooks.manager import _PLUGIN_HOOKS
from sequencer.hooks.manager import get_hook_manager
from sequencer.hooks.manager import initialize_hooks
from sequencer.hooks.manager import register_hooks
from sequencer.hooks.manager import register_hooks_entry_points
from sequencer.hooks.manager import unregister_hooks
from sequencer.hooks.specs import CallSpec

from .echo_plugin import EchoPlugin


class TestInitializeHooks:
    """Test suite for initialize_hooks function."""

    @patch("sequencer.hooks.manager.HooksContext")
    @patch("sequencer.hooks.manager.PluginManager")
    def test_initialize_hooks_replaces_existing_context(
        self, mock_plugin_manager, mock_hooks_context
    ):
        """Test that initialize_hooks exits the existing context and enters a new one."""
        # Arrange
        mock_manager = Mock()
        mock_plugin_manager.return_value = mock_manager
        mock_existing_context = Mock()
        mock_existing_context.__exit__ = Mock()
        mock_hooks_context.get.return_value = mock_existing_context
        mock_new_context = Mock()
        mock_new_context.__enter__ = Mock()
        mock_hooks_context.return_value = mock_new_context

        # Act
        initialize_hooks()

        # Assert
        mock_existing_context.__exit__.assert_called_once()
        mock_plugin_manager.assert_called_once_with("sequencer")
        mock_manager.add_hookspecs.assert_called_once_with(CallSpec)
        mock_hooks_context.assert_called_once_with(manager=mock_manager)
        mock_new_context.__enter__.assert_called_once()

    @patch("sequencer.hooks.manager.HooksContext")
    @patch("sequencer.hooks.manager.PluginManager")
    def test_initialize_hooks_no_existing_context(self, mock_plugin_manager, mock_hooks_context):
        """Test that initialize_hooks works when no existing context exists."""
        # Arrange
        mock_hooks_context.get.return_value = None
        mock_new_context = Mock()
        mock_new_context.__enter__ = Mock()
        mock_hooks_context.return_value = mock_new_context

        # Act
        initialize_hooks()

        # Assert
        mock_hooks_context.assert_called_once_with(manager=mock_plugin_manager.return_value)
        mock_new_context.__enter__.assert_called_once()


class TestGetHookManager:
    """Test suite for get_hook_manager function."""

    def test_get_hook_manager_is_initialized_on_import(self):
        """Test that importing the library initializes the hook manager."""
        manager = get_hook_manager()
        assert manager.project_name == "sequencer"
        assert manager.hook.after_call_enqueue is not None

    @patch("sequencer.hooks.manager.HooksContext")
    def test_get_hook_manager_raises_runtime_error_when_no_context(self, mock_hooks_context):
        """Test that get_hook_manager raises RuntimeError when no context exists."""
        mock_hooks_context.get.return_value = None

        with pytest.raises(RuntimeError, match="Attempted access of Hook plugin manager"):
            get_hook_manager()


class TestRegisterHooks:
    """Test suite for register_hooks and unregister_hooks functions."""

    def test_register_and_unregister(self):
        """Test registering a plugin instance and removing it again."""
        plugin = EchoPlugin()
        manager = get_hook_manager()

        register_hooks(plugin)
        try:
            assert manager.is_registered(plugin)
            register_hooks(plugin)  # registering twice is a no-op
        finally:
            unregister_hooks(plugin)

        assert not manager.is_registered(plugin)
        unregister_hooks(plugin)  # unregistering twice is a no-op

    @patch("sequencer.hooks.manager.get_hook_manager")
    def test_register_hooks_raises_error_for_class(self, mock_get_hook_manager):
        """Test that register_hooks raises TypeError when passed a class instead of instance."""
        mock_hook_manager = Mock()
        mock_hook_manager.is_registered.return_value = False
        mock_get_hook_manager.return_value = mock_hook_manager

        with pytest.raises(TypeError, match="expects hooks to be registered as instances"):
            register_hooks(EchoPlugin)
        mock_hook_manager.register.assert_not_called()


class TestRegisterHooksEntryPoints:
    """Test suite for register_hooks_entry_points function."""

    @patch("sequencer.hooks.manager.get_hook_manager")
    def test_register_hooks_entry_points_loads_group(self, mock_get_hook_manager):
        """Test register_hooks_entry_points loads the sequencer entry-point group."""
        mock_hook_manager = Mock()
        mock_get_hook_manager.return_value = mock_hook_manager

        register_hooks_entry_points()

        assert _PLUGIN_HOOKS == "sequencer.hooks"
        mock_hook_manager.load_setuptools_entrypoints.assert_called_once_with(_PLUGIN_HOOKS)
