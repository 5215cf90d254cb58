"""
Tests for chat listeners and the observer registry
"""

import gc
import unittest
from unittest.mock import MagicMock
from ..events import (
    LoginResult, Disconnected, UserList, MessageReceived, MessageError,
    CommandError, SupportedCommands, TextMessage
)
from ..listener import ChatListener, ObserverRegistry

class Recorder(ChatListener):
    """Listener that records which listener saw which event"""

    def __init__(self, name, log):
        self.name = name
        self.log = log

    def on_event(self, event):
        self.log.append((self.name, event))

class TestChatListener(unittest.TestCase):
    """Test cases for routing events to handlers"""

    def test_routing(self):
        listener = ChatListener()
        for handler in ["on_login_result", "on_disconnect", "on_user_list",
                        "on_message_received", "on_message_error",
                        "on_command_error", "on_supported_commands"]:
            setattr(listener, handler, MagicMock())

        message = TextMessage("alice", False, "hi")
        listener.on_event(LoginResult(False, "bad password"))
        listener.on_event(Disconnected("Connection closed"))
        listener.on_event(UserList(["alice", "bob"]))
        listener.on_event(MessageReceived(message))
        listener.on_event(MessageError("incorrect recipient"))
        listener.on_event(CommandError("command joke not supported"))
        listener.on_event(SupportedCommands(["login", "help"]))

        listener.on_login_result.assert_called_once_with(False, "bad password")
        listener.on_disconnect.assert_called_once_with("Connection closed")
        listener.on_user_list.assert_called_once_with(["alice", "bob"])
        listener.on_message_received.assert_called_once_with(message)
        listener.on_message_error.assert_called_once_with("incorrect recipient")
        listener.on_command_error.assert_called_once_with("command joke not supported")
        listener.on_supported_commands.assert_called_once_with(["login", "help"])

    def test_default_handlers_do_nothing(self):
        ChatListener().on_event(LoginResult(True))
        ChatListener().on_event(object())

class TestObserverRegistry(unittest.TestCase):
    """Test cases for the ObserverRegistry class"""

    def setUp(self):
        self.registry = ObserverRegistry()
        self.log = []

    def test_registration_order(self):
        """Test that listeners are notified in registration order"""
        first = Recorder("first", self.log)
        second = Recorder("second", self.log)
        self.registry.register(first)
        self.registry.register(second)

        self.registry.notify(LoginResult(True))

        self.assertEqual([name for name, _ in self.log], ["first", "second"])

    def test_duplicate_registration(self):
        listener = Recorder("only", self.log)
        self.assertTrue(self.registry.register(listener))
        self.assertFalse(self.registry.register(listener))
        self.assertEqual(len(self.registry), 1)

        self.registry.notify(LoginResult(True))
        self.assertEqual(len(self.log), 1)

    def test_unregister(self):
        listener = Recorder("gone", self.log)
        self.registry.register(listener)
        self.assertTrue(self.registry.unregister(listener))
        self.assertFalse(self.registry.unregister(listener))

        self.registry.notify(LoginResult(True))
        self.assertEqual(self.log, [])

    def test_register_none(self):
        self.assertFalse(self.registry.register(None))
        self.assertEqual(len(self.registry), 0)

    def test_weak_references(self):
        """Test that the registry does not keep listeners alive"""
        kept = Recorder("kept", self.log)
        dropped = Recorder("dropped", self.log)
        self.registry.register(kept)
        self.registry.register(dropped)

        del dropped
        gc.collect()

        self.registry.notify(UserList(["alice"]))
        self.assertEqual([name for name, _ in self.log], ["kept"])
        self.assertEqual(len(self.registry), 1)

    def test_unregister_during_notify(self):
        """Test that a listener may unregister itself from its callback"""
        registry = self.registry
        log = self.log

        class OneShot(ChatListener):
            def on_event(self, event):
                log.append(("one-shot", event))
                registry.unregister(self)

        one_shot = OneShot()
        after = Recorder("after", self.log)
        registry.register(one_shot)
        registry.register(after)

        registry.notify(LoginResult(True))
        registry.notify(LoginResult(False, "again"))

        self.assertEqual([name for name, _ in self.log], ["one-shot", "after", "after"])

    def test_failing_listener(self):
        """Test that a listener raising does not stop delivery"""
        broken = MagicMock(spec=ChatListener)
        broken.on_event.side_effect = RuntimeError("boom")
        after = Recorder("after", self.log)
        self.registry.register(broken)
        self.registry.register(after)

        self.registry.notify(CommandError("oops"))

        broken.on_event.assert_called_once()
        self.assertEqual(self.log, [("after", CommandError("oops"))])

if __name__ == '__main__':
    unittest.main()
