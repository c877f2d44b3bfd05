"""Curses operator console for ShadowPay."""

from .commands import Command, CommandScheduler, MessageBus
from .form import InputForm
from .messages import Error, KeyInput, Loading, Message, Resize, Success
from .model import Model
from .terminal import Console, launch_console
from .views import View

__all__ = [
    "Command",
    "CommandScheduler",
    "Console",
    "Error",
    "InputForm",
    "KeyInput",
    "Loading",
    "Message",
    "MessageBus",
    "Model",
    "Resize",
    "Success",
    "View",
    "launch_console",
]
