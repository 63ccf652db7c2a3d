"""Server Survival scenario configuration generator.

Turns a free-text theme and a difficulty level into validated random events
and traffic shifts, generated by a chat-completion model and spliced into the
game's settings.
"""

__version__ = "0.1.0"
