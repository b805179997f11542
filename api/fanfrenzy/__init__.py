"""FanFrenzy: sports trivia API and gameplay engine."""

__version__ = "1.0.0"
