"""oncompletion - follow-up actions for tasks that have just been completed."""

__version__ = "0.1.0"
