"""taskhub: users -> projects / task groups -> tasks, kept consistent without foreign keys."""

__version__ = "0.1.0"
