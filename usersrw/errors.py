class UsersRwError(Exception):
    """Base exception for usersrw errors."""


class ConfigError(UsersRwError):
    """Missing or invalid service configuration."""


class QueueError(UsersRwError):
    """General notification queue issues."""
