class NetSieveError(Exception):
    pass

class ConfigError(NetSieveError):
    pass

class InvalidPatternError(ConfigError):
    """A regex pattern failed to compile."""
    pass

class PresetNotFoundError(ConfigError):
    pass

class EventParseError(NetSieveError):
    """A recorded events file could not be parsed."""
    pass

class EventWriteError(NetSieveError):
    """Kept events could not be written."""
    pass

class AuditLogError(NetSieveError):
    """Failed to write to the decision audit log."""
    pass
