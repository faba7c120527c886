"""
Exceptions raised by the snow hazard pipeline.

Undefined pixels and routes without coverage are data states carried as
``NaN`` and the no-coverage danger index, not exceptions. Only invalid
configuration stops a run.
"""


class ConfigurationError(ValueError):
    """A pipeline setting is out of range or inconsistent."""
