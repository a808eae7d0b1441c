"""EventCarbon - event greenhouse-gas footprint engine."""

__version__ = '1.0.0'
