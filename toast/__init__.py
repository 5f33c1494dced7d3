"""Parse Go sources into a serializable IR and feed it to generator plugins."""

__version__ = "0.1.0"
