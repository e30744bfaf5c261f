"""LifeSync: optimistic client state with a self-healing sync backend."""

__version__ = "0.1.0"
