"""
Budget Kernel

The foundation layer of the budget tracking system:
- Immutable domain objects (entries, categories, forecast modes, periods)
- Typed exceptions with machine-readable codes
- Structured JSON logging
- SQLAlchemy persistence primitives for the entry store
"""

__version__ = "0.1.0"
