"""eckprov - declarative ECK control planes and clusters."""

__version__ = "0.1.0"
