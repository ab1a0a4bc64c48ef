"""Building blocks for filtering, rate-limiting, capturing and replaying HTTP traffic."""

__version__ = "0.1.0"