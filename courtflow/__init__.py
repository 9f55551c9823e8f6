"""Court availability, selection policy and waitlist cascade engine."""

__version__ = "0.1.0"
