"""Executive business digest — metric aggregation, alerting and action synthesis."""

__version__ = "0.1.0"
