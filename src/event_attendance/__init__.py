"""Event attendance tracker: scheduled check-in windows, access codes and exports."""

__version__ = "1.0.0"
