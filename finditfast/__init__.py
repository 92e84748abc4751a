"""FindItFast: location-aware item search for approved stores."""

__version__ = "0.3.0"
