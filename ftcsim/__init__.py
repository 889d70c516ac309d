"""ftcsim - Robotics match simulator."""

__version__ = "0.1.0"
