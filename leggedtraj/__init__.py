"""Spline-based variables, constraints, costs, terrain, gaits and dynamics for legged-robot trajectory optimization."""

__version__ = "0.1.0"