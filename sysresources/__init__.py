"""Declarative package and service resources that restore prior state on delete."""

__version__ = "0.1.0"