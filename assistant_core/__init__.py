"""
Assistant core: state store and backend wire contracts for the Erika and
Marvin assistant dashboards.
"""

__version__ = "0.1.0"
