"""
Transportation order server package.
Read-only REST access to truck transportation orders.
"""

__version__ = "0.1.0"
