"""
Trading workflow backend: storage, validation and preview execution of
timer/condition/order/output graphs built in the visual editor.
"""

__version__ = "0.1.0"
