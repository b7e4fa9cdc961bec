"""
LED Display Manager

Status monitoring and scheduled content reconciliation for
VNNOX-controlled LED displays.
"""

__version__ = "1.0.0"
