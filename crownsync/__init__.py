"""
CrownSync - Remote Library Reconciliation

Keeps a local catalog of training sessions and video clips consistent
with a shared remote object store written to by several devices.

Author: CrownSync Project
"""

__version__ = "1.0.0"
