"""
Public API

Modules:
    akasha: Akasha facade (learn, ask, learn_batch, CRUD, health)
"""

from akasha.api.akasha import Akasha

__all__ = ["Akasha"]
