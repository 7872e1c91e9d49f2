"""
GhostHire Services
==================

HTTP services built on the ghosthire library.
"""
