"""Application layer: mirrors and the services composed from them.

Depends on the RemoteStore protocol, not on a concrete adapter.
"""
