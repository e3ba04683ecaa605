"""
Warden - a command-driven guard/follow agent for a real-time game world.

Operators type short chat commands ("come", "guard", "follow bob") and the
agent resolves them against live world state, delegating movement, combat and
inventory work to external collaborators.
"""
