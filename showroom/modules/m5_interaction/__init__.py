"""
#WHERE
    Imported by session.py, main.py and test_interaction.py.

#WHAT
    Interaction Bridge Module (Module 5) — translates external UI events
    (resize, paint colour / palette buttons, pointer drag, wheel) into
    camera, surface and material mutations on a live session.

#INPUT
    Session, event payloads (sizes, material substring, colour, deltas).

#OUTPUT
    In-place scene/camera updates; counts of recoloured meshes.
"""

from .bridge import InteractionBridge

__all__ = ["InteractionBridge"]
