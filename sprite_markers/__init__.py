"""sprite-markers — mount-point markers embedded in sprite pixels.

Decode reserved-colour markers (thruster, laser, armor, rocket plus an
orientation hint) into sidecar JSON, and strip those colours from finished
sprites before shipping.
"""
