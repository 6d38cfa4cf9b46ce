"""
virtual_creatures module: render/colors.py

Central color palette.
"""

BG = (14, 14, 18)
GRID = (28, 28, 34)
JOINT = (110, 110, 120)
HINGE = (30, 40, 40)

ROOT = (80, 210, 140)
SEGMENT = (90, 170, 130)
FIN = (220, 90, 90)
TRAIL = (80, 120, 230)
TEXT = (235, 235, 235)
