"""
virtual_creatures module: render/renderer.py

Pygame rendering of a simulated creature, seen from above (x right, y forward).
"""

from __future__ import annotations
import math
from typing import List, Tuple

import pygame

from morphology.joints import JointType
from render import colors
from world.creature import Creature, DIRECTIONS

PIXELS_PER_UNIT = 60.0


def to_screen(x: float, y: float, origin: Tuple[float, float], center: Tuple[int, int]) -> Tuple[int, int]:
    # camera follows ``origin``; screen y grows downwards
    return (
        int(center[0] + (x - origin[0]) * PIXELS_PER_UNIT),
        int(center[1] - (y - origin[1]) * PIXELS_PER_UNIT),
    )


def draw_grid(screen: pygame.Surface, origin: Tuple[float, float], spacing: float = 1.0) -> None:
    w, h = screen.get_size()
    step = spacing * PIXELS_PER_UNIT
    ox = (-origin[0] * PIXELS_PER_UNIT + w / 2) % step
    oy = (origin[1] * PIXELS_PER_UNIT + h / 2) % step
    x = ox
    while x < w:
        pygame.draw.line(screen, colors.GRID, (x, 0), (x, h), 1)
        x += step
    y = oy
    while y < h:
        pygame.draw.line(screen, colors.GRID, (0, y), (w, y), 1)
        y += step


def draw_creature(screen: pygame.Surface, creature: Creature, trail: List[Tuple[float, float]], debug: bool = False) -> None:
    center = (screen.get_width() // 2, screen.get_height() // 2)
    cx, cy, _ = creature.center_of_mass()
    origin = (cx, cy)
    draw_grid(screen, origin)

    if len(trail) > 1:
        pygame.draw.lines(screen, colors.TRAIL, False, [to_screen(x, y, origin, center) for x, y in trail], 2)

    positions = {s.node: p for s, p in creature.segment_positions()}
    morphology = creature.morphology

    # joints first
    for e, joint in zip(morphology.edges, creature.joints):
        a = positions[e.source]
        b = positions[e.destination]
        pa = to_screen(a[0], a[1], origin, center)
        pb = to_screen(b[0], b[1], origin, center)
        pygame.draw.line(screen, colors.JOINT, pa, pb, 2)

        if e.joint.joint_type == JointType.HINGE:
            # hinge deflection drawn around the face normal
            nx, ny, _ = DIRECTIONS[e.joint.face]
            base = math.atan2(ny, nx) + math.radians(joint.angle)
            r = 14
            pygame.draw.line(screen, colors.HINGE, pb, (pb[0] + math.cos(base) * r, pb[1] - math.sin(base) * r), 2)

    for node, (x, y, _) in positions.items():
        if node is morphology.root:
            col = colors.ROOT
        elif any(e.destination is node and e.joint.joint_type == JointType.HINGE for e in morphology.edges):
            col = colors.FIN
        else:
            col = colors.SEGMENT
        bx, by, _ = node.shape.bounds()
        r = max(3, int(max(bx, by) * PIXELS_PER_UNIT * 0.5))
        pygame.draw.circle(screen, col, to_screen(x, y, origin, center), r)

        if debug and node.label:
            font = pygame.font.Font(None, 16)
            txt = font.render(node.label, True, colors.TEXT)
            px, py = to_screen(x, y, origin, center)
            screen.blit(txt, (px + r + 2, py - r - 2))


def draw_hud(screen: pygame.Surface, stats: dict) -> None:
    font = pygame.font.Font(None, 26)

    lines = [
        f"Generation: {stats.get('generation', 0)}  Member: {stats.get('member', '-')}",
        f"Best fitness: {stats.get('best', 0.0):.4f}  Mean: {stats.get('mean', 0.0):.4f}",
        f"Repair failures: {stats.get('repair_failures', 0)}",
        f"Sim time: {stats.get('sim_time', 0.0):.1f}s",
    ]

    y = 10
    for line in lines:
        txt = font.render(line, True, colors.TEXT)
        screen.blit(txt, (12, y))
        y += 22
