"""
Generational evolution of finned creatures, with an optional live replay of the
best member of every generation.
"""

from __future__ import annotations
import os
import threading
from typing import List, Optional, Tuple

import pygame
from loguru import logger

import config
from evolution.algorithm import EvolutionAlgorithm
from evolution.lineage import to_delimited
from evolution.selection import PopulationMember
from logger_setup import setup_logger
from morphology.morphology import Morphology
from neural.dot import to_dot
from render import colors
from render.renderer import draw_creature, draw_hud
from world.world import World


def replay(screen: pygame.Surface, clock: pygame.time.Clock, world: World, algorithm: EvolutionAlgorithm,
           cancel: threading.Event) -> None:
    """Show the best member of the current generation for VIEW_SECONDS."""
    best = algorithm.best()
    if best is None:
        return
    creature, nn = world.build(best.morphology)
    scores = [m.fitness for m in algorithm.population if m.fitness is not None]
    stats = {
        "generation": algorithm.generation,
        "member": best.id,
        "best": best.fitness,
        "mean": sum(scores) / len(scores) if scores else 0.0,
        "repair_failures": algorithm.repair_failures,
        "sim_time": 0.0,
    }

    trail: List[Tuple[float, float]] = []
    sim_time = 0.0
    debug = False
    while sim_time < config.VIEW_SECONDS:
        clock.tick(int(round(1.0 / world.dt)))

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                cancel.set()
                return
            elif e.type == pygame.KEYDOWN and e.key == pygame.K_TAB:
                debug = not debug

        world.step(creature, nn)
        sim_time += world.dt
        x, y, _ = creature.center_of_mass()
        trail.append((x, y))
        stats["sim_time"] = sim_time

        screen.fill(colors.BG)
        draw_creature(screen, creature, trail, debug=debug)
        draw_hud(screen, stats)
        pygame.display.flip()


def save_run(directory: str, algorithm: EvolutionAlgorithm, best: Optional[PopulationMember]) -> List[str]:
    """Write the lineage history and the best member's network graph; returns the written paths."""
    os.makedirs(directory, exist_ok=True)
    written = []
    lineage_path = os.path.join(directory, "lineage.csv")
    with open(lineage_path, "w", encoding="utf-8", newline="") as f:
        f.write(to_delimited(algorithm.history))
    written.append(lineage_path)
    if best is not None:
        dot_path = os.path.join(directory, "best.dot")
        with open(dot_path, "w", encoding="utf-8") as f:
            f.write(to_dot(best.morphology, f"member_{best.id}"))
        written.append(dot_path)
    logger.info(f"[main] saved {len(algorithm.history)} lineage records to {directory}")
    return written


def main():
    setup_logger(level=config.LOG_LEVEL, log_dir=config.LOG_DIR)

    world = World()
    base = Morphology.sin_wave_fins(config.DEFAULT_HINGE_LIMIT)
    algorithm = EvolutionAlgorithm(base, config.POPULATION_SIZE, config.SEED)
    cancel = threading.Event()
    logger.info(
        f"[main] population={config.POPULATION_SIZE} generations={config.GENERATIONS} "
        f"seed={config.SEED} fitness={world.fitness.name}"
    )

    on_generation = None
    if config.SHOW_VIEWER:
        pygame.init()
        screen = pygame.display.set_mode((config.SCREEN_W, config.SCREEN_H))
        pygame.display.set_caption("virtual_creatures (best of generation)")
        clock = pygame.time.Clock()

        def on_generation(alg: EvolutionAlgorithm) -> None:
            replay(screen, clock, world, alg, cancel)

    try:
        best = algorithm.run(world.evaluate, config.GENERATIONS, cancel, config.MAX_WORKERS, on_generation)
    finally:
        if config.SHOW_VIEWER:
            pygame.quit()

    if best is not None:
        logger.info(f"[main] best member {best.id} of generation {best.generation}: fitness={best.fitness:.4f}")
        logger.info(f"[main] {best.morphology}")

    if config.LOG_DIR is not None:
        save_run(config.LOG_DIR, algorithm, best)


if __name__ == "__main__":
    main()
