"""
Live viewer
===========
Runs a simulation and renders the sites x species population matrix in
real time using Pygame.

Usage:
    pip install socweb[viewer]
    python -m socweb.viewer food_web.net neighborhood.net --seed 7

Controls:
    SPACE      — Pause / Resume
    UP / DOWN  — Speed up / slow down (steps per frame)
    L          — Toggle log / linear color scale
    R          — Reset simulation
    Q / ESC    — Quit
"""

import argparse
import sys
import time as _time

import numpy as np
import pygame

from .config import Config
from .simulation import Simulation


# ═══════════════════════════════════════════════════════════════════════════════
# VIEWER CONFIG
# ═══════════════════════════════════════════════════════════════════════════════

GRID_PX = 640             # Matrix area, square
STATS_WIDTH = 340
FPS = 30
INITIAL_STEPS_PER_FRAME = 1

BG_COLOR = (8, 8, 12)


# ═══════════════════════════════════════════════════════════════════════════════
# COLOR UTILITIES
# ═══════════════════════════════════════════════════════════════════════════════

def make_colormap(keypoints):
    """Build a 256-entry RGB colormap from a list of (position, r, g, b) keypoints."""
    cmap = np.zeros((256, 3), dtype=np.uint8)
    for i in range(256):
        t = i / 255.0
        lo, hi = keypoints[0], keypoints[-1]
        for k in range(len(keypoints) - 1):
            if keypoints[k][0] <= t <= keypoints[k + 1][0]:
                lo, hi = keypoints[k], keypoints[k + 1]
                break
        span = hi[0] - lo[0]
        s = (t - lo[0]) / span if span > 0 else 0
        cmap[i] = [int(lo[j + 1] + s * (hi[j + 1] - lo[j + 1])) for j in range(3)]
    return cmap

POPULATION_CMAP = make_colormap([
    (0.0,   0,   0,   0),
    (0.2,  10,  40,  60),
    (0.5,  30, 150,  90),
    (0.8, 210, 210,  40),
    (1.0, 255, 120,  40),
])


def render_heatmap(grid, cmap, vmin=0.0, vmax=1.0):
    normalized = np.clip((grid - vmin) / max(vmax - vmin, 1e-8), 0, 1)
    return cmap[(normalized * 255).astype(np.uint8)]


def matrix_surface(matrix, log_scale):
    """Sites as rows, species as columns, scaled to the matrix area."""
    values = np.log1p(matrix) if log_scale else matrix.astype(np.float64)
    vmax = float(values.max()) if values.size else 1.0
    rgb = render_heatmap(values, POPULATION_CMAP, vmin=0.0, vmax=max(vmax, 1.0))
    surf = pygame.surfarray.make_surface(rgb.transpose(1, 0, 2))
    return pygame.transform.scale(surf, (GRID_PX, GRID_PX))


# ═══════════════════════════════════════════════════════════════════════════════
# STATS PANEL
# ═══════════════════════════════════════════════════════════════════════════════

def draw_stats_panel(surface, sim, x_offset, steps_per_frame, paused, log_scale, elapsed):
    font = pygame.font.SysFont("monospace", 12)
    panel_rect = pygame.Rect(x_offset, 0, STATS_WIDTH, surface.get_height())
    pygame.draw.rect(surface, (15, 15, 22), panel_rect)
    pygame.draw.line(surface, (60, 60, 80), (x_offset, 0), (x_offset, surface.get_height()), 2)

    state = sim.state
    s = sim.stats_history[-1] if sim.stats_history else {}
    totals = state.species_totals()

    lines = [("SOC FOOD WEB", (200, 180, 255)), ("", None)]
    run_state = "▐▐ PAUSED" if paused else f"▶ {steps_per_frame} steps/frame"
    lines.append((f"t = {sim.timestep:,} / {sim.cfg.total_timesteps:,}   {run_state}", (255, 255, 255)))
    lines.append((f"Sim time: {elapsed:.1f}s", (150, 150, 150)))
    lines.append(("", None))

    lines.append(("─── Landscape ───", (100, 180, 255)))
    lines.append((f"  Individuals: {int(totals.sum()):,}", (255, 255, 255)))
    if s:
        lines.append((f"  Species alive: {s['species_alive']}/{state.n_species}", (180, 230, 180)))
        lines.append((f"  Sites occupied: {s['sites_occupied']}/{state.n_sites}", (180, 180, 230)))
        lines.append((f"  Births {s['births']:4d}  Deaths {s['natural_deaths']:4d}", (200, 200, 200)))
        lines.append((f"  Kills  {s['kills']:4d}  Migrants {s['migrants']:4d}", (255, 120, 120)))
    lines.append(("", None))

    lines.append(("─── Species ───", (100, 220, 130)))
    for sp, total in list(zip(state.species, totals))[:20]:
        color = (60, 210, 90) if sp.is_basal else (230, 90, 70)
        lines.append((f"  {sp.name[:14]:14s} {int(total):7d}", color if total else (80, 80, 80)))
    lines.append(("", None))

    lines.append((f"  Scale: {'log' if log_scale else 'linear'}", (200, 200, 255)))
    lines.append(("─── Controls ───", (120, 120, 120)))
    for ctrl in ["SPACE  Pause/Resume", "UP/DN  Speed +/-", "L      Log/linear",
                 "R      Reset", "Q/ESC  Quit"]:
        lines.append((f"  {ctrl}", (100, 100, 110)))

    y = 10
    for text, color in lines:
        if color is None:
            y += 5
            continue
        surface.blit(font.render(text, True, color), (x_offset + 10, y))
        y += 16


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN LOOP
# ═══════════════════════════════════════════════════════════════════════════════

def main(argv=None):
    p = argparse.ArgumentParser(prog="socweb-viewer")
    p.add_argument("food_web")
    p.add_argument("neighborhood")
    p.add_argument("--seed", type=int, default=Config.random_seed)
    p.add_argument("--steps", type=int, default=Config.total_timesteps)
    args = p.parse_args(argv)

    cfg = Config(food_web_file=args.food_web, neighborhood_file=args.neighborhood,
                 random_seed=args.seed, total_timesteps=args.steps).validate()

    pygame.init()
    pygame.display.set_caption("SOC food web — sites × species")
    screen = pygame.display.set_mode((GRID_PX + STATS_WIDTH, GRID_PX))
    clock = pygame.time.Clock()

    sim = Simulation.from_files(cfg)
    paused = False
    log_scale = True
    steps_per_frame = INITIAL_STEPS_PER_FRAME
    sim_start = _time.time()
    running = True

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_q, pygame.K_ESCAPE):
                    running = False
                elif event.key == pygame.K_SPACE:
                    paused = not paused
                elif event.key == pygame.K_UP:
                    steps_per_frame = min(steps_per_frame + 1, 50)
                elif event.key == pygame.K_DOWN:
                    steps_per_frame = max(steps_per_frame - 1, 1)
                elif event.key == pygame.K_l:
                    log_scale = not log_scale
                elif event.key == pygame.K_r:
                    sim = Simulation.from_files(cfg)
                    sim_start = _time.time()

        if not paused:
            for _ in range(steps_per_frame):
                if sim.done:
                    paused = True
                    break
                sim.update()

        elapsed = _time.time() - sim_start
        screen.fill(BG_COLOR)
        screen.blit(matrix_surface(sim.state.population_matrix(), log_scale), (0, 0))
        draw_stats_panel(screen, sim, GRID_PX, steps_per_frame, paused, log_scale, elapsed)
        pygame.display.flip()
        clock.tick(FPS)

    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
