from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pygame
from pygame.math import Vector2

from ..sim.core.entities import EntityKind, Position
from ..sim.core.world import World
from .headless import build_config

logger = logging.getLogger(__name__)

TITLE = "Simulated evolution"
SCREEN_WIDTH = 1024
SCREEN_HEIGHT = 768
BACKGROUND = (245, 245, 245)
TREE_SPRITE_PX = 32
ANIMAL_SPRITE_PX = 48

Color = Tuple[int, int, int]

# One colour per sprite frame; an entity always maps to frame ``id % len(frames)``.
TREE_FRAMES: Tuple[Color, ...] = (
    (34, 139, 34),
    (46, 125, 50),
    (85, 139, 47),
    (0, 100, 0),
    (107, 142, 35),
    (60, 179, 113),
)
ANIMAL_FRAMES: Tuple[Color, ...] = (
    (205, 92, 92),
    (210, 105, 30),
    (139, 69, 19),
    (178, 34, 34),
    (218, 165, 32),
    (160, 82, 45),
    (199, 21, 133),
    (70, 130, 180),
)


@dataclass
class ViewerContext:
    """Camera and frame-counter state owned by the render loop."""

    camera: Vector2 = field(default_factory=Vector2)
    cam_speed: float = 500.0
    zoom: float = 1.0
    zoom_speed: float = 1.2
    cell_px: int = 4
    frames: int = 0
    fps: int = 0
    fps_elapsed: float = 0.0
    tree_sprites: Optional[List[pygame.Surface]] = None
    animal_sprites: Optional[List[pygame.Surface]] = None
    sprite_cache: Dict[Tuple[EntityKind, int, int], pygame.Surface] = field(default_factory=dict)


def sprite_frame(kind: EntityKind, entity_id: int) -> Color:
    frames = TREE_FRAMES if kind is EntityKind.TREE else ANIMAL_FRAMES
    return frames[entity_id % len(frames)]


def load_sprite_frames(path: Path, frame_px: int) -> List[pygame.Surface]:
    """Slice a sprite sheet into square ``frame_px`` tiles, row by row."""
    sheet = pygame.image.load(str(path))
    columns = sheet.get_width() // frame_px
    rows = sheet.get_height() // frame_px
    if columns == 0 or rows == 0:
        raise ValueError(f"{path} holds no {frame_px}px frames")
    return [
        sheet.subsurface(pygame.Rect(col * frame_px, row * frame_px, frame_px, frame_px)).copy()
        for row in range(rows)
        for col in range(columns)
    ]


def sprite_image(ctx: ViewerContext, kind: EntityKind, entity_id: int, side: int) -> Optional[pygame.Surface]:
    sprites = ctx.tree_sprites if kind is EntityKind.TREE else ctx.animal_sprites
    if not sprites:
        return None
    index = entity_id % len(sprites)
    key = (kind, index, side)
    image = ctx.sprite_cache.get(key)
    if image is None:
        image = pygame.transform.scale(sprites[index], (side, side))
        ctx.sprite_cache[key] = image
    return image


def center_camera(ctx: ViewerContext, world: World) -> None:
    ctx.camera.update(world.width * ctx.cell_px / 2.0, world.height * ctx.cell_px / 2.0)


def pan_camera(ctx: ViewerContext, pressed: Sequence[bool], dt: float) -> None:
    direction = Vector2()
    if pressed[pygame.K_LEFT]:
        direction.x -= 1
    if pressed[pygame.K_RIGHT]:
        direction.x += 1
    if pressed[pygame.K_UP]:
        direction.y -= 1
    if pressed[pygame.K_DOWN]:
        direction.y += 1
    ctx.camera += direction * (ctx.cam_speed * dt)


def apply_zoom(ctx: ViewerContext, scroll_y: float) -> None:
    ctx.zoom *= ctx.zoom_speed ** scroll_y


def world_to_screen(ctx: ViewerContext, position: Position, screen_size: Tuple[int, int]) -> Vector2:
    world_px = Vector2(position.x * ctx.cell_px, position.y * ctx.cell_px)
    center = Vector2(screen_size[0] / 2.0, screen_size[1] / 2.0)
    return (world_px - ctx.camera) * ctx.zoom + center


def tick_fps(ctx: ViewerContext, dt: float) -> Optional[int]:
    """Count a frame; return the FPS figure once per elapsed second, else ``None``."""
    ctx.frames += 1
    ctx.fps_elapsed += dt
    if ctx.fps_elapsed < 1.0:
        return None
    ctx.fps = ctx.frames
    ctx.frames = 0
    ctx.fps_elapsed -= 1.0
    return ctx.fps


def draw_world(surface: pygame.Surface, world: World, ctx: ViewerContext) -> int:
    """Draw trees, then animals on top; return how many entities landed on screen."""
    surface.fill(BACKGROUND)
    size = surface.get_size()
    side = max(1, int(round(ctx.cell_px * ctx.zoom)))
    bounds = surface.get_rect()
    occupants = world.occupants()
    drawn = 0
    for kind in (EntityKind.TREE, EntityKind.ANIMAL):
        for occupant in occupants:
            if occupant.kind is not kind:
                continue
            corner = world_to_screen(ctx, occupant.position, size)
            rect = pygame.Rect(int(corner.x), int(corner.y), side, side)
            if not bounds.colliderect(rect):
                continue
            image = sprite_image(ctx, kind, occupant.id, side)
            color = sprite_frame(kind, occupant.id)
            if image is not None:
                surface.blit(image, rect)
            elif kind is EntityKind.TREE:
                pygame.draw.rect(surface, color, rect)
            else:
                pygame.draw.ellipse(surface, color, rect)
            drawn += 1
    return drawn


def run_viewer(world: World, ctx: ViewerContext, max_fps: int = 60, max_frames: Optional[int] = None) -> None:
    pygame.init()
    try:
        screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption(TITLE)
        clock = pygame.time.Clock()
        frame = 0
        running = True
        while running:
            dt = clock.tick(max_fps) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.MOUSEWHEEL:
                    apply_zoom(ctx, event.y)
            pan_camera(ctx, pygame.key.get_pressed(), dt)

            world.update()
            draw_world(screen, world, ctx)
            pygame.display.flip()

            fps = tick_fps(ctx, dt)
            if fps is not None:
                pygame.display.set_caption(f"{TITLE} | FPS: {fps}")
            frame += 1
            if max_frames is not None and frame >= max_frames:
                running = False
        logger.info("Viewer closed after %d frames at tick %d", frame, world.tick)
    finally:
        pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch the simulated-evolution world")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--width", type=int, default=None, help="World width in cells")
    parser.add_argument("--height", type=int, default=None, help="World height in cells")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--cell-size", type=int, default=4, help="Pixels per cell at zoom 1")
    parser.add_argument("--max-fps", type=int, default=60)
    parser.add_argument("--tree-sprites", type=Path, default=None, help=f"Sprite sheet of {TREE_SPRITE_PX}px tree frames")
    parser.add_argument(
        "--animal-sprites", type=Path, default=None, help=f"Sprite sheet of {ANIMAL_SPRITE_PX}px animal frames"
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    world = World(build_config(args.config, args.seed, args.width, args.height))
    ctx = ViewerContext(cell_px=max(1, args.cell_size))
    if args.tree_sprites is not None:
        ctx.tree_sprites = load_sprite_frames(args.tree_sprites, TREE_SPRITE_PX)
    if args.animal_sprites is not None:
        ctx.animal_sprites = load_sprite_frames(args.animal_sprites, ANIMAL_SPRITE_PX)
    center_camera(ctx, world)
    run_viewer(world, ctx, max_fps=args.max_fps)


if __name__ == "__main__":
    main()
