import argparse
import logging
import random
import sys

import pygame

import settings as cfg
from controller import SortController
from settings import Settings, load_settings, save_settings
from sorters import AlgorithmKind
from sound import init_sound

logger = logging.getLogger(__name__)

KEY_TO_KIND = {
    pygame.K_1: AlgorithmKind.BUBBLE,
    pygame.K_2: AlgorithmKind.SELECTION,
    pygame.K_3: AlgorithmKind.INSERTION,
    pygame.K_4: AlgorithmKind.QUICK,
    pygame.K_5: AlgorithmKind.MERGE,
}

# ============================================================
# ======================= COLOR / DRAW =======================
# ============================================================

def value_to_color(value, max_value):
    r = value / max_value
    return (int(30 + r * 100), int(30 + r * 200), int(150 + r * 105))


def bar_color(k, v, snap, max_value):
    if snap.is_sorted:
        return cfg.SETTLED_COLOR
    if k in snap.marked:
        return cfg.MARK_COLOR
    if k in snap.highlighted:
        # a merge write is shown white, every other focus red
        return cfg.SETTLED_COLOR if snap.kind is AlgorithmKind.MERGE else cfg.ACTIVE_COLOR
    if k in snap.settled:
        return cfg.SETTLED_COLOR
    return value_to_color(v, max_value)


def draw_progress(screen, progress):
    y = cfg.WINDOW_HEIGHT - cfg.PROGRESS_HEIGHT
    pygame.draw.rect(screen, cfg.PROGRESS_BG, (0, y, cfg.WINDOW_WIDTH, cfg.PROGRESS_HEIGHT))
    pygame.draw.rect(screen, cfg.PROGRESS_FILL,
                     (0, y, progress * cfg.WINDOW_WIDTH, cfg.PROGRESS_HEIGHT))


def draw_bars(screen, snap, max_value):
    n = len(snap.sequence)
    if not n:
        return
    bw      = cfg.WINDOW_WIDTH / n
    bottom  = cfg.WINDOW_HEIGHT - cfg.BAR_BOTTOM_GAP
    scale   = (bottom - 60) / max_value
    for k, v in enumerate(snap.sequence):
        h = v * scale
        pygame.draw.rect(screen, bar_color(k, v, snap, max_value),
                         (k * bw, bottom - h, max(1.0, bw - cfg.BAR_SPACING), h))


def overlay_text(snap, delay_ms):
    if snap.is_shuffling:
        return "STATUS: Shuffling..."
    m = snap.metrics
    return (f"ALGORITHM:  {snap.kind.display_name}\n"
            f"COMPLEXITY: {snap.kind.complexity}\n"
            f"HOW IT WORKS: {snap.kind.description}\n"
            f"\n"
            f"Comparisons:  {m.comparisons}\n"
            f"Swaps:        {m.swaps}\n"
            f"Real CPU Time:{m.elapsed_ms:.3f}ms\n"
            f"Delay Added:  {delay_ms}ms")


def draw_ui(screen, font, text):
    x = y = 20
    for line in text.split("\n"):
        if not line:
            y += cfg.LINE_HEIGHT // 2
            continue
        color = cfg.LABEL_COLOR if ":" in line else cfg.TEXT_COLOR
        screen.blit(font.render(line, True, cfg.SHADOW_COLOR), (x + 2, y + 2))
        screen.blit(font.render(line, True, color), (x, y))
        y += cfg.LINE_HEIGHT


def draw_frame(screen, font, snap, delay_ms, max_value):
    screen.fill(cfg.BACKGROUND_COLOR)
    draw_progress(screen, snap.progress)
    draw_bars(screen, snap, max_value)
    draw_ui(screen, font, overlay_text(snap, delay_ms))
    pygame.display.flip()

# ============================================================
# ========================= MAIN =============================
# ============================================================

def build_font():
    for name in ("Consolas", "Courier New", "Lucida Console"):
        try:
            return pygame.font.SysFont(name, cfg.TEXT_SIZE)
        except (OSError, pygame.error):
            pass
    return pygame.font.SysFont(None, cfg.TEXT_SIZE)


def run(settings: Settings):
    rng   = random.Random(settings.seed)
    ctl   = SortController(settings.size, settings.value_low, settings.value_high, rng=rng)
    delay = settings.delay_ms

    pygame.init()
    engine = init_sound(ctl.mailbox, settings) if settings.sound else None
    screen = pygame.display.set_mode((cfg.WINDOW_WIDTH, cfg.WINDOW_HEIGHT))
    pygame.display.set_caption("StepSorter")
    font  = build_font()
    clock = pygame.time.Clock()

    ctl.reset(AlgorithmKind.from_key(settings.algorithm), regenerate=True)
    running = True
    try:
        while running:
            for ev in pygame.event.get():
                if ev.type == pygame.QUIT:
                    running = False
                elif ev.type == pygame.KEYDOWN:
                    if ev.key in KEY_TO_KIND:
                        ctl.reset(KEY_TO_KIND[ev.key], regenerate=True)
                    elif ev.key == pygame.K_r:
                        ctl.reset(ctl.kind, regenerate=False)
                    elif ev.key == pygame.K_ESCAPE:
                        running = False
                    elif ev.key == pygame.K_UP:
                        delay = max(0, delay - 1)
                    elif ev.key == pygame.K_DOWN:
                        delay += 1

            shuffling = ctl.is_shuffling
            sorting   = not shuffling and not ctl.is_sorted
            snap = ctl.tick()

            # pacing happens after the timed step so it never counts as CPU time
            if shuffling:
                pygame.time.delay(settings.shuffle_delay_ms)
            elif sorting:
                extra = settings.merge_copy_extra_ms if ctl.merge_copying else 0
                pygame.time.delay(delay + extra)
            else:
                clock.tick(cfg.FPS_IDLE)

            draw_frame(screen, font, snap, delay, settings.value_high)
    finally:
        if engine:
            engine.stop()
        pygame.quit()


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="StepSorter - watch sorting algorithms run one comparison at a time",
        epilog="Keys: 1-5 pick an algorithm, R reshuffles, Up/Down change the delay, Esc quits.",
    )
    parser.add_argument('--algorithm', choices=[k.key for k in AlgorithmKind],
                        help='Algorithm to start with')
    parser.add_argument('--size', type=int, help='Number of bars')
    parser.add_argument('--delay', type=int, help='Milliseconds to wait after each step')
    parser.add_argument('--seed', type=int, help='Seed for data generation and shuffling')
    parser.add_argument('--no-sound', action='store_true', help='Run without audio')
    parser.add_argument('--settings', default=cfg.SETTINGS_JSON,
                        help='JSON settings file (default: %(default)s)')
    parser.add_argument('--save-settings', action='store_true',
                        help='Write the effective settings back to the settings file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    args = parser.parse_args(argv)
    if args.size is not None and args.size < 0:
        parser.error("--size must be >= 0")
    if args.delay is not None and args.delay < 0:
        parser.error("--delay must be >= 0")
    return args


def main(argv=None):
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    settings = load_settings(args.settings)
    if args.algorithm is not None: settings.algorithm = args.algorithm
    if args.size is not None:      settings.size = args.size
    if args.delay is not None:     settings.delay_ms = args.delay
    if args.seed is not None:      settings.seed = args.seed
    if args.no_sound:              settings.sound = False
    if args.save_settings:
        save_settings(settings, args.settings)

    try:
        run(settings)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
