"""pygame host: draws the framebuffer, plays the beep and feeds the keypad.

Controls:
    1234 / QWER / ASDF / ZXCV   CHIP-8 keypad
    P      pause / resume       F5   reset (reload ROM)
    F6     single step          F1   debug overlay
    F2     next color scheme    +/-  double / halve speed
    ESC    quit
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import pygame

from .constants import (
    BEEP_FREQUENCY, BLOOM_STRENGTH, BLUR_RADIUS, COLORS, DISPLAY_H, DISPLAY_W,
    GLOW_UPSCALE, MENU_H, SAMPLE_RATE, SCALE, STATUS_H,
)
from .debug import register_lines
from .errors import Chip8Error, MachineFault
from .runner import Emulator

logger = logging.getLogger(__name__)

# Keyboard mapping (QWERTY -> CHIP-8 hex keypad)
# CHIP-8 Keypad:    Keyboard:
# 1 2 3 C          1 2 3 4
# 4 5 6 D          Q W E R
# 7 8 9 E          A S D F
# A 0 B F          Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}

COLOR_SCHEMES = [
    ('Green Phosphor', COLORS['fg_green']),
    ('Amber CRT', COLORS['fg_amber']),
    ('Cool White', COLORS['fg_white']),
    ('Ice Blue', COLORS['fg_blue']),
]


class GlowRenderer:
    """Turns the boolean framebuffer into a crisp layer plus a blurred halo"""

    def __init__(self, scale: int = SCALE, fg_color: Tuple[int, int, int] = COLORS['fg_green']):
        self.scale = scale
        self.fg_color = fg_color
        self.bloom_strength = BLOOM_STRENGTH
        self.blur_radius = BLUR_RADIUS
        self.glow_upscale = GLOW_UPSCALE
        self.final_size = (DISPLAY_W * scale, DISPLAY_H * scale)

    @staticmethod
    def box_blur(arr: np.ndarray, passes: int = 1) -> np.ndarray:
        """Fast box blur using rolling averages"""
        a = arr.copy()
        for _ in range(passes):
            a = (np.roll(a, 1, axis=0) + a + np.roll(a, -1, axis=0)) / 3.0
            a = (np.roll(a, 1, axis=1) + a + np.roll(a, -1, axis=1)) / 3.0
        return a

    def colorize(self, intensity: np.ndarray) -> np.ndarray:
        """(w, h) intensities in 0..1 -> (w, h, 3) RGB bytes"""
        return (intensity[..., None] * np.array(self.fg_color, dtype=np.float32)).astype(np.uint8)

    def render(self, frame: np.ndarray) -> Tuple[pygame.Surface, pygame.Surface]:
        """
        Args:
            frame: (height, width) boolean array

        Returns:
            (base_surface, glow_surface) scaled to the window
        """
        # surfarray wants (width, height)
        base = frame.T.astype(np.float32)

        up = self.glow_upscale
        glow = np.repeat(np.repeat(base, up, axis=0), up, axis=1)
        glow = self.box_blur(glow, passes=1 + self.blur_radius)
        glow = np.clip(glow * self.bloom_strength, 0.0, 1.0)

        base_surf = pygame.surfarray.make_surface(self.colorize(base))
        glow_surf = pygame.surfarray.make_surface(self.colorize(glow))

        return (pygame.transform.scale(base_surf, self.final_size),
                pygame.transform.smoothscale(glow_surf, self.final_size))

    def create_background(self) -> pygame.Surface:
        """Create CRT-style background with scanlines"""
        surf = pygame.Surface(self.final_size)
        bg = COLORS['bg_dark']
        surf.fill(bg)
        line = tuple(c + 5 for c in bg)
        for y in range(0, self.final_size[1], 2):
            pygame.draw.line(surf, line, (0, y), (self.final_size[0], y))
        return surf


class Beeper:
    """Square wave that loops while the sound timer is nonzero"""

    def __init__(self, frequency: int = BEEP_FREQUENCY, volume: float = 0.2):
        self.sound: Optional[pygame.mixer.Sound] = None
        self.playing = False
        try:
            pygame.mixer.init(SAMPLE_RATE, -16, 1, 512)
        except pygame.error as e:
            logger.warning("Audio unavailable: %s", e)
            return

        period = max(2, SAMPLE_RATE // frequency)
        t = np.arange(period * 20)
        wave = np.where((t % period) < period // 2, 1, -1) * int(32767 * volume)
        self.sound = pygame.mixer.Sound(buffer=wave.astype(np.int16).tobytes())

    def update(self, active: bool):
        if self.sound is None or active == self.playing:
            return
        if active:
            self.sound.play(loops=-1)
        else:
            self.sound.stop()
        self.playing = active


class Chip8Window:
    """Main emulator window"""

    def __init__(self, emulator: Emulator, scale: int = SCALE, color_scheme: int = 0):
        pygame.init()
        pygame.display.set_caption("🐱 Meow CHIP-8")

        self.emu = emulator
        self.emu.on_fault = self._on_fault
        self.scale = scale
        self.screen = pygame.display.set_mode(
            (DISPLAY_W * scale, DISPLAY_H * scale + MENU_H + STATUS_H))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 20)

        self.color_scheme = color_scheme % len(COLOR_SCHEMES)
        self.renderer = GlowRenderer(scale, COLOR_SCHEMES[self.color_scheme][1])
        self.background = self.renderer.create_background()
        self.beeper = Beeper()

        self.running = True
        self.show_debug = False
        self.rom_name = "(no ROM)"
        self.status = "Ready - pass a .ch8 file to begin"
        self._frame = emulator.snapshot()

    # ─── Control surface ───

    def load_rom(self, path: str) -> bool:
        try:
            self.emu.load(Path(path).read_bytes())
        except (OSError, Chip8Error) as e:
            logger.error("Failed to load ROM %s: %s", path, e)
            self.status = f"Failed to load ROM: {e}"
            return False
        self.rom_name = Path(path).stem
        self.status = f"Loaded: {self.rom_name}"
        return True

    def _on_fault(self, fault: MachineFault):
        self.status = f"Halted: {fault} - F5 to reset"

    def _reset(self):
        self.emu.reset()
        self.status = f"Reset: {self.rom_name}"

    def _toggle_pause(self):
        self.status = "Paused" if self.emu.toggle_pause() else "Running"

    def _single_step(self):
        self.emu.pause()
        if self.emu.run_cycles(1):
            self.status = f"Step - PC: ${self.emu.machine.registers.PC:03X}"

    def _set_speed(self, hz: int):
        self.emu.clock_hz = max(60, min(hz, 20000))
        self.status = f"Speed: {self.emu.clock_hz} Hz"

    def _next_color(self):
        self.color_scheme = (self.color_scheme + 1) % len(COLOR_SCHEMES)
        name, color = COLOR_SCHEMES[self.color_scheme]
        self.renderer.fg_color = color
        self.status = f"Color: {name}"

    # ─── Main loop ───

    def handle_events(self):
        """Process input events"""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_p:
                    self._toggle_pause()
                elif event.key == pygame.K_F5:
                    self._reset()
                elif event.key == pygame.K_F6:
                    self._single_step()
                elif event.key == pygame.K_F1:
                    self.show_debug = not self.show_debug
                elif event.key == pygame.K_F2:
                    self._next_color()
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                    self._set_speed(self.emu.clock_hz * 2)
                elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    self._set_speed(self.emu.clock_hz // 2)
                elif event.key in KEY_MAP:
                    self.emu.press_key(KEY_MAP[event.key])

            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    self.emu.release_key(KEY_MAP[event.key])

    def render(self):
        self.screen.fill(COLORS['bg_dark'])
        self.screen.blit(self.background, (0, MENU_H))

        if self.emu.consume_redraw():
            self._frame = self.emu.snapshot()
        base_surf, glow_surf = self.renderer.render(self._frame)
        self.screen.blit(glow_surf, (0, MENU_H), special_flags=pygame.BLEND_ADD)
        self.screen.blit(base_surf, (0, MENU_H), special_flags=pygame.BLEND_ADD)

        title = f"{self.rom_name}  |  {self.emu.clock_hz} Hz"
        self.screen.blit(self.font.render(title, True, COLORS['text']), (10, 5))

        status_y = MENU_H + DISPLAY_H * self.scale
        pygame.draw.rect(self.screen, COLORS['status_bg'],
                         pygame.Rect(0, status_y, self.screen.get_width(), STATUS_H))
        self.screen.blit(self.font.render(self.status, True, COLORS['text_dim']),
                         (10, status_y + 5))

        if self.show_debug:
            self._render_debug()

        pygame.display.flip()

    def _render_debug(self):
        """Render debug information overlay"""
        with self.emu.lock:
            lines = register_lines(self.emu.machine)

        width = self.screen.get_width()
        overlay = pygame.Surface((220, 20 + 18 * len(lines)), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))
        self.screen.blit(overlay, (width - 230, MENU_H + 5))

        for i, line in enumerate(lines):
            text = self.font.render(line, True, COLORS['fg_green'])
            self.screen.blit(text, (width - 225, MENU_H + 10 + i * 18))

    def run(self):
        """Main loop"""
        while self.running:
            self.handle_events()
            dt = self.clock.tick(60) / 1000.0
            self.emu.run_for(dt)
            self.beeper.update(self.emu.sound_active and not self.emu.paused)
            self.render()

        pygame.quit()
