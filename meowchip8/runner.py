"""Host-side drivers for a Machine.

The interpreter runs at a configurable instruction rate while the timers
always count down at 60Hz. Emulator owns the machine together with the lock
that serializes the two drivers and incoming key events, and offers three ways
of pacing them:

- run_for(): call from a single loop (e.g. once per rendered frame); timer
  ticks are interleaved between instructions.
- run_timed(): a fixed number of instructions as fast as possible, with
  timer ticks interleaved as though they ran at the clock rate.
- start()/stop(): one background thread per driver.
"""

import logging
import threading
import time
from typing import Callable, Optional

import numpy as np

from .constants import DEFAULT_CLOCK_HZ, MAX_CATCHUP, TIMER_HZ
from .errors import MachineFault
from .interpreter import StepOutcome, step
from .machine import Machine, load, tick_timers

logger = logging.getLogger(__name__)


class Emulator:
    """Thread-safe facade over a Machine"""

    def __init__(self, machine: Optional[Machine] = None, clock_hz: int = DEFAULT_CLOCK_HZ):
        self.machine = machine if machine is not None else Machine()
        self.lock = threading.RLock()
        self.clock_hz = clock_hz
        self.paused = False
        self.on_fault: Optional[Callable[[MachineFault], None]] = None

        self._cpu_acc = 0.0
        self._timer_acc = 0.0
        self._frame_acc = 0

        self._stop_event = threading.Event()
        self._threads = []

    @property
    def clock_hz(self) -> int:
        return self._clock_hz

    @clock_hz.setter
    def clock_hz(self, hz: int):
        if hz <= 0:
            raise ValueError(f"Clock rate must be positive, got {hz}")
        self._clock_hz = hz

    # ─── Machine access ───

    @property
    def halted(self) -> bool:
        return self.machine.halted

    @property
    def last_fault(self) -> Optional[MachineFault]:
        return self.machine.fault

    @property
    def sound_active(self) -> bool:
        with self.lock:
            return self.machine.sound_active

    def load(self, rom: bytes):
        with self.lock:
            load(self.machine, rom)
            self._cpu_acc = self._timer_acc = 0.0

    def reset(self):
        """Reload the last ROM"""
        with self.lock:
            self.machine.reset()
            self._cpu_acc = self._timer_acc = 0.0
        logger.info("Reset")

    def press_key(self, key: int):
        with self.lock:
            self.machine.press_key(key)

    def release_key(self, key: int):
        with self.lock:
            self.machine.release_key(key)

    def snapshot(self) -> np.ndarray:
        """Copy of the current frame"""
        with self.lock:
            return self.machine.display.snapshot()

    def consume_redraw(self) -> bool:
        with self.lock:
            return self.machine.display.consume_redraw()

    # ─── Drivers ───

    def step(self) -> StepOutcome:
        """Execute one instruction under the lock"""
        with self.lock:
            try:
                return step(self.machine)
            except MachineFault as fault:
                if self.on_fault is not None:
                    self.on_fault(fault)
                raise

    def tick_timers(self):
        with self.lock:
            tick_timers(self.machine)

    def pause(self):
        self.paused = True
        logger.info("Paused")

    def resume(self):
        self.paused = False
        logger.info("Running")

    def toggle_pause(self) -> bool:
        if self.paused:
            self.resume()
        else:
            self.pause()
        return self.paused

    def run_cycles(self, count: int) -> int:
        """Run up to count instructions; stops early on a fault or key wait.

        Returns the number of step() calls made.
        """
        done = 0
        with self.lock:
            for _ in range(count):
                if self.machine.halted:
                    break
                done += 1
                if self._step_or_halt() is StepOutcome.AWAITING_KEY:
                    break
        return done

    def run_for(self, seconds: float):
        """Advance emulated time by seconds, interleaving timer ticks.

        Backlogs longer than MAX_CATCHUP (e.g. after the window was dragged)
        are dropped rather than replayed.
        """
        if self.paused or self.machine.halted:
            return
        seconds = min(seconds, MAX_CATCHUP)
        cpu_step = 1.0 / self.clock_hz
        timer_step = 1.0 / TIMER_HZ

        with self.lock:
            self._cpu_acc += seconds
            while self._cpu_acc >= cpu_step:
                self._cpu_acc -= cpu_step
                if self._run_slot(cpu_step, timer_step) is None:
                    self._cpu_acc = self._timer_acc = 0.0
                    return

    def run_timed(self, count: int) -> int:
        """Run count instruction slots back to back with 60Hz timer ticks
        interleaved as if they took real time at clock_hz.

        Unlike run_cycles() a key wait does not stop the run, so timers keep
        counting down. Stops early on a fault; returns the slots run.
        """
        cpu_step = 1.0 / self.clock_hz
        timer_step = 1.0 / TIMER_HZ
        done = 0
        with self.lock:
            for _ in range(count):
                if self.machine.halted:
                    break
                done += 1
                if self._run_slot(cpu_step, timer_step) is None:
                    break
        return done

    def _run_slot(self, cpu_step: float, timer_step: float) -> Optional[StepOutcome]:
        # Each instruction slot moves the timer clock forward by its own length
        self._timer_acc += cpu_step
        while self._timer_acc >= timer_step:
            self._timer_acc -= timer_step
            tick_timers(self.machine)
        return self._step_or_halt()

    def _step_or_halt(self) -> Optional[StepOutcome]:
        try:
            return step(self.machine)
        except MachineFault as fault:
            if self.on_fault is not None:
                self.on_fault(fault)
            return None

    # ─── Background threads ───

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def start(self):
        """Start emulation threads"""
        if self.running:
            return
        self._stop_event.clear()
        self._threads = [
            threading.Thread(target=self._cpu_loop, name="chip8-cpu", daemon=True),
            threading.Thread(target=self._timer_loop, name="chip8-timers", daemon=True),
        ]
        for thread in self._threads:
            thread.start()

    def stop(self, timeout: float = 1.0):
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout=timeout)
        self._threads = []

    def _frame_cycles(self, fps: int) -> int:
        """Instructions due this frame; the remainder carries over"""
        self._frame_acc += self.clock_hz
        count, self._frame_acc = divmod(self._frame_acc, fps)
        return count

    def _cpu_loop(self):
        """Main CPU emulation loop"""
        target_fps = 60
        self._frame_acc = 0
        while not self._stop_event.is_set():
            start_time = time.perf_counter()
            if not self.paused:
                self.run_cycles(self._frame_cycles(target_fps))
            elapsed = time.perf_counter() - start_time
            self._stop_event.wait(max(0.0, 1.0 / target_fps - elapsed))

    def _timer_loop(self):
        """Timer decrement loop (60Hz)"""
        interval = 1.0 / TIMER_HZ
        next_tick = time.perf_counter() + interval
        while not self._stop_event.wait(max(0.0, next_tick - time.perf_counter())):
            if not self.paused and not self.machine.halted:
                self.tick_timers()
            next_tick += interval
