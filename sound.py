import logging
import math
import threading
import time

import numpy as np
import pygame

from settings import CHUNK_SIZE, HARMONIC_BLEND, SAMPLE_RATE

logger = logging.getLogger(__name__)

# ============================================================
# ====================== SOUND ENGINE ========================
# ============================================================
#
# HOW THE TONE ENGINE WORKS
# =========================
#
# The sorting loop publishes the bar it just touched into a SoundMailbox.
# A background thread wakes once per chunk, reads the mailbox and renders
# one chunk of a continuous sine at the matching pitch.
#
# WAVEFORM — sine + small 2nd harmonic:
#   wave[t] = sin(2pi * phase[t]) + HARMONIC_BLEND * sin(4pi * phase[t])
#   The phase carries over between chunks, so pitch changes do not click.
#
# GAIN GLIDE — the gain moves from the previous chunk's level to the new
#   target along a raised-cosine curve over the whole chunk:
#   g[t] = g0 + (g1 - g0) * 0.5 * (1 - cos(pi * t / N))
#   Going silent therefore fades the last pitch out instead of cutting it.

TWO_PI = 2.0 * math.pi


def synth_chunk(freq, phase, gain_from, gain_to, n=CHUNK_SIZE, sample_rate=SAMPLE_RATE):
    """
    Render ``n`` samples of the tone.

    Returns (buf, next_phase) where ``buf`` is float64 in [-1, 1] and
    ``next_phase`` is the phase in [0, 1) to start the next chunk with.
    """
    idx = np.arange(n, dtype=np.float64)
    if freq <= 0.0 or (gain_from <= 0.0 and gain_to <= 0.0):
        return np.zeros(n, dtype=np.float64), phase

    phases = (phase + idx * (freq / sample_rate)) % 1.0
    wave = np.sin(TWO_PI * phases)
    if HARMONIC_BLEND > 0.0:
        wave += HARMONIC_BLEND * np.sin(TWO_PI * 2.0 * phases)

    glide = 0.5 * (1.0 - np.cos(math.pi * idx / n))
    gain  = gain_from + (gain_to - gain_from) * glide

    buf = wave * gain / (1.0 + HARMONIC_BLEND)
    return buf, (phase + n * (freq / sample_rate)) % 1.0


def to_pcm_stereo(mono: np.ndarray) -> np.ndarray:
    """Float [-1,1] mono -> int16 stereo frames, scaled to 85% for headroom."""
    pcm = (np.clip(mono, -1.0, 1.0) * 32767 * 0.85).astype(np.int16)
    return np.column_stack((pcm, pcm))


class SoundEngine:
    def __init__(self, mailbox, settings):
        self.mailbox     = mailbox
        self.settings    = settings
        self.sample_rate = SAMPLE_RATE
        self.chunk_size  = CHUNK_SIZE
        self._freq       = 0.0      # last audible pitch, kept for the fade-out
        self._gain       = 0.0
        self._phase      = 0.0
        self._running    = False
        self._thread     = None
        self._channel    = None

    def start(self):
        self._channel = pygame.mixer.Channel(1)
        self._running = True
        self._thread  = threading.Thread(target=self._loop, daemon=True)
        self._thread.start()
        logger.info("Sound engine started (%d Hz, %d-sample chunks)",
                    self.sample_rate, self.chunk_size)

    def stop(self):
        self._running = False
        if self._thread:
            self._thread.join(timeout=1.0)
        if self._channel:
            self._channel.stop()
        logger.info("Sound engine stopped")

    def next_chunk(self) -> np.ndarray:
        """Poll the mailbox once and render the chunk that follows."""
        freq = self.settings.tone_frequency(self.mailbox.read())
        if freq > 0.0:
            self._freq = freq
            target = self.settings.volume
        else:
            target = 0.0
        buf, self._phase = synth_chunk(self._freq, self._phase, self._gain, target,
                                       self.chunk_size, self.sample_rate)
        self._gain = target
        return buf

    def _loop(self):
        """
        Audio thread: generates chunks and queues them to the pygame mixer channel.
        Runs slightly ahead of playback to avoid gaps.
        """
        chunk_secs = self.chunk_size / self.sample_rate
        while self._running:
            snd = pygame.mixer.Sound(buffer=to_pcm_stereo(self.next_chunk()).tobytes())
            deadline = time.monotonic() + chunk_secs * 4
            while self._channel.get_queue() is not None and self._running:
                time.sleep(0.001)
                if time.monotonic() > deadline:
                    break
            if self._running:
                self._channel.queue(snd)
            time.sleep(chunk_secs * 0.75)


def init_sound(mailbox, settings) -> SoundEngine | None:
    """Open the mixer and start the tone thread; None if audio is unavailable."""
    try:
        pygame.mixer.pre_init(SAMPLE_RATE, -16, 2, CHUNK_SIZE)
        pygame.mixer.init()
    except pygame.error as e:
        logger.warning("Audio disabled, mixer failed to start: %s", e)
        return None
    engine = SoundEngine(mailbox, settings)
    engine.start()
    return engine
