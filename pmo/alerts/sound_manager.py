"""
Sound Manager - audio cues for finished timer phases.

Two cues, both synthesized on first run and cached as WAV files:
  phase_complete    two-note bell after a work period or short break
  session_complete  rising arpeggio once the long break is over

Playback goes through pygame.mixer. Without pygame (or without an audio
device) every play() is a quiet no-op that returns False.
"""

from __future__ import annotations

import logging
import math
import struct
import wave
from io import BytesIO
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

SOUNDS_DIR = Path(__file__).resolve().parent.parent / "assets" / "sounds"
SAMPLE_RATE = 22050

_mixer_available = False
try:
    import pygame.mixer
    _mixer_available = True
except ImportError:
    logger.warning("pygame not installed; sounds will be disabled.")


# ── Synthesis ───────────────────────────────────────────────────────────────

def _tone(freq: float, seconds: float, envelope: Callable[[float], float],
          peak: int) -> List[float]:
    """One sine note; envelope maps 0..1 progress to 0..1 gain."""
    n = int(SAMPLE_RATE * seconds)
    return [
        peak * envelope(i / n) * math.sin(2 * math.pi * freq * i / SAMPLE_RATE)
        for i in range(n)
    ]


def _silence(seconds: float) -> List[float]:
    return [0.0] * int(SAMPLE_RATE * seconds)


def _to_wav(samples: Sequence[float]) -> bytes:
    buf = BytesIO()
    with wave.open(buf, "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(SAMPLE_RATE)
        w.writeframes(struct.pack(f"<{len(samples)}h", *(int(s) for s in samples)))
    return buf.getvalue()


def _decay(p: float) -> float:
    return math.exp(-p * 2.2)


def _fade(p: float) -> float:
    return 1.0 - p


def _bell() -> bytes:
    samples: List[float] = []
    for freq in (784, 1047):  # G5, C6
        samples += _tone(freq, 0.18, _decay, 8000) + _silence(0.03)
    return _to_wav(samples)


def _arpeggio() -> bytes:
    samples: List[float] = []
    for freq in (523, 659, 784, 1047):  # C5, E5, G5, C6
        samples += _tone(freq, 0.12, _fade, 7000)
    return _to_wav(samples)


CUES: Dict[str, Callable[[], bytes]] = {
    "phase_complete": _bell,
    "session_complete": _arpeggio,
}


def synth_cue(name: str) -> bytes:
    """WAV bytes for a named cue. KeyError for unknown names."""
    return CUES[name]()


# ── Playback ────────────────────────────────────────────────────────────────

class SoundManager:
    """Loads the cues into pygame.mixer and plays them by name."""

    def __init__(self, enabled: bool = True, volume: float = 0.5,
                 sounds_dir: Optional[Path] = None) -> None:
        self.enabled = enabled
        self.volume = max(0.0, min(volume, 1.0))
        self.sounds_dir = sounds_dir or SOUNDS_DIR
        self._ready = False
        self._sounds: dict = {}

        if enabled:
            self._open_device()

    def _open_device(self) -> None:
        if not _mixer_available:
            return
        try:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1, buffer=512)
        except Exception as e:
            logger.warning("Could not init audio: %s", e)
            return
        self._ready = True
        for name in CUES:
            self._load(name)
        logger.info("Audio ready (%d cues).", len(self._sounds))

    def _load(self, name: str) -> None:
        path = self.sounds_dir / f"{name}.wav"
        try:
            if not path.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(synth_cue(name))
            sound = pygame.mixer.Sound(str(path))
            sound.set_volume(self.volume)
        except Exception as e:
            logger.warning("Could not load cue %s: %s", name, e)
            return
        self._sounds[name] = sound

    def play(self, sound_name: str) -> bool:
        """Play a named cue. Returns False if nothing was played."""
        if not (self.enabled and self._ready):
            return False
        sound = self._sounds.get(sound_name)
        if sound is None:
            logger.debug("No cue named %r", sound_name)
            return False
        try:
            sound.set_volume(self.volume)
            sound.play()
        except Exception:
            logger.exception("Audio playback failed for %s", sound_name)
            return False
        return True

    def set_volume(self, volume: float) -> None:
        self.volume = max(0.0, min(volume, 1.0))
        for sound in self._sounds.values():
            sound.set_volume(self.volume)

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled
        if enabled and not self._ready:
            self._open_device()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Builds two short cues from sine notes shaped by an envelope, caches them
#   as WAVs and plays them through pygame.mixer when a phase ends.
#
# Data flow:
#   App start → SoundManager.__init__() → mixer opened → missing WAVs written
#   from CUES → loaded as pygame.mixer.Sound → DesktopNotifier calls
#   play("phase_complete"). No pygame or no audio device → play() is False
#   and the timer carries on.
