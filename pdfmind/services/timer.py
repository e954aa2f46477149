import asyncio
import logging
import math
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class QuizTimer:
    """
    Compte à rebours du quiz.

    Tâche annulable replanifiée chaque seconde sur la boucle asyncio courante ;
    la condition d'arrêt est vérifiée avant chaque replanification. Sans boucle
    active, l'expiration est détectée à la demande via tick().
    `on_expire` est appelé au plus une fois.
    """

    def __init__(
        self,
        duration: int,
        on_expire: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
        interval: float = 1.0,
    ):
        self.duration = duration
        self._on_expire = on_expire
        self._clock = clock
        self._interval = interval
        self._started_at: Optional[float] = None
        self._frozen_left: Optional[int] = None
        self._fired = False
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None and self._frozen_left is None

    @property
    def expired(self) -> bool:
        return self._fired

    @property
    def time_left(self) -> int:
        if self._frozen_left is not None:
            return self._frozen_left
        if self._started_at is None:
            return self.duration
        elapsed = self._clock() - self._started_at
        return max(0, math.ceil(self.duration - elapsed))

    def start(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._started_at = self._clock()
        self._frozen_left = None
        self._fired = False
        self._schedule()

    def stop(self) -> None:
        if self._frozen_left is None:
            self._frozen_left = self.time_left
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def tick(self) -> bool:
        """Vérifie l'expiration ; retourne True si le timer vient d'expirer."""
        if not self.running or self.time_left > 0:
            return False
        self.stop()
        if self._fired:
            return False
        self._fired = True
        logger.info("quiz timer expired, auto-submitting")
        self._on_expire()
        return True

    # ---------- scheduling ----------

    def _schedule(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._handle = loop.call_later(self._interval, self._on_tick)

    def _on_tick(self) -> None:
        self._handle = None
        if not self.running:
            return
        self.tick()
        if self.running:
            self._schedule()
