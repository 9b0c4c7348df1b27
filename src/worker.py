import logging
import threading
import time

from src.pipeline import SnowDetectionPipeline


class Worker:
    """
    Ejecuta el pipeline de detección de forma periódica.

    El primer ciclo corre de inmediato al llamar `start()`; los siguientes se
    programan cada `interval_minutes`, medidos entre inicios de ciclo. Los
    ciclos nunca se solapan: si uno tarda más que el periodo, el siguiente
    comienza apenas termina.
    """
    def __init__(self,
                 pipeline: SnowDetectionPipeline,
                 interval_minutes: float):

        self.logger = logging.getLogger(__name__)

        if interval_minutes <= 0:
            raise ValueError(f"interval_minutes debe ser positivo, se recibió {interval_minutes}")

        self.pipeline = pipeline
        self.interval_seconds = interval_minutes * 60.0
        self.cycles_run = 0
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return not self._stop_event.is_set()

    def start(self):
        """
        Inicia el ciclo periódico. Bloquea hasta que se llame a `stop()`.
        """
        self.logger.info(f"🚀 Worker iniciado. Se revisará la presencia de nieve cada {self.interval_seconds / 60.0:g} minuto(s)")

        try:
            while self.is_running:
                cycle_start = time.monotonic()
                self._run_cycle()

                remaining = self.interval_seconds - (time.monotonic() - cycle_start)
                if remaining > 0:
                    self._stop_event.wait(remaining)

        finally:
            self.logger.info("Worker finalizado.")

    def _run_cycle(self):
        self.cycles_run += 1
        outcome = self.pipeline.run_cycle()

        if outcome is None:
            self.logger.warning(f"⚠️ Ciclo #{self.cycles_run} terminó con error. Se reintentará en el próximo ciclo.")
        else:
            self.logger.info(f"✅ Ciclo #{self.cycles_run} completado: nieve={'sí' if outcome.snow_detected else 'no'} (ratio={outcome.ratio:.4f})")

    def stop(self):
        self.logger.info("🛑 Solicitud de parada recibida.")
        self._stop_event.set()
