import json
import logging
import signal
import sys

from config.settings import load_settings
from src import __version__
from src.exceptions import ConfigurationError, FilesystemError
from src.pipeline import SnowDetectionPipeline
from src.utils import build_camera_client, build_home_assistant_client, build_snapshot_store
from src.worker import Worker

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def main():
    logging.info(">>> Snow Detection v%s iniciando...", __version__)

    # Verificación crítica de configuración antes de arrancar.
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logging.error("Configuración inválida: %s. El servicio no puede iniciar.", e)
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    logging.info("Umbral de brillo: %d, umbral de ratio de nieve: %s", settings.brightness_threshold, settings.snow_ratio_threshold)
    logging.info("Puntos del polígono: %s", json.dumps([list(p) for p in settings.polygon.as_pairs()]))
    if settings.dry_run:
        logging.info("Modo dry-run activo: Home Assistant no será actualizado.")

    snapshot_store = build_snapshot_store(settings)
    try:
        snapshot_store.ensure_directory()
    except FilesystemError as e:
        logging.error("No se pudo preparar la carpeta de capturas: %s", e)

    worker = None
    camera_client = build_camera_client(settings)
    ha_client = build_home_assistant_client(settings)
    try:
        pipeline = SnowDetectionPipeline(
            settings=settings,
            camera_client=camera_client,
            ha_client=ha_client,
            snapshot_store=snapshot_store
        )
        worker = Worker(pipeline=pipeline, interval_minutes=settings.check_interval_minutes)

        signal.signal(signal.SIGTERM, lambda signum, frame: worker.stop())

        worker.start()

    except KeyboardInterrupt:
        logging.warning("Interrupción manual detectada. Finalizando servicio...")
        if worker:
            worker.stop()

    except Exception as e:
        logging.critical(f"Error fatal en el ciclo principal: {e}", exc_info=True)
        if worker:
            worker.stop()
        sys.exit(1)

    finally:
        camera_client.close()
        ha_client.close()

    logging.info("Servicio detenido limpiamente.")


if __name__ == "__main__":
    main()
