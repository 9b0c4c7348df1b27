"""
Script de procesamiento manual local.
Ejecuta la detección de nieve (pasos 2 al 5) sobre imágenes en una carpeta
local, sin contactar la cámara ni Home Assistant. Sirve para ajustar el
polígono y los umbrales antes de desplegar el servicio.

Lee POLYGON_POINTS, BRIGHTNESS_THRESHOLD y SNOW_RATIO_THRESHOLD del entorno
(o del archivo .env).
"""
import logging
import os
import sys
from pathlib import Path

import cv2
from dotenv import load_dotenv

# Aseguramos que el directorio raíz esté en el path para los imports
sys.path.append(str(Path(__file__).parent.parent))

from config.settings import parse_polygon
from src.exceptions import ConfigurationError
from src.nodes.snow import (BrightnessClassifierNode, GreyscaleNode,
                            PolygonMaskNode, SnowDecisionNode)

# Configuración de carpetas
INPUT_DIR = Path(__file__).parent.parent / "manual_script" / "images"
OUTPUT_DIR = Path(__file__).parent.parent / "manual_script" / "results"


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.info(">>> Iniciando script de procesamiento manual...")

    # 1. Verificar directorios
    if not INPUT_DIR.exists():
        logging.error(f"No se encontró la carpeta de entrada: {INPUT_DIR.absolute()}")
        logging.info("Por favor crea la carpeta 'images' y coloca las capturas ahí.")
        return

    OUTPUT_DIR.mkdir(exist_ok=True)

    # 2. Cargar polígono y umbrales
    load_dotenv()
    try:
        polygon = parse_polygon(os.environ.get("POLYGON_POINTS", ""))
        brightness_threshold = int(os.environ["BRIGHTNESS_THRESHOLD"])
        snow_ratio_threshold = float(os.environ["SNOW_RATIO_THRESHOLD"])
    except (ConfigurationError, KeyError, ValueError) as e:
        logging.critical(f"Configuración inválida para el procesamiento manual: {e}")
        return

    # 3. Construir los nodos (pasos 2 al 5 del pipeline)
    nodes = [
        GreyscaleNode(name="Greyscale"),
        PolygonMaskNode(polygon=polygon, name="Mask"),
        BrightnessClassifierNode(brightness_threshold=brightness_threshold, name="Brightness"),
        SnowDecisionNode(
            snow_ratio_threshold=snow_ratio_threshold,
            brightness_threshold=brightness_threshold,
            name="Decision"
        ),
    ]

    # 4. Listar imágenes
    supported_extensions = ['*.jpg', '*.jpeg', '*.png', '*.bmp']
    image_files = []
    for ext in supported_extensions:
        image_files.extend(INPUT_DIR.glob(ext))
        image_files.extend(INPUT_DIR.glob(ext.upper()))

    image_files = sorted(set(image_files))

    if not image_files:
        logging.warning(f"No se encontraron imágenes en {INPUT_DIR}")
        return

    logging.info(f"Se encontraron {len(image_files)} imágenes para procesar.")

    # 5. Loop de procesamiento
    for img_path in image_files:
        logging.info(f"--- Procesando: {img_path.name} ---")

        image = cv2.imread(str(img_path))
        if image is None:
            logging.error(f"Error al leer la imagen: {img_path}")
            continue

        context = {
            "image": image,
            "original_shape": (image.shape[1], image.shape[0])
        }

        try:
            for node in nodes:
                context = node.run(context)

            output_path = OUTPUT_DIR / f"{img_path.stem}-bright.jpg"
            cv2.imwrite(str(output_path), context["bright_image"])

            outcome = context["outcome"]
            logging.info(f"✅ {img_path.name}: ratio={outcome.ratio:.4f} nieve={outcome.snow_detected} -> {output_path}")

        except Exception as e:
            logging.error(f"❌ Fallo al procesar {img_path.name}: {e}", exc_info=True)

    logging.info(">>> Procesamiento finalizado.")


if __name__ == "__main__":
    main()
