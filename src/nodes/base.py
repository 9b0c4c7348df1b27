"""
Define la interfaz base para los pasos de un ciclo de detección de nieve.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict


class PipelineNode(ABC):
    """
    Clase base abstracta para un paso del ciclo de detección.

    Cada nodo realiza una única tarea (descargar la captura, generar la
    máscara, clasificar píxeles, reportar el estado...) y se comunica con los
    demás a través de un diccionario de contexto que vive sólo durante el
    ciclo en curso.

    Attributes:
        name (str): Nombre del nodo, utilizado en los logs y en la medición
            de tiempos del pipeline.
    """
    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """
        Ejecuta el paso sobre el contexto del ciclo.

        El nodo lee del contexto lo que necesita, escribe sus resultados en el
        mismo diccionario y lo devuelve. Un nodo que no puede completar su
        trabajo lanza una excepción, lo que aborta el ciclo.

        Args:
            context (Dict[str, Any]): Estado del ciclo compartido entre nodos.

        Returns:
            Dict[str, Any]: El contexto con los resultados de este nodo.
        """
        pass

    def _require(self, context: Dict[str, Any], key: str) -> Any:
        value = context.get(key)
        if value is None:
            raise ValueError(f"[{self.name}] El contexto no contiene la clave '{key}'.")
        return value
