from __future__ import annotations

from typing import Callable, Protocol

from .domain.point import TopicSample


class SampleBroker(Protocol):
    """Interfaz abstracta de stream de muestras por topic.

    El motor solo depende de esta interfaz; el transporte concreto
    (Socket.IO, MQTT, ...) queda fuera y solo publica aquí.
    """

    def publish(self, sample: TopicSample) -> None:
        """Publicar una muestra cruda.

        Las implementaciones deciden si bloquean o descartan; el motor
        no depende de eso.
        """

        ...

    def subscribe(self, handler: Callable[[TopicSample], None]) -> None:
        """Consumir muestras de forma continua, llamando ``handler(sample)``.

        Normalmente bloquea hasta que se detiene el broker.
        """

        ...
