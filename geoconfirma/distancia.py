"""
Distâncias entre as coordenadas dos três serviços de geocodificação.

A distância entre dois pontos é calculada pela fórmula de haversine sobre uma
esfera de raio :data:`~geoconfirma.config.RAIO_TERRA_KM` e expressa em
quilômetros.  Quando qualquer extremidade do par está ausente a distância é
indefinida (``None``) — nunca zero.
"""

import math

import pandas as pd

from geoconfirma.config import PARES, RAIO_TERRA_KM

# ---------------------------------------------------------------------------
# Tipos auxiliares
# (lat, lon) ou None quando o serviço não retornou coordenada
# ---------------------------------------------------------------------------
Coordenada = tuple[float, float] | None

#: Distâncias (d12, d13, d23) em km; ``None`` onde o par é incompleto
TriplaDistancias = tuple[float | None, float | None, float | None]


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distância de grande círculo entre dois pontos, em km.

    Args:
        lat1, lon1: Primeiro ponto em graus decimais.
        lat2, lon2: Segundo ponto em graus decimais.

    Returns:
        Distância não negativa; ``0.0`` para pontos idênticos.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    # Arredondamentos podem empurrar ``a`` levemente acima de 1
    a = min(1.0, a)
    return 2 * RAIO_TERRA_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def coordenada(lat: object, lon: object) -> Coordenada:
    """Monta ``(lat, lon)`` a partir de valores brutos; ``None`` se faltar algum.

    Aceita ``None``, ``NaN`` e ``pd.NA`` como ausência; valores infinitos
    também anulam a coordenada.
    """
    if lat is None or lon is None:
        return None
    if bool(pd.isna(lat)) or bool(pd.isna(lon)):
        return None
    lat, lon = float(lat), float(lon)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return (lat, lon)


def distancias_par_a_par(
    coords: tuple[Coordenada, Coordenada, Coordenada],
) -> TriplaDistancias:
    """Calcula as distâncias dos pares (1,2), (1,3) e (2,3) de um registro.

    Args:
        coords: Coordenadas dos serviços 1, 2 e 3 (cada uma pode ser ``None``).

    Returns:
        Tupla ``(d12, d13, d23)``; cada item é ``None`` quando uma das
        extremidades do par está ausente.
    """
    distancias: list[float | None] = []
    for i, j in PARES:
        a, b = coords[i - 1], coords[j - 1]
        if a is None or b is None:
            distancias.append(None)
        else:
            distancias.append(haversine_km(a[0], a[1], b[0], b[1]))
    return (distancias[0], distancias[1], distancias[2])
