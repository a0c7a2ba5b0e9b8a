"""
conftest.py — Fixtures e configurações globais para os testes.

Aplicado automaticamente a todos os módulos de teste (autouse=True):
- tqdm substituído por iteração direta (sem saída de progresso nos testes).

Fixtures compartilhadas:
- ``df_amostra``: sete registros cobrindo todas as combinações relevantes de
  coordenadas presentes/ausentes (um exemplo por rótulo de menor par).
"""

import math

import pandas as pd
import pytest

NAN = math.nan


@pytest.fixture(autouse=True)
def desabilitar_tqdm(monkeypatch: pytest.MonkeyPatch) -> None:
    """Substitui tqdm por passthrough para suprimir barras de progresso."""
    monkeypatch.setattr(
        "geoconfirma.pipeline.tqdm",
        lambda iterable, **kw: iterable,
    )


@pytest.fixture
def df_amostra() -> pd.DataFrame:
    """Sete endereços de Campinas/SP com coordenadas dos três serviços.

    Linha a linha, o menor par esperado é: 1-2, 1-3, 1-2, só 1, só 2, só 3,
    nenhum.  Pontos MDC totais: serviço 1 = 3, serviço 2 = 2, serviço 3 = 1.
    """
    return pd.DataFrame(
        {
            "input_addr": ["Addr_1"] * 7,
            "lat1": [-22.71704, -22.71258, -22.77704, -22.74704, NAN, NAN, NAN],
            "lon1": [-46.91200, -46.90435, -46.97200, -46.91200, NAN, NAN, NAN],
            "lat2": [-22.72704, -22.71268, -22.72304, NAN, -22.72704, NAN, NAN],
            "lon2": [-46.93200, -46.90435, -46.99200, NAN, -46.92435, NAN, NAN],
            "lat3": [-22.75704, -22.71258, NAN, NAN, NAN, -22.77704, NAN],
            "lon3": [-46.92430, -46.90435, NAN, NAN, NAN, -46.92439, NAN],
        }
    )
