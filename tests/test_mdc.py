"""
Testes para geoconfirma.mdc.

Cobre:
- selecionar_menor_par: menor distância, desempate 1-2 < 1-3 < 2-3,
  cobertura exaustiva das 8 combinações de coordenadas presentes
- formatar_rotulo: texto de par, serviço único (nomes reais das colunas) e
  ausência de coordenadas
- pontuar_confirmacao: soma sempre 0 ou 2
- somar_pontos / classificar_servicos: totais, ausentes como zero, empates
  resolvidos pelo número do serviço
- resumo_mdc: uma linha por serviço com posição
"""

import itertools

import pytest

from geoconfirma.config import COLUNAS_PADRAO
from geoconfirma.distancia import distancias_par_a_par
from geoconfirma.mdc import (
    classificar_servicos,
    formatar_rotulo,
    melhor_classificado,
    pontuar_confirmacao,
    resumo_mdc,
    selecionar_menor_par,
    somar_pontos,
)

P1 = (-22.71704, -46.91200)
P2 = (-22.72704, -46.93200)
P3 = (-22.75704, -46.92430)

ROTULOS_VALIDOS = {(1, 2), (1, 3), (2, 3), (1,), (2,), (3,), ()}


# ===========================================================================
# selecionar_menor_par
# ===========================================================================


class TestSelecionarMenorPar:
    def test_tres_coordenadas(self) -> None:
        """Distâncias 2.33 / 4.62 / 3.43 → par 1-2."""
        coords = (P1, P2, P3)
        assert selecionar_menor_par(distancias_par_a_par(coords), coords) == (1, 2)

    def test_sem_servico_1(self) -> None:
        """Só 2 e 3 presentes → único par calculável, 2-3."""
        coords = (None, P2, P3)
        assert selecionar_menor_par(distancias_par_a_par(coords), coords) == (2, 3)

    def test_somente_servico_1(self) -> None:
        coords = (P1, None, None)
        assert selecionar_menor_par(distancias_par_a_par(coords), coords) == (1,)

    def test_sem_coordenadas(self) -> None:
        coords = (None, None, None)
        assert selecionar_menor_par(distancias_par_a_par(coords), coords) == ()

    def test_empate_total_fica_com_1_2(self) -> None:
        coords = (P1, P1, P1)
        assert selecionar_menor_par((0.0, 0.0, 0.0), coords) == (1, 2)

    def test_empate_1_3_e_2_3_fica_com_1_3(self) -> None:
        coords = (P1, P2, P3)
        assert selecionar_menor_par((5.0, 1.0, 1.0), coords) == (1, 3)

    def test_distancia_zero_vence(self) -> None:
        """Registro com 1 e 3 idênticos: par 1-3."""
        coords = ((-22.71258, -46.90435), (-22.71268, -46.90435), (-22.71258, -46.90435))
        assert selecionar_menor_par(distancias_par_a_par(coords), coords) == (1, 3)

    @pytest.mark.parametrize(
        "presenca", list(itertools.product([True, False], repeat=3))
    )
    def test_cobertura_exaustiva(self, presenca: tuple[bool, bool, bool]) -> None:
        """Toda combinação gera exatamente um rótulo do conjunto fechado."""
        pontos = (P1, P2, P3)
        coords = tuple(p if presente else None for p, presente in zip(pontos, presenca))
        rotulo = selecionar_menor_par(distancias_par_a_par(coords), coords)

        assert rotulo in ROTULOS_VALIDOS
        presentes = tuple(i + 1 for i, presente in enumerate(presenca) if presente)
        if len(presentes) <= 1:
            assert rotulo == presentes
        else:
            assert len(rotulo) == 2
            assert set(rotulo) <= set(presentes)


# ===========================================================================
# formatar_rotulo
# ===========================================================================


class TestFormatarRotulo:
    def test_par(self) -> None:
        assert formatar_rotulo((1, 3), "dist", COLUNAS_PADRAO) == "dist_1_3"

    def test_prefixo_personalizado(self) -> None:
        assert formatar_rotulo((2, 3), "dis", COLUNAS_PADRAO) == "dis_2_3"

    def test_servico_unico_usa_nomes_das_colunas(self) -> None:
        colunas = {**COLUNAS_PADRAO, "lat2": "latitude_google", "lon2": "longitude_google"}
        assert (
            formatar_rotulo((2,), "dist", colunas)
            == "just latitude_google and longitude_google"
        )

    def test_sem_coordenadas(self) -> None:
        assert formatar_rotulo((), "dist", COLUNAS_PADRAO) == "No Coordinates"


# ===========================================================================
# pontuar_confirmacao
# ===========================================================================


class TestPontuarConfirmacao:
    @pytest.mark.parametrize(
        "rotulo, esperado",
        [
            ((1, 2), (1, 1, 0)),
            ((1, 3), (1, 0, 1)),
            ((2, 3), (0, 1, 1)),
            ((1,), (0, 0, 0)),
            ((2,), (0, 0, 0)),
            ((3,), (0, 0, 0)),
            ((), (0, 0, 0)),
        ],
    )
    def test_pontos(self, rotulo: tuple[int, ...], esperado: tuple[int, int, int]) -> None:
        assert pontuar_confirmacao(rotulo) == esperado

    @pytest.mark.parametrize("rotulo", sorted(ROTULOS_VALIDOS))
    def test_conservacao(self, rotulo: tuple[int, ...]) -> None:
        """A soma do vetor é sempre 0 ou 2."""
        assert sum(pontuar_confirmacao(rotulo)) in (0, 2)


# ===========================================================================
# somar_pontos / classificar_servicos
# ===========================================================================


class TestClassificacao:
    def test_somar_pontos(self) -> None:
        vetores = [(1, 1, 0), (1, 0, 1), (1, 1, 0), (0, 0, 0)]
        assert somar_pontos(vetores) == {1: 3, 2: 2, 3: 1}

    def test_ausentes_contam_zero(self) -> None:
        assert somar_pontos([(0, 1, 1), None]) == {1: 0, 2: 1, 3: 1}

    def test_conjunto_vazio(self) -> None:
        assert somar_pontos([]) == {1: 0, 2: 0, 3: 0}

    def test_ordem_decrescente(self) -> None:
        assert classificar_servicos({1: 3, 2: 2, 3: 1}) == (1, 2, 3)
        assert classificar_servicos({1: 0, 2: 7, 3: 4}) == (2, 3, 1)

    def test_empate_no_topo(self) -> None:
        """Serviços 2 e 3 empatados: o de menor número fica à frente."""
        assert classificar_servicos({1: 1, 2: 5, 3: 5}) == (2, 3, 1)

    def test_empate_na_base(self) -> None:
        assert classificar_servicos({1: 2, 2: 2, 3: 9}) == (3, 1, 2)

    def test_empate_triplo(self) -> None:
        assert classificar_servicos({1: 4, 2: 4, 3: 4}) == (1, 2, 3)

    def test_empate_e_registrado_no_log(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="geoconfirma.mdc"):
            classificar_servicos({1: 4, 2: 4, 3: 1})
        assert "Empate" in caplog.text

    def test_classificacao_imutavel(self) -> None:
        assert isinstance(classificar_servicos({1: 3, 2: 2, 3: 1}), tuple)

    def test_melhor_classificado(self) -> None:
        classificacao = (2, 3, 1)
        assert melhor_classificado((1, 3), classificacao) == 3
        assert melhor_classificado((1,), classificacao) == 1
        assert melhor_classificado((), classificacao) is None


# ===========================================================================
# resumo_mdc
# ===========================================================================


def test_resumo_mdc() -> None:
    resumo = resumo_mdc({1: 3, 2: 2, 3: 1}, (1, 2, 3))
    assert resumo["servico"].tolist() == [1, 2, 3]
    assert resumo["pontos"].tolist() == [3, 2, 1]
    assert resumo["posicao"].tolist() == ["melhor", "intermediario", "pior"]


def test_resumo_mdc_ordem_de_servico_independe_da_posicao() -> None:
    resumo = resumo_mdc({1: 0, 2: 7, 3: 4}, (2, 3, 1))
    assert resumo["posicao"].tolist() == ["pior", "melhor", "intermediario"]
