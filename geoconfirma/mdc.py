"""
Método da Dupla Confirmação (MDC).

Três passos:

1. **Menor par** — para cada registro, o par de serviços cujas coordenadas
   estão mais próximas (ou o único serviço com coordenada, ou nenhum).
2. **Pontuação** — os dois serviços do menor par recebem 1 ponto cada
   (confirmaram-se mutuamente); coordenada isolada não pontua.
3. **Classificação** — soma dos pontos sobre todo o conjunto de dados,
   ordenando os serviços do melhor para o pior.  A classificação é calculada
   uma única vez e usada apenas como desempate na coordenada final.

Representação do rótulo do menor par (:data:`RotuloPar`): tupla com os números
dos serviços envolvidos — ``(1, 2)``, ``(1, 3)``, ``(2, 3)``, ``(k,)`` quando só
o serviço *k* tem coordenada, ``()`` quando nenhum tem.
"""

import logging
from collections.abc import Iterable

import pandas as pd

from geoconfirma.config import (
    MODELO_ROTULO_UNICO,
    PARES,
    ROTULO_SEM_COORDENADAS,
    SERVICOS,
)
from geoconfirma.distancia import Coordenada, TriplaDistancias

log = logging.getLogger(__name__)

RotuloPar = tuple[int, ...]

#: Pontos MDC de um registro, um por serviço (soma 0 ou 2)
VetorConfirmacao = tuple[int, int, int]

#: Serviços do melhor para o pior, ex.: ``(2, 1, 3)``
ClassificacaoServicos = tuple[int, int, int]

POSICOES: tuple[str, str, str] = ("melhor", "intermediario", "pior")


# ===========================================================================
# Menor par
# ===========================================================================


def selecionar_menor_par(
    distancias: TriplaDistancias,
    coords: tuple[Coordenada, Coordenada, Coordenada],
) -> RotuloPar:
    """Classifica o registro pelo par de menor distância.

    Empates entre distâncias iguais ficam com o primeiro par na ordem fixa
    1-2, 1-3, 2-3.  Sem nenhuma distância calculável, inspeciona quais
    coordenadas existem.

    Args:
        distancias: Tupla ``(d12, d13, d23)`` com ``None`` nos pares incompletos.
        coords:     Coordenadas dos três serviços.

    Returns:
        Rótulo do menor par (ver :data:`RotuloPar`).
    """
    melhor: RotuloPar | None = None
    menor: float | None = None
    for par, dist in zip(PARES, distancias):
        if dist is None:
            continue
        if menor is None or dist < menor:
            menor = dist
            melhor = par
    if melhor is not None:
        return melhor

    presentes = tuple(s for s in SERVICOS if coords[s - 1] is not None)
    if len(presentes) == 1:
        return presentes
    # Duas ou mais coordenadas sempre geram ao menos uma distância
    return ()


def formatar_rotulo(
    rotulo: RotuloPar,
    prefixo_dist: str,
    colunas: dict[str, str],
) -> str:
    """Converte o rótulo interno no texto da coluna ``shortest_distance``.

    - par ``(i, j)`` → ``"<prefixo>_i_j"``
    - único ``(k,)`` → ``"just <lat_k> and <lon_k>"`` com os nomes reais
      das colunas de entrada
    - vazio → ``"No Coordinates"``
    """
    if len(rotulo) == 2:
        return f"{prefixo_dist}_{rotulo[0]}_{rotulo[1]}"
    if len(rotulo) == 1:
        k = rotulo[0]
        return MODELO_ROTULO_UNICO.format(
            lat=colunas[f"lat{k}"], lon=colunas[f"lon{k}"]
        )
    return ROTULO_SEM_COORDENADAS


# ===========================================================================
# Pontuação
# ===========================================================================


def pontuar_confirmacao(rotulo: RotuloPar) -> VetorConfirmacao:
    """Atribui 1 ponto a cada serviço do menor par e 0 ao restante.

    Rótulos de serviço único ou sem coordenadas não pontuam ninguém: uma
    coordenada isolada não pode ser confirmada.
    """
    if len(rotulo) != 2:
        return (0, 0, 0)
    pontos = [1 if s in rotulo else 0 for s in SERVICOS]
    return (pontos[0], pontos[1], pontos[2])


# ===========================================================================
# Classificação dos serviços (nível do conjunto de dados)
# ===========================================================================


def somar_pontos(vetores: Iterable[VetorConfirmacao | None]) -> dict[int, int]:
    """Soma os pontos MDC de cada serviço em todos os registros.

    Vetores ausentes (``None``) contam como zero.
    """
    totais = {s: 0 for s in SERVICOS}
    for vetor in vetores:
        if vetor is None:
            continue
        for s in SERVICOS:
            totais[s] += int(vetor[s - 1])
    return totais


def classificar_servicos(totais: dict[int, int]) -> ClassificacaoServicos:
    """Ordena os serviços do maior para o menor total de pontos.

    Empates são resolvidos pela ordem crescente do número do serviço: com
    totais iguais, o serviço 1 fica à frente do 2, que fica à frente do 3.

    Args:
        totais: Pontos por serviço, como devolvido por :func:`somar_pontos`.

    Returns:
        Tupla imutável com os serviços do melhor para o pior.
    """
    ordem = sorted(SERVICOS, key=lambda s: (-totais.get(s, 0), s))

    valores = [totais.get(s, 0) for s in SERVICOS]
    if len(set(valores)) < len(valores):
        log.warning(
            "  Empate nos pontos MDC %s — desempate pelo número do serviço: %s",
            totais,
            ordem,
        )
    return (ordem[0], ordem[1], ordem[2])


def melhor_classificado(
    servicos: Iterable[int], classificacao: ClassificacaoServicos
) -> int | None:
    """Retorna o serviço mais bem posicionado entre *servicos* (``None`` se vazio)."""
    candidatos = list(servicos)
    if not candidatos:
        return None
    return min(candidatos, key=classificacao.index)


def resumo_mdc(
    totais: dict[int, int], classificacao: ClassificacaoServicos
) -> pd.DataFrame:
    """Monta o resumo do MDC por serviço.

    Returns:
        DataFrame com uma linha por serviço e colunas ``servico``, ``pontos``
        e ``posicao`` (``"melhor"`` | ``"intermediario"`` | ``"pior"``).
    """
    posicao = {s: POSICOES[i] for i, s in enumerate(classificacao)}
    return pd.DataFrame(
        [
            {"servico": s, "pontos": int(totais.get(s, 0)), "posicao": posicao[s]}
            for s in SERVICOS
        ]
    )
