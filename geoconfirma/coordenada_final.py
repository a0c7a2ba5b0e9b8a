"""
Escolha da coordenada final de cada registro.

Combina três sinais, em ordem de prioridade:

1. **CEP** — serviços cujo CEP devolvido é igual ao CEP da entrada
   (*confirmados*);
2. **Menor par** — os dois serviços com coordenadas mais próximas;
3. **Classificação MDC** — posição global do serviço no conjunto de dados,
   usada apenas como desempate.

Regras pelo número de serviços confirmados:

- **1**: o confirmado, sem olhar distância ou classificação;
- **2**: se exatamente um deles está no menor par, ele; se os dois estão (o
  menor par é o par dos confirmados) ou nenhum está, o mais bem classificado
  dos dois;
- **0 ou 3**: o mais bem classificado dentre os serviços do menor par —
  para rótulo de serviço único é o próprio serviço; sem coordenadas, nenhum.

Quando o serviço escolhido não tem coordenada, o resultado é ausente com
origem ``"none"``.
"""

from geoconfirma.cep import FlagsCep
from geoconfirma.config import ORIGEM_NENHUMA, SERVICOS
from geoconfirma.distancia import Coordenada
from geoconfirma.mdc import ClassificacaoServicos, RotuloPar, melhor_classificado

#: (lat, lon, origem), com origem ∈ {"service_1", "service_2", "service_3", "none"}
CoordenadaFinal = tuple[float | None, float | None, str]


def origem_servico(servico: int) -> str:
    return f"service_{servico}"


def escolher_servico(
    rotulo: RotuloPar,
    flags: FlagsCep,
    classificacao: ClassificacaoServicos,
) -> int | None:
    """Decide qual serviço fornece a coordenada final (``None`` = nenhum).

    Função pura: mesmas entradas, mesma escolha.
    """
    confirmados = [s for s in SERVICOS if flags[s - 1] == 1]

    if len(confirmados) == 1:
        return confirmados[0]

    if len(confirmados) == 2:
        no_par = [s for s in confirmados if s in rotulo]
        if len(no_par) == 1:
            return no_par[0]
        return melhor_classificado(confirmados, classificacao)

    return melhor_classificado(rotulo, classificacao)


def resolver_coordenada_final(
    rotulo: RotuloPar,
    flags: FlagsCep,
    classificacao: ClassificacaoServicos,
    coords: tuple[Coordenada, Coordenada, Coordenada],
) -> CoordenadaFinal:
    """Resolve a coordenada final de um registro.

    Args:
        rotulo:        Menor par do registro.
        flags:         Comparação de CEP entrada × saída por serviço.
        classificacao: Serviços do melhor para o pior (snapshot global).
        coords:        Coordenadas dos serviços 1, 2 e 3.

    Returns:
        ``(lat, lon, origem)``; ``(None, None, "none")`` quando não há
        coordenada disponível para o serviço escolhido.
    """
    servico = escolher_servico(rotulo, flags, classificacao)
    if servico is None:
        return (None, None, ORIGEM_NENHUMA)

    coord = coords[servico - 1]
    if coord is None:
        return (None, None, ORIGEM_NENHUMA)
    return (coord[0], coord[1], origem_servico(servico))
