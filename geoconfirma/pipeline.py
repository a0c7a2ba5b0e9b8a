"""
Pipeline de consenso entre três serviços de geocodificação.

Recebe um DataFrame com uma linha por endereço e devolve um *novo* DataFrame
com as colunas derivadas anexadas (o original nunca é alterado):

- **Fase 1** (por registro, paralelizável): distâncias par a par, menor par,
  pontos MDC e, se habilitado, extração/comparação de CEP;
- **Barreira**: soma dos pontos MDC de todos os registros e classificação dos
  serviços — snapshot imutável calculado uma única vez;
- **Fase 2** (por registro): coordenada final usando CEP + menor par +
  classificação.

Uso::

    from geoconfirma.pipeline import melhores_coordenadas

    df_final, resumo = melhores_coordenadas(
        df,
        menor_distancia=True,
        mdc=True,
        resumir_mdc=True,
        confirmacao_cep=True,
        comparacao_cep=True,
        coordenada_final=True,
    )
"""

import logging
import math
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any

import pandas as pd
from tqdm import tqdm

from geoconfirma.cep import _ausente, confirmar_cep
from geoconfirma.config import (
    CHAVES_COORDENADAS,
    CHAVES_ENDERECOS_SAIDA,
    COLUNA_CEP_ENTRADA,
    COLUNA_FINAL_LAT,
    COLUNA_FINAL_LON,
    COLUNA_FINAL_ORIGEM,
    COLUNA_MENOR_DISTANCIA,
    COLUNAS_CEP_SAIDA,
    COLUNAS_COMPARACAO_CEP,
    COLUNAS_MDC,
    COLUNAS_PADRAO,
    MAX_WORKERS_PADRAO,
    PARES,
    PREFIXO_DIST,
    SERVICOS,
)
from geoconfirma.coordenada_final import resolver_coordenada_final
from geoconfirma.distancia import coordenada, distancias_par_a_par
from geoconfirma.erros import EntradaInvalida, PrerequisitoAusente
from geoconfirma.mdc import (
    ClassificacaoServicos,
    classificar_servicos,
    formatar_rotulo,
    pontuar_confirmacao,
    resumo_mdc,
    selecionar_menor_par,
    somar_pontos,
)

log = logging.getLogger(__name__)

_FLAGS_DESCONHECIDAS = (None, None, None)


# ===========================================================================
# Validação
# ===========================================================================


def validar_prerequisitos(
    menor_distancia: bool,
    mdc: bool,
    resumir_mdc: bool,
    confirmacao_cep: bool,
    comparacao_cep: bool,
    coordenada_final: bool,
) -> None:
    """Garante que cada etapa solicitada tem a etapa da qual depende.

    Raises:
        PrerequisitoAusente: Com a etapa faltante indicada na mensagem.
    """
    if mdc and not menor_distancia:
        raise PrerequisitoAusente(
            "O MDC depende da menor distância: use menor_distancia=True."
        )
    if resumir_mdc and not mdc:
        raise PrerequisitoAusente(
            "O resumo do MDC depende do MDC: use mdc=True."
        )
    if comparacao_cep and not confirmacao_cep:
        raise PrerequisitoAusente(
            "A comparação de CEP depende da extração dos CEPs: "
            "use confirmacao_cep=True."
        )
    if coordenada_final and not resumir_mdc:
        raise PrerequisitoAusente(
            "A coordenada final depende da classificação dos serviços: "
            "use resumir_mdc=True."
        )


def mapear_colunas(colunas: dict[str, str] | None = None) -> dict[str, str]:
    """Combina o mapeamento padrão com as substituições do chamador.

    Raises:
        EntradaInvalida: Se *colunas* tiver chaves lógicas desconhecidas.
    """
    mapa = dict(COLUNAS_PADRAO)
    if colunas:
        desconhecidas = sorted(set(colunas) - set(COLUNAS_PADRAO))
        if desconhecidas:
            raise EntradaInvalida(
                f"Chaves de coluna desconhecidas: {desconhecidas}. "
                f"Chaves válidas: {sorted(COLUNAS_PADRAO)}"
            )
        mapa.update(colunas)
    return mapa


def validar_schema(df: pd.DataFrame, colunas: Sequence[str]) -> None:
    """Valida que o DataFrame contém todas as *colunas* referenciadas.

    Raises:
        EntradaInvalida: Com a lista das colunas faltantes e das encontradas.
    """
    ausentes = [c for c in colunas if c not in df.columns]
    if ausentes:
        encontradas = sorted(map(str, df.columns))
        raise EntradaInvalida(
            f"Schema inválido — colunas ausentes: {ausentes}. "
            f"Colunas encontradas: {encontradas}"
        )


def _validar_enderecos(df: pd.DataFrame, colunas: Sequence[str]) -> None:
    """Falha no primeiro valor de endereço presente que não seja texto."""
    for col in colunas:
        for indice, valor in df[col].items():
            if _ausente(valor) or isinstance(valor, str):
                continue
            raise EntradaInvalida(
                f"Endereço não textual na coluna '{col}', linha {indice!r}: "
                f"{valor!r} ({type(valor).__name__})"
            )


def _coordenadas_numericas(
    df: pd.DataFrame, mapa: dict[str, str]
) -> dict[str, pd.Series]:
    """Converte as seis colunas de coordenadas para numérico.

    Valores não numéricos (``errors='coerce'``) e infinitos viram ``NaN`` e
    são contados no log.
    """
    numericas: dict[str, pd.Series] = {}
    for chaves in CHAVES_COORDENADAS.values():
        for chave in chaves:
            original = df[mapa[chave]]
            convertida = pd.to_numeric(original, errors="coerce")
            descartados = int((convertida.isna() & original.notna()).sum())
            if descartados:
                log.warning(
                    "  Coluna '%s': %d valor(es) não numérico(s) tratado(s) como ausente(s)",
                    mapa[chave],
                    descartados,
                )
            infinitos = convertida.isin([math.inf, -math.inf])
            if infinitos.any():
                log.warning(
                    "  Coluna '%s': %d valor(es) infinito(s) tratado(s) como ausente(s)",
                    mapa[chave],
                    int(infinitos.sum()),
                )
                convertida = convertida.mask(infinitos)
            numericas[chave] = convertida
    return numericas


# ===========================================================================
# Execução por registro
# ===========================================================================


def _mapear_registros(
    funcao: Callable[[dict[str, Any]], Any],
    registros: list[dict[str, Any]],
    max_workers: int,
    desc: str,
) -> list[Any]:
    """Aplica *funcao* a cada registro preservando a ordem.

    Com ``max_workers > 1`` usa um :class:`ThreadPoolExecutor`; registros são
    independentes e não compartilham estado mutável.
    """
    if max_workers <= 1:
        return [funcao(r) for r in tqdm(registros, desc=desc, unit="reg")]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(
            tqdm(
                executor.map(funcao, registros),
                total=len(registros),
                desc=desc,
                unit="reg",
            )
        )


def _avaliar_registro(
    registro: dict[str, Any],
    confirmacao_cep: bool,
    comparacao_cep: bool,
    subsetor_como_cep: bool,
    verificacao_estrita: bool,
) -> dict[str, Any]:
    """Fase 1 de um registro: distâncias, menor par, pontos MDC e CEP."""
    coords = registro["coords"]
    distancias = distancias_par_a_par(coords)
    rotulo = selecionar_menor_par(distancias, coords)

    resultado: dict[str, Any] = {
        "distancias": distancias,
        "rotulo": rotulo,
        "pontos": pontuar_confirmacao(rotulo),
        "cep_entrada": None,
        "ceps_saida": (None, None, None),
        "flags": _FLAGS_DESCONHECIDAS,
    }

    if confirmacao_cep:
        cep_entrada, ceps_saida, flags = confirmar_cep(
            registro["input_addr"],
            registro["output_addrs"],
            subsetor_como_cep=subsetor_como_cep,
            verificacao_estrita=verificacao_estrita,
        )
        resultado["cep_entrada"] = cep_entrada
        resultado["ceps_saida"] = ceps_saida
        if comparacao_cep:
            resultado["flags"] = flags

    return resultado


def _resolver_registro(
    par: tuple[dict[str, Any], dict[str, Any]],
    classificacao: ClassificacaoServicos,
) -> tuple[float | None, float | None, str]:
    """Fase 2 de um registro: coordenada final."""
    registro, avaliacao = par
    return resolver_coordenada_final(
        avaliacao["rotulo"],
        avaliacao["flags"],
        classificacao,
        registro["coords"],
    )


def _montar_registros(
    df: pd.DataFrame,
    mapa: dict[str, str],
    coords_num: dict[str, pd.Series],
    com_enderecos: bool,
) -> list[dict[str, Any]]:
    registros: list[dict[str, Any]] = []
    for posicao, indice in enumerate(df.index):
        coords = tuple(
            coordenada(
                coords_num[lat].iloc[posicao],
                coords_num[lon].iloc[posicao],
            )
            for lat, lon in (CHAVES_COORDENADAS[s] for s in SERVICOS)
        )
        registro: dict[str, Any] = {
            "indice": indice,
            "coords": coords,
            "input_addr": None,
            "output_addrs": (None, None, None),
        }
        if com_enderecos:
            registro["input_addr"] = df[mapa["input_addr"]].iloc[posicao]
            registro["output_addrs"] = tuple(
                df[mapa[CHAVES_ENDERECOS_SAIDA[s]]].iloc[posicao] for s in SERVICOS
            )
        registros.append(registro)
    return registros


# ===========================================================================
# API pública
# ===========================================================================


def melhores_coordenadas(
    df: pd.DataFrame,
    colunas: dict[str, str] | None = None,
    prefixo_dist: str = PREFIXO_DIST,
    menor_distancia: bool = False,
    mdc: bool = False,
    resumir_mdc: bool = False,
    confirmacao_cep: bool = False,
    comparacao_cep: bool = False,
    subsetor_como_cep: bool = False,
    verificacao_estrita: bool = False,
    coordenada_final: bool = False,
    max_workers: int = MAX_WORKERS_PADRAO,
) -> pd.DataFrame | tuple[pd.DataFrame, pd.DataFrame]:
    """Avalia as coordenadas dos três serviços e escolhe a mais confiável.

    As colunas de distância (``<prefixo>_1_2``, ``<prefixo>_1_3``,
    ``<prefixo>_2_3``) são sempre anexadas; as demais dependem das flags:

    - ``menor_distancia``: coluna ``shortest_distance``;
    - ``mdc``: colunas ``mdc_1..3`` (requer ``menor_distancia``);
    - ``resumir_mdc``: devolve também o resumo por serviço (requer ``mdc``);
    - ``confirmacao_cep``: colunas ``input_addr_cep`` e ``output_addr_cep_1..3``;
    - ``comparacao_cep``: colunas ``comparison_cep_input_output_1..3``
      (requer ``confirmacao_cep``);
    - ``coordenada_final``: colunas ``final_lat``, ``final_lon`` e
      ``final_source`` (requer ``resumir_mdc``).  Sem ``comparacao_cep`` as
      flags de CEP são tratadas como desconhecidas.

    Args:
        df:                  Uma linha por endereço.
        colunas:             Substitui nomes de :data:`~geoconfirma.config.COLUNAS_PADRAO`.
        prefixo_dist:        Prefixo das colunas de distância e dos rótulos de par.
        subsetor_como_cep:   Aceita CEP de 5 dígitos na extração.
        verificacao_estrita: Compara CEPs de 5 dígitos.
        max_workers:         Threads para as etapas por registro.

    Returns:
        Novo DataFrame com as colunas derivadas; com ``resumir_mdc=True``, a
        tupla ``(df, resumo)``.

    Raises:
        PrerequisitoAusente: Flag habilitada sem a etapa da qual depende.
        EntradaInvalida:     Coluna referenciada ausente ou endereço não textual.
    """
    validar_prerequisitos(
        menor_distancia,
        mdc,
        resumir_mdc,
        confirmacao_cep,
        comparacao_cep,
        coordenada_final,
    )
    mapa = mapear_colunas(colunas)

    colunas_coords = [mapa[c] for s in SERVICOS for c in CHAVES_COORDENADAS[s]]
    colunas_enderecos = [mapa["input_addr"]] + [
        mapa[CHAVES_ENDERECOS_SAIDA[s]] for s in SERVICOS
    ]
    validar_schema(
        df, colunas_coords + (colunas_enderecos if confirmacao_cep else [])
    )
    if confirmacao_cep:
        _validar_enderecos(df, colunas_enderecos)

    df = df.copy()
    coords_num = _coordenadas_numericas(df, mapa)
    registros = _montar_registros(df, mapa, coords_num, com_enderecos=confirmacao_cep)

    # -----------------------------------------------------------------------
    # Fase 1: por registro
    # -----------------------------------------------------------------------
    log.info("[ETAPA 1] Distâncias, menor par e CEP de %d registro(s)...", len(df))
    avaliacoes = _mapear_registros(
        partial(
            _avaliar_registro,
            confirmacao_cep=confirmacao_cep,
            comparacao_cep=comparacao_cep,
            subsetor_como_cep=subsetor_como_cep,
            verificacao_estrita=verificacao_estrita,
        ),
        registros,
        max_workers,
        desc="Avaliando",
    )

    for k, (i, j) in enumerate(PARES):
        df[f"{prefixo_dist}_{i}_{j}"] = pd.Series(
            [a["distancias"][k] for a in avaliacoes], index=df.index, dtype="float64"
        )

    if menor_distancia:
        df[COLUNA_MENOR_DISTANCIA] = [
            formatar_rotulo(a["rotulo"], prefixo_dist, mapa) for a in avaliacoes
        ]
        log.info(
            "  Distribuição da menor distância: %s",
            df[COLUNA_MENOR_DISTANCIA].value_counts().to_dict(),
        )

    if mdc:
        for s in SERVICOS:
            df[COLUNAS_MDC[s]] = pd.Series(
                [a["pontos"][s - 1] for a in avaliacoes], index=df.index, dtype="int64"
            )

    if confirmacao_cep:
        df[COLUNA_CEP_ENTRADA] = [a["cep_entrada"] for a in avaliacoes]
        for s in SERVICOS:
            df[COLUNAS_CEP_SAIDA[s]] = [a["ceps_saida"][s - 1] for a in avaliacoes]
        log.info(
            "  CEP encontrado na entrada: %d/%d",
            df[COLUNA_CEP_ENTRADA].notna().sum(),
            len(df),
        )

    if comparacao_cep:
        for s in SERVICOS:
            df[COLUNAS_COMPARACAO_CEP[s]] = pd.Series(
                [a["flags"][s - 1] for a in avaliacoes], index=df.index, dtype="Int64"
            )

    if not resumir_mdc:
        return df

    # -----------------------------------------------------------------------
    # Barreira: classificação global dos serviços
    # -----------------------------------------------------------------------
    log.info("[ETAPA 2] Classificando serviços pelo MDC...")
    totais = somar_pontos(a["pontos"] for a in avaliacoes)
    classificacao = classificar_servicos(totais)
    resumo = resumo_mdc(totais, classificacao)
    log.info("  Pontos MDC: %s → classificação %s", totais, classificacao)

    if not coordenada_final:
        return df, resumo

    # -----------------------------------------------------------------------
    # Fase 2: coordenada final por registro
    # -----------------------------------------------------------------------
    log.info("[ETAPA 3] Resolvendo coordenada final...")
    finais = _mapear_registros(
        partial(_resolver_registro, classificacao=classificacao),
        list(zip(registros, avaliacoes)),
        max_workers,
        desc="Resolvendo",
    )

    df[COLUNA_FINAL_LAT] = pd.Series(
        [f[0] for f in finais], index=df.index, dtype="float64"
    )
    df[COLUNA_FINAL_LON] = pd.Series(
        [f[1] for f in finais], index=df.index, dtype="float64"
    )
    df[COLUNA_FINAL_ORIGEM] = [f[2] for f in finais]

    log.info(
        "  Origem da coordenada final: %s",
        df[COLUNA_FINAL_ORIGEM].value_counts().to_dict(),
    )
    return df, resumo


def comparar_distancias(
    df: pd.DataFrame,
    colunas: dict[str, str] | None = None,
    prefixo_dist: str = PREFIXO_DIST,
    menor_distancia: bool = False,
    mdc: bool = False,
    resumir_mdc: bool = False,
    confirmacao_cep: bool = False,
    comparacao_cep: bool = False,
    subsetor_como_cep: bool = False,
    verificacao_estrita: bool = False,
    max_workers: int = MAX_WORKERS_PADRAO,
) -> pd.DataFrame | tuple[pd.DataFrame, pd.DataFrame]:
    """Distâncias, menor par, MDC e CEP — sem coordenada final.

    Mesmo contrato de :func:`melhores_coordenadas` com
    ``coordenada_final=False``.
    """
    return melhores_coordenadas(
        df,
        colunas=colunas,
        prefixo_dist=prefixo_dist,
        menor_distancia=menor_distancia,
        mdc=mdc,
        resumir_mdc=resumir_mdc,
        confirmacao_cep=confirmacao_cep,
        comparacao_cep=comparacao_cep,
        subsetor_como_cep=subsetor_como_cep,
        verificacao_estrita=verificacao_estrita,
        coordenada_final=False,
        max_workers=max_workers,
    )
