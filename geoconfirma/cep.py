"""
Confirmação por CEP.

Extrai o CEP do endereço de entrada e dos três endereços devolvidos pelos
serviços de geocodificação e compara a entrada com cada saída:

- ``1`` — os dois CEPs têm 8 dígitos e são iguais;
- ``0`` — os dois têm 8 dígitos e são diferentes;
- com ``verificacao_estrita=True``, CEPs de exatamente 5 dígitos (subsetor)
  também são comparados (``1``/``0``);
- ``None`` — qualquer outra combinação (CEP ausente, tamanhos diferentes...).

Um serviço com flag ``1`` é considerado *confirmado* pelo CEP.
"""

import re
import unicodedata

import pandas as pd

from geoconfirma.erros import EntradaInvalida

#: Resultado da comparação de CEP por serviço: 1, 0 ou ``None`` (desconhecido)
FlagsCep = tuple[int | None, int | None, int | None]

_RE_CEP_8 = re.compile(r"\b\d{8}\b")
_RE_CEP_5 = re.compile(r"\b\d{5}\b")


# ===========================================================================
# Normalização de endereço
# ===========================================================================


#: Letras latinas sem decomposição NFKD (traço, ligadura ou letra própria)
_LATIN_ASCII = str.maketrans(
    {
        "Æ": "AE", "æ": "ae",
        "Œ": "OE", "œ": "oe",
        "Ø": "O", "ø": "o",
        "Ł": "L", "ł": "l",
        "Đ": "D", "đ": "d",
        "Ð": "D", "ð": "d",
        "Þ": "TH", "þ": "th",
        "Ħ": "H", "ħ": "h",
        "Ŧ": "T", "ŧ": "t",
        "ß": "ss", "ẞ": "SS",
        "ı": "i",
    }
)


def _remover_acentos(texto: str) -> str:
    """Translitera letras latinas para ASCII (acentos, ligaduras e traços)."""
    decomposto = unicodedata.normalize("NFKD", texto.translate(_LATIN_ASCII))
    return "".join(c for c in decomposto if not unicodedata.combining(c))


def _remover_pontuacao(texto: str) -> str:
    """Remove todo caractere da categoria Unicode de pontuação (``P*``)."""
    return "".join(c for c in texto if not unicodedata.category(c).startswith("P"))


def limpar_endereco(endereco: str) -> str:
    """Padroniza um endereço para busca de padrões.

    Etapas: remove pontuação → maiúsculas → remove acentos → colapsa espaços.

    Exemplo::

        >>> limpar_endereco("Samplê ADReEss  -   Wíth PonctuatìõNs::")
        'SAMPLE ADREESS WITH PONCTUATIONS'

    Raises:
        EntradaInvalida: Se *endereco* não for texto.
    """
    if not isinstance(endereco, str):
        raise EntradaInvalida(
            f"Endereço deve ser texto, recebido {type(endereco).__name__}: {endereco!r}"
        )
    texto = _remover_pontuacao(endereco)
    texto = _remover_acentos(texto.upper())
    return re.sub(r"\s+", " ", texto).strip()


def _ausente(valor: object) -> bool:
    """``True`` para ``None``/``NaN``/``pd.NA``."""
    if valor is None:
        return True
    try:
        return bool(pd.isna(valor))
    except (TypeError, ValueError):
        return False


# ===========================================================================
# Extração
# ===========================================================================


def extrair_cep(endereco: object, subsetor_como_cep: bool = False) -> str | None:
    """Extrai o CEP de um endereço.

    Procura um número isolado de 8 dígitos depois da limpeza (``12345-678``
    vira ``12345678``).  Com ``subsetor_como_cep=True`` aceita um número
    isolado de 5 dígitos quando não há padrão de 8.

    Args:
        endereco:          Endereço completo; ``None``/``NaN`` = ausente.
        subsetor_como_cep: Aceita subsetor de 5 dígitos como CEP.

    Returns:
        CEP só com dígitos, ou ``None`` se nenhum padrão for encontrado.

    Raises:
        EntradaInvalida: Se *endereco* estiver presente mas não for texto.
    """
    if _ausente(endereco):
        return None
    limpo = limpar_endereco(endereco)  # type: ignore[arg-type]

    m = _RE_CEP_8.search(limpo)
    if m:
        return m.group(0)
    if subsetor_como_cep:
        m = _RE_CEP_5.search(limpo)
        if m:
            return m.group(0)
    return None


# ===========================================================================
# Comparação
# ===========================================================================


def _texto_cep(valor: object) -> str:
    if _ausente(valor):
        return ""
    return str(valor).strip()


def _limpar_cep(cep: str) -> str:
    """Mantém apenas dígitos e trunca nos 8 primeiros."""
    return re.sub(r"[^0-9]", "", cep)[:8]


def comparar_cep(
    cep1: object, cep2: object, verificacao_estrita: bool = False
) -> int | None:
    """Compara dois CEPs.

    Args:
        cep1, cep2:          CEPs brutos (texto, número ou ausente).
        verificacao_estrita: Também avalia CEPs de exatamente 5 dígitos.

    Returns:
        ``1`` (iguais), ``0`` (diferentes) ou ``None`` quando os valores não
        atendem aos critérios de 8 (ou 5, se estrita) dígitos.
    """
    bruto1, bruto2 = _texto_cep(cep1), _texto_cep(cep2)
    limpo1, limpo2 = _limpar_cep(bruto1), _limpar_cep(bruto2)

    if len(limpo1) == 8 and len(limpo2) == 8:
        return int(limpo1 == limpo2)

    if (
        verificacao_estrita
        and len(limpo1) == 5
        and len(limpo2) == 5
        and len(bruto1) == 5
        and len(bruto2) == 5
    ):
        return int(limpo1 == limpo2)

    return None


def comparar_cep_colunas(
    df: pd.DataFrame,
    col_cep1: str,
    col_cep2: str,
    verificacao_estrita: bool = False,
) -> pd.Series:
    """Aplica :func:`comparar_cep` linha a linha sobre duas colunas.

    Returns:
        Série ``Int64`` (``<NA>`` para desconhecido) com o mesmo índice de *df*.

    Raises:
        EntradaInvalida: Se alguma das colunas não existir em *df*.
    """
    ausentes = [c for c in (col_cep1, col_cep2) if c not in df.columns]
    if ausentes:
        raise EntradaInvalida(
            f"Colunas de CEP ausentes: {ausentes}. "
            f"Colunas encontradas: {sorted(map(str, df.columns))}"
        )
    valores = [
        comparar_cep(a, b, verificacao_estrita=verificacao_estrita)
        for a, b in zip(df[col_cep1], df[col_cep2])
    ]
    return pd.Series(valores, index=df.index, dtype="Int64")


# ===========================================================================
# Etapa por registro
# ===========================================================================


def confirmar_cep(
    endereco_entrada: object,
    enderecos_saida: tuple[object, object, object],
    subsetor_como_cep: bool = False,
    verificacao_estrita: bool = False,
) -> tuple[str | None, tuple[str | None, str | None, str | None], FlagsCep]:
    """Extrai os quatro CEPs de um registro e compara a entrada com cada saída.

    Args:
        endereco_entrada:    Endereço enviado aos serviços.
        enderecos_saida:     Endereços devolvidos pelos serviços 1, 2 e 3.
        subsetor_como_cep:   Repassado a :func:`extrair_cep`.
        verificacao_estrita: Repassado a :func:`comparar_cep`.

    Returns:
        ``(cep_entrada, (cep_1, cep_2, cep_3), (flag_1, flag_2, flag_3))``.
    """
    cep_entrada = extrair_cep(endereco_entrada, subsetor_como_cep=subsetor_como_cep)
    ceps = tuple(
        extrair_cep(e, subsetor_como_cep=subsetor_como_cep) for e in enderecos_saida
    )
    flags = tuple(
        comparar_cep(cep_entrada, c, verificacao_estrita=verificacao_estrita)
        for c in ceps
    )
    return (
        cep_entrada,
        (ceps[0], ceps[1], ceps[2]),
        (flags[0], flags[1], flags[2]),
    )
