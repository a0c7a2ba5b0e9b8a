"""Exceções do pacote geoconfirma.

Ambas herdam de :exc:`ValueError`: quem já captura ``ValueError`` continua
funcionando.
"""


class EntradaInvalida(ValueError):
    """Coluna referenciada ausente ou campo de endereço não textual.

    Aborta o lote inteiro — não há recuperação por registro.
    """


class PrerequisitoAusente(ValueError):
    """Etapa solicitada sem a etapa da qual ela depende."""
