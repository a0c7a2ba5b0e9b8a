"""
Pacote geoconfirma — consenso de coordenadas entre três serviços de geocodificação.

Módulos disponíveis:

- ``geoconfirma.config``           — constantes, nomes de colunas e rótulos
- ``geoconfirma.erros``            — exceções (entrada inválida, pré-requisito ausente)
- ``geoconfirma.distancia``        — haversine e distâncias par a par
- ``geoconfirma.mdc``              — menor par, pontos e classificação MDC
- ``geoconfirma.cep``              — limpeza de endereço, extração e comparação de CEP
- ``geoconfirma.coordenada_final`` — escolha da coordenada final por registro
- ``geoconfirma.pipeline``         — pipeline tabular em duas fases
"""

__version__ = "0.1.0"
