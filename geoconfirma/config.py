"""
Constantes centralizadas do pacote geoconfirma.

Todos os demais módulos devem importar daqui — nunca definir constantes
localmente para evitar divergências entre nomes de colunas e rótulos.
"""

# ===========================================================================
# Geodésia
# ===========================================================================

#: Raio médio da Terra em quilômetros (fórmula de haversine)
RAIO_TERRA_KM: float = 6371.0

# ===========================================================================
# Serviços de geocodificação
# ===========================================================================

#: Numeração fixa dos três serviços comparados
SERVICOS: tuple[int, int, int] = (1, 2, 3)

#: Pares na ordem de desempate da menor distância (1-2 < 1-3 < 2-3)
PARES: tuple[tuple[int, int], ...] = ((1, 2), (1, 3), (2, 3))

#: Proveniência da coordenada final quando nenhum serviço é escolhido
ORIGEM_NENHUMA: str = "none"

# ===========================================================================
# Colunas de entrada (mapeamento padrão, sobrescrevível pelo chamador)
# ===========================================================================

COLUNAS_PADRAO: dict[str, str] = {
    "input_addr": "input_addr",
    "output_addr_1": "output_addr_1",
    "output_addr_2": "output_addr_2",
    "output_addr_3": "output_addr_3",
    "lat1": "lat1",
    "lon1": "lon1",
    "lat2": "lat2",
    "lon2": "lon2",
    "lat3": "lat3",
    "lon3": "lon3",
}

#: Chaves lógicas das colunas de coordenadas, por serviço
CHAVES_COORDENADAS: dict[int, tuple[str, str]] = {
    1: ("lat1", "lon1"),
    2: ("lat2", "lon2"),
    3: ("lat3", "lon3"),
}

#: Chaves lógicas das colunas de endereço retornado, por serviço
CHAVES_ENDERECOS_SAIDA: dict[int, str] = {
    1: "output_addr_1",
    2: "output_addr_2",
    3: "output_addr_3",
}

# ===========================================================================
# Colunas de saída
# ===========================================================================

#: Prefixo padrão das colunas de distância (``dist_1_2``, ``dist_1_3``, ...)
PREFIXO_DIST: str = "dist"

COLUNA_MENOR_DISTANCIA: str = "shortest_distance"

#: Colunas de pontos MDC, uma por serviço
COLUNAS_MDC: dict[int, str] = {1: "mdc_1", 2: "mdc_2", 3: "mdc_3"}

COLUNA_CEP_ENTRADA: str = "input_addr_cep"
COLUNAS_CEP_SAIDA: dict[int, str] = {
    1: "output_addr_cep_1",
    2: "output_addr_cep_2",
    3: "output_addr_cep_3",
}
COLUNAS_COMPARACAO_CEP: dict[int, str] = {
    1: "comparison_cep_input_output_1",
    2: "comparison_cep_input_output_2",
    3: "comparison_cep_input_output_3",
}

COLUNA_FINAL_LAT: str = "final_lat"
COLUNA_FINAL_LON: str = "final_lon"
COLUNA_FINAL_ORIGEM: str = "final_source"

# ===========================================================================
# Rótulos textuais da menor distância
# ===========================================================================

#: Rótulo quando nenhum dos três serviços retornou coordenada
ROTULO_SEM_COORDENADAS: str = "No Coordinates"

#: Modelo do rótulo quando apenas um serviço retornou coordenada
MODELO_ROTULO_UNICO: str = "just {lat} and {lon}"

# ===========================================================================
# Execução
# ===========================================================================

#: Threads para as etapas por registro (1 = sequencial)
MAX_WORKERS_PADRAO: int = 1
