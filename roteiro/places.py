# -*- coding: utf-8 -*-
"""
places – tabelas estáticas de destinos, aeroportos e moedas.

Chaves são escritas de forma legível e normalizadas com ``normalize_key`` no
carregamento do módulo; os mapas publicados são somente leitura.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping

from .normalize import normalize_key

# ────────────────────────────────────────────────────────────────
# 1.  Nome de lugar -> código IATA (aeroporto ou cidade)
# ────────────────────────────────────────────────────────────────

_RAW_PLACE_ALIASES: Dict[str, str] = {
    # Brasil – capitais e grandes cidades
    "São Paulo": "SAO",
    "Sampa": "SAO",
    "SP": "SAO",
    "Guarulhos": "GRU",
    "Congonhas": "CGH",
    "Campinas": "VCP",
    "Viracopos": "VCP",
    "Rio de Janeiro": "RIO",
    "Rio": "RIO",
    "RJ": "RIO",
    "Galeão": "GIG",
    "Santos Dumont": "SDU",
    "Belo Horizonte": "BHZ",
    "BH": "BHZ",
    "Confins": "CNF",
    "Brasília": "BSB",
    "Salvador": "SSA",
    "Recife": "REC",
    "Fortaleza": "FOR",
    "Natal": "NAT",
    "João Pessoa": "JPA",
    "Maceió": "MCZ",
    "Aracaju": "AJU",
    "Teresina": "THE",
    "São Luís": "SLZ",
    "Belém": "BEL",
    "Manaus": "MAO",
    "Macapá": "MCP",
    "Boa Vista": "BVB",
    "Porto Velho": "PVH",
    "Rio Branco": "RBR",
    "Palmas": "PMW",
    "Goiânia": "GYN",
    "Cuiabá": "CGB",
    "Campo Grande": "CGR",
    "Curitiba": "CWB",
    "Florianópolis": "FLN",
    "Floripa": "FLN",
    "Porto Alegre": "POA",
    "Vitória": "VIX",
    "Foz do Iguaçu": "IGU",
    "Cataratas do Iguaçu": "IGU",
    "Navegantes": "NVT",
    "Joinville": "JOI",
    "Londrina": "LDB",
    "Maringá": "MGF",
    "Ribeirão Preto": "RAO",
    "Uberlândia": "UDI",
    "Porto Seguro": "BPS",
    "Ilhéus": "IOS",
    "Petrolina": "PNZ",
    "Fernando de Noronha": "FEN",
    "Noronha": "FEN",
    "Santarém": "STM",
    "Bonito": "BYO",

    # Destinos turísticos sem aeroporto próprio -> aeroporto mais próximo
    "Maragogi": "MCZ",
    "São Miguel dos Milagres": "MCZ",
    "Praia do Francês": "MCZ",
    "Porto de Galinhas": "REC",
    "Carneiros": "REC",
    "Olinda": "REC",
    "Pipa": "NAT",
    "Praia da Pipa": "NAT",
    "São Miguel do Gostoso": "NAT",
    "Jericoacoara": "FOR",
    "Jeri": "FOR",
    "Canoa Quebrada": "FOR",
    "Cumbuco": "FOR",
    "Lençóis Maranhenses": "SLZ",
    "Barreirinhas": "SLZ",
    "Praia do Forte": "SSA",
    "Morro de São Paulo": "SSA",
    "Chapada Diamantina": "SSA",
    "Itacaré": "IOS",
    "Trancoso": "BPS",
    "Arraial d'Ajuda": "BPS",
    "Caraíva": "BPS",
    "Búzios": "RIO",
    "Armação dos Búzios": "RIO",
    "Arraial do Cabo": "RIO",
    "Cabo Frio": "RIO",
    "Paraty": "RIO",
    "Angra dos Reis": "RIO",
    "Ilha Grande": "RIO",
    "Petrópolis": "RIO",
    "Ilhabela": "SAO",
    "Ubatuba": "SAO",
    "Campos do Jordão": "SAO",
    "Santos": "SAO",
    "Guarujá": "SAO",
    "Holambra": "VCP",
    "Ouro Preto": "BHZ",
    "Tiradentes": "BHZ",
    "Inhotim": "BHZ",
    "Capitólio": "BHZ",
    "Gramado": "POA",
    "Canela": "POA",
    "Bento Gonçalves": "POA",
    "Balneário Camboriú": "NVT",
    "Bombinhas": "NVT",
    "Beto Carrero": "NVT",
    "Chapada dos Veadeiros": "BSB",
    "Pirenópolis": "BSB",
    "Chapada dos Guimarães": "CGB",
    "Pantanal": "CGB",
    "Alter do Chão": "STM",
    "Jalapão": "PMW",

    # Países -> hub principal
    "Brasil": "SAO",
    "Brazil": "SAO",
    "Portugal": "LIS",
    "Espanha": "MAD",
    "França": "PAR",
    "Itália": "ROM",
    "Alemanha": "FRA",
    "Inglaterra": "LON",
    "Reino Unido": "LON",
    "Irlanda": "DUB",
    "Holanda": "AMS",
    "Países Baixos": "AMS",
    "Bélgica": "BRU",
    "Suíça": "ZRH",
    "Áustria": "VIE",
    "Grécia": "ATH",
    "Turquia": "IST",
    "Estados Unidos": "NYC",
    "EUA": "NYC",
    "USA": "NYC",
    "Canadá": "YTO",
    "México": "MEX",
    "Argentina": "BUE",
    "Chile": "SCL",
    "Uruguai": "MVD",
    "Paraguai": "ASU",
    "Peru": "LIM",
    "Colômbia": "BOG",
    "Bolívia": "LPB",
    "Equador": "UIO",
    "Cuba": "HAV",
    "República Dominicana": "PUJ",
    "Japão": "TYO",
    "China": "BJS",
    "Coreia do Sul": "SEL",
    "Tailândia": "BKK",
    "Emirados Árabes": "DXB",
    "Emirados Árabes Unidos": "DXB",
    "Egito": "CAI",
    "Marrocos": "CMN",
    "África do Sul": "JNB",
    "Austrália": "SYD",
    "Nova Zelândia": "AKL",
    "Índia": "DEL",

    # Cidades do mundo
    "Lisboa": "LIS",
    "Lisbon": "LIS",
    "Porto": "OPO",
    "Faro": "FAO",
    "Algarve": "FAO",
    "Madeira": "FNC",
    "Funchal": "FNC",
    "Madri": "MAD",
    "Madrid": "MAD",
    "Barcelona": "BCN",
    "Sevilha": "SVQ",
    "Paris": "PAR",
    "Nice": "NCE",
    "Londres": "LON",
    "London": "LON",
    "Roma": "ROM",
    "Rome": "ROM",
    "Milão": "MIL",
    "Veneza": "VCE",
    "Florença": "FLR",
    "Toscana": "FLR",
    "Nápoles": "NAP",
    "Berlim": "BER",
    "Munique": "MUC",
    "Frankfurt": "FRA",
    "Amsterdã": "AMS",
    "Amsterdam": "AMS",
    "Bruxelas": "BRU",
    "Zurique": "ZRH",
    "Genebra": "GVA",
    "Viena": "VIE",
    "Praga": "PRG",
    "Budapeste": "BUD",
    "Atenas": "ATH",
    "Santorini": "JTR",
    "Istambul": "IST",
    "Dublin": "DUB",
    "Edimburgo": "EDI",
    "Copenhague": "CPH",
    "Estocolmo": "STO",
    "Moscou": "MOW",
    "Nova York": "NYC",
    "Nova Iorque": "NYC",
    "New York": "NYC",
    "NY": "NYC",
    "Miami": "MIA",
    "Orlando": "ORL",
    "Disney": "ORL",
    "Los Angeles": "LAX",
    "Las Vegas": "LAS",
    "São Francisco": "SFO",
    "San Francisco": "SFO",
    "Chicago": "CHI",
    "Washington": "WAS",
    "Boston": "BOS",
    "Toronto": "YTO",
    "Montreal": "YMQ",
    "Vancouver": "YVR",
    "Cidade do México": "MEX",
    "Cancún": "CUN",
    "Cancun": "CUN",
    "Punta Cana": "PUJ",
    "Havana": "HAV",
    "Aruba": "AUA",
    "Curaçao": "CUR",
    "Buenos Aires": "BUE",
    "Bariloche": "BRC",
    "Mendoza": "MDZ",
    "Ushuaia": "USH",
    "El Calafate": "FTE",
    "Santiago": "SCL",
    "Santiago do Chile": "SCL",
    "Atacama": "CJC",
    "San Pedro de Atacama": "CJC",
    "Montevidéu": "MVD",
    "Punta del Este": "PDP",
    "Lima": "LIM",
    "Cusco": "CUZ",
    "Machu Picchu": "CUZ",
    "Bogotá": "BOG",
    "Cartagena": "CTG",
    "San Andrés": "ADZ",
    "Medellín": "MDE",
    "Quito": "UIO",
    "Galápagos": "GPS",
    "La Paz": "LPB",
    "Tóquio": "TYO",
    "Tokyo": "TYO",
    "Osaka": "OSA",
    "Kyoto": "OSA",
    "Pequim": "BJS",
    "Xangai": "SHA",
    "Seul": "SEL",
    "Bangkok": "BKK",
    "Phuket": "HKT",
    "Bali": "DPS",
    "Singapura": "SIN",
    "Dubai": "DXB",
    "Abu Dhabi": "AUH",
    "Doha": "DOH",
    "Cairo": "CAI",
    "Marrakech": "RAK",
    "Cidade do Cabo": "CPT",
    "Joanesburgo": "JNB",
    "Sydney": "SYD",
    "Melbourne": "MEL",
    "Maldivas": "MLE",
}

# ────────────────────────────────────────────────────────────────
# 2.  Aeroporto -> código metropolitano (agrega mais ofertas)
# ────────────────────────────────────────────────────────────────

_RAW_AIRPORT_TO_CITY: Dict[str, str] = {
    "GRU": "SAO", "CGH": "SAO", "VCP": "SAO",
    "GIG": "RIO", "SDU": "RIO",
    "CNF": "BHZ", "PLU": "BHZ",
    "JFK": "NYC", "LGA": "NYC", "EWR": "NYC",
    "IAD": "WAS", "DCA": "WAS", "BWI": "WAS",
    "ORD": "CHI", "MDW": "CHI",
    "MCO": "ORL", "SFB": "ORL",
    "YYZ": "YTO", "YTZ": "YTO",
    "YUL": "YMQ",
    "EZE": "BUE", "AEP": "BUE",
    "LHR": "LON", "LGW": "LON", "STN": "LON", "LTN": "LON", "LCY": "LON", "SEN": "LON",
    "CDG": "PAR", "ORY": "PAR", "BVA": "PAR",
    "FCO": "ROM", "CIA": "ROM",
    "MXP": "MIL", "LIN": "MIL", "BGY": "MIL",
    "ARN": "STO", "BMA": "STO",
    "SVO": "MOW", "DME": "MOW", "VKO": "MOW",
    "HND": "TYO", "NRT": "TYO",
    "KIX": "OSA", "ITM": "OSA",
    "ICN": "SEL", "GMP": "SEL",
    "PEK": "BJS", "PKX": "BJS",
    "PVG": "SHA",
    "DMK": "BKK",
    "DWC": "DXB",
}

# ────────────────────────────────────────────────────────────────
# 3.  Países (sufixos a remover e moeda principal)
# ────────────────────────────────────────────────────────────────

_RAW_COUNTRY_SUFFIXES = (
    "Brasil", "Brazil", "Portugal", "Espanha", "França", "Itália",
    "Argentina", "Chile", "Estados Unidos", "EUA", "USA",
)

_RAW_COUNTRY_CURRENCIES: Dict[str, str] = {
    "Brasil": "BRL", "Brazil": "BRL",
    "Portugal": "EUR", "Espanha": "EUR", "França": "EUR", "Itália": "EUR",
    "Alemanha": "EUR", "Holanda": "EUR", "Países Baixos": "EUR", "Bélgica": "EUR",
    "Irlanda": "EUR", "Áustria": "EUR", "Grécia": "EUR",
    "Inglaterra": "GBP", "Reino Unido": "GBP", "Escócia": "GBP",
    "Suíça": "CHF", "Turquia": "TRY",
    "Estados Unidos": "USD", "EUA": "USD", "USA": "USD",
    "Canadá": "CAD", "México": "MXN",
    "Argentina": "ARS", "Chile": "CLP", "Uruguai": "UYU", "Paraguai": "PYG",
    "Peru": "PEN", "Colômbia": "COP", "Bolívia": "BOB", "Equador": "USD",
    "Japão": "JPY", "China": "CNY", "Coreia do Sul": "KRW", "Tailândia": "THB",
    "Emirados Árabes": "AED", "Emirados Árabes Unidos": "AED",
    "Egito": "EGP", "Marrocos": "MAD", "África do Sul": "ZAR",
    "Austrália": "AUD", "Nova Zelândia": "NZD", "Índia": "INR",
}


def _freeze(raw: Mapping[str, str], *, normalize_keys: bool = True) -> Mapping[str, str]:
    table: Dict[str, str] = {}
    for key, value in raw.items():
        k = normalize_key(key) if normalize_keys else key.upper()
        if k and k not in table:
            table[k] = value.upper()
    return MappingProxyType(table)


PLACE_ALIASES: Mapping[str, str] = _freeze(_RAW_PLACE_ALIASES)
AIRPORT_TO_CITY: Mapping[str, str] = _freeze(_RAW_AIRPORT_TO_CITY, normalize_keys=False)
COUNTRY_CURRENCIES: Mapping[str, str] = _freeze(_RAW_COUNTRY_CURRENCIES)
COUNTRY_SUFFIXES = tuple(
    sorted({normalize_key(s) for s in _RAW_COUNTRY_SUFFIXES}, key=len, reverse=True)
)

# Destinos com código brasileiro na tabela – usados para adivinhar BRL
DOMESTIC_CODES = frozenset(
    {
        "SAO", "GRU", "CGH", "VCP", "RIO", "GIG", "SDU", "BHZ", "CNF", "BSB",
        "SSA", "REC", "FOR", "NAT", "JPA", "MCZ", "AJU", "THE", "SLZ", "BEL",
        "MAO", "MCP", "BVB", "PVH", "RBR", "PMW", "GYN", "CGB", "CGR", "CWB",
        "FLN", "POA", "VIX", "IGU", "NVT", "JOI", "LDB", "MGF", "RAO", "UDI",
        "BPS", "IOS", "PNZ", "FEN", "STM", "BYO",
    }
)


def prefer_city_code(code: str) -> str:
    """Collapse an airport code to its metro code when one exists."""
    code = code.upper()
    return AIRPORT_TO_CITY.get(code, code)


def guess_currency(text: str, default: str = "USD") -> str:
    """Best-effort ISO 4217 guess for *text* without calling any service."""
    key = normalize_key(text)
    if not key:
        return default
    if key in COUNTRY_CURRENCIES:
        return COUNTRY_CURRENCIES[key]
    for country, code in COUNTRY_CURRENCIES.items():
        if key.endswith(" " + country):
            return code
    head = key.split(" ")
    for n in range(len(head), 0, -1):
        alias = PLACE_ALIASES.get(" ".join(head[:n]))
        if alias:
            return "BRL" if alias in DOMESTIC_CODES else default
    return default


__all__ = [
    "PLACE_ALIASES",
    "AIRPORT_TO_CITY",
    "COUNTRY_CURRENCIES",
    "COUNTRY_SUFFIXES",
    "DOMESTIC_CODES",
    "prefer_city_code",
    "guess_currency",
]
