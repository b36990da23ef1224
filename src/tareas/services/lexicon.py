"""Static lookup tables for the rule-based task parser.

Iteration order of the keyword dictionaries is significant: the category
detector returns the first entry that matches, so entries are listed in the
order they must be tried.
"""

import re

# Top-level categories and the lowercase phrases that trigger them
CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "Instachef": ["instachef", "insta chef", "ic"],
    "Omme": ["omme"],
    "Antai": ["antai"],
    "Antai General": ["antai general"],
    "Antai Admin": ["antai admin", "admin antai"],
    "Opportunity Circle": ["opportunity circle", "opp circle", "oc"],
    "EBISU": ["ebisu"],
    "Personal": ["personal", "yo", "casa"],
}

# Contextual sub-categories appended under a category
SUBCATEGORY_KEYWORDS: dict[str, list[str]] = {
    "Constitución": ["constitución", "constitucion", "legal"],
    "Documentación": ["documentación", "documentacion", "docs", "doc"],
    "Inversores": ["inversores", "investors", "coinversores"],
    "Recetas": ["recetas", "recipes"],
    "Marketing": ["marketing", "mkt"],
    "Producto": ["producto", "product"],
    "Tech": ["tech", "desarrollo", "dev"],
    "Finanzas": ["finanzas", "finance", "contabilidad"],
    "RRHH": ["rrhh", "hr", "equipo", "team"],
    "Operaciones": ["operaciones", "ops"],
}

# (task type, trigger patterns); tried in order against the raw text
TASK_TYPE_PATTERNS: list[tuple[str, list[re.Pattern[str]]]] = [
    (
        "email",
        [
            re.compile(r"\bcorreo\b", re.IGNORECASE),
            re.compile(r"\bresponder\b", re.IGNORECASE),
            re.compile(r"\bmail\b", re.IGNORECASE),
            re.compile(r"\bemail\b", re.IGNORECASE),
            re.compile(r"\benviar\b", re.IGNORECASE),
            re.compile(r"\bcontestar\b", re.IGNORECASE),
        ],
    ),
    (
        "intro",
        [
            re.compile(r"\bintro\b", re.IGNORECASE),
            re.compile(r"\bpresentar\b", re.IGNORECASE),
            re.compile(r"\bconectar\b", re.IGNORECASE),
            re.compile(r"\b<>\b"),
            re.compile(r"\bintroducir\b", re.IGNORECASE),
        ],
    ),
    (
        "call",
        [
            re.compile(r"\bllamar\b", re.IGNORECASE),
            re.compile(r"\bllamada\b", re.IGNORECASE),
            re.compile(r"\bcall\b", re.IGNORECASE),
            re.compile(r"\bhablar con\b", re.IGNORECASE),
        ],
    ),
    (
        "meeting",
        [
            re.compile(r"\breunión\b", re.IGNORECASE),
            re.compile(r"\breunion\b", re.IGNORECASE),
            re.compile(r"\bmeeting\b", re.IGNORECASE),
            re.compile(r"\bjunta\b", re.IGNORECASE),
        ],
    ),
    (
        "doc",
        [
            re.compile(r"\bdoc\b", re.IGNORECASE),
            re.compile(r"\bdocumento\b", re.IGNORECASE),
            re.compile(r"\bdocumentación\b", re.IGNORECASE),
            re.compile(r"\bplan\b", re.IGNORECASE),
            re.compile(r"\bescribir\b", re.IGNORECASE),
            re.compile(r"\bredactar\b", re.IGNORECASE),
        ],
    ),
    (
        "review",
        [
            re.compile(r"\brevisar\b", re.IGNORECASE),
            re.compile(r"\breview\b", re.IGNORECASE),
            re.compile(r"\bchequear\b", re.IGNORECASE),
            re.compile(r"\bverificar\b", re.IGNORECASE),
        ],
    ),
    (
        "research",
        [
            re.compile(r"\binvestigar\b", re.IGNORECASE),
            re.compile(r"\bresearch\b", re.IGNORECASE),
            re.compile(r"\bbuscar\b", re.IGNORECASE),
            re.compile(r"\blista\b", re.IGNORECASE),
        ],
    ),
]

# Generic action verbs; a hit means "some task" without a specific type
ACTION_VERBS = [
    "acabar",
    "terminar",
    "completar",
    "hacer",
    "crear",
    "preparar",
    "enviar",
    "responder",
    "llamar",
    "revisar",
    "actualizar",
    "subir",
    "bajar",
    "descargar",
    "compartir",
    "organizar",
    "programar",
    "agendar",
]

TASK_TYPE_LABELS: dict[str, str] = {
    "email": "Correo",
    "intro": "Intro",
    "doc": "Documento",
    "research": "Investigar",
    "call": "Llamada",
    "meeting": "Reunión",
    "review": "Revisar",
    "other": "Otro",
}

# Common Spanish first names
KNOWN_NAMES = frozenset([
    "alba", "marta", "carlos", "miguel", "david", "pablo", "jorge", "antonio",
    "jose", "francisco", "manuel", "juan", "pedro", "luis", "javier", "rafael",
    "fernando", "sergio", "daniel", "alejandro", "maria", "carmen", "ana", "laura",
    "cristina", "elena", "isabel", "patricia", "rosa", "lucia", "sara", "paula",
    "sofia", "andrea", "raquel", "silvia", "nuria", "eva", "beatriz", "ines",
])

STOPWORDS = frozenset([
    "de", "la", "el", "los", "las", "un", "una", "y", "o", "que", "en", "con",
    "para", "por", "al", "del", "se", "su", "es", "si", "no", "como", "más",
])


def _keyword_vocabulary() -> frozenset[str]:
    words: set[str] = set()
    for table in (CATEGORY_KEYWORDS, SUBCATEGORY_KEYWORDS):
        for name, keywords in table.items():
            words.add(name.lower())
            words.update(keywords)
    return frozenset(words)


# Tokens that never count as entities
ENTITY_SKIP_WORDS = STOPWORDS | _keyword_vocabulary()

MONTH_NAMES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]

MONTH_ABBREVIATIONS = [
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sept", "oct", "nov", "dic",
]

# Date phrase rules; tried in order, first match wins.
# kind: "offset" (days from today), "weekday" (0=Monday), "end_of_month",
# "numeric" (DD/MM[/YY]), "month_name" (DD [de] <mes>)
DATE_RULES: list[tuple[re.Pattern[str], str, int]] = [
    (re.compile(r"\bhoy\b", re.IGNORECASE), "offset", 0),
    (re.compile(r"\bmañana\b", re.IGNORECASE), "offset", 1),
    (re.compile(r"\bpasado mañana\b", re.IGNORECASE), "offset", 2),
    (re.compile(r"\beste lunes\b", re.IGNORECASE), "weekday", 0),
    (re.compile(r"\beste martes\b", re.IGNORECASE), "weekday", 1),
    (re.compile(r"\beste miércoles\b", re.IGNORECASE), "weekday", 2),
    (re.compile(r"\beste jueves\b", re.IGNORECASE), "weekday", 3),
    (re.compile(r"\beste viernes\b", re.IGNORECASE), "weekday", 4),
    (re.compile(r"\besta semana\b", re.IGNORECASE), "offset", 7),
    (re.compile(r"\bpróxima semana\b", re.IGNORECASE), "offset", 14),
    (re.compile(r"\bfin de mes\b", re.IGNORECASE), "end_of_month", 0),
    (re.compile(r"\b(\d{1,2})[/\-](\d{1,2})(?:[/\-](\d{2,4}))?\b"), "numeric", 0),
    (
        re.compile(
            r"\b(\d{1,2})\s+(?:de\s+)?(" + "|".join(MONTH_NAMES) + r")\b",
            re.IGNORECASE,
        ),
        "month_name",
        0,
    ),
]
