"""
Parser Constants.

This module contains the tables used by the menu parser, the order matcher
and the recommendation scorer: number words, the curated misspelling table,
filler words, combo definitions and preference keyword lists. It also holds
the text normalization helpers every matcher shares.
"""

import re
import unicodedata

# =============================================================================
# Text Normalization
# =============================================================================


def strip_accents(s: str) -> str:
    """Remove diacritics: "café" -> "cafe", "jamón" -> "jamon", "ñ" -> "n"."""
    return "".join(
        c for c in unicodedata.normalize("NFD", s) if unicodedata.category(c) != "Mn"
    )


def normalize_text(s: str) -> str:
    """
    Normalize free text for matching.

    Lowercases, strips accents, turns punctuation (except commas, which
    separate order items) into spaces and collapses whitespace. A minus
    sign directly before a number is kept ("-3") so quantity clamping
    sees it; hyphens inside words ("coca-cola") become spaces.
    """
    s = strip_accents((s or "").lower())
    s = re.sub(r"[^a-z0-9,\s-]", " ", s)
    s = re.sub(r"(?<=[a-z0-9])-|-(?!\d)", " ", s)
    s = re.sub(r"\s*,\s*", ", ", s)
    return re.sub(r"\s+", " ", s).strip(" ,")


def normalize_for_match(s: str) -> str:
    """
    Normalize a string for compact matching.

    Handles variations like:
    - "limonada de coco" matching "limonadadecoco"
    - "tres leches" matching "tresleches"

    Args:
        s: The string to normalize (already passed through normalize_text)

    Returns:
        Normalized string with spaces and commas removed
    """
    return s.replace(",", "").replace(" ", "")


# =============================================================================
# Quantities
# =============================================================================

# Spanish first (the menus and customers are Colombian), English for tourists
WORD_TO_NUM = {
    "un": 1, "una": 1, "uno": 1,
    "dos": 2, "par": 2, "un par": 2, "un par de": 2,
    "tres": 3,
    "cuatro": 4,
    "cinco": 5,
    "seis": 6, "media docena": 6, "media docena de": 6,
    "siete": 7,
    "ocho": 8,
    "nueve": 9,
    "diez": 10,
    "once": 11,
    "doce": 12, "docena": 12, "una docena": 12, "una docena de": 12,
    "a": 1, "an": 1, "one": 1,
    "two": 2, "couple": 2, "a couple": 2, "a couple of": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6, "half dozen": 6, "half a dozen": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "twelve": 12, "dozen": 12, "a dozen": 12,
}


# =============================================================================
# Misspelling Table
# =============================================================================
# Hand-curated variants seen in real WhatsApp orders, keyed by the normalized
# (lowercase, accent-free) misspelling. Applied to whole words only, so
# "chocolat" is corrected but "chocolate" is left alone. Plurals are handled
# by the matcher ("capuchinos" -> "cappuccinos").

TYPO_MAP = {
    "capuchino": "cappuccino",
    "capuccino": "cappuccino",
    "capucino": "cappuccino",
    "cappucino": "cappuccino",
    "capuchinno": "cappuccino",
    "croisant": "croissant",
    "croissan": "croissant",
    "croasan": "croissant",
    "cruasan": "croissant",
    "nutela": "nutella",
    "chocolat": "chocolate",
    "choclate": "chocolate",
    "expreso": "espresso",
    "expresso": "espresso",
    "frape": "frappe",
    "frapee": "frappe",
    "moca": "mocha",
    "limonda": "limonada",
    "hamburgesa": "hamburguesa",
    "amburguesa": "hamburguesa",
    "sanduche": "sandwich",
    "sanwich": "sandwich",
    "brawnie": "brownie",
    "browni": "brownie",
    "cheescake": "cheesecake",
    "tiramizu": "tiramisu",
    "mufin": "muffin",
    "crep": "crepe",
}


# =============================================================================
# Order Utterance Vocabulary
# =============================================================================

# Words that carry no product meaning in an order fragment
ORDER_FILLER_WORDS = {
    "quiero", "quisiera", "queremos", "deseo", "dame", "deme", "regalame",
    "me", "das", "da", "puedes", "podrias", "traer", "traes", "pedir",
    "ordenar", "gustaria", "porfa", "por", "favor", "hola", "buenas",
    "el", "la", "los", "las", "lo", "unos", "unas", "tambien", "otra", "otro",
    "para", "mi", "nos", "y", "e", "de", "del", "con", "al", "en",
    "i", "want", "would", "like", "please", "the", "some", "also", "and",
    "get", "can", "have", "of",
}

# Connector words ignored when comparing fragment tokens to item names
CONNECTOR_WORDS = {"de", "del", "con", "y", "e", "al", "a", "la", "el", "en", "sin", "of", "with", "and"}


# =============================================================================
# Menu Text Vocabulary
# =============================================================================

# Markers that indicate a wings restaurant whose combo prices are compressed
# onto trailing lines (see PositionalComboStrategy)
COMBO_MENU_KEYWORD = "combo"
COMBO_MENU_EMOJIS = ("\U0001F357",)  # poultry leg

# Fixed combo table, in the order the wings menus list their prices.
# Positional: the Nth price found in the text belongs to the Nth combo here.
COMBO_DEFINITIONS = [
    {"name": "Combo 1", "description": "{wings} alitas + acompañante + salsas", "wings": 5},
    {"name": "Combo 2", "description": "{wings} alitas + acompañante + salsas", "wings": 7},
    {"name": "Combo 3", "description": "{wings} alitas + acompañante + salsas", "wings": 9},
    {"name": "Combo Emparejado", "description": "{wings} alitas + 2 acompañantes + salsas", "wings": 14},
    {"name": "Combo Familiar 1", "description": "{wings} alitas + 2 acompañantes + salsas + gaseosa", "wings": 20},
    {"name": "Combo Familiar 2", "description": "{wings} alitas + 3 acompañantes + salsas + gaseosa", "wings": 30},
]


# =============================================================================
# Recommendation Vocabulary
# =============================================================================

# Budget option text -> (min, max)
BUDGET_OPTION_RANGES = {
    "Menos de $15,000": (0, 15000),
    "$15,000 - $25,000": (15000, 25000),
    "$25,000 - $40,000": (25000, 40000),
    "$40,000 - $60,000": (40000, 60000),
    "Más de $60,000": (60000, 999999),
}
DEFAULT_BUDGET_RANGE = (0, 50000)
OPEN_BUDGET_MAX = 999999

# Dietary answers that mean "no restriction"
NO_RESTRICTION_ANSWERS = {"ninguna", "ninguno", "none", "no", "nada"}

# Restriction keyword (normalized) -> substrings that disqualify an item
DIETARY_EXCLUSIONS = {
    "vegetariano": ["carne", "pollo", "cerdo"],
    "vegano": ["carne", "pollo", "cerdo", "queso", "leche", "huevo"],
    "sin gluten": ["pan", "pasta", "harina", "trigo"],
    "sin lactosa": ["queso", "leche", "crema"],
    "halal": ["cerdo", "tocino"],
    "kosher": ["cerdo", "tocino", "camaron"],
}

# Meal type (normalized answer) -> keywords that make an item fit
MEAL_TYPE_KEYWORDS = {
    "desayuno": ["cafe", "huevo", "pan"],
    "almuerzo": ["arroz", "pollo", "carne"],
    "cena": ["pasta", "carne", "pescado"],
    "snack/merienda": ["muffin", "croissant", "galleta", "torta", "jugo"],
}

MEAL_TYPE_REASONS = {
    "desayuno": "Perfecto para desayuno",
    "almuerzo": "Ideal para almuerzo",
    "cena": "Ideal para cenar",
    "snack/merienda": "Buena opción para merendar",
}

ROMANTIC_KEYWORDS = ["pasta", "vino"]

# Fallback price ceiling for work meetings when no budget was given
WORK_MEETING_PRICE_CEILING = 30000
