#ingredient_parser.py
import re
from typing import Iterable, List, Optional, Tuple

from recipe_models import Ingredient

# --- Configuration ---
COMMON_UNITS = {
    'cup', 'cups', 'tablespoon', 'tablespoons', 'tbsp', 'tbsps', 'teaspoon', 'teaspoons', 'tsp', 'tsps',
    'ounce', 'ounces', 'oz', 'pound', 'pounds', 'lb', 'lbs', 'gram', 'grams', 'g', 'kilogram', 'kilograms', 'kg',
    'milliliter', 'milliliters', 'ml', 'liter', 'liters', 'l', 'pinch', 'pinches', 'dash', 'dashes', 'clove', 'cloves',
    'can', 'cans', 'package', 'packages', 'pkg', 'container', 'containers', 'jar', 'jars', 'bottle', 'bottles',
    'slice', 'slices', 'piece', 'pieces', 'head', 'heads', 'bunch', 'bunches', 'sprig', 'sprigs', 'stalk', 'stalks',
    'ear', 'ears', 'inch', 'inches', 'stick', 'sticks', 'quart', 'quarts', 'qt', 'pint', 'pints', 'pt',
}

# Two-word units, checked before single words
COMPOUND_UNITS = {
    'fl oz', 'fluid oz', 'fluid ounce', 'fluid ounces',
}

LEADING_INDEX_NOISE = re.compile(r'^(?:[A-Z|]|\d{1,2}[.,])\s+')   # "E ", "| ", "3. "
LEADING_SYMBOL_NOISE = re.compile(r'^[^a-zA-Z\d()¼-¾]+\s*')         # bullets, dashes, boxes
AMOUNT_PATTERN = re.compile(r'^(\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)?\s*')


def clean_ingredient_line(line: Optional[str]) -> str:
    """Strip OCR/bullet noise from the front of a line and collapse whitespace."""
    if not line:
        return ""
    cleaned = LEADING_INDEX_NOISE.sub('', line.strip())
    cleaned = LEADING_SYMBOL_NOISE.sub('', cleaned)
    return re.sub(r'\s+', ' ', cleaned).strip()


def _unit_key(words: List[str]) -> str:
    return " ".join(words).lower().replace('.', '').replace(',', '')


def split_unit(text: str) -> Tuple[str, str]:
    """Returns (unit, remainder). Unit keeps the source spelling."""
    words = text.split(' ') if text else []
    if len(words) > 1 and _unit_key(words[:2]) in COMPOUND_UNITS:
        return " ".join(words[:2]), " ".join(words[2:])
    if words and _unit_key(words[:1]) in COMMON_UNITS:
        return words[0], " ".join(words[1:])
    return "", text


def parse_ingredient_line(line: Optional[str]) -> Ingredient:
    """Best effort parse of one free-text line. Never fails."""
    cleaned = clean_ingredient_line(line)

    amount = ""
    remaining = cleaned
    match = AMOUNT_PATTERN.match(cleaned)
    if match and match.group(1):
        amount = match.group(1).strip()
        remaining = cleaned[match.end():].strip()

    unit, remaining = split_unit(remaining)

    name = remaining.strip() or cleaned
    name = name[:1].upper() + name[1:]
    return Ingredient(name=name, amount=amount, unit=unit)


def normalize_ingredients(lines: Iterable[Optional[str]]) -> List[Ingredient]:
    """Normalize every line. Empty lines are kept; callers filter upstream."""
    return [parse_ingredient_line(line) for line in lines]


def parse_ingredient_text(text: Optional[str]) -> List[Ingredient]:
    """Bulk interface: one ingredient per non-blank line of pasted text."""
    if not text:
        return []
    lines = [line.strip() for line in text.split('\n') if line.strip()]
    return normalize_ingredients(lines)
