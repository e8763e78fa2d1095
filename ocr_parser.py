#ocr_parser.py
import re
import logging
from enum import Enum
from typing import List, Optional, Tuple

from ingredient_parser import normalize_ingredients
from recipe_models import ParsedRecipe

# --- Configuration ---
DEFAULT_TITLE = "Imported Recipe"
NO_DIRECTIONS_PLACEHOLDER = "No directions found in scanning. Please add manually."
TITLE_SCAN_LINES = 15
MIN_TITLE_LENGTH = 8        # exclusive
MIN_TITLE_LETTERS = 5       # exclusive
MIN_INGREDIENT_LENGTH = 2   # exclusive
MIN_DIRECTION_LENGTH = 3    # exclusive

# Site branding and metadata lines that sit above the real title on printed cards
BRANDING_PATTERN = re.compile(
    r'half[- \s]*baked|harvest|tieghan|gerard|calories|prep|cook|total|time|servings|recipe', re.IGNORECASE)
TITLE_DECORATION = re.compile(r'^[|—\-\s]+|[|—\-\s]+$')

INGREDIENT_NOISE = re.compile(r'^[^a-zA-Z0-9()¼-¾]+\s*')
DIRECTION_ORDINAL = re.compile(r'^\d+\.?\s*(?:\d+\.?\s*)?')
DIRECTION_BULLET = re.compile(r'^[|•-]\s*')
DIRECTION_STOPWORDS = ('footer', 'http')

METADATA_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ('servings', re.compile(r'servings?:?\s*(\d+)', re.IGNORECASE)),
    ('prep_time', re.compile(r'prep\s*time:?\s*(\d+)', re.IGNORECASE)),
    ('cook_time', re.compile(r'cook\s*time:?\s*(\d+)', re.IGNORECASE)),
]


class Section(Enum):
    NONE = 'none'
    INGREDIENTS = 'ingredients'
    DIRECTIONS = 'directions'


# Checked in order; directions first so an instructions header is never read as ingredients.
SECTION_HEADERS: List[Tuple[re.Pattern, Section]] = [
    (re.compile(r"(directions|instructions|steps|method|how to make)", re.IGNORECASE), Section.DIRECTIONS),
    (re.compile(r"(ingredients|what you'll need|shopping list)", re.IGNORECASE), Section.INGREDIENTS),
]


def split_lines(raw_text: Optional[str]) -> List[str]:
    if not raw_text:
        return []
    return [line.strip() for line in raw_text.split('\n') if line.strip()]


def guess_title(lines: List[str]) -> Tuple[str, Optional[int]]:
    """Returns (title, index of the line it came from). Index is None for the default title."""
    for index, line in enumerate(lines[:TITLE_SCAN_LINES]):
        alpha_only = re.sub(r'[^a-zA-Z]', '', line)
        if (len(line) > MIN_TITLE_LENGTH
                and not BRANDING_PATTERN.search(line)
                and 'http' not in line
                and len(alpha_only) > MIN_TITLE_LETTERS):
            return TITLE_DECORATION.sub('', line).strip(), index
    return DEFAULT_TITLE, None


def next_section(line: str, current: Section) -> Optional[Section]:
    """Section a header line switches to, or None if the line is not a header."""
    for pattern, section in SECTION_HEADERS:
        if not pattern.search(line):
            continue
        if section is Section.INGREDIENTS and current is Section.DIRECTIONS:
            return None
        return section
    return None


def clean_ingredient(line: str) -> Optional[str]:
    cleaned = INGREDIENT_NOISE.sub('', line).strip()
    return cleaned if len(cleaned) > MIN_INGREDIENT_LENGTH else None


def clean_direction(line: str) -> Optional[str]:
    cleaned = DIRECTION_ORDINAL.sub('', line)
    cleaned = DIRECTION_BULLET.sub('', cleaned).strip()
    if len(cleaned) <= MIN_DIRECTION_LENGTH or any(word in cleaned for word in DIRECTION_STOPWORDS):
        return None
    return cleaned


def extract_metadata(lines: List[str]) -> dict:
    """First match per field wins, regardless of section."""
    metadata = {}
    for line in lines:
        for field, pattern in METADATA_PATTERNS:
            if field in metadata:
                continue
            match = pattern.search(line)
            if match:
                metadata[field] = int(match.group(1))
    return metadata


def segment_lines(lines: List[str]) -> Tuple[List[str], List[str]]:
    """Single pass over the lines, threading the current section through."""
    ingredients: List[str] = []
    directions: List[str] = []
    section = Section.NONE

    for line in lines:
        switched_to = next_section(line, section)
        if switched_to is not None:
            section = switched_to
            continue

        if section is Section.INGREDIENTS:
            cleaned = clean_ingredient(line)
            if cleaned:
                ingredients.append(cleaned)
        elif section is Section.DIRECTIONS:
            cleaned = clean_direction(line)
            if cleaned:
                directions.append(cleaned)

    return ingredients, directions


def split_in_half(lines: List[str], title_index: Optional[int]) -> Tuple[List[str], List[str]]:
    """Last resort when no headers were found: first half ingredients, second half directions."""
    skip = title_index if title_index is not None else 0
    body = [line for index, line in enumerate(lines) if index != skip]
    half = (len(body) + 1) // 2
    return body[:half], body[half:]


def extract_ocr_recipe(raw_text: Optional[str]) -> ParsedRecipe:
    """Segments concatenated OCR text into a recipe. Never fails on empty or garbage input."""
    lines = split_lines(raw_text)
    title, title_index = guess_title(lines)
    metadata = extract_metadata(lines)
    ingredients, directions = segment_lines(lines)

    if not ingredients and not directions:
        logging.debug("No section headers recognized in OCR text; splitting lines in half.")
        ingredients, directions = split_in_half(lines, title_index)

    servings = metadata.get('servings')
    return ParsedRecipe(
        title=title,
        ingredients=normalize_ingredients(ingredients),
        directions=directions or [NO_DIRECTIONS_PLACEHOLDER],
        servings=servings if servings else None,
        prep_time=metadata.get('prep_time'),
        cook_time=metadata.get('cook_time'),
    )
