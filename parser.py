#parser.py
import json
import re
import logging
from functools import singledispatch
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from ingredient_parser import normalize_ingredients
from recipe_models import ParsedRecipe

# --- Configuration ---
HTML_PARSER = 'lxml'
DEFAULT_TITLE = "Untitled Recipe"
NO_DIRECTIONS_PLACEHOLDER = "No directions found. Please add them manually."
MAX_INGREDIENT_LENGTH = 200     # longer candidates picked up a container, not a list item
MAX_DIRECTION_LENGTH = 1000

# Ordered selector tables; earlier entries win for single-valued fields
TITLE_SELECTORS = ['h1', '[class*="recipe-title"]', '[class*="entry-title"]']
INGREDIENT_SELECTORS = [
    '.recipe-ingredients li',
    '.ingredients li',
    '[class*="ingredient"] li',
    '.wprm-recipe-ingredient',
    '.tasty-recipe-ingredients li',
]
DIRECTION_SELECTORS = [
    '.recipe-instructions li',
    '.directions li',
    '[class*="instruction"] li',
    '.wprm-recipe-instruction',
    '.tasty-recipe-instructions li',
    '[class*="step"]',
]
SERVINGS_SELECTORS = ['[class*="serving"]', '[class*="yield"]']
IMAGE_SELECTORS = [
    ('[class*="recipe"] img, [class*="featured"] img', 'src'),
    ('img[class*="wp-post-image"]', 'src'),
    ('meta[property="og:image"]', 'content'),
]
DIRECTION_LABEL = re.compile(r'^(instructions?|directions?):?$', re.IGNORECASE)
ISO_DURATION = re.compile(r'PT(?:(\d+)H)?(?:(\d+)M)?')


# --- Helper Functions ---

def make_soup(html_content: str) -> BeautifulSoup:
    return BeautifulSoup(html_content or "", HTML_PARSER)


def clean_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace to single spaces and strip."""
    if not text:
        return ""
    return re.sub(r'\s+', ' ', text).strip()


def absolute_url(url: Any, source_url: Optional[str]) -> Optional[str]:
    """Resolve a possibly relative URL against the page it came from. None if it stays relative."""
    if not isinstance(url, str) or not url or url.startswith('data:'):
        return None
    if url.startswith('http'):
        return url
    resolved = urljoin(source_url or "", url)
    parsed = urlparse(resolved)
    if not parsed.scheme or not parsed.netloc:
        return None
    return resolved


def parse_duration_minutes(time_str: Any) -> Optional[int]:
    """ISO 8601 duration (PT1H30M) to total minutes. None when it does not match."""
    if not isinstance(time_str, str) or not time_str:
        return None
    match = ISO_DURATION.search(time_str)
    if not match:
        return None
    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    return hours * 60 + minutes


def parse_servings(yield_val: Any) -> Optional[int]:
    """recipeYield may be a number, a string like '4 servings', or a list of either."""
    if isinstance(yield_val, bool) or not yield_val:
        return None
    if isinstance(yield_val, (int, float)):
        servings = int(yield_val)
    elif isinstance(yield_val, str):
        match = re.search(r'(\d+)', yield_val)
        servings = int(match.group(1)) if match else None
    elif isinstance(yield_val, list):
        return parse_servings(yield_val[0])
    else:
        return None
    return servings if servings and servings > 0 else None


def parse_keywords(keywords: Any) -> Optional[List[str]]:
    if isinstance(keywords, list):
        return [k for k in keywords if isinstance(k, str)]
    if isinstance(keywords, str) and keywords:
        return [k.strip() for k in keywords.split(',') if k.strip()]
    return None


def parse_image(img_data: Any) -> Optional[str]:
    """image may be a URL string, an ImageObject, or a list of either. Only string URLs count."""
    if isinstance(img_data, list):
        img_data = img_data[0] if img_data else None
    if isinstance(img_data, dict):
        img_data = img_data.get('url')
    if isinstance(img_data, str) and img_data:
        return img_data
    return None


# --- Instruction Flattening ---

@singledispatch
def flatten_instructions(node: Any) -> List[str]:
    """One recipeInstructions entry -> step strings. Unknown node types, nested lists included, contribute nothing."""
    return []


@flatten_instructions.register
def _(node: str) -> List[str]:
    step = node.strip()
    return [step] if step else []


@flatten_instructions.register
def _(node: dict) -> List[str]:
    text = node.get('text')
    if isinstance(text, str) and text.strip():
        return [text.strip()]
    if node.get('@type') == 'HowToSection':
        return flatten_step_list(node.get('itemListElement'))
    return []


def flatten_step_list(nodes: Any) -> List[str]:
    if not isinstance(nodes, list):
        return []
    steps = []
    for node in nodes:
        steps.extend(flatten_instructions(node))
    return steps


def parse_directions(instructions: Any) -> List[str]:
    # A single string often carries every step separated by newlines
    if isinstance(instructions, str):
        return [step.strip() for step in re.split(r'\n+', instructions) if step.strip()]
    return flatten_step_list(instructions)


# --- Extraction Strategies ---

def is_recipe_type(item_type: Any) -> bool:
    if isinstance(item_type, str):
        return item_type == 'Recipe'
    return isinstance(item_type, list) and 'Recipe' in item_type


def _find_recipe_node(data: Any) -> Optional[Dict[str, Any]]:
    """First Recipe object in a JSON-LD payload: the object itself, or its @graph."""
    items = data if isinstance(data, list) else [data]
    for item in items:
        if not isinstance(item, dict):
            continue
        if is_recipe_type(item.get('@type')):
            return item
        graph = item.get('@graph')
        if isinstance(graph, list):
            for node in graph:
                if isinstance(node, dict) and is_recipe_type(node.get('@type')):
                    return node
    return None


def _recipe_from_json_ld(item: Dict[str, Any], source_url: str) -> ParsedRecipe:
    ingredients = item.get('recipeIngredient') or []
    if not isinstance(ingredients, list):
        ingredients = [ingredients]
    name = item.get('name')
    return ParsedRecipe(
        title=clean_text(name) if isinstance(name, str) and clean_text(name) else DEFAULT_TITLE,
        ingredients=normalize_ingredients(ing for ing in ingredients if isinstance(ing, str)),
        directions=parse_directions(item.get('recipeInstructions') or []) or [NO_DIRECTIONS_PLACEHOLDER],
        prep_time=parse_duration_minutes(item.get('prepTime')),
        cook_time=parse_duration_minutes(item.get('cookTime')),
        servings=parse_servings(item.get('recipeYield')),
        source_url=source_url,
        tags=parse_keywords(item.get('keywords')),
        image_url=absolute_url(parse_image(item.get('image')), source_url),
    )


def extract_structured_recipe(soup: BeautifulSoup, source_url: str) -> Optional[ParsedRecipe]:
    """Extracts a recipe from JSON-LD script tags (Schema.org). None when no Recipe object is present."""
    try:
        for script in soup.find_all('script', type='application/ld+json'):
            script_content = script.string
            if not script_content:
                continue
            try:
                data = json.loads(script_content)
            except (json.JSONDecodeError, TypeError):
                logging.debug("Failed to parse JSON-LD script content.", exc_info=True)
                continue

            item = _find_recipe_node(data)
            if item is not None:
                return _recipe_from_json_ld(item, source_url)
    except Exception as e:
        logging.error(f"Error during JSON-LD extraction for {source_url}: {e}", exc_info=True)
    return None


def _select_texts(soup: BeautifulSoup, selectors: List[str]) -> List[str]:
    """Union of all selector matches in document order, whitespace collapsed."""
    return [clean_text(el.get_text()) for el in soup.select(', '.join(selectors))]


def _first_text(soup: BeautifulSoup, selectors: List[str]) -> str:
    for selector in selectors:
        element = soup.select_one(selector)
        if element:
            text = clean_text(element.get_text())
            if text:
                return text
    return ""


def _first_image(soup: BeautifulSoup, source_url: str) -> Optional[str]:
    for selector, attr in IMAGE_SELECTORS:
        element = soup.select_one(selector)
        if element and element.get(attr):
            return absolute_url(element[attr], source_url)
    return None


def extract_heuristic_recipe(soup: BeautifulSoup, source_url: str) -> ParsedRecipe:
    """Fallback for pages without structured data. Always returns a recipe."""
    title = _first_text(soup, TITLE_SELECTORS) or DEFAULT_TITLE

    ingredients = [text for text in _select_texts(soup, INGREDIENT_SELECTORS)
                   if 0 < len(text) < MAX_INGREDIENT_LENGTH]
    directions = [text for text in _select_texts(soup, DIRECTION_SELECTORS)
                  if text and not DIRECTION_LABEL.match(text) and len(text) < MAX_DIRECTION_LENGTH]

    servings = None
    servings_element = soup.select_one(', '.join(SERVINGS_SELECTORS))
    if servings_element:
        servings = parse_servings(servings_element.get_text())

    if not directions:
        logging.debug(f"No directions matched for {source_url}; using placeholder.")

    return ParsedRecipe(
        title=title,
        ingredients=normalize_ingredients(ingredients),
        directions=directions or [NO_DIRECTIONS_PLACEHOLDER],
        servings=servings,
        source_url=source_url,
        image_url=_first_image(soup, source_url),
    )
