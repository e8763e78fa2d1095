#recipe_import.py
import os
import re
import csv
import json
import time
import logging
import argparse
from pathlib import Path
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

from tqdm import tqdm

from ingredient_parser import parse_ingredient_text  # noqa: F401  bulk ingredient entry point
from ocr_parser import extract_ocr_recipe
from parser import extract_heuristic_recipe, extract_structured_recipe, make_soup
from recipe_models import Ingredient, ParsedRecipe

# --- Configuration ---
INPUT_DIR = "./bodies"                      # Saved HTML pages (*.html) and OCR text (*.txt)
OUTPUT_JSON_FILE = "recipes.json"
OUTPUT_CSV_FILE = "recipes.csv"
MAX_WORKERS = os.cpu_count()
LOG_FILE = "recipe_import.log"
LOG_LEVEL = logging.INFO
MIN_HTML_LENGTH = 150

CSV_COLUMNS = ['title', 'ingredients', 'directions', 'servings', 'prepTime', 'cookTime',
               'tags', 'imageUrl', 'sourceUrl', 'sourceFile']

GENERIC_ERROR_MESSAGE = "An unexpected error occurred while parsing the recipe."
TIMEOUT_MESSAGE = "The request timed out. The website might be slow or blocking our connection."
ACCESS_DENIED_MESSAGE = "Access was denied by the website. This site has strong anti-bot protections."
OCR_FAILURE_MESSAGE = "Failed to extract text from images. Please ensure they are clear photos of a recipe."


# --- Errors ---

class RecipeImportError(Exception):
    """Base class for errors surfaced to callers of the import pipeline."""


class InvalidSourceUrl(RecipeImportError, ValueError):
    pass


class UpstreamError(RecipeImportError):
    """A fetch or OCR collaborator failed. The extractors themselves never raise this."""

    def __init__(self, message: str, source: str = "fetch"):
        super().__init__(message)
        self.source = source


def validate_source_url(url: Optional[str]) -> str:
    if not url or not url.strip():
        raise InvalidSourceUrl("URL is required")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise InvalidSourceUrl(f"Invalid URL format: {url}")
    return url


def describe_upstream_error(error: BaseException) -> str:
    """Human-readable message for a collaborator failure."""
    if isinstance(error, UpstreamError) and error.source == 'ocr':
        return OCR_FAILURE_MESSAGE
    text = str(error)
    lowered = text.lower()
    if isinstance(error, TimeoutError) or 'timeout' in lowered or 'timed out' in lowered:
        return TIMEOUT_MESSAGE
    if '403' in text or 'denied' in lowered:
        return ACCESS_DENIED_MESSAGE
    return text or GENERIC_ERROR_MESSAGE


# --- Pipeline ---

def parse_recipe_from_html(html_content: str, source_url: str) -> ParsedRecipe:
    """Structured data first, DOM heuristics otherwise."""
    soup = make_soup(html_content)
    recipe = extract_structured_recipe(soup, source_url)
    if recipe is not None:
        logging.debug(f"Extracted recipe from JSON-LD: {source_url}")
        return recipe
    logging.debug(f"No JSON-LD recipe found, falling back to HTML heuristics: {source_url}")
    return extract_heuristic_recipe(soup, source_url)


def parse_recipe_from_ocr_text(text: str) -> ParsedRecipe:
    return extract_ocr_recipe(text)


def parse_recipe_from_ocr_texts(texts: Iterable[str]) -> ParsedRecipe:
    """Per-image OCR text, joined in the given order. Title guessing depends on that order."""
    combined_text = "".join(f"{text}\n" for text in texts if text)
    return extract_ocr_recipe(combined_text)


# --- Batch Processing ---

class TqdmLoggingHandler(logging.Handler):

    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg)
        except Exception:
            self.handleError(record)


def setup_logging(log_file: str = LOG_FILE, level: int = LOG_LEVEL) -> None:
    formatter = logging.Formatter('%(asctime)s - %(process)d - %(levelname)s - %(message)s')
    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setFormatter(formatter)
    console_handler = TqdmLoggingHandler()
    console_handler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers = [file_handler, console_handler]


def source_url_from_filename(file_path: Path) -> str:
    """Saved pages are named after their URL, e.g. https___example.com_recipes_x.html."""
    url_match = re.match(r'^(https?)___([^_/?#]+)', file_path.name)
    if not url_match:
        return ""
    return f"{url_match.group(1)}://{url_match.group(2)}"


def process_file(file_path: Path) -> Optional[Dict[str, Any]]:
    """Reads an HTML page or an OCR text file and extracts one recipe from it."""
    try:
        try: content = file_path.read_text(encoding='utf-8')
        except UnicodeDecodeError:
            logging.warning(f"UTF-8 decode failed for {file_path}, trying with errors='ignore'")
            content = file_path.read_text(encoding='utf-8', errors='ignore')

        if file_path.suffix.lower() == '.txt':
            if not content.strip():
                logging.warning(f"OCR text file is empty: {file_path}"); return None
            recipe = parse_recipe_from_ocr_text(content)
        else:
            lowered = content.lower()
            if len(content) < MIN_HTML_LENGTH or not ("<html" in lowered or "<body" in lowered):
                logging.warning(f"File is empty or lacks basic HTML structure: {file_path}"); return None
            recipe = parse_recipe_from_html(content, source_url_from_filename(file_path))

        result = recipe.to_dict()
        result['sourceFile'] = str(file_path)
        logging.info(f"Successfully extracted recipe: {recipe.title} from {file_path}")
        return result
    except FileNotFoundError: logging.error(f"File not found: {file_path}"); return None
    except OSError as e: logging.error(f"Error reading file {file_path}: {e}", exc_info=True); return None


def find_input_files(input_dir: Path) -> List[Path]:
    patterns = ['*.[hH][tT][mM]', '*.[hH][tT][mM][lL]', '*.[tT][xX][tT]']
    files = []
    for pattern in patterns:
        files.extend(input_dir.rglob(pattern))
    return sorted(files)


def _csv_value(key: str, value: Any) -> Any:
    if value is None:
        return ''
    if key == 'ingredients':
        return '\n'.join(Ingredient(**ing).render() for ing in value)
    if isinstance(value, list):
        return '\n'.join(map(str, value))
    return value


def save_to_json(recipes: List[Dict[str, Any]], json_path: Path) -> None:
    try:
        json_path.write_text(json.dumps(recipes, indent=4, ensure_ascii=False), encoding='utf-8')
        logging.info(f"Recipes saved to JSON: {json_path.resolve()}")
    except IOError as e: logging.error(f"Failed to write JSON file {json_path}: {e}", exc_info=True)


def save_to_csv(recipes: List[Dict[str, Any]], csv_path: Path, headers: List[str] = CSV_COLUMNS) -> None:
    """Saves recipes to CSV; list fields become newline-separated cells."""
    logging.info(f"Attempting to save {len(recipes)} recipes to CSV: {csv_path}")
    try:
        with open(csv_path, 'w', newline='', encoding='utf-8') as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=headers, quoting=csv.QUOTE_MINIMAL, extrasaction='ignore')
            writer.writeheader(); rows_written = 0
            for recipe in recipes:
                row_data = {header: _csv_value(header, recipe.get(header)) for header in headers}
                try: writer.writerow(row_data); rows_written += 1
                except csv.Error as write_err: logging.error(f"CSV write failed for recipe '{recipe.get('title', 'N/A')}': {write_err}", exc_info=True)
            logging.info(f"Successfully saved {rows_written} recipes to CSV: {csv_path}")
    except IOError as e: logging.error(f"Failed to write CSV file {csv_path}: {e}", exc_info=True)


def run_batch(input_dir: Path, json_path: Path, csv_path: Path, max_workers: Optional[int] = MAX_WORKERS) -> List[Dict[str, Any]]:
    """Extracts every file under input_dir in parallel and writes JSON and CSV exports."""
    files = find_input_files(input_dir)
    logging.info(f"Found {len(files)} files to process in {input_dir.resolve()}")
    if not files:
        logging.warning("No HTML or text files found in the input directory."); return []

    all_recipes = []; files_successful = 0; files_skipped = 0; files_failed = 0; start_time = time.time()

    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(process_file, file_path): file_path for file_path in files}
        for future in tqdm(as_completed(futures), total=len(futures), desc="Extracting", unit="file"):
            file_path = futures[future]
            try:
                result = future.result()
                if result: all_recipes.append(result); files_successful += 1
                else: files_skipped += 1
            except Exception as e: files_failed += 1; logging.error(f"Unhandled exception processing {file_path}: {e}", exc_info=True)

    duration = time.time() - start_time
    logging.info("-" * 30); logging.info(f"Extraction finished in {duration:.2f} seconds."); logging.info(f"Successfully extracted recipes: {files_successful}"); logging.info(f"Files skipped (empty/not HTML): {files_skipped}"); logging.info(f"Files failed (errors during processing): {files_failed}"); logging.info("-" * 30)

    if all_recipes:
        all_recipes.sort(key=lambda x: x.get('title', '').lower())
        save_to_json(all_recipes, json_path)
        save_to_csv(all_recipes, csv_path)
    else:
        logging.warning("No recipes were extracted. No output files created.")
    return all_recipes


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract recipes from saved HTML pages and OCR text files.")
    parser.add_argument("--input-dir", default=INPUT_DIR, help="Directory with *.html pages and *.txt OCR text")
    parser.add_argument("--json-out", default=OUTPUT_JSON_FILE)
    parser.add_argument("--csv-out", default=OUTPUT_CSV_FILE)
    parser.add_argument("--workers", type=int, default=MAX_WORKERS, help="Number of parallel processes")
    parser.add_argument("--log-file", default=LOG_FILE)
    parser.add_argument("--log-level", default=logging.getLevelName(LOG_LEVEL), choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_file, getattr(logging, args.log_level))

    input_dir = Path(args.input_dir)
    if not input_dir.is_dir():
        logging.error(f"Input directory not found or is not a directory: {input_dir.resolve()}")
        return 1

    run_batch(input_dir, Path(args.json_out), Path(args.csv_out), args.workers)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
