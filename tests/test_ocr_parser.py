from ocr_parser import (
    NO_DIRECTIONS_PLACEHOLDER,
    Section,
    clean_direction,
    extract_ocr_recipe,
    guess_title,
    next_section,
    segment_lines,
    split_lines,
)

CARD = """
HALF BAKED HARVEST
| Grandma's Apple Pie —
Prep Time: 20 mins   Cook Time: 45 mins
Servings: 8
Ingredients
• 2 cups flour
E 1 cup butter, cold
~~
* 6 apples, sliced
Instructions
1. Preheat the oven to 400F.
2. 1. Roll out the dough.
- Fill with apples and bake.
ok
www.footer-site.com footer
"""


def test_full_card():
    recipe = extract_ocr_recipe(CARD)
    assert recipe.title == "Grandma's Apple Pie"
    assert recipe.prep_time == 20
    assert recipe.cook_time == 45
    assert recipe.servings == 8
    assert [(i.amount, i.unit, i.name) for i in recipe.ingredients] == [
        ("2", "cups", "Flour"),
        ("1", "cup", "Butter, cold"),
        ("6", "", "Apples, sliced"),
    ]
    assert recipe.directions == [
        "Preheat the oven to 400F.",
        "Roll out the dough.",
        "Fill with apples and bake.",
    ]


def test_simple_sections():
    recipe = extract_ocr_recipe("MY RECIPE\nIngredients\n1 cup flour\nDirections\nMix well")
    # "recipe" is a branding keyword, so the first line that qualifies is the header
    assert recipe.title == "Ingredients"
    [flour] = recipe.ingredients
    assert (flour.amount, flour.unit, flour.name) == ("1", "cup", "Flour")
    assert recipe.directions == ["Mix well"]


def test_title_keeps_case_and_strips_decoration():
    title, index = guess_title(["abc", "-- Chicken Tikka Masala |", "Ingredients"])
    assert title == "Chicken Tikka Masala"
    assert index == 1


def test_title_skips_branding_urls_and_short_lines():
    lines = ["Recipe by Someone", "http://example.com/x", "Calories 300", "12345678901", "Lemon Tart"]
    assert guess_title(lines) == ("Lemon Tart", 4)


def test_title_only_looks_at_first_fifteen_lines():
    lines = ["x"] * 15 + ["Late Title Here"]
    assert guess_title(lines) == ("Imported Recipe", None)


def test_directions_lock_ignores_ingredient_header():
    text = "\n".join([
        "Weeknight Noodles",
        "Instructions",
        "Boil the noodles for ten minutes.",
        "Toss with the ingredients from the pantry.",
        "Ingredients",
        "Serve hot.",
    ])
    recipe = extract_ocr_recipe(text)
    assert recipe.ingredients == []
    # once in directions, an ingredient header is ordinary step text
    assert recipe.directions == [
        "Boil the noodles for ten minutes.",
        "Toss with the ingredients from the pantry.",
        "Ingredients",
        "Serve hot.",
    ]


def test_direction_header_checked_before_ingredient_header():
    assert next_section("Ingredients & Instructions", Section.NONE) is Section.DIRECTIONS
    assert next_section("Ingredients", Section.NONE) is Section.INGREDIENTS
    assert next_section("Ingredients", Section.DIRECTIONS) is None
    assert next_section("2 cups flour", Section.INGREDIENTS) is None


def test_header_lines_are_consumed():
    ingredients, directions = segment_lines(["Shopping List", "3 eggs", "Method", "Beat the eggs"])
    assert ingredients == ["3 eggs"]
    assert directions == ["Beat the eggs"]


def test_short_and_noise_lines_dropped():
    ingredients, directions = segment_lines(["Ingredients", "ab", "|", "Steps", "1.", "Go", "see http://x.y"])
    assert ingredients == []
    assert directions == []


def test_clean_direction():
    assert clean_direction("12. 3. Whisk") == "Whisk"
    assert clean_direction("• Stir gently") == "Stir gently"
    assert clean_direction("Mix") is None


def test_half_split_fallback():
    lines = ["Pancakes Deluxe", "1 cup milk", "2 eggs", "Whisk it all", "Fry in a pan"]
    recipe = extract_ocr_recipe("\n".join(lines))
    assert recipe.title == "Pancakes Deluxe"
    assert [i.name for i in recipe.ingredients] == ["Milk", "Eggs"]
    assert recipe.directions == ["Whisk it all", "Fry in a pan"]
    assert len(recipe.ingredients) + len(recipe.directions) == len(lines) - 1


def test_half_split_excludes_title_line_not_first_line():
    lines = ["abc", "Tomato Bruschetta", "4 tomatoes", "Chop and toast"]
    recipe = extract_ocr_recipe("\n".join(lines))
    assert recipe.title == "Tomato Bruschetta"
    assert [i.name for i in recipe.ingredients] == ["Abc", "Tomatoes"]
    assert recipe.directions == ["Chop and toast"]


def test_degenerate_input():
    for text in ("", "   \n\n  ", None):
        recipe = extract_ocr_recipe(text)
        assert recipe.title == "Imported Recipe"
        assert recipe.ingredients == []
        assert recipe.directions == [NO_DIRECTIONS_PLACEHOLDER]
        assert recipe.servings is None


def test_split_lines():
    assert split_lines("  a \n\n b\r\n") == ["a", "b"]
