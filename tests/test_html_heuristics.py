from parser import NO_DIRECTIONS_PLACEHOLDER, extract_heuristic_recipe, make_soup

SOURCE_URL = "https://blog.example.com/2024/05/banana-bread/"

PLUGIN_PAGE = """
<html><head><meta property="og:image" content="https://cdn.example.com/og.jpg"></head>
<body>
  <h1>  Banana
     Bread </h1>
  <div class="wprm-recipe-servings-container"><span class="wprm-recipe-servings">Serves 8</span></div>
  <div class="featured-image"><img src="/uploads/banana.jpg"></div>
  <div class="recipe-ingredients">
    <ul>
      <li>3 ripe bananas</li>
      <li>1 1/2 cups   flour</li>
      <li>1 tsp baking soda</li>
    </ul>
  </div>
  <div class="recipe-instructions">
    <ol>
      <li>Instructions:</li>
      <li>Mash the bananas.</li>
      <li>Fold in the flour and bake.</li>
    </ol>
  </div>
</body></html>
"""


def test_plugin_markup():
    recipe = extract_heuristic_recipe(make_soup(PLUGIN_PAGE), SOURCE_URL)
    assert recipe.title == "Banana Bread"
    assert [(i.amount, i.unit, i.name) for i in recipe.ingredients] == [
        ("3", "", "Ripe bananas"),
        ("1 1/2", "cups", "Flour"),
        ("1", "tsp", "Baking soda"),
    ]
    assert recipe.directions == ["Mash the bananas.", "Fold in the flour and bake."]
    assert recipe.servings == 8
    assert recipe.image_url == "https://blog.example.com/uploads/banana.jpg"
    assert recipe.source_url == SOURCE_URL


def test_title_fallbacks():
    soup = make_soup('<html><body><h1> </h1><h2 class="post entry-title">Lentil Soup</h2></body></html>')
    assert extract_heuristic_recipe(soup, SOURCE_URL).title == "Lentil Soup"
    soup = make_soup('<html><body><div class="recipe-title-wrap">Chili</div>'
                     '<div class="entry-title">Other</div></body></html>')
    assert extract_heuristic_recipe(soup, SOURCE_URL).title == "Chili"
    assert extract_heuristic_recipe(make_soup("<html><body></body></html>"), SOURCE_URL).title == "Untitled Recipe"


def test_placeholder_when_no_directions():
    recipe = extract_heuristic_recipe(make_soup("<html><body><p>Nothing here</p></body></html>"), SOURCE_URL)
    assert recipe.directions == [NO_DIRECTIONS_PLACEHOLDER]
    assert recipe.ingredients == []
    assert recipe.servings is None
    assert recipe.image_url is None


def test_long_candidates_are_discarded():
    long_text = "word " * 60
    html = f"""<html><body>
      <ul class="ingredients"><li>{long_text}</li><li>2 eggs</li></ul>
      <ol class="directions"><li>{"stir " * 250}</li><li>Whisk eggs.</li></ol>
    </body></html>"""
    recipe = extract_heuristic_recipe(make_soup(html), SOURCE_URL)
    assert [i.name for i in recipe.ingredients] == ["Eggs"]
    assert recipe.directions == ["Whisk eggs."]


def test_matches_are_unioned_in_document_order():
    html = """<html><body>
      <div class="tasty-recipe-ingredients"><ul><li>1 cup rice</li></ul></div>
      <div class="ingredients"><ul><li>2 cups water</li></ul></div>
      <span class="wprm-recipe-ingredient">1 pinch salt</span>
    </body></html>"""
    recipe = extract_heuristic_recipe(make_soup(html), SOURCE_URL)
    assert [i.name for i in recipe.ingredients] == ["Rice", "Water", "Salt"]


def test_image_fallback_order():
    html = """<html><head><meta property="og:image" content="https://cdn.example.com/og.jpg"></head>
      <body><img class="attachment-full wp-post-image" src="https://cdn.example.com/post.jpg"></body></html>"""
    assert extract_heuristic_recipe(make_soup(html), SOURCE_URL).image_url == "https://cdn.example.com/post.jpg"

    html = '<html><head><meta property="og:image" content="/og.jpg"></head><body></body></html>'
    assert extract_heuristic_recipe(make_soup(html), SOURCE_URL).image_url == "https://blog.example.com/og.jpg"
