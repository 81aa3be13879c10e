"""
Tests for free-text meal request matching.
"""

from meal_plan_engine.data.models import Recipe, RecipeIngredient
from meal_plan_engine.planner_modules.keyword_resolver import (
    extract_food_words,
    resolve,
    score_recipe_for_request,
)


def _recipe(recipe_id, name, **kwargs):
    ingredients = [RecipeIngredient(name=n) for n in kwargs.pop("ingredients", [])]
    return Recipe(id=recipe_id, name=name, ingredients=ingredients, **kwargs)


class TestExtractFoodWords:

    def test_strips_chef_names_and_possessives(self):
        assert extract_food_words("Ina Garten's mac and cheese") == ["mac", "cheese"]

    def test_strips_day_names(self):
        assert extract_food_words("tacos on Friday") == ["tacos"]

    def test_drops_punctuation_and_single_letters(self):
        assert extract_food_words("chicken, rice & a salad!") == ["chicken", "rice", "salad"]

    def test_only_stop_words(self):
        assert extract_food_words("something quick for dinner tonight") == ["something"]
        assert extract_food_words("the best dinner") == []


class TestScoring:

    def test_exact_name(self):
        assert score_recipe_for_request("beef tacos", _recipe(1, "Beef Tacos")) == 200

    def test_name_contains_request(self):
        assert score_recipe_for_request("salmon", _recipe(1, "Grilled Salmon")) == 150

    def test_name_plus_related_term(self):
        # "tacos" in name, related "taco" also in name
        assert score_recipe_for_request("tacos on friday", _recipe(1, "Beef Tacos")) == 125

    def test_multi_word_name_hits(self):
        recipe = _recipe(1, "Baked Mac and Cheese", ingredients=["elbow macaroni", "cheddar"])
        score = score_recipe_for_request("Ina Garten's mac and cheese", recipe)
        assert score >= 140

    def test_protein_match(self):
        recipe = _recipe(1, "Sunday Roast", protein_type="chicken")
        assert score_recipe_for_request("chicken", recipe) == 80

    def test_cuisine_match(self):
        recipe = _recipe(1, "Enchiladas", cuisine="mexican")
        assert score_recipe_for_request("mexican", recipe) == 60

    def test_ingredient_match(self):
        recipe = _recipe(1, "Weeknight Bowl", ingredients=["brown rice", "tofu"])
        assert score_recipe_for_request("tofu", recipe) == 60

    def test_related_only(self):
        recipe = _recipe(1, "Enchiladas", tags=["mexican"])
        # "tacos" -> related "mexican" via tags
        assert score_recipe_for_request("tacos", recipe) == 40

    def test_single_word_fallback_checks_related_cuisine(self):
        recipe = _recipe(1, "Enchiladas", cuisine="mexican")
        assert score_recipe_for_request("tacos", recipe) == 40

    def test_no_match(self):
        assert score_recipe_for_request("sushi", _recipe(1, "Beef Stew", cuisine="american")) == 0

    def test_half_the_words_must_hit(self):
        recipe = _recipe(1, "Tomato Soup", ingredients=["tomatoes"])
        assert score_recipe_for_request("lobster bisque thermidor crab tomato", recipe) == 0


class TestResolve:

    def test_tacos_on_friday_resolves_to_beef_tacos(self, sample_recipes):
        matches = resolve("tacos on Friday", sample_recipes)
        assert matches[0].recipe.name == "Beef Tacos"

    def test_sorted_descending(self, sample_recipes):
        matches = resolve("chicken", sample_recipes)
        scores = [m.score for m in matches]
        assert scores == sorted(scores, reverse=True)
        assert {m.recipe.id for m in matches} >= {2, 11}

    def test_only_positive_scores(self, sample_recipes):
        assert all(m.score > 0 for m in resolve("rice", sample_recipes))

    def test_ties_keep_catalog_order(self):
        recipes = [_recipe(1, "Fish Curry", cuisine="indian"), _recipe(2, "Veg Curry", cuisine="indian")]
        assert [m.recipe.id for m in resolve("curry", recipes)] == [1, 2]

    def test_unmatched_request(self, sample_recipes):
        assert resolve("lobster thermidor", sample_recipes) == []
