import pytest

from ecore_reader import ContainmentError, EClass, EPackage, EReference, Resource


def test_package_identifiers(recipe_root):
    assert recipe_root.identifier == "recipe.ecore#/"
    appliances = recipe_root.subpackages[0]
    assert appliances.identifier == "recipe.ecore#//appliances"


def test_classifier_identifiers(recipe_classifiers):
    assert recipe_classifiers["Recipe"].identifier == "recipe.ecore#//Recipe"
    assert recipe_classifiers["Oven"].identifier == "recipe.ecore#//appliances/Oven"


def test_member_identifiers_carry_kind_tag(recipe_classifiers):
    recipe = recipe_classifiers["Recipe"]
    feature = next(f for f in recipe.structural_features if f.name == "ingredients")
    operation = recipe.operations[0]
    parameter = operation.parameters[0]
    literal = recipe_classifiers["Unit"].literals[0]
    assert feature.identifier == "EStructuralFeature::recipe.ecore#//Recipe/ingredients"
    assert operation.identifier == "EOperation::recipe.ecore#//Recipe/scale"
    assert parameter.identifier == "EParameter::EOperation::recipe.ecore#//Recipe/scale/factor"
    assert literal.identifier == "EEnumLiteral::recipe.ecore#//Unit/DECAGRAM"


def test_cache_holds_every_named_element(recipe_resource, recipe_classifiers):
    cache = recipe_resource.cache
    assert cache["recipe.ecore#//Recipe"] is recipe_classifiers["Recipe"]
    assert "EStructuralFeature::recipe.ecore#//Ingredient/recipe" in cache
    assert "EEnumLiteral::recipe.ecore#//Unit/TEASPOON" in cache
    assert set(recipe_resource.all_contents()) == set(cache.values())


def test_identifier_is_computed_once(tmp_path):
    resource = Resource(str(tmp_path / "shop.ecore"))
    first = EPackage(resource)
    first.name = "shop"
    eclass = EClass(resource)
    eclass.name = "Basket"
    first.classifiers.add(eclass)
    assert eclass.identifier == "shop.ecore#//Basket"

    eclass.name = "Cart"
    second = EPackage(resource)
    second.name = "store"
    second.classifiers.add(eclass)
    assert eclass.identifier == "shop.ecore#//Basket"


def test_identifier_without_container_fails(tmp_path):
    reference = EReference(Resource(str(tmp_path / "shop.ecore")))
    reference.name = "items"
    with pytest.raises(ContainmentError):
        reference.identifier
