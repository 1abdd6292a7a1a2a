import ntpath
import os
from types import SimpleNamespace

import pytest

import ecore_reader.resource as resource_module
from ecore_reader import (
    EAttribute,
    EClass,
    EDataType,
    EEnum,
    EReference,
    InvalidEcoreError,
    Resource,
    ResourceSet,
    ResourceState,
    ResourceStateError,
    UnresolvedReferenceError,
)


def test_load_returns_root_package(recipe_resource):
    root = recipe_resource.root
    assert recipe_resource.is_loaded()
    assert recipe_resource.state is ResourceState.LOADED
    assert recipe_resource.contents == [root]
    assert root.name == "recipe"
    assert root.ns_uri == "http://www.example.org/recipe"
    assert root.ns_prefix == "recipe"
    assert root.super_package is None
    assert [sub.name for sub in root.subpackages] == ["appliances"]
    assert recipe_resource.errors == []
    assert recipe_resource.time_stamp is not None


def test_classifier_kinds(recipe_classifiers):
    assert isinstance(recipe_classifiers["Recipe"], EClass)
    assert isinstance(recipe_classifiers["Unit"], EEnum)
    assert isinstance(recipe_classifiers["Duration"], EDataType)
    assert recipe_classifiers["Duration"].instance_class_name == "java.time.Duration"


def test_forward_references_resolve(recipe_classifiers):
    standard_action = recipe_classifiers["StandardAction"]
    action = recipe_classifiers["Action"]
    assert standard_action.super_types == [action]
    assert action.abstract
    assert action.super_types == [recipe_classifiers["NamedElement"]]


def test_feature_properties(recipe_classifiers):
    recipe = recipe_classifiers["Recipe"]
    features = {f.name: f for f in recipe.structural_features}

    ingredients = features["ingredients"]
    assert isinstance(ingredients, EReference)
    assert ingredients.containment
    assert ingredients.upper_bound == -1
    assert ingredients.many
    assert ingredients.type is recipe_classifiers["Ingredient"]
    assert ingredients.containing_class is recipe

    servings = features["servings"]
    assert isinstance(servings, EAttribute)
    assert servings.required
    assert servings.default_value_literal == "4"
    assert servings.type is recipe_classifiers["Recipe"].resource.bootstrap.data_type("EInt")

    total_time = features["totalTime"]
    assert total_time.derived and total_time.transient and total_time.volatile
    assert not total_time.changeable
    assert total_time.type is recipe_classifiers["Duration"]


def test_typed_element_defaults(recipe_classifiers):
    tools = next(f for f in recipe_classifiers["Recipe"].structural_features if f.name == "tools")
    assert tools.ordered and tools.unique
    assert tools.lower_bound == 0
    assert not tools.containment
    assert tools.resolve_proxies
    assert tools.opposite is None


def test_opposites_resolve_both_ways(recipe_classifiers):
    ingredients = next(f for f in recipe_classifiers["Recipe"].structural_features if f.name == "ingredients")
    recipe_ref = next(f for f in recipe_classifiers["Ingredient"].structural_features if f.name == "recipe")
    assert ingredients.opposite is recipe_ref
    assert recipe_ref.opposite is ingredients


def test_reference_into_sub_package(recipe_classifiers):
    oven = next(f for f in recipe_classifiers["Recipe"].structural_features if f.name == "oven")
    assert oven.type is recipe_classifiers["Oven"]
    assert recipe_classifiers["Oven"].super_types == [recipe_classifiers["NamedElement"]]
    assert [p.name for p in recipe_classifiers["Oven"].package_tree] == ["recipe", "appliances"]


def test_operation(recipe_classifiers):
    scale = recipe_classifiers["Recipe"].operations[0]
    assert scale.name == "scale"
    assert scale.type is recipe_classifiers["Recipe"]
    assert scale.exceptions == [recipe_classifiers["ConversionError"]]
    factor = scale.parameters[0]
    assert factor.operation is scale
    assert factor.type.name == "EDouble"


def test_attribute_id_flag(recipe_classifiers):
    name = recipe_classifiers["NamedElement"].structural_features[0]
    assert name.id


def test_annotations(recipe_root, recipe_classifiers):
    annotation = recipe_root.annotations[0]
    assert annotation.source == "http://www.eclipse.org/emf/2002/GenModel"
    assert annotation.details == {"documentation": "Metamodel describing cooking recipes."}
    assert annotation.model_element is recipe_root
    assert len(recipe_classifiers["Recipe"].annotations) == 0


def test_enum_literals(recipe_classifiers):
    literals = {literal.name: literal for literal in recipe_classifiers["Unit"].literals}
    assert literals["DECAGRAM"].value == 0
    assert literals["TEASPOON"].value == 5
    assert literals["TEASPOON"].literal == "tsp"
    assert [literal.name for literal in recipe_classifiers["Unit"].literals][:3] == ["DECAGRAM", "GRAM", "TEASPOON"]


def test_double_load_rejected(recipe_resource):
    with pytest.raises(ResourceStateError):
        recipe_resource.load()


def test_unload_and_reload(recipe_resource):
    first_root = recipe_resource.root
    recipe_resource.unload()
    assert recipe_resource.state is ResourceState.UNLOADED
    assert recipe_resource.contents == []
    assert recipe_resource.cache == {}
    root = recipe_resource.load()
    assert root is not first_root
    assert root.name == "recipe"


def test_get_eobject_rejects_empty_key(recipe_resource):
    with pytest.raises(InvalidEcoreError):
        recipe_resource.get_eobject("  ")


def test_get_eobject_rejects_non_ecore_prefix(recipe_resource):
    with pytest.raises(InvalidEcoreError):
        recipe_resource.get_eobject("recipe.xml#//Recipe")


def test_get_eobject_unknown_in_own_document(recipe_resource):
    with pytest.raises(UnresolvedReferenceError) as excinfo:
        recipe_resource.get_eobject("recipe.ecore#//Missing")
    assert excinfo.value.key == "recipe.ecore#//Missing"


def test_get_eobject_relative_uri_without_directory():
    rset = ResourceSet()
    resource = rset.create_resource("recipe.ecore")
    with pytest.raises(InvalidEcoreError):
        resource.get_eobject("other.ecore#//Thing")


def test_resource_lookup_by_uri(recipe_path):
    rset = ResourceSet()
    assert rset.resource(str(recipe_path)) is None
    assert len(rset) == 0

    resource = rset.resource(str(recipe_path), load_on_demand=True)
    assert resource.is_loaded()
    assert rset.resource(str(recipe_path)) is resource
    assert rset.resources == [resource]


def test_resource_load_on_demand_loads_unloaded_resource(recipe_path):
    rset = ResourceSet()
    created = rset.create_resource(str(recipe_path))
    assert not created.is_loaded()
    assert rset.resource(str(recipe_path), load_on_demand=True) is created
    assert created.is_loaded()


def test_create_resource_requires_uri():
    with pytest.raises(ValueError):
        ResourceSet().create_resource(None)


def test_unknown_xsi_type_fails_load(write_ecore):
    path = write_ecore("broken", '  <eClassifiers xsi:type="ecore:EWidget" name="Widget"/>')
    resource = ResourceSet().create_resource(str(path))
    with pytest.raises(InvalidEcoreError, match="EWidget"):
        resource.load()
    assert resource.state is ResourceState.UNLOADED
    assert resource.contents == []
    assert resource.cache == {}
    assert len(resource.errors) == 1
    assert resource.errors[0].location == str(path)


def test_unknown_structural_feature_type_fails(write_ecore):
    body = (
        '  <eClassifiers xsi:type="ecore:EClass" name="Widget">\n'
        '    <eStructuralFeatures xsi:type="ecore:EOperation" name="size"/>\n'
        "  </eClassifiers>"
    )
    resource = ResourceSet().create_resource(str(write_ecore("broken", body)))
    with pytest.raises(InvalidEcoreError):
        resource.load()


def test_missing_xsi_type_fails(write_ecore):
    resource = ResourceSet().create_resource(str(write_ecore("broken", '  <eClassifiers name="Widget"/>')))
    with pytest.raises(InvalidEcoreError):
        resource.load()


def test_invalid_boolean_fails(write_ecore):
    body = '  <eClassifiers xsi:type="ecore:EClass" name="Widget" abstract="maybe"/>'
    resource = ResourceSet().create_resource(str(write_ecore("broken", body)))
    with pytest.raises(InvalidEcoreError, match="abstract"):
        resource.load()


def test_duplicate_identifier_fails(write_ecore):
    body = (
        '  <eClassifiers xsi:type="ecore:EClass" name="Widget"/>\n'
        '  <eClassifiers xsi:type="ecore:EClass" name="Widget"/>'
    )
    resource = ResourceSet().create_resource(str(write_ecore("broken", body)))
    with pytest.raises(InvalidEcoreError, match="Duplicate"):
        resource.load()


def test_unresolved_reference_fails(write_ecore):
    body = '  <eClassifiers xsi:type="ecore:EClass" name="Widget" eSuperTypes="#//Gadget"/>'
    resource = ResourceSet().create_resource(str(write_ecore("broken", body)))
    with pytest.raises(UnresolvedReferenceError):
        resource.load()
    assert not resource.is_loaded()


def test_supertype_must_be_a_class(write_ecore):
    body = (
        '  <eClassifiers xsi:type="ecore:EClass" name="Widget" eSuperTypes="#//Size"/>\n'
        '  <eClassifiers xsi:type="ecore:EDataType" name="Size"/>'
    )
    resource = ResourceSet().create_resource(str(write_ecore("broken", body)))
    with pytest.raises(InvalidEcoreError):
        resource.load()


def test_malformed_xml_fails(tmp_path):
    path = tmp_path / "broken.ecore"
    path.write_text("<ecore:EPackage", encoding="utf-8")
    resource = ResourceSet().create_resource(str(path))
    with pytest.raises(InvalidEcoreError):
        resource.load()
    assert resource.errors[0].line is not None


def test_root_must_be_a_package(tmp_path):
    path = tmp_path / "broken.ecore"
    path.write_text('<?xml version="1.0"?><model name="x"/>', encoding="utf-8")
    with pytest.raises(InvalidEcoreError, match="EPackage"):
        ResourceSet().create_resource(str(path)).load()


def test_generic_types_are_skipped_with_warning(write_ecore):
    body = (
        '  <eClassifiers xsi:type="ecore:EClass" name="Box">\n'
        '    <eStructuralFeatures xsi:type="ecore:EReference" name="content">\n'
        '      <eGenericType eClassifier="#//Box"/>\n'
        "    </eStructuralFeatures>\n"
        "  </eClassifiers>"
    )
    resource = ResourceSet().create_resource(str(write_ecore("generic", body)))
    root = resource.load()
    assert resource.is_loaded()
    assert len(resource.warnings) == 1
    assert "eGenericType" in resource.warnings[0].message
    assert root.classifiers[0].structural_features[0].type is None


def test_load_from_text(tmp_path):
    text = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<ecore:EPackage xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
        ' xmlns:ecore="http://www.eclipse.org/emf/2002/Ecore" name="inline" nsURI="urn:inline" nsPrefix="inline">'
        '<eClassifiers xsi:type="ecore:EClass" name="Thing"/>'
        "</ecore:EPackage>"
    )
    resource = ResourceSet().create_resource(str(tmp_path / "inline.ecore"))
    root = resource.load(text)
    assert resource.get_eobject("inline.ecore#//Thing") is root.classifiers[0]


def test_sibling_uri_uses_platform_separators(monkeypatch):
    monkeypatch.setattr(resource_module, "os", SimpleNamespace(path=ntpath, fspath=os.fspath))
    resource = Resource(r"C:\models\kitchen.ecore")
    sibling = resource.sibling_uri("recipe.ecore")
    assert sibling == ntpath.normcase(ntpath.abspath(r"C:\models\recipe.ecore"))
    assert sibling.endswith("\\recipe.ecore")


def test_interrupted_load_resets_state(monkeypatch, recipe_path):
    def interrupted(self):
        raise KeyboardInterrupt

    monkeypatch.setattr(resource_module.EcoreParser, "parse", interrupted)
    resource = ResourceSet().create_resource(str(recipe_path))
    with pytest.raises(KeyboardInterrupt):
        resource.load()
    assert resource.state is ResourceState.UNLOADED
    assert resource.cache == {}
    assert len(resource.errors) == 1
    resource.unload()


def test_unnamed_element_fails(write_ecore):
    resource = ResourceSet().create_resource(str(write_ecore("broken", '  <eClassifiers xsi:type="ecore:EClass"/>')))
    with pytest.raises(InvalidEcoreError, match="line 3 .* has no name"):
        resource.load()
    assert resource.cache == {}


def test_get_uri_fragment(recipe_resource, recipe_classifiers):
    assert recipe_resource.get_uri_fragment(recipe_classifiers["Recipe"]) == "recipe.ecore#//Recipe"
    assert recipe_resource.get_uri_fragment(recipe_resource.root) == "recipe.ecore#/"
    with pytest.raises(ValueError):
        recipe_resource.get_uri_fragment(None)


def test_interface_and_own_structural_features(write_ecore):
    body = (
        '  <eClassifiers xsi:type="ecore:EClass" name="Labelled" abstract="true" interface="true">\n'
        '    <eStructuralFeatures xsi:type="ecore:EAttribute" name="label"'
        ' eType="ecore:EDataType http://www.eclipse.org/emf/2002/Ecore#//EString"/>\n'
        "  </eClassifiers>\n"
        '  <eClassifiers xsi:type="ecore:EClass" name="Base" abstract="true">\n'
        '    <eStructuralFeatures xsi:type="ecore:EAttribute" name="id"'
        ' eType="ecore:EDataType http://www.eclipse.org/emf/2002/Ecore#//EString"/>\n'
        "  </eClassifiers>\n"
        '  <eClassifiers xsi:type="ecore:EClass" name="Widget" eSuperTypes="#//Labelled #//Base">\n'
        '    <eStructuralFeatures xsi:type="ecore:EAttribute" name="size"'
        ' eType="ecore:EDataType http://www.eclipse.org/emf/2002/Ecore#//EInt"/>\n'
        "  </eClassifiers>"
    )
    root = ResourceSet().create_resource(str(write_ecore("widgets", body))).load()
    widget = root.classifiers[2]
    assert [f.name for f in widget.interface_and_own_structural_features] == ["size", "label"]
    assert [f.name for f in widget.all_structural_features] == ["size", "label", "id"]
