from pathlib import Path

import pytest

from ecore_reader import EClassifier, ResourceSet
from ecore_reader.query import iter_classifiers

DATA = Path(__file__).parent / "data"
RECIPE = DATA / "recipe.ecore"
KITCHEN = DATA / "kitchen.ecore"

ECORE_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<ecore:EPackage xmi:version="2.0" xmlns:xmi="http://www.omg.org/XMI"'
    ' xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
    ' xmlns:ecore="http://www.eclipse.org/emf/2002/Ecore"'
    ' name="{name}" nsURI="http://www.example.org/{name}" nsPrefix="{name}">\n'
)


@pytest.fixture
def recipe_path():
    return RECIPE


@pytest.fixture
def kitchen_path():
    return KITCHEN


@pytest.fixture
def recipe_resource():
    rset = ResourceSet()
    resource = rset.create_resource(str(RECIPE))
    resource.load()
    return resource


@pytest.fixture
def recipe_root(recipe_resource):
    return recipe_resource.root


@pytest.fixture
def recipe_classifiers(recipe_root):
    return {classifier.name: classifier for classifier in iter_classifiers(recipe_root, EClassifier)}


@pytest.fixture
def write_ecore(tmp_path):
    """Write an Ecore document named after its root package into ``tmp_path``."""

    def write(name: str, body: str) -> Path:
        path = tmp_path / f"{name}.ecore"
        path.write_text(ECORE_HEADER.format(name=name) + body + "\n</ecore:EPackage>\n", encoding="utf-8")
        return path

    return write
