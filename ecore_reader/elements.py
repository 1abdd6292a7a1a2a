"""The Ecore model element hierarchy.

Every concrete kind knows which child XML elements it owns
(``_deserialize_child``) and how to turn its captured attributes into typed
values (``set_properties``). Both always call the base implementation
first, so ownership and property handling compose up the class chain.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List

from lxml import etree

from .containment import ContainmentList
from .exceptions import ContainmentError, InvalidEcoreError
from .xmlwalk import ParseContext, iter_child_elements, local_name, read_attributes, xsi_type

if TYPE_CHECKING:
    from .resolver import PropertyResolver
    from .resource import Resource

LOGGER = logging.getLogger(__name__)

# Generic type constructs are not modelled; they are skipped with a warning.
IGNORED_ELEMENTS = frozenset(
    {
        "eGenericType",
        "eTypeParameters",
        "eTypeArguments",
        "eGenericSuperTypes",
        "eGenericExceptions",
    }
)


class EObject:
    containing_feature: str | None = None

    def __init__(self, resource: Resource) -> None:
        self._resource = resource
        self._identifier: str | None = None
        self.container: EObject | None = None
        self.attributes: Dict[str, str] = {}

    @property
    def resource(self) -> Resource:
        return self._resource

    @property
    def identifier(self) -> str | None:
        if self._identifier is None:
            self._identifier = self._build_identifier()
        return self._identifier

    @identifier.setter
    def identifier(self, value: str) -> None:
        self._identifier = value

    @property
    def eclass(self) -> EClass | None:
        """The bootstrap meta class describing this object's kind."""
        return self._resource.bootstrap.meta_class(type(self).__name__)

    def _build_identifier(self) -> str | None:
        return None

    def read_xml(self, element: etree._Element, context: ParseContext) -> None:
        self.attributes.update(read_attributes(element, context))
        for child in iter_child_elements(element):
            self._deserialize_child(child, context)

    def _deserialize_child(self, child: etree._Element, context: ParseContext) -> None:
        pass

    def set_properties(self, resolver: PropertyResolver) -> None:
        pass

    def _adopt(self, child: EObject, owner: ContainmentList, element: etree._Element, context: ParseContext) -> None:
        owner.add(child)
        child.read_xml(element, context)

    def __repr__(self) -> str:
        if self._identifier is None:
            return f"<{type(self).__name__}>"
        return f"<{type(self).__name__} {self._identifier}>"


class EModelElement(EObject):
    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.annotations: ContainmentList[EAnnotation] = ContainmentList(self)

    def _deserialize_child(self, child: etree._Element, context: ParseContext) -> None:
        super()._deserialize_child(child, context)
        name = local_name(child)
        if name == "eAnnotations":
            self._adopt(EAnnotation(self.resource), self.annotations, child, context)
        elif name in IGNORED_ELEMENTS:
            LOGGER.debug("Skipping <%s> in %s", name, self.identifier)
            self.resource.add_warning(
                f"Ignored unsupported element <{name}> in {self.identifier}",
                line=child.sourceline,
            )

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        for annotation in self.annotations:
            annotation.set_properties(resolver)


class EAnnotation(EModelElement):
    containing_feature = "annotations"

    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.source: str | None = None
        self.details: Dict[str, str] = {}

    @property
    def model_element(self) -> EModelElement | None:
        return self.container

    def _deserialize_child(self, child: etree._Element, context: ParseContext) -> None:
        super()._deserialize_child(child, context)
        if local_name(child) == "details":
            key = child.get("key")
            if key is not None:
                self.details[key] = child.get("value", "")

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        source = resolver.text(self, "source")
        if source is not None:
            self.source = source


class ENamedElement(EModelElement):
    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.name: str | None = None

    def read_xml(self, element: etree._Element, context: ParseContext) -> None:
        self.name = element.get("name")
        if self.name is None:
            raise InvalidEcoreError(
                f"<{local_name(element)}> at line {element.sourceline} of {self.resource.uri} has no name"
            )
        self.resource.register(self)
        super().read_xml(element, context)

    def _build_identifier(self) -> str:
        raise NotImplementedError

    def _owner_identifier(self) -> str:
        if self.container is None:
            raise ContainmentError(f"{type(self).__name__} {self.name!r} has no container")
        return self.container.identifier

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class EPackage(ENamedElement):
    containing_feature = "subpackages"

    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.ns_uri: str | None = None
        self.ns_prefix: str | None = None
        self.subpackages: ContainmentList[EPackage] = ContainmentList(self)
        self.classifiers: ContainmentList[EClassifier] = ContainmentList(self)

    @property
    def super_package(self) -> EPackage | None:
        return self.container

    def read_xml(self, element: etree._Element, context: ParseContext) -> None:
        if self.super_package is None:
            context.top_package_name = element.get("name")
        super().read_xml(element, context)

    def _build_identifier(self) -> str:
        hierarchy = [self.name]
        package = self.super_package
        while package is not None:
            hierarchy.append(package.name)
            package = package.super_package
        hierarchy[-1] = f"{hierarchy[-1]}.ecore#/"
        return "/".join(reversed(hierarchy))

    def _deserialize_child(self, child: etree._Element, context: ParseContext) -> None:
        super()._deserialize_child(child, context)
        name = local_name(child)
        if name == "eSubpackages":
            self._adopt(EPackage(self.resource), self.subpackages, child, context)
        elif name == "eClassifiers":
            kind = xsi_type(child)
            factory = CLASSIFIER_KINDS.get(kind)
            if factory is None:
                raise InvalidEcoreError(f"Type of classifier not recognized: {kind}")
            self._adopt(factory(self.resource), self.classifiers, child, context)

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        self.ns_uri = resolver.text(self, "nsURI")
        self.ns_prefix = resolver.text(self, "nsPrefix")


class EClassifier(ENamedElement):
    containing_feature = "classifiers"

    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.instance_class_name: str | None = None

    @property
    def package(self) -> EPackage | None:
        return self.container

    @property
    def package_tree(self) -> List[EPackage]:
        tree: List[EPackage] = []
        package = self.package
        while package is not None:
            tree.append(package)
            package = package.super_package
        tree.reverse()
        return tree

    def _build_identifier(self) -> str:
        return f"{self._owner_identifier()}/{self.name}"

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        value = resolver.text(self, "instanceClassName")
        if value is not None:
            self.instance_class_name = value


class EClass(EClassifier):
    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.abstract = False
        self.interface = False
        self.super_types: List[EClass] = []
        self.operations: ContainmentList[EOperation] = ContainmentList(self)
        self.structural_features: ContainmentList[EStructuralFeature] = ContainmentList(self)

    @property
    def all_structural_features(self) -> List[EStructuralFeature]:
        features: List[EStructuralFeature] = list(self.structural_features)
        for super_type in self.super_types:
            for feature in super_type.all_structural_features:
                if feature not in features:
                    features.append(feature)
        return features

    @property
    def all_structural_features_by_name(self) -> List[EStructuralFeature]:
        return sorted(self.all_structural_features, key=lambda x: x.name or "")

    @property
    def structural_features_by_name(self) -> List[EStructuralFeature]:
        return sorted(self.structural_features, key=lambda x: x.name or "")

    @property
    def interface_and_own_structural_features(self) -> List[EStructuralFeature]:
        features: List[EStructuralFeature] = list(self.structural_features)
        for super_type in self.super_types:
            if not super_type.interface:
                continue
            for feature in super_type.all_structural_features:
                if feature not in features:
                    features.append(feature)
        return features

    def _deserialize_child(self, child: etree._Element, context: ParseContext) -> None:
        super()._deserialize_child(child, context)
        name = local_name(child)
        if name == "eStructuralFeatures":
            kind = xsi_type(child)
            if kind == "ecore:EReference":
                feature: EStructuralFeature = EReference(self.resource)
            elif kind == "ecore:EAttribute":
                feature = EAttribute(self.resource)
            else:
                raise InvalidEcoreError(f"Type of structural feature not recognized: {kind}")
            self._adopt(feature, self.structural_features, child, context)
        elif name == "eOperations":
            self._adopt(EOperation(self.resource), self.operations, child, context)

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        abstract = resolver.boolean(self, "abstract")
        if abstract is not None:
            self.abstract = abstract
        interface = resolver.boolean(self, "interface")
        if interface is not None:
            self.interface = interface
        super_types = []
        for super_type in resolver.references(self, "eSuperTypes"):
            if not isinstance(super_type, EClass):
                raise InvalidEcoreError(
                    f"Super type {super_type!r} of {self.identifier} is not an EClass"
                )
            super_types.append(super_type)
        if super_types:
            self.super_types = super_types


class EDataType(EClassifier):
    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.serializable = True

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        serializable = resolver.boolean(self, "serializable")
        if serializable is not None:
            self.serializable = serializable


class EEnum(EDataType):
    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.literals: ContainmentList[EEnumLiteral] = ContainmentList(self)

    def _deserialize_child(self, child: etree._Element, context: ParseContext) -> None:
        super()._deserialize_child(child, context)
        if local_name(child) == "eLiterals":
            self._adopt(EEnumLiteral(self.resource), self.literals, child, context)


class EEnumLiteral(ENamedElement):
    containing_feature = "literals"

    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.value = 0
        self.literal: str | None = None

    @property
    def enum(self) -> EEnum | None:
        return self.container

    def _build_identifier(self) -> str:
        return f"EEnumLiteral::{self._owner_identifier()}/{self.name}"

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        value = resolver.integer(self, "value")
        if value is not None:
            self.value = value
        self.literal = resolver.text(self, "literal")


class ETypedElement(ENamedElement):
    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.ordered = True
        self.unique = True
        self.lower_bound = 0
        self.upper_bound = 1
        self.type: EClassifier | None = None

    @property
    def many(self) -> bool:
        return self.upper_bound == -1 or self.upper_bound > 1

    @property
    def required(self) -> bool:
        return self.lower_bound >= 1

    def set_properties(self, resolver: PropertyResolver) -> None:
        LOGGER.debug("Setting properties of %s", self.identifier)
        super().set_properties(resolver)
        for name, attr in (("ordered", "ordered"), ("unique", "unique")):
            value = resolver.boolean(self, name)
            if value is not None:
                setattr(self, attr, value)
        for name, attr in (("lowerBound", "lower_bound"), ("upperBound", "upper_bound")):
            value = resolver.integer(self, name)
            if value is not None:
                setattr(self, attr, value)
        etype = resolver.reference(self, "eType")
        if etype is not None:
            if not isinstance(etype, EClassifier):
                raise InvalidEcoreError(f"Type {etype!r} of {self.identifier} is not an EClassifier")
            self.type = etype


class EStructuralFeature(ETypedElement):
    containing_feature = "structural_features"

    _FLAGS = ("changeable", "volatile", "transient", "unsettable", "derived")

    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.changeable = True
        self.volatile = False
        self.transient = False
        self.unsettable = False
        self.derived = False
        self.default_value_literal: str | None = None

    @property
    def containing_class(self) -> EClass | None:
        return self.container

    def _build_identifier(self) -> str:
        return f"EStructuralFeature::{self._owner_identifier()}/{self.name}"

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        for flag in self._FLAGS:
            value = resolver.boolean(self, flag)
            if value is not None:
                setattr(self, flag, value)
        default = resolver.text(self, "defaultValueLiteral")
        if default is not None:
            self.default_value_literal = default


class EAttribute(EStructuralFeature):
    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.id = False

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        value = resolver.boolean(self, "iD")
        if value is not None:
            self.id = value


class EReference(EStructuralFeature):
    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.containment = False
        self.is_container = False
        self.resolve_proxies = True
        self.opposite: EReference | None = None

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        for name, attr in (
            ("containment", "containment"),
            ("container", "is_container"),
            ("resolveProxies", "resolve_proxies"),
        ):
            value = resolver.boolean(self, name)
            if value is not None:
                setattr(self, attr, value)
        opposite = resolver.reference(self, "eOpposite", prefix="EStructuralFeature::")
        if opposite is not None:
            if not isinstance(opposite, EReference):
                raise InvalidEcoreError(f"Opposite {opposite!r} of {self.identifier} is not an EReference")
            self.opposite = opposite


class EOperation(ETypedElement):
    containing_feature = "operations"

    def __init__(self, resource: Resource) -> None:
        super().__init__(resource)
        self.parameters: ContainmentList[EParameter] = ContainmentList(self)
        self.exceptions: List[EClassifier] = []

    @property
    def containing_class(self) -> EClass | None:
        return self.container

    def _build_identifier(self) -> str:
        return f"EOperation::{self._owner_identifier()}/{self.name}"

    def _deserialize_child(self, child: etree._Element, context: ParseContext) -> None:
        super()._deserialize_child(child, context)
        if local_name(child) == "eParameters":
            self._adopt(EParameter(self.resource), self.parameters, child, context)

    def set_properties(self, resolver: PropertyResolver) -> None:
        super().set_properties(resolver)
        exceptions = resolver.references(self, "eExceptions")
        if exceptions:
            self.exceptions = exceptions


class EParameter(ETypedElement):
    containing_feature = "parameters"

    @property
    def operation(self) -> EOperation | None:
        return self.container

    def _build_identifier(self) -> str:
        return f"EParameter::{self._owner_identifier()}/{self.name}"


CLASSIFIER_KINDS = {
    "ecore:EClass": EClass,
    "ecore:EDataType": EDataType,
    "ecore:EEnum": EEnum,
}
