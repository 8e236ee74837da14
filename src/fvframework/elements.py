"""
Contains a minimal model of the concrete input elements of a form.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional


class ElementKind(str, Enum):
    """
    The kind of an input element. It determines the grouping of a field and the event which signals a value change.
    """

    TEXT = "text"
    PASSWORD = "password"
    EMAIL = "email"
    NUMBER = "number"
    TEXTAREA = "textarea"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    SELECT = "select"
    FILE = "file"
    HIDDEN = "hidden"

    @property
    def is_choice(self) -> bool:
        """Radio buttons and checkboxes sharing a name are scored as one logical unit"""
        return self in (ElementKind.RADIO, ElementKind.CHECKBOX)

    @property
    def change_event(self) -> str:
        """The event which is dispatched if the user changes the value of an element of this kind"""
        if self.is_choice or self in (ElementKind.SELECT, ElementKind.FILE):
            return "change"
        return "input"


@dataclass(eq=False)
class FieldElement:
    """
    A single input element. Elements are compared by identity, two elements with equal values are still different
    elements.
    """

    name: str
    kind: ElementKind = ElementKind.TEXT
    value: str = ""
    checked: bool = False
    selected: tuple[str, ...] = ()
    disabled: bool = False
    hidden: bool = False
    visible: bool = True

    def clear(self) -> None:
        """Resets the user input of this element"""
        if self.kind.is_choice:
            self.checked = False
        elif self.kind == ElementKind.SELECT:
            self.selected = ()
        else:
            self.value = ""


class Form:
    """
    An ordered container of input elements.
    """

    def __init__(self, elements: Iterable[FieldElement] = ()):
        self._elements: list[FieldElement] = list(elements)

    def add(self, element: FieldElement) -> FieldElement:
        """Appends the element to the form and returns it"""
        self._elements.append(element)
        return element

    def elements(self, name: str) -> list[FieldElement]:
        """All elements with the given name in the order they were added"""
        return [element for element in self._elements if element.name == name]

    def first(self, name: str) -> Optional[FieldElement]:
        """The first element with the given name or None"""
        return next((element for element in self._elements if element.name == name), None)

    def __iter__(self) -> Iterator[FieldElement]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)
