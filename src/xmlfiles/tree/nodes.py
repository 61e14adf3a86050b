"""Document model: text, Comment, CData, Element and Document.

The model is a plain mutable tree. Each Element owns its ``children`` list and
there are no parent back-references, so every node belongs to exactly one
parent. Raw text children are ordinary ``str`` values.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, TextIO, Union

from xmlfiles.shared import XMLFilesConfig

PROLOG_PREFIXES = ("?", "!")


def _serialize(node: Any) -> str:
    from xmlfiles.serialization import serialize

    return serialize(node)


@dataclass
class Comment:
    """Comment node, rendered as ``<!-- data -->``."""

    data: str

    def __str__(self) -> str:
        return _serialize(self)


@dataclass
class CData:
    """CDATA section, rendered as ``<![CDATA[data]]>``."""

    data: str

    def __str__(self) -> str:
        return _serialize(self)


Node = Union[str, Comment, CData, "Element"]
PrologNode = Union[Comment, CData, "Element"]


def _check_child(child: Any) -> None:
    if not isinstance(child, (str, Comment, CData, Element)):
        raise TypeError(
            f"Child must be str, Comment, CData or Element, not {type(child).__name__}"
        )


@dataclass
class Element:
    """XML element with ordered attributes and heterogeneous children.

    ``closed`` is False only for prolog pseudo-elements such as ``<?xml ...>``
    or ``<!DOCTYPE ...>`` which have no matching end tag; such elements never
    have children.

    Equality compares tag, closed flag, attributes and children. Attribute
    order does not take part in equality but is kept for serialization.

    Calling an element uses it as a template:

        >>> item = Element.create("item", kind="leaf")
        >>> item("text", kind="branch", id="2").attributes
        {'kind': 'branch', 'id': '2'}
    """

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List[Node] = field(default_factory=list)
    closed: bool = True

    def __post_init__(self) -> None:
        """Validate element values and the prolog invariant."""
        if not isinstance(self.tag, str) or not self.tag:
            raise ValueError("Element tag cannot be empty")
        self.attributes = dict(self.attributes)
        self.children = list(self.children)
        for child in self.children:
            _check_child(child)
        if not self.closed:
            if not self.tag.startswith(PROLOG_PREFIXES):
                raise ValueError(
                    f"Only prolog elements (<?...> or <!...>) may be unclosed: "
                    f"{self.tag!r}"
                )
            if self.children:
                raise ValueError("Unclosed prolog elements cannot have children")

    @classmethod
    def create(cls, tag: str, *children: Node, **attributes: Any) -> "Element":
        """Build an element from positional children and keyword attributes."""
        return cls(tag, {key: str(value) for key, value in attributes.items()},
                   list(children))

    def __call__(self, *children: Node, **attributes: Any) -> "Element":
        """Return a new element using this one as a template.

        The new element gets a deep copy of this element's children followed
        by ``children``, and this element's attributes updated with
        ``attributes``. The template is left untouched.
        """
        merged = dict(self.attributes)
        merged.update((key, str(value)) for key, value in attributes.items())
        return Element(
            self.tag,
            merged,
            copy.deepcopy(self.children) + list(children),
            closed=self.closed,
        )

    def __str__(self) -> str:
        return _serialize(self)

    @property
    def is_prolog(self) -> bool:
        """Check if the tag marks a prolog pseudo-element."""
        return self.tag.startswith(PROLOG_PREFIXES)

    @property
    def text(self) -> str:
        """Concatenated direct text children."""
        return "".join(child for child in self.children if isinstance(child, str))

    @property
    def elements(self) -> List["Element"]:
        """Direct child elements, skipping text, comments and CDATA."""
        return [child for child in self.children if isinstance(child, Element)]

    def append(self, child: Node) -> None:
        """Append a child node."""
        _check_child(child)
        if not self.closed:
            raise ValueError("Unclosed prolog elements cannot have children")
        self.children.append(child)

    def extend(self, children: List[Node]) -> None:
        for child in children:
            self.append(child)

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    def set_attribute(self, name: str, value: Any) -> None:
        """Set attribute value; new names are added at the end."""
        if not isinstance(name, str) or not name:
            raise TypeError("Attribute name must be a non-empty string")
        self.attributes[name] = str(value)

    def iter_elements(self) -> Iterator["Element"]:
        """Iterate over this element and all descendant elements in order."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter_elements()

    def find(self, tag: str) -> Optional["Element"]:
        """Find first descendant element with matching tag name."""
        for element in self.iter_elements():
            if element is not self and element.tag == tag:
                return element
        return None

    def find_all(self, tag: str) -> List["Element"]:
        """Find all descendant elements with matching tag name."""
        return [
            element for element in self.iter_elements()
            if element is not self and element.tag == tag
        ]


@dataclass
class Document:
    """XML document split into its ``prolog`` and single ``root`` element."""

    prolog: List[PrologNode]
    root: Element

    def __post_init__(self) -> None:
        """Validate document structure."""
        if not isinstance(self.root, Element):
            raise TypeError("Document root must be an Element")
        self.prolog = list(self.prolog)
        for node in self.prolog:
            if not isinstance(node, (Comment, CData, Element)):
                raise TypeError(
                    f"Prolog entries must be Comment, CData or Element, "
                    f"not {type(node).__name__}"
                )

    def __str__(self) -> str:
        return _serialize(self)

    def iter_elements(self) -> Iterator[Element]:
        """Iterate over all elements under the root in document order."""
        return self.root.iter_elements()

    def find(self, tag: str) -> Optional[Element]:
        """Find first element with matching tag name, root included."""
        if self.root.tag == tag:
            return self.root
        return self.root.find(tag)

    def find_all(self, tag: str) -> List[Element]:
        """Find all elements with matching tag name, root included."""
        return [element for element in self.iter_elements() if element.tag == tag]

    def write(self, sink: TextIO, config: Optional[XMLFilesConfig] = None) -> None:
        """Write the serialized document to a text sink."""
        from xmlfiles.serialization import write

        write(self, sink, config)
