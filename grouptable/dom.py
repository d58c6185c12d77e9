from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import Any, Callable, Hashable, Iterator, Sequence

from .reconcile import Keyed, ReconcileResult, keyed, reconcile

VOID_TAGS = {"br", "col", "hr", "img", "input", "meta"}

Handler = Callable[["Element"], Any]


class Element:
    """A small DOM-like node the table renders into."""

    def __init__(self, tag: str, *, class_name: str | None = None) -> None:
        self.tag = tag
        self.attrs: dict[str, str] = {}
        self.classes: list[str] = []
        self.style: dict[str, str] = {}
        self.text: str | None = None
        self.children: list[Element] = []
        self.parent: Element | None = None
        self.key: Hashable | None = None
        self.datum: Any = None
        self._handlers: dict[str, Handler] = {}
        if class_name:
            for name in class_name.split():
                self.classed(name, True)

    def __repr__(self) -> str:
        classes = ".".join(self.classes)
        return f"<Element {self.tag}{'.' + classes if classes else ''} key={self.key!r}>"

    def append(self, tag: str, *, class_name: str | None = None) -> Element:
        return self.insert(Element(tag, class_name=class_name))

    def insert(self, child: Element, index: int | None = None) -> Element:
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        if index is None or index >= len(self.children):
            self.children.append(child)
        else:
            self.children.insert(index, child)
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def clear(self) -> None:
        for child in self.children:
            child.parent = None
        self.children = []

    def classed(self, name: str, flag: bool) -> Element:
        if flag and name not in self.classes:
            self.classes.append(name)
        elif not flag and name in self.classes:
            self.classes.remove(name)
        return self

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def set_attr(self, name: str, value: Any) -> Element:
        self.attrs[name] = str(value)
        return self

    def set_style(self, name: str, value: Any | None) -> Element:
        if value is None:
            self.style.pop(name, None)
        else:
            self.style[name] = str(value)
        return self

    def set_text(self, value: Any) -> Element:
        self.text = None if value is None else str(value)
        return self

    def on(self, event: str, handler: Handler | None) -> Element:
        if handler is None:
            self._handlers.pop(event, None)
        else:
            self._handlers[event] = handler
        return self

    def has_handler(self, event: str) -> bool:
        return event in self._handlers

    def dispatch(self, event: str) -> Any:
        handler = self._handlers.get(event)
        if handler is None:
            return None
        return handler(self)

    def ancestor(self, tag: str) -> Element | None:
        node = self.parent
        while node is not None:
            if node.tag == tag:
                return node
            node = node.parent
        return None

    def iter_descendants(self) -> Iterator[Element]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def find_all(self, tag: str | None = None, class_name: str | None = None) -> list[Element]:
        return [
            node
            for node in self.iter_descendants()
            if (tag is None or node.tag == tag) and (class_name is None or node.has_class(class_name))
        ]

    def children_with(self, tag: str, class_name: str | None = None) -> list[Element]:
        return [
            child
            for child in self.children
            if child.tag == tag and (class_name is None or child.has_class(class_name))
        ]

    def to_html(self) -> str:
        parts = [self.tag]
        if self.classes:
            parts.append(f"class='{escape(' '.join(self.classes))}'")
        for name, value in self.attrs.items():
            parts.append(f"{escape(name)}='{escape(value)}'")
        if self.style:
            style = "; ".join(f"{name}: {value}" for name, value in self.style.items())
            parts.append(f"style='{escape(style)}'")
        opening = "<" + " ".join(parts) + ">"
        if self.tag in VOID_TAGS:
            return opening
        inner = escape(self.text) if self.text is not None else ""
        inner += "".join(child.to_html() for child in self.children)
        return f"{opening}{inner}</{self.tag}>"


@dataclass
class Binding:
    enter: list[Element] = field(default_factory=list)
    update: list[Element] = field(default_factory=list)
    elements: list[Element] = field(default_factory=list)
    result: ReconcileResult[Any] = field(default_factory=ReconcileResult)


def bind_keyed(
    parent: Element,
    tag: str,
    class_name: str | None,
    items: Sequence[Any],
    key_fn: Callable[[Any], Hashable],
) -> Binding:
    """Join ``items`` onto the keyed ``tag`` children of ``parent``.

    Exited elements are detached with their whole subtree, entering items get
    a fresh element, updated elements receive the new datum. Afterwards the
    bound children sit in ``items`` order after any unrelated children.
    """

    existing = parent.children_with(tag, class_name)
    previous = keyed(existing, lambda element: element.key)
    # Next side carries positions so duplicate items stay distinguishable.
    incoming = [Keyed(key_fn(item), position) for position, item in enumerate(items)]
    result = reconcile(previous, incoming)

    for element in result.exit:
        element.remove()

    binding = Binding(result=result)
    reused = {position: element for element, position in result.update}
    for position, item in enumerate(items):
        element = reused.get(position)
        if element is None:
            element = Element(tag, class_name=class_name)
            binding.enter.append(element)
        else:
            binding.update.append(element)
        element.key = incoming[position].key
        element.datum = item
        binding.elements.append(element)

    bound = {id(element) for element in binding.elements}
    others = [child for child in parent.children if id(child) not in bound]
    for element in binding.elements:
        element.parent = parent
    parent.children = others + binding.elements
    return binding
